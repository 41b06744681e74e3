"""
Configuration Module for webmention discovery.

Configuration is loaded from config.yml and covers the discovery fetcher
(timeout, User-Agent, redirect limit, private address blocking) and the
command line logging setup.

Usage:
    >>> from config import load_config, get_webmention_config
    >>> config = load_config()
    >>> timeout = get_webmention_config(config)["timeout"]

Configuration (config.yml):
    webmention:
      timeout: 30
      max_redirects: 20
      block_private_addresses: true
    logging:
      level: INFO
      file: webmention.log
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yml"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_REDIRECTS = 20
DEFAULT_USER_AGENT = "Webmention (webmention-discovery)"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_LOG_BACKUP_COUNT = 3


def _find_config_file() -> Optional[str]:
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return str(candidate)
    return None


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from config.yml file.

    Args:
        config_path: Path to config.yml file. If None, looks in the current
                     directory and its parents.

    Returns:
        Dictionary containing configuration settings. Falls back to
        get_default_config() when the file is missing, is not valid YAML,
        or does not hold a mapping.

    Example:
        >>> config = load_config()
        >>> config.get("webmention", {}).get("timeout", 30)
    """
    if config_path is None:
        config_path = _find_config_file()

    if config_path is None:
        logger.debug("config.yml not found, using default configuration")
        return get_default_config()

    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning(f"Configuration file not found: {config_path}")
        return get_default_config()
    except yaml.YAMLError as e:
        logger.error(f"Error parsing configuration file: {e}")
        return get_default_config()

    if not isinstance(config, dict):
        logger.warning("Configuration root must be a mapping, using default configuration")
        return get_default_config()

    logger.info(f"Loaded configuration from {config_path}")
    return config


def get_default_config() -> Dict[str, Any]:
    """Return default configuration when config.yml is not available.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "webmention": {
            "timeout": DEFAULT_TIMEOUT,
            "user_agent": DEFAULT_USER_AGENT,
            "max_redirects": DEFAULT_MAX_REDIRECTS,
            "block_private_addresses": True,
        },
        "logging": {
            "level": DEFAULT_LOG_LEVEL,
            "file": None,
        },
    }


def get_webmention_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Extract fetcher settings from the main config, with defaults applied.

    Example:
        >>> get_webmention_config({"webmention": {"timeout": 5}})["timeout"]
        5.0
    """
    wm = config.get("webmention") or {}
    return {
        "timeout": float(wm.get("timeout", DEFAULT_TIMEOUT)),
        "user_agent": wm.get("user_agent", DEFAULT_USER_AGENT),
        "max_redirects": int(wm.get("max_redirects", DEFAULT_MAX_REDIRECTS)),
        "block_private_addresses": bool(wm.get("block_private_addresses", True)),
    }


def get_logging_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Extract logging settings from the main config, with defaults applied."""
    log = config.get("logging") or {}
    level = str(log.get("level", DEFAULT_LOG_LEVEL)).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        logger.warning(f"Unknown log level {level!r}; falling back to {DEFAULT_LOG_LEVEL}")
        level = DEFAULT_LOG_LEVEL

    return {
        "level": level,
        "file": log.get("file"),
        "max_bytes": int(log.get("max_bytes", DEFAULT_LOG_MAX_BYTES)),
        "backup_count": int(log.get("backup_count", DEFAULT_LOG_BACKUP_COUNT)),
    }
