"""
Command line interface for webmention endpoint discovery.

Subcommands:
    webmention send <source> <target>...
        Send a webmention from source to each target. Delivery is not
        implemented yet; the command logs a warning and exits successfully.

    webmention query <source> [output-dir]
        Discover the webmention endpoint of source and print it (or None).
        With output-dir, the result is also written to output-dir/links.json.

Options:
    -s, --silent    Do not print the result
    --debug         Verbose logging (also enabled by WEBMENTION_DEBUG=true)
    --config PATH   Path to config.yml

Exit codes:
    0  success (including "no endpoint advertised")
    1  network failure, unresolvable endpoint, or unwritable output directory
    2  invalid configuration (e.g. missing or malformed source URL)
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from jsonschema import validate

from config import get_logging_config, get_webmention_config, load_config
from schema import LINKS_SCHEMA
from webmention.client import Client
from webmention.errors import ConfigurationError, InvalidUrlError, WebmentionError


logger = logging.getLogger(__name__)

LINKS_FILENAME = "links.json"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webmention",
        description="CLI tool to send and retrieve Webmentions",
    )
    parser.add_argument("-s", "--silent", action="store_true", help="Do not print the result")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", default=None, help="Path to config.yml")

    subparsers = parser.add_subparsers(dest="command", required=True)

    send = subparsers.add_parser("send", help="Send a Webmention to one (or many) targets")
    send.add_argument("source", help="URL indicating the Webmention source")
    send.add_argument("target", nargs="+", help="URL indicating the Webmention target")

    query = subparsers.add_parser("query", help="Query for the Webmention endpoint of a URL")
    query.add_argument("source", help="Source URL for endpoint discovery")
    query.add_argument(
        "output", nargs="?", default=None,
        help="Optionally specify a folder to save Webmention data",
    )

    return parser


def configure_logging(debug: bool, settings: Dict[str, Any]) -> None:
    """Configure the root logger for command line use.

    Logs go to stderr so that stdout only carries results. When a log file
    is configured, a rotating file handler is added as well.
    """
    log_level = logging.DEBUG if debug else getattr(logging, settings["level"])

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.get("file"):
        file_handler = RotatingFileHandler(
            settings["file"],
            maxBytes=settings["max_bytes"],
            backupCount=settings["backup_count"],
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def write_links(output_dir: str, source: str, endpoint: Optional[str]) -> Path:
    """Persist a discovery result as links.json under output_dir.

    Relative output directories are resolved against the working directory
    and created if they do not exist.

    Returns:
        Path of the written file.
    """
    document = {
        "source": source,
        "endpoint": endpoint,
        "discovered_at": datetime.now(timezone.utc).isoformat(),
    }
    validate(instance=document, schema=LINKS_SCHEMA)

    root = Path.cwd() / output_dir
    root.mkdir(parents=True, exist_ok=True)
    dest = root / LINKS_FILENAME
    dest.write_text(json.dumps(document, indent=2) + "\n")
    logger.debug(f"Wrote output to {dest}")
    return dest


def _build_client(source: str, targets: List[str], settings: Dict[str, Any]) -> Client:
    builder = Client.from_source(source).configure(settings)
    for target in targets:
        logger.debug(f"Adding target {target}")
        builder = builder.target(target)
    return builder.build()


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the `webmention` console command."""
    args = build_parser().parse_args(argv)

    debug = args.debug or os.environ.get("WEBMENTION_DEBUG", "").lower() in ("true", "1", "yes")
    config = load_config(args.config)
    configure_logging(debug, get_logging_config(config))
    settings = get_webmention_config(config)

    targets = args.target if args.command == "send" else []

    try:
        client = _build_client(args.source, targets, settings)
    except (ConfigurationError, InvalidUrlError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    try:
        result = asyncio.run(client.run())
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to fetch {client.source}: {e}")
        return 1
    except WebmentionError as e:
        logger.error(f"Webmention discovery failed for {client.source}: {e}")
        return 1

    if args.command == "query":
        if args.output:
            try:
                write_links(args.output, client.source, result)
            except OSError as e:
                logger.error(f"Failed to write {LINKS_FILENAME} to {args.output}: {e}")
                return 1
        if not args.silent:
            print(result)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
