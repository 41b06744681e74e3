"""
Webmention client with a validating builder.

A client is configured with one source URL and, optionally, target URLs.
Without targets it runs in query mode and discovers the source's webmention
endpoint. With targets it runs in send mode, which is not implemented yet:
it logs that no notification was delivered and returns None.

Usage:
    >>> import asyncio
    >>> client = (
    ...     Client.builder()
    ...     .source("https://webmention.rocks/test/1")
    ...     .build()
    ... )
    >>> endpoint = asyncio.run(client.run())
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from webmention.errors import ConfigurationError
from webmention.parser import parse
from webmention.reference import normalize_url
from webmention.source import (
    DEFAULT_TIMEOUT,
    MAX_REDIRECTS,
    WEBMENTION_USER_AGENT,
    RequestsSource,
)


logger = logging.getLogger(__name__)


class Mode(Enum):
    """What a client does when run."""
    SEND = "send"
    QUERY = "query"


class Client:
    """Discover webmention endpoints for a source URL.

    Attributes:
        source: Normalized absolute source URL
        targets: Normalized target URLs, or None in query mode
        timeout: Fetch timeout in seconds
        block_private_addresses: Refuse sources on private networks
    """

    def __init__(
        self,
        source: str,
        targets: Optional[List[str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        block_private_addresses: bool = True,
        user_agent: str = WEBMENTION_USER_AGENT,
        max_redirects: int = MAX_REDIRECTS,
    ):
        self.source = source
        self.targets = targets
        self.timeout = timeout
        self.block_private_addresses = block_private_addresses
        self.user_agent = user_agent
        self.max_redirects = max_redirects

    @staticmethod
    def builder() -> "Builder":
        """Start configuring a new client."""
        return Builder()

    @staticmethod
    def from_source(source: str) -> "Builder":
        """Start configuring a new client with the source URL already set."""
        return Builder().source(source)

    @property
    def mode(self) -> Mode:
        return Mode.SEND if self.targets else Mode.QUERY

    def _make_source(self) -> RequestsSource:
        return RequestsSource(
            self.source,
            timeout=self.timeout,
            block_private_addresses=self.block_private_addresses,
            user_agent=self.user_agent,
            max_redirects=self.max_redirects,
        )

    async def discover(self) -> Optional[str]:
        """Fetch the source and return its webmention endpoint, if any."""
        endpoint = await parse(self._make_source())
        if endpoint:
            logger.info(f"Discovered webmention endpoint: source={self.source}, endpoint={endpoint}")
        return endpoint

    async def run(self) -> Optional[str]:
        """Run the configured operation.

        Returns:
            The discovered endpoint in query mode; None in send mode.
        """
        if self.mode is Mode.SEND:
            return await self._send()
        return await self.discover()

    async def _send(self) -> None:
        # TODO: discover each target's endpoint and POST source/target to it
        logger.warning(
            f"Sending webmentions is not implemented: source={self.source}, "
            f"targets={len(self.targets or [])}; no notifications were delivered"
        )
        return None

    def __repr__(self) -> str:
        return f"Client(source={self.source!r}, targets={self.targets!r})"


class Builder:
    """Collect client settings and validate them in build()."""

    def __init__(self):
        self._source: Optional[str] = None
        self._targets: Optional[List[str]] = None
        self._options: Dict[str, Any] = {}

    def source(self, source: str) -> "Builder":
        """Set the source URL."""
        self._source = source
        return self

    def target(self, target: str) -> "Builder":
        """Append a target URL; any target switches the client to send mode."""
        if self._targets is None:
            self._targets = []
        self._targets.append(target)
        return self

    def timeout(self, seconds: float) -> "Builder":
        self._options["timeout"] = float(seconds)
        return self

    def block_private_addresses(self, enabled: bool) -> "Builder":
        self._options["block_private_addresses"] = bool(enabled)
        return self

    def user_agent(self, user_agent: str) -> "Builder":
        self._options["user_agent"] = user_agent
        return self

    def max_redirects(self, limit: int) -> "Builder":
        self._options["max_redirects"] = int(limit)
        return self

    def configure(self, settings: Dict[str, Any]) -> "Builder":
        """Apply fetch settings from get_webmention_config()."""
        for key in ("timeout", "block_private_addresses", "user_agent", "max_redirects"):
            if key in settings:
                getattr(self, key)(settings[key])
        return self

    def build(self) -> Client:
        """Validate settings and create the client.

        Raises:
            ConfigurationError: If no source URL was given.
            InvalidUrlError: If the source or a target is not an absolute URL.
        """
        if not self._source:
            raise ConfigurationError("Source is required")

        source = normalize_url(self._source)
        targets = None
        if self._targets is not None:
            targets = [normalize_url(target) for target in self._targets]

        return Client(source, targets=targets, **self._options)
