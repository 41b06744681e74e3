"""
Sources that feed the webmention parser.

RequestsSource fetches a URL over HTTP with requests, following redirects,
and hands the parser the final URL, every Link header line in the order it
was received, and the decoded body. The blocking request runs on a worker
thread so discovery can be awaited alongside other work.

StaticSource wraps parts that were fetched elsewhere (or written by hand in
tests) so they can go through the same parser.

Discovery requests follow W3C recommendations: the User-Agent mentions
"Webmention", redirects are capped at 20, and hosts resolving to private or
loopback addresses are refused unless explicitly allowed.
"""

import asyncio
import ipaddress
import logging
import socket
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

import requests

from webmention.errors import BlockedAddressError
from webmention.parser import ParserParts


logger = logging.getLogger(__name__)

WEBMENTION_USER_AGENT = "Webmention (webmention-discovery)"
MAX_REDIRECTS = 20
DEFAULT_TIMEOUT = 30.0


def _is_private_or_loopback(url: str) -> bool:
    """Check if a URL resolves to a private or loopback address.

    Args:
        url: The URL to check.

    Returns:
        True if the hostname is missing, cannot be resolved, or resolves to
        a private, loopback, reserved or link-local address.
    """
    try:
        hostname = urlparse(url).hostname
        if not hostname:
            return True

        infos = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
        for family, _, _, _, sockaddr in infos:
            ip_str = sockaddr[0]
            addr = ipaddress.ip_address(ip_str)
            if addr.is_private or addr.is_loopback or addr.is_reserved or addr.is_link_local:
                logger.warning(
                    f"Blocked request to private/loopback address: url={url}, resolved={ip_str}"
                )
                return True
    except (socket.gaierror, ValueError, OSError) as e:
        logger.warning(f"DNS resolution failed for URL {url}: {e}")
        return True

    return False


def _build_session(
    user_agent: str = WEBMENTION_USER_AGENT,
    max_redirects: int = MAX_REDIRECTS,
) -> requests.Session:
    """Build a requests Session with webmention-appropriate settings."""
    session = requests.Session()
    session.headers["User-Agent"] = user_agent
    session.max_redirects = max_redirects
    return session


def _link_header_values(response: requests.Response) -> List[str]:
    """Return each Link header line separately, in the order received.

    response.headers folds repeated headers into one comma-joined string,
    so the underlying urllib3 headers are read when available.
    """
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return [str(value) for value in raw_headers.getlist("Link")]

    folded = response.headers.get("Link")
    return [folded] if folded else []


class RequestsSource:
    """Fetch a source document over HTTP for endpoint discovery.

    Example:
        >>> source = RequestsSource("https://webmention.rocks/test/1")
        >>> base_url, link_headers, body = asyncio.run(source.into_parser_parts())
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        block_private_addresses: bool = True,
        user_agent: str = WEBMENTION_USER_AGENT,
        max_redirects: int = MAX_REDIRECTS,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the source.

        Args:
            url: Absolute URL of the document to fetch.
            timeout: Request timeout in seconds.
            block_private_addresses: Refuse hosts that resolve to private or
                loopback addresses.
            user_agent: User-Agent header for the discovery request.
            max_redirects: Redirect limit for the discovery request.
            session: Session to reuse; a fresh one is built per fetch if None.
        """
        self.url = url
        self.timeout = timeout
        self.block_private_addresses = block_private_addresses
        self.user_agent = user_agent
        self.max_redirects = max_redirects
        self.session = session

    def fetch(self) -> ParserParts:
        """Fetch the document synchronously.

        Raises:
            BlockedAddressError: If the host resolves to a private address.
            requests.RequestException: On any network or HTTP status failure.
        """
        if self.block_private_addresses and _is_private_or_loopback(self.url):
            raise BlockedAddressError(self.url)

        if self.session is not None:
            return self._fetch_with(self.session)

        # Sessions built here are closed once the fetch completes
        with _build_session(self.user_agent, self.max_redirects) as session:
            return self._fetch_with(session)

    def _fetch_with(self, session: requests.Session) -> ParserParts:
        logger.debug(f"Fetching {self.url} for webmention discovery")

        response = session.get(
            self.url,
            headers={"Accept": "text/html"},
            timeout=self.timeout,
            allow_redirects=True,
        )
        try:
            response.raise_for_status()
            base_url = response.url or self.url
            link_headers = _link_header_values(response)
            body = response.text
        finally:
            response.close()

        logger.info(
            f"Fetched {self.url}: final_url={base_url}, status_code={response.status_code}, "
            f"link_headers={len(link_headers)}"
        )
        return base_url, link_headers, body

    async def into_parser_parts(self) -> ParserParts:
        return await asyncio.to_thread(self.fetch)


@dataclass
class StaticSource:
    """Parser input that has already been fetched."""
    base_url: str
    link_headers: List[str] = field(default_factory=list)
    body: str = ""

    async def into_parser_parts(self) -> ParserParts:
        return self.base_url, list(self.link_headers), self.body
