"""
Classification and resolution of webmention endpoint candidates.

A candidate string pulled from a Link header or an HTML attribute is first
classified into one of three references:

    Absolute    the candidate is already a complete URL
    Relative    the candidate is a URI reference (path, query, authority...)
    Unresolved  the candidate is not valid URI syntax as written

and then resolved into an absolute URL. Absolute references come back
untouched. The other two are rebuilt from their components: scheme and
authority when both are present, otherwise the path and query joined to
the origin of the base URL. Every rebuilt URL is validated before it is
returned.

Usage:
    >>> reference = classify("https://example.org:8443/a", "/a/endpoint")
    >>> resolve(reference)
    'https://example.org:8443/a/endpoint'
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import SplitResult, quote, urljoin, urlsplit, urlunsplit

import idna

from webmention.errors import (
    InvalidHeaderError,
    InvalidInputError,
    InvalidUriError,
    InvalidUrlError,
)


logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}

# Schemes whose URLs are meaningless without a host
HOST_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")

# RFC 3986 unreserved and reserved characters plus the percent sign
_URI_TEXT = re.compile(r"^[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]*$")
_URI_SAFE = "-._~:/?#[]@!$&'()*+,;=%"

# HTML "ASCII whitespace", stripped from both ends of every candidate
_ASCII_WHITESPACE = " \t\n\r\f"


@dataclass(frozen=True)
class Components:
    """The parts of a URI reference used to rebuild a URL."""
    scheme: Optional[str] = None
    authority: Optional[str] = None
    path_and_query: Optional[str] = None

    @classmethod
    def from_split(cls, parts: SplitResult) -> "Components":
        path_and_query = parts.path
        if parts.query:
            path_and_query = f"{path_and_query}?{parts.query}"
        return cls(
            scheme=parts.scheme or None,
            authority=parts.netloc or None,
            path_and_query=path_and_query or None,
        )

    def is_empty(self) -> bool:
        return not (self.scheme or self.authority or self.path_and_query)


@dataclass(frozen=True)
class Absolute:
    """A candidate that is already a complete URL."""
    url: str


@dataclass(frozen=True)
class Relative:
    """A candidate that parsed as a URI reference relative to base."""
    base: str
    components: Components


@dataclass(frozen=True)
class Unresolved:
    """A candidate that is not valid URI syntax; rebuilt as a last resort."""
    base: str
    raw: str


Reference = Union[Absolute, Relative, Unresolved]


def _is_uri_text(value: str) -> bool:
    return bool(_URI_TEXT.match(value))


def _split_absolute(value: str) -> Optional[SplitResult]:
    """Split value if it is a complete absolute URL, else return None."""
    if not value or not _is_uri_text(value):
        return None

    try:
        parts = urlsplit(value)
        # Accessing .port validates it
        parts.port
    except ValueError:
        return None

    if not parts.scheme or not _SCHEME.match(parts.scheme):
        return None
    if parts.scheme.lower() in HOST_SCHEMES:
        if not parts.hostname:
            return None
    elif not (parts.netloc or parts.path):
        return None

    return parts


def _split_reference(value: str) -> Optional[Components]:
    """Split value as a generic URI reference, else return None."""
    if not _is_uri_text(value):
        return None

    try:
        components = Components.from_split(urlsplit(value))
    except ValueError:
        return None

    if components.is_empty():
        return None
    return components


def validate_url(value: str) -> str:
    """Return value unchanged if it is a valid absolute URL.

    Raises:
        InvalidUrlError: If value is not a complete absolute URL.
    """
    if _split_absolute(value) is None:
        raise InvalidUrlError(f"Not a valid absolute URL: {value!r}")
    return value


def normalize_url(value: str) -> str:
    """Validate an absolute URL and normalize its scheme and empty path.

    Example:
        >>> normalize_url("HTTPS://webmention.rocks?query=yes")
        'https://webmention.rocks/?query=yes'

    Raises:
        InvalidUrlError: If value is not a complete absolute URL.
    """
    parts = _split_absolute(value.strip())
    if parts is None:
        raise InvalidUrlError(f"Not a valid absolute URL: {value!r}")

    path = parts.path
    if parts.netloc and not path:
        path = "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc, path, parts.query, parts.fragment))


def origin(url: str) -> str:
    """Return scheme://host[:port] for url, omitting the scheme's default port.

    Raises:
        InvalidUrlError: If url has no scheme or host.
    """
    parts = _split_absolute(url)
    if parts is None or not parts.hostname:
        raise InvalidUrlError(f"Base URL has no usable origin: {url!r}")

    scheme = parts.scheme.lower()
    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"

    port = parts.port
    if port is None or DEFAULT_PORTS.get(scheme) == port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def classify(base: str, candidate: str) -> Reference:
    """Classify a raw endpoint candidate.

    Args:
        base: The URL of the fetched document, after redirects.
        candidate: The raw reference extracted by a scanner.

    Returns:
        Absolute, Relative or Unresolved.

    Leading and trailing ASCII whitespace is removed first, as browsers do
    when parsing an href.

    Raises:
        InvalidInputError: If candidate is empty or only whitespace.
    """
    candidate = candidate.strip(_ASCII_WHITESPACE)
    if not candidate:
        raise InvalidInputError("Webmention candidate is empty")

    if _split_absolute(candidate) is not None:
        return Absolute(candidate)

    components = _split_reference(candidate)
    if components is not None:
        return Relative(base=base, components=components)

    return Unresolved(base=base, raw=candidate)


def _encode_netloc(parts: SplitResult) -> str:
    """Rebuild netloc with an IDNA (punycode) host and quoted userinfo."""
    host = parts.hostname or ""
    if not host.isascii():
        try:
            host = idna.encode(host, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise InvalidUriError(f"Cannot encode host {parts.hostname!r}: {e}") from e
    elif ":" in host:
        host = f"[{host}]"

    userinfo, at, _ = parts.netloc.rpartition("@")
    netloc = f"{quote(userinfo, safe=_URI_SAFE)}@{host}" if at else host
    if parts.port is not None:
        netloc = f"{netloc}:{parts.port}"
    return netloc


def _unresolved_components(raw: str) -> Components:
    """Split raw, then encode each part: IDNA for the host, percent-encoding elsewhere."""
    try:
        parts = urlsplit(raw)
        netloc = _encode_netloc(parts) if parts.netloc else ""
    except ValueError as e:
        raise InvalidUriError(f"Cannot split {raw!r} into URI components: {e}") from e

    return Components.from_split(parts._replace(
        netloc=netloc,
        path=quote(parts.path, safe=_URI_SAFE),
        query=quote(parts.query, safe=_URI_SAFE),
    ))


def _merge_path(base: str, path_and_query: str) -> str:
    """Resolve path_and_query against base and return the merged path and query.

    Dot segments are removed from absolute and relative paths alike.
    """
    first_segment = path_and_query.split("/", 1)[0].split("?", 1)[0]
    if ":" in first_segment:
        # Keep "a:b" from being read as a scheme
        path_and_query = f"./{path_and_query}"

    merged = urlsplit(urljoin(base, path_and_query))
    path = merged.path or "/"
    return f"{path}?{merged.query}" if merged.query else path


def resolve(reference: Reference) -> str:
    """Turn a classified reference into an absolute endpoint URL.

    Args:
        reference: Output of classify().

    Returns:
        A validated absolute URL.

    Raises:
        InvalidHeaderError: If the reference has neither scheme and authority
            nor a path or query to join to the base origin.
        InvalidUrlError: If the rebuilt string is not a valid URL, or the
            base URL has no origin.
        InvalidUriError: If an unresolved candidate cannot be split at all.
    """
    if isinstance(reference, Absolute):
        return reference.url

    if isinstance(reference, Relative):
        base, components = reference.base, reference.components
    elif isinstance(reference, Unresolved):
        base, components = reference.base, _unresolved_components(reference.raw)
    else:
        raise TypeError(f"Unsupported reference type: {type(reference).__name__}")

    scheme = components.scheme
    if scheme is None and components.authority:
        # Network-path reference: //host/path takes the base scheme
        scheme = urlsplit(base).scheme or None

    if scheme and components.authority:
        url = f"{scheme}://{components.authority}{components.path_and_query or ''}"
        logger.debug(f"Attempting to construct URL from: {url}")
        return validate_url(url)

    if components.path_and_query:
        url = f"{origin(base)}{_merge_path(base, components.path_and_query)}"
        logger.debug(f"Attempting to construct URL from: {url}")
        return validate_url(url)

    raise InvalidHeaderError(f"Cannot build an endpoint URL from {reference!r}")
