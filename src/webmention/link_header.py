"""
HTTP Link header scanning for webmention endpoints.

A Link header value holds one or more comma-separated link entries:

    <https://example.org/webmention>; rel="webmention", </style.css>; rel=stylesheet

The tokenizer here splits on commas and semicolons only when they sit
outside a <...> URI token or a "..." quoted string, so a comma inside an
endpoint URL does not break the entry apart.

Selection rules:
    - an entry matches when its rel parameter contains "webmention"
      (case-insensitive substring, so rel="webmention external" matches)
    - within one header value the first matching entry wins
    - across header values the last value with a match wins
    - a bare rel parameter without a value aborts that header value

References:
    - RFC 8288 (Web Linking): https://www.rfc-editor.org/rfc/rfc8288
    - W3C Webmention discovery: https://www.w3.org/TR/webmention/#sender-discovers-receiver-webmention-endpoint
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple


logger = logging.getLogger(__name__)

WEBMENTION_REL = "webmention"

# Characters dropped from a URI token: angle brackets, quotes and whitespace
_URI_NOISE = re.compile(r'[<>"\s]')


@dataclass
class LinkEntry:
    """One link entry of a Link header value.

    Attributes:
        uri: The target reference with brackets, quotes and whitespace removed
        params: Ordered (key, value) pairs; value is None for a bare key
    """
    uri: str
    params: List[Tuple[str, Optional[str]]] = field(default_factory=list)

    def rel_values(self) -> List[Optional[str]]:
        """Return the values of every rel parameter, in order."""
        return [value for key, value in self.params if key == "rel"]


def _split_outside_delimiters(value: str, separator: str) -> List[str]:
    """Split value on separator, ignoring separators inside <...> or "..."."""
    parts: List[str] = []
    current: List[str] = []
    in_angle = False
    in_quote = False
    escaped = False

    for char in value:
        if in_quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_quote = False
        elif in_angle:
            if char == ">":
                in_angle = False
        elif char == '"':
            in_quote = True
        elif char == "<":
            in_angle = True
        elif char == separator:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)

    parts.append("".join(current))
    return parts


def split_link_entries(value: str) -> List[str]:
    """Split a raw Link header value into its comma-separated entries.

    Blank entries (from leading, trailing or doubled commas) are dropped.

    Example:
        >>> split_link_entries('<https://a.example/x,y>; rel=webmention, </b>; rel=next')
        ['<https://a.example/x,y>; rel=webmention', ' </b>; rel=next']
    """
    return [entry for entry in _split_outside_delimiters(value, ",") if entry.strip()]


def _clean_param_value(value: str) -> str:
    return value.strip().strip('"').strip()


def parse_link_entry(entry: str) -> LinkEntry:
    """Parse a single link entry into its URI token and parameters.

    Args:
        entry: One entry such as '<https://example.org/wm>; rel="webmention"'

    Returns:
        LinkEntry with the cleaned URI and ordered parameters. Parameters
        without '=' keep None as their value.
    """
    segments = _split_outside_delimiters(entry, ";")
    uri = _URI_NOISE.sub("", segments[0])

    params: List[Tuple[str, Optional[str]]] = []
    for segment in segments[1:]:
        if not segment.strip():
            continue
        key, sep, value = segment.partition("=")
        params.append((key.strip(), _clean_param_value(value) if sep else None))

    return LinkEntry(uri=uri, params=params)


def scan_link_header(value: str) -> Optional[str]:
    """Return the first webmention candidate in a single Link header value.

    Args:
        value: One raw Link header line, possibly holding several entries.

    Returns:
        The raw candidate reference (not yet resolved), or None when no entry
        matches or a malformed rel parameter aborted the scan.
    """
    for raw_entry in split_link_entries(value):
        entry = parse_link_entry(raw_entry)
        if not entry.params:
            continue

        for rel in entry.rel_values():
            if rel is None:
                logger.debug(f"Link entry has a rel parameter without a value, skipping header: {value!r}")
                return None
            if WEBMENTION_REL in rel.lower():
                return entry.uri

    return None


def scan_link_headers(values: Iterable[str]) -> Optional[str]:
    """Scan every Link header value and return the winning candidate.

    All values are scanned; a later value with a match replaces the
    candidate found in an earlier one.

    Args:
        values: Raw Link header lines in the order they were received.

    Returns:
        The candidate from the last header value that matched, or None.
    """
    candidate: Optional[str] = None

    for value in values:
        found = scan_link_header(value)
        if found is not None:
            candidate = found

    if candidate is not None:
        logger.debug(f"Webmention candidate found in Link header: {candidate!r}")
    return candidate
