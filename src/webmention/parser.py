"""
Webmention endpoint discovery: the single entry point tying scanners and
the reference resolver together.

Discovery runs in two phases with a fixed priority:

    1. Link headers. A candidate found here is resolved immediately; if it
       cannot be resolved the error is raised, markup is not consulted.
    2. HTML markup. Only scanned when no Link header yielded a candidate.

When neither phase finds a candidate the result is None, which means the
resource does not advertise an endpoint. That is not an error.

Anything that can produce (base URL, Link header values, body) can feed the
parser by implementing the Parsable protocol; no base class is required.

Usage:
    >>> import asyncio
    >>> from webmention.source import StaticSource
    >>> source = StaticSource(
    ...     "https://example.org/a",
    ...     ['<https://example.org/a/endpoint>; rel="webmention"'],
    ...     "",
    ... )
    >>> asyncio.run(parse(source))
    'https://example.org/a/endpoint'
"""

import logging
from typing import List, Optional, Protocol, Tuple, runtime_checkable

from webmention.errors import InvalidInputError, InvalidValueError
from webmention.link_header import scan_link_headers
from webmention.markup import scan_markup
from webmention.reference import classify, resolve


logger = logging.getLogger(__name__)

# (base URL after redirects, raw Link header values in order, decoded body)
ParserParts = Tuple[str, List[str], str]


@runtime_checkable
class Parsable(Protocol):
    """A source of material for the webmention parser."""

    async def into_parser_parts(self) -> ParserParts:
        """Return the base URL, the raw Link header values and the body."""
        ...


def _resolve_candidate(base_url: str, candidate: str) -> str:
    try:
        reference = classify(base_url, candidate)
    except InvalidInputError as e:
        raise InvalidValueError(f"Rejected webmention candidate for {base_url}: {e}") from e
    return resolve(reference)


def parse_parts(base_url: str, link_headers: List[str], body: str) -> Optional[str]:
    """Discover the webmention endpoint from already-fetched parts.

    Args:
        base_url: URL of the document after following redirects.
        link_headers: Raw Link header values, in the order received.
        body: Decoded response body.

    Returns:
        The absolute endpoint URL, or None if none is advertised.

    Raises:
        ParseError: If a candidate was found but could not be resolved.
    """
    candidate = scan_link_headers(link_headers)
    if candidate is not None:
        logger.debug(f"Resolving Link header candidate {candidate!r} against {base_url}")
        return _resolve_candidate(base_url, candidate)

    candidate = scan_markup(body)
    if candidate is not None:
        logger.debug(f"Resolving markup candidate {candidate!r} against {base_url}")
        return _resolve_candidate(base_url, candidate)

    logger.info(f"No webmention endpoint advertised by {base_url}")
    return None


async def parse(payload: Parsable) -> Optional[str]:
    """Fetch parts from payload and discover its webmention endpoint.

    Errors raised while producing the parts (network failures) propagate
    unchanged.
    """
    base_url, link_headers, body = await payload.into_parser_parts()
    return parse_parts(base_url, link_headers, body)
