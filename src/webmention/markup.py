"""
HTML markup scanning for webmention endpoints.

Used only when no Link header advertised an endpoint. Every element whose
rel attribute contains "webmention" is collected in document order; the
first one whose rel is exactly "webmention" and which has an href wins.

Elements inside comments, escaped markup and <script>/<style> text are never
seen as elements by the parser, so decoy endpoints there are ignored.
"""

import logging
from html.parser import HTMLParser
from typing import List, NamedTuple, Optional


logger = logging.getLogger(__name__)

WEBMENTION_REL = "webmention"


class MarkupMatch(NamedTuple):
    """An element whose rel attribute mentions webmention."""
    tag: str
    rel: str
    href: Optional[str]


class WebmentionLinkExtractor(HTMLParser):
    """HTML parser that collects elements with a webmention rel attribute."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.matches: List[MarkupMatch] = []

    def handle_starttag(self, tag: str, attrs: list) -> None:
        # Duplicate attributes: the first occurrence wins, as in browsers
        attrs_dict = {}
        for name, value in attrs:
            attrs_dict.setdefault(name, value)

        rel = attrs_dict.get("rel")
        if not rel or WEBMENTION_REL not in rel:
            return

        href = None
        if "href" in attrs_dict:
            href = attrs_dict["href"] or ""
        self.matches.append(MarkupMatch(tag=tag, rel=rel, href=href))


def find_webmention_elements(body: str) -> List[MarkupMatch]:
    """Return every element whose rel attribute contains "webmention"."""
    parser = WebmentionLinkExtractor()
    parser.feed(body)
    parser.close()
    return parser.matches


def scan_markup(body: str) -> Optional[str]:
    """Return the href of the first element with rel exactly "webmention".

    Args:
        body: Decoded HTML of the source document.

    Returns:
        The raw href value (an empty string is returned as-is), or None when
        no element qualifies.
    """
    if not body:
        return None

    for match in find_webmention_elements(body):
        if match.rel == WEBMENTION_REL and match.href is not None:
            logger.debug(f"Webmention candidate found in <{match.tag}> element: {match.href!r}")
            return match.href

    return None
