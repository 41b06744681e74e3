"""
Types describing a webmention and the content that triggered it.

parse_mention() reads the first microformats2 h-entry of a source page and
works out who wrote it and how it relates to the target (reply, like,
repost, bookmark, RSVP, or a plain mention).

References:
    - Microformats2 h-entry: https://microformats.org/wiki/h-entry
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import mf2py


logger = logging.getLogger(__name__)


class MentionType(Enum):
    """How a source document relates to the target it mentions."""
    REPLY = "reply"
    LIKE = "like"
    REPOST = "repost"
    BOOKMARK = "bookmark"
    RSVP = "rsvp"
    MENTION = "mention"


@dataclass
class Author:
    """Author of the mentioning content."""
    name: str = ""
    url: str = ""


@dataclass
class Mention:
    """A webmention payload extracted from a source document.

    Attributes:
        author: Who created the content
        title: Name of the h-entry, empty if it has none
        content: Plain-text content of the h-entry
        url: Canonical URL of the h-entry, or the source URL
        mention_type: Relation between the entry and the target
    """
    url: str
    author: Author = field(default_factory=Author)
    title: str = ""
    content: str = ""
    mention_type: MentionType = MentionType.MENTION


# Checked in order; the first property linking to the target decides the type
_TYPE_PROPERTIES = (
    ("in-reply-to", MentionType.REPLY),
    ("like-of", MentionType.LIKE),
    ("repost-of", MentionType.REPOST),
    ("bookmark-of", MentionType.BOOKMARK),
)


def parse_mention(html: str, source_url: str, target_url: str) -> Optional[Mention]:
    """Extract a Mention from the first h-entry in html.

    Args:
        html: Decoded HTML of the source document.
        source_url: URL the document was fetched from; relative URLs in the
            markup are resolved against it.
        target_url: The URL being mentioned.

    Returns:
        The Mention, or None if the document has no h-entry or cannot be
        parsed as microformats.
    """
    try:
        parsed = mf2py.parse(html, url=source_url)
    except Exception as e:
        logger.debug(f"Microformats parsing failed for {source_url}: {e}")
        return None

    hentry = _find_first_hentry(parsed.get("items", []))
    if not hentry:
        return None

    properties = hentry.get("properties", {})
    return Mention(
        url=_first_str(properties.get("url", [])) or source_url,
        author=_extract_author(properties.get("author", [])),
        title=_first_str(properties.get("name", [])),
        content=_extract_content(properties.get("content", [])),
        mention_type=determine_mention_type(properties, target_url),
    )


def determine_mention_type(properties: Dict[str, Any], target_url: str) -> MentionType:
    """Determine the mention type from h-entry properties."""
    target_normalized = target_url.rstrip("/")

    for name, mention_type in _TYPE_PROPERTIES:
        if any(_url_matches_target(value, target_normalized) for value in properties.get(name, [])):
            if mention_type is MentionType.REPLY and properties.get("rsvp"):
                return MentionType.RSVP
            return mention_type

    return MentionType.MENTION


def _find_first_hentry(items: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Recursively find the first h-entry in parsed microformats items."""
    for item in items:
        if "h-entry" in item.get("type", []):
            return item
        found = _find_first_hentry(item.get("children", []))
        if found:
            return found
    return None


def _extract_author(authors: List[Any]) -> Author:
    if not authors:
        return Author()

    author = authors[0]
    if isinstance(author, dict):
        props = author.get("properties", {})
        return Author(name=_first_str(props.get("name", [])), url=_first_str(props.get("url", [])))
    if isinstance(author, str):
        return Author(name=author)
    return Author()


def _extract_content(contents: List[Any]) -> str:
    if not contents:
        return ""

    content = contents[0]
    if isinstance(content, dict):
        return content.get("value", "")
    if isinstance(content, str):
        return content
    return ""


def _url_matches_target(url_or_obj: Any, target_normalized: str) -> bool:
    """Check if a URL (string or h-cite dict) matches the target."""
    if isinstance(url_or_obj, str):
        return url_or_obj.rstrip("/") == target_normalized
    if isinstance(url_or_obj, dict):
        urls = url_or_obj.get("properties", {}).get("url", [])
        return any(u.rstrip("/") == target_normalized for u in urls if isinstance(u, str))
    return False


def _first_str(values: List[Any]) -> str:
    """Return the first string value from a list, or empty string."""
    for value in values:
        if isinstance(value, str):
            return value
    return ""
