"""
Webmention endpoint discovery.

Given a source URL, fetch the resource and work out the absolute URL of the
webmention endpoint it advertises, from an HTTP Link header or, failing
that, from <link>/<a> markup with rel="webmention".

Features:
    - Link header tokenizer honouring <...> and quoted strings
    - HTML scanning that ignores comments and escaped markup
    - Resolution of absolute, relative and malformed endpoint references
    - Async parser fed by any object implementing the Parsable protocol
    - Builder-validated client and a `webmention` command line tool
    - Microformats2 mention extraction (author, content, mention type)

Usage:
    >>> import asyncio
    >>> from webmention import Client
    >>> client = Client.from_source("https://webmention.rocks/test/1").build()
    >>> endpoint = asyncio.run(client.discover())

    >>> from webmention import parse_parts
    >>> parse_parts("https://example.org/a", [], '<link rel="webmention" href="/a/endpoint">')
    'https://example.org/a/endpoint'

References:
    - W3C Webmention: https://www.w3.org/TR/webmention/
"""

from webmention.client import Builder, Client, Mode
from webmention.errors import (
    BlockedAddressError,
    ConfigurationError,
    InvalidHeaderError,
    InvalidInputError,
    InvalidUriError,
    InvalidUrlError,
    InvalidValueError,
    ParseError,
    TransportError,
    WebmentionError,
)
from webmention.parser import Parsable, parse, parse_parts
from webmention.reference import Absolute, Relative, Unresolved, classify, resolve
from webmention.source import RequestsSource, StaticSource
from webmention.types import Author, Mention, MentionType, parse_mention

__all__ = [
    "Builder",
    "Client",
    "Mode",
    "BlockedAddressError",
    "ConfigurationError",
    "InvalidHeaderError",
    "InvalidInputError",
    "InvalidUriError",
    "InvalidUrlError",
    "InvalidValueError",
    "ParseError",
    "TransportError",
    "WebmentionError",
    "Parsable",
    "parse",
    "parse_parts",
    "Absolute",
    "Relative",
    "Unresolved",
    "classify",
    "resolve",
    "RequestsSource",
    "StaticSource",
    "Author",
    "Mention",
    "MentionType",
    "parse_mention",
]
