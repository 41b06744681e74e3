"""
Exceptions raised by webmention endpoint discovery.

Absence of an endpoint is never an error: discovery returns None in that
case. Exceptions are reserved for a missing source at build time, a
refused fetch, and candidates that are present but cannot be turned into
a valid absolute URL.

Hierarchy:
    WebmentionError
    ├── ConfigurationError
    ├── TransportError
    │   └── BlockedAddressError
    └── ParseError (also a ValueError)
        ├── InvalidUrlError
        ├── InvalidUriError
        ├── InvalidHeaderError
        └── InvalidValueError

Network failures raised by requests (timeouts, HTTP status errors, too many
redirects) are not wrapped and reach the caller unchanged.
"""


class WebmentionError(Exception):
    """Base class for all webmention discovery errors."""


class ConfigurationError(WebmentionError):
    """The client was built without a required setting (e.g. no source URL)."""


class TransportError(WebmentionError):
    """The fetcher refused or failed to retrieve the source document."""


class BlockedAddressError(TransportError):
    """The source URL resolves to a private, loopback or reserved address."""

    def __init__(self, url: str):
        super().__init__(f"Refusing to fetch private or loopback address: {url}")
        self.url = url


class ParseError(WebmentionError, ValueError):
    """A webmention candidate was found but could not be resolved."""


class InvalidUrlError(ParseError):
    """A string expected to be an absolute URL is not one."""


class InvalidUriError(ParseError):
    """A candidate cannot be split into URI components."""


class InvalidHeaderError(ParseError):
    """No reconstruction path produced a URL from the candidate."""


class InvalidValueError(ParseError):
    """The candidate was rejected before classification (e.g. it is empty)."""


class InvalidInputError(ValueError):
    """Raised by classify() when handed an empty candidate."""
