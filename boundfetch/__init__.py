"""Bounded fetching of web resources with charset and language detection."""

from boundfetch.fetch import (
    BadPortError,
    BadProtocolError,
    BadURIError,
    BoundFetchError,
    ConnectionFailedError,
    ContentOverflowError,
    ContentTooBigError,
    FetchErrorKind,
    FetchOptions,
    FetchTimeoutError,
    MalformedURIError,
    OptionsRegistry,
    RedirectProhibitedError,
    SizeError,
    Target,
    TooManyConnectionsError,
    TooManyRedirectsError,
    UnknownOptionError,
    get_registry,
)
from boundfetch.resource import Resource


__version__ = "0.1.0"

__all__ = [
    "Resource",
    "FetchOptions",
    "OptionsRegistry",
    "Target",
    "UnknownOptionError",
    "get_registry",
    "BoundFetchError",
    "FetchErrorKind",
    "SizeError",
    "ContentTooBigError",
    "ContentOverflowError",
    "ConnectionFailedError",
    "TooManyConnectionsError",
    "TooManyRedirectsError",
    "FetchTimeoutError",
    "BadURIError",
    "MalformedURIError",
    "BadProtocolError",
    "BadPortError",
    "RedirectProhibitedError",
]
