"""Bounded HTTP fetch layer.

This module provides fetching of a single resource with:
- Scheme, port and redirect-scheme validation
- Redirect and connection-retry budgets
- Connect/read timeouts under one total deadline
- Byte limits enforced while streaming (abort or truncate)
- Metrics collection for observability
"""

from boundfetch.fetch.config import (
    FetchOptions,
    OptionsRegistry,
    UnknownOptionError,
    get_registry,
)
from boundfetch.fetch.deadline import Deadline
from boundfetch.fetch.errors import (
    BadPortError,
    BadProtocolError,
    BadURIError,
    BoundFetchError,
    ConnectionFailedError,
    ContentOverflowError,
    ContentTooBigError,
    FetchErrorKind,
    FetchTimeoutError,
    MalformedURIError,
    RedirectProhibitedError,
    SizeError,
    TooManyConnectionsError,
    TooManyRedirectsError,
)
from boundfetch.fetch.metrics import FetchMetrics
from boundfetch.fetch.models import FetchResult, ReadKind, ReadOutcome
from boundfetch.fetch.reader import StreamingReader
from boundfetch.fetch.state_machine import (
    FetchState,
    FetchStateMachine,
    FetchStateTransitionError,
)
from boundfetch.fetch.url import (
    Target,
    parse_target,
    resolve_location,
    validate_redirect,
    validate_url,
)


__all__ = [
    # Config
    "FetchOptions",
    "OptionsRegistry",
    "UnknownOptionError",
    "get_registry",
    # URL
    "Target",
    "parse_target",
    "resolve_location",
    "validate_redirect",
    "validate_url",
    # Fetching
    "Deadline",
    "StreamingReader",
    "FetchState",
    "FetchStateMachine",
    "FetchStateTransitionError",
    # Models
    "FetchResult",
    "ReadKind",
    "ReadOutcome",
    # Errors
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
    # Metrics
    "FetchMetrics",
]
