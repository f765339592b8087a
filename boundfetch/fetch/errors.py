"""Exceptions for the fetch layer.

This module defines the hierarchy of exceptions raised while fetching a
resource:

    BoundFetchError
        SizeError
            ContentTooBigError          # declared Content-Length > limit
            ContentOverflowError        # bytes actually read > limit
        ConnectionFailedError
            TooManyConnectionsError     # connection retries exhausted
            TooManyRedirectsError       # redirect budget exhausted
            FetchTimeoutError           # total deadline or I/O timeout
        BadURIError
            MalformedURIError           # empty or unparseable URL
            BadProtocolError            # scheme other than http/https
            BadPortError                # non-standard port
            RedirectProhibitedError     # redirect changing the scheme
"""

from enum import Enum


class FetchErrorKind(str, Enum):
    """Classification of fetch errors for metrics and reporting."""

    CONTENT_TOO_BIG = "CONTENT_TOO_BIG"
    CONTENT_OVERFLOW = "CONTENT_OVERFLOW"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    TOO_MANY_CONNECTIONS = "TOO_MANY_CONNECTIONS"
    TOO_MANY_REDIRECTS = "TOO_MANY_REDIRECTS"
    TIMEOUT = "TIMEOUT"
    MALFORMED_URI = "MALFORMED_URI"
    BAD_PROTOCOL = "BAD_PROTOCOL"
    BAD_PORT = "BAD_PORT"
    REDIRECT_PROHIBITED = "REDIRECT_PROHIBITED"


class BoundFetchError(Exception):
    """Base exception for all fetch errors.

    Every subclass carries a ``kind`` so callers can branch on the error
    family without importing each class.
    """

    kind: FetchErrorKind = FetchErrorKind.CONNECTION_FAILED

    def __init__(self, message: str, url: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            url: URL being processed when the error occurred.
        """
        super().__init__(message)
        self.message = message
        self.url = url

    def to_dict(self) -> dict[str, str | None]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "url": self.url,
        }


class SizeError(BoundFetchError):
    """Base class for size-related errors.

    Suppressed by the ``ignore_content_overflows`` option, in which case the
    body is truncated at the byte limit instead.
    """

    def __init__(self, message: str, limit: int, url: str | None = None) -> None:
        """Initialize the size error.

        Args:
            message: Human-readable error message.
            limit: The byte limit that was exceeded.
            url: URL being fetched.
        """
        super().__init__(message, url)
        self.limit = limit


class ContentTooBigError(SizeError):
    """Raised when the declared Content-Length exceeds the byte limit."""

    kind = FetchErrorKind.CONTENT_TOO_BIG

    def __init__(self, declared: int, limit: int, url: str | None = None) -> None:
        self.declared = declared
        super().__init__(
            f"content length ({declared}) is bigger than {limit} bytes", limit, url
        )


class ContentOverflowError(SizeError):
    """Raised when the bytes actually read exceed the byte limit."""

    kind = FetchErrorKind.CONTENT_OVERFLOW

    def __init__(self, limit: int, url: str | None = None) -> None:
        super().__init__(f"read data size exceeds {limit} bytes, aborting", limit, url)


class ConnectionFailedError(BoundFetchError):
    """Raised when a resource cannot be obtained.

    Wraps transport failures, protocol violations and non-2xx responses;
    the underlying message is preserved.
    """

    kind = FetchErrorKind.CONNECTION_FAILED

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, url)
        self.status_code = status_code


class TooManyConnectionsError(ConnectionFailedError):
    """Raised when connection attempts exceed the retry budget."""

    kind = FetchErrorKind.TOO_MANY_CONNECTIONS


class TooManyRedirectsError(ConnectionFailedError):
    """Raised when redirects exceed the redirect budget."""

    kind = FetchErrorKind.TOO_MANY_REDIRECTS


class FetchTimeoutError(ConnectionFailedError):
    """Raised when the total deadline or a connect/read timeout expires."""

    kind = FetchErrorKind.TIMEOUT


class BadURIError(BoundFetchError):
    """Base class for URLs that must not be requested. Never retried."""

    kind = FetchErrorKind.MALFORMED_URI


class MalformedURIError(BadURIError):
    """Raised for empty or unparseable URLs."""

    kind = FetchErrorKind.MALFORMED_URI


class BadProtocolError(BadURIError):
    """Raised for schemes other than http and https."""

    kind = FetchErrorKind.BAD_PROTOCOL


class BadPortError(BadURIError):
    """Raised for non-standard ports when strange ports are not allowed."""

    kind = FetchErrorKind.BAD_PORT

    def __init__(self, port: int, url: str | None = None) -> None:
        self.port = port
        super().__init__(f"strange port number: {port}", url)


class RedirectProhibitedError(BadURIError):
    """Raised for redirects that change the URL scheme."""

    kind = FetchErrorKind.REDIRECT_PROHIBITED

    def __init__(self, source: str, destination: str) -> None:
        self.source = source
        self.destination = destination
        super().__init__(f"redirect prohibited: {source} -> {destination}", source)
