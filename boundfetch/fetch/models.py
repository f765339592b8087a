"""Data models for the fetch layer."""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from boundfetch.fetch.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN
from boundfetch.fetch.url import Target


class ReadKind(str, Enum):
    """Outcome of a single request/response cycle.

    - OK: 2xx response, body read (possibly truncated under the ignore policy)
    - REDIRECT: 3xx response, or I/O failure, with a Location header
    - RETRIABLE: I/O failure (or 3xx without Location) worth reconnecting for
    - TOO_BIG: Declared Content-Length exceeds the byte limit
    - OVERFLOW: Bytes read exceed the byte limit
    - TIMEOUT: Connect/read timeout or deadline expiry
    - FAILED: Protocol error, non-2xx/3xx status, other transport failure
    """

    OK = "OK"
    REDIRECT = "REDIRECT"
    RETRIABLE = "RETRIABLE"
    TOO_BIG = "TOO_BIG"
    OVERFLOW = "OVERFLOW"
    TIMEOUT = "TIMEOUT"
    FAILED = "FAILED"


@dataclass
class ReadOutcome:
    """Result returned by the streaming reader for one attempt.

    Attributes:
        kind: Outcome classification.
        status_code: HTTP status, 0 if no response was received.
        headers: Lower-cased header names to raw values, last value wins.
        body: Body bytes read, never more than the byte limit.
        truncated: Whether the body was cut at the byte limit.
        message: Description of the failure, empty on success.
        declared_length: Content-Length announced by the server, if any.
    """

    kind: ReadKind
    status_code: int = 0
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    truncated: bool = False
    message: str = ""
    declared_length: int | None = None

    @property
    def location(self) -> str:
        """Location header value, or empty string."""
        return self.headers.get("location", "").strip()


class FetchResult(BaseModel):
    """Final result of fetching one target.

    Produced by the fetch state machine once per target and read many times
    by the resource and metadata resolver.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    final_target: Target = Field(description="Target actually used after redirects")
    status_code: int = Field(ge=100, le=599, description="HTTP status code")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Lower-cased response headers"
    )
    body_bytes: bytes = Field(default=b"", description="Response body")
    truncated: bool = Field(
        default=False, description="Whether the body was cut at max_length"
    )
    redirects: int = Field(default=0, ge=0, description="Redirects followed")
    retries: int = Field(default=0, ge=0, description="Connection retries spent")

    @property
    def final_url(self) -> str:
        """Get the final URL after redirects."""
        return self.final_target.url

    @property
    def is_success(self) -> bool:
        """Check if the response status is 2xx."""
        return HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX

    @property
    def body_size(self) -> int:
        """Get the size of the response body in bytes."""
        return len(self.body_bytes)
