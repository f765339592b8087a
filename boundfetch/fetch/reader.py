"""Streaming reader performing one size-limited request/response cycle."""

import socket
import threading

import httpx
import structlog

from boundfetch.fetch.config import FetchOptions
from boundfetch.fetch.constants import (
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    HTTP_STATUS_REDIRECT_MAX,
    HTTP_STATUS_REDIRECT_MIN,
)
from boundfetch.fetch.deadline import Deadline
from boundfetch.fetch.models import ReadKind, ReadOutcome
from boundfetch.fetch.redact import redact_headers, redact_url_credentials
from boundfetch.fetch.url import Target


logger = structlog.get_logger()


class StreamingReader:
    """Performs a single GET and reads the body under a byte limit.

    Never raises for transport problems: every exit path is reported as a
    ReadOutcome so the caller can dispatch on its kind. The client and the
    response stream are closed on every path.
    """

    def __init__(
        self,
        options: FetchOptions,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            options: Fetch options (timeouts, byte limit, overflow policy).
            transport: Optional httpx transport, e.g. httpx.MockTransport.
        """
        self._options = options
        self._transport = transport
        self._log = logger.bind(component="reader")

    def read(self, target: Target, deadline: Deadline) -> ReadOutcome:
        """Request a target once.

        Args:
            target: Validated target to request.
            deadline: Overall deadline; caps connect/read timeouts.

        Returns:
            ReadOutcome describing the response or failure.
        """
        received: dict[str, str] = {}
        log = self._log.bind(url=redact_url_credentials(target.url))

        try:
            with (
                httpx.Client(
                    timeout=self._build_timeout(deadline),
                    follow_redirects=False,
                    verify=self._options.verify_tls,
                    transport=self._transport,
                ) as client,
                client.stream(
                    "GET", target.url, headers=self._build_headers()
                ) as response,
            ):
                received = collect_headers(response)
                log.debug(
                    "response_received",
                    status_code=response.status_code,
                    headers=redact_headers(received),
                )
                watchdog = arm_watchdog(response, deadline)
                try:
                    return self._consume(response, received, deadline)
                finally:
                    if watchdog is not None:
                        watchdog.cancel()

        except httpx.InvalidURL as e:
            # Raised while httpx prepares the next request for a bad Location
            return ReadOutcome(
                kind=ReadKind.FAILED,
                headers=received,
                message=f"Invalid URL: {e}",
            )

        except httpx.TimeoutException as e:
            return ReadOutcome(
                kind=ReadKind.TIMEOUT,
                headers=received,
                message=f"Request timed out: {e}",
            )

        except httpx.NetworkError as e:
            # A Location header seen before the failure still names a new hop
            kind = (
                ReadKind.REDIRECT if received.get("location") else ReadKind.RETRIABLE
            )
            return ReadOutcome(
                kind=kind,
                headers=received,
                message=f"Connection failed: {str(e) or type(e).__name__}",
            )

        except httpx.HTTPError as e:
            return ReadOutcome(
                kind=ReadKind.FAILED,
                headers=received,
                message=f"{type(e).__name__}: {e}",
            )

    def _build_timeout(self, deadline: Deadline) -> httpx.Timeout:
        """Per-attempt timeouts, capped by the time left on the deadline."""
        open_timeout = deadline.cap(self._options.open_timeout)
        read_timeout = deadline.cap(self._options.read_timeout)
        return httpx.Timeout(
            connect=open_timeout,
            read=read_timeout,
            write=read_timeout,
            pool=open_timeout,
        )

    def _build_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._options.user_agent,
            "Accept": "*/*",
            # Byte limits apply to the bytes on the wire
            "Accept-Encoding": "identity",
        }

    def _consume(
        self,
        response: httpx.Response,
        headers: dict[str, str],
        deadline: Deadline,
    ) -> ReadOutcome:
        """Classify the status and stream the body under the byte limit."""
        status = response.status_code

        if HTTP_STATUS_REDIRECT_MIN <= status < HTTP_STATUS_REDIRECT_MAX:
            outcome = ReadOutcome(
                kind=ReadKind.REDIRECT, status_code=status, headers=headers
            )
            if not outcome.location:
                outcome.kind = ReadKind.RETRIABLE
                outcome.message = f"Redirect ({status}) without Location header"
            return outcome

        if not HTTP_STATUS_OK_MIN <= status < HTTP_STATUS_OK_MAX:
            return ReadOutcome(
                kind=ReadKind.FAILED,
                status_code=status,
                headers=headers,
                message=f"{status} {response.reason_phrase}".strip(),
            )

        limit = self._options.max_length
        ignore_overflows = self._options.ignore_content_overflows
        declared = parse_content_length(headers)

        if (
            limit is not None
            and not ignore_overflows
            and declared is not None
            and declared > limit
        ):
            return ReadOutcome(
                kind=ReadKind.TOO_BIG,
                status_code=status,
                headers=headers,
                declared_length=declared,
                message=f"Content length {declared} exceeds limit {limit}",
            )

        buffer = bytearray()
        # One chunk per network read, so the deadline is checked on each
        for chunk in response.iter_bytes():
            if deadline.expired:
                return expired_outcome(status, headers, buffer, deadline)

            if limit is not None and len(buffer) + len(chunk) > limit:
                buffer.extend(chunk[: limit - len(buffer)])
                if ignore_overflows:
                    return ReadOutcome(
                        kind=ReadKind.OK,
                        status_code=status,
                        headers=headers,
                        body=bytes(buffer),
                        truncated=True,
                        declared_length=declared,
                    )
                return ReadOutcome(
                    kind=ReadKind.OVERFLOW,
                    status_code=status,
                    headers=headers,
                    body=bytes(buffer),
                    declared_length=declared,
                    message=f"Read data exceeds limit of {limit} bytes",
                )

            buffer.extend(chunk)

        # A close-delimited body also ends when the watchdog shuts the socket
        if deadline.expired:
            return expired_outcome(status, headers, buffer, deadline)

        return ReadOutcome(
            kind=ReadKind.OK,
            status_code=status,
            headers=headers,
            body=bytes(buffer),
            declared_length=declared,
        )


def expired_outcome(
    status: int,
    headers: dict[str, str],
    buffer: bytearray,
    deadline: Deadline,
) -> ReadOutcome:
    """Outcome for a body read abandoned at the total deadline."""
    return ReadOutcome(
        kind=ReadKind.TIMEOUT,
        status_code=status,
        headers=headers,
        body=bytes(buffer),
        message=f"Total timeout of {deadline.seconds}s exceeded",
    )


def arm_watchdog(
    response: httpx.Response, deadline: Deadline
) -> threading.Timer | None:
    """Shut the response's socket down once the deadline passes.

    The read timeout is fixed when the attempt starts, so a server sending
    one byte at a time could otherwise keep the body read alive well past
    the deadline. Shutting the socket down wakes the blocked read, which
    then fails or ends and the caller reports a timeout.

    Args:
        response: Streaming response whose body is about to be read.
        deadline: Overall deadline of the fetch.

    Returns:
        The started timer, or None if the deadline is unbounded or the
        transport exposes no socket (e.g. httpx.MockTransport).
    """
    if not deadline.is_bounded:
        return None
    stream = response.extensions.get("network_stream")
    sock = stream.get_extra_info("socket") if stream is not None else None
    if sock is None:
        return None

    timer = threading.Timer(deadline.remaining() or 0.0, shutdown_socket, (sock,))
    timer.daemon = True
    timer.start()
    return timer


def shutdown_socket(sock: socket.socket) -> None:
    """Shut down both directions of a socket, ignoring one already closed."""
    try:
        # Unbound call so a TLS socket is shut down at the transport level
        socket.socket.shutdown(sock, socket.SHUT_RDWR)
    except OSError as e:
        logger.debug("socket_shutdown_skipped", error=str(e))


def collect_headers(response: httpx.Response) -> dict[str, str]:
    """Lower-cased header names to raw values; the last duplicate wins."""
    headers: dict[str, str] = {}
    for key, value in response.headers.multi_items():
        headers[key.lower()] = value
    return headers


def parse_content_length(headers: dict[str, str]) -> int | None:
    """Parse the Content-Length header, None if absent or invalid."""
    value = headers.get("content-length", "").strip()
    if not value:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length >= 0 else None
