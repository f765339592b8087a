"""Fetch state machine: redirects, connection retries and the total deadline."""

import time
from enum import Enum
from typing import assert_never

import httpx
import structlog

from boundfetch.fetch.config import FetchOptions
from boundfetch.fetch.deadline import Deadline
from boundfetch.fetch.errors import (
    BoundFetchError,
    ConnectionFailedError,
    ContentOverflowError,
    ContentTooBigError,
    FetchTimeoutError,
    TooManyConnectionsError,
    TooManyRedirectsError,
)
from boundfetch.fetch.metrics import FetchMetrics
from boundfetch.fetch.models import FetchResult, ReadKind, ReadOutcome
from boundfetch.fetch.reader import StreamingReader
from boundfetch.fetch.redact import redact_url_credentials
from boundfetch.fetch.url import (
    Target,
    resolve_location,
    validate_redirect,
    validate_url,
)


logger = structlog.get_logger()


class FetchState(str, Enum):
    """State of a single fetch.

    - IDLE: Not yet started
    - ATTEMPTING: Request in flight
    - REDIRECT_PENDING: Redirect accepted, next hop not yet requested
    - RETRY_PENDING: Connection failed, waiting to reconnect
    - SUCCEEDED: Body obtained
    - FAILED: Terminal error raised
    """

    IDLE = "IDLE"
    ATTEMPTING = "ATTEMPTING"
    REDIRECT_PENDING = "REDIRECT_PENDING"
    RETRY_PENDING = "RETRY_PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


# Valid state transitions
_VALID_TRANSITIONS: dict[FetchState, set[FetchState]] = {
    FetchState.IDLE: {FetchState.ATTEMPTING, FetchState.FAILED},
    FetchState.ATTEMPTING: {
        FetchState.SUCCEEDED,
        FetchState.REDIRECT_PENDING,
        FetchState.RETRY_PENDING,
        FetchState.FAILED,
    },
    FetchState.REDIRECT_PENDING: {FetchState.ATTEMPTING, FetchState.FAILED},
    FetchState.RETRY_PENDING: {FetchState.ATTEMPTING, FetchState.FAILED},
    FetchState.SUCCEEDED: set(),  # Terminal state
    FetchState.FAILED: set(),  # Terminal state
}


class FetchStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(self, from_state: FetchState, to_state: FetchState) -> None:
        """Initialize the transition error.

        Args:
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal fetch state transition: {from_state.value} -> {to_state.value}"
        )


class FetchStateMachine:
    """Resolves a target to a FetchResult.

    Follows redirects within the redirect budget, reconnects within the
    connection-retry budget, and runs everything under one total deadline.
    A machine is single-use: create a new one for every fetch.
    """

    def __init__(
        self,
        options: FetchOptions,
        transport: httpx.BaseTransport | None = None,
        reader: StreamingReader | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            options: Fetch options.
            transport: Optional httpx transport passed to the reader.
            reader: Optional reader (overrides transport).
        """
        self._options = options
        self._reader = reader or StreamingReader(options, transport=transport)
        self._state = FetchState.IDLE
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    @property
    def state(self) -> FetchState:
        """Get the current state."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal."""
        return self._state in (FetchState.SUCCEEDED, FetchState.FAILED)

    def can_transition_to(self, target: FetchState) -> bool:
        """Check if a transition to the target state is valid."""
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: FetchState) -> None:
        """Transition to a new state.

        Raises:
            FetchStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            raise FetchStateTransitionError(self._state, target)

        old_state = self._state
        self._state = target
        self._log.debug(
            "state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )

    def resolve(self, target: Target) -> FetchResult:
        """Fetch a target, following redirects and retrying connections.

        Args:
            target: Validated initial target.

        Returns:
            FetchResult for the final URL actually used.

        Raises:
            BoundFetchError: Any size, connection, timeout or URI error.
            FetchStateTransitionError: If the machine was already used.
        """
        if self._state is not FetchState.IDLE:
            raise FetchStateTransitionError(self._state, FetchState.ATTEMPTING)

        start_time_ns = time.perf_counter_ns()
        deadline = Deadline(self._options.total_timeout)
        try:
            result = self._run(target, deadline)
        except BoundFetchError as e:
            if not self.is_terminal:
                self.transition_to(FetchState.FAILED)
            self._metrics.record_failure(e.kind)
            raise

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._metrics.record_fetch(duration_ms)
        self._log.info(
            "fetch_complete",
            url=redact_url_credentials(target.url),
            final_url=redact_url_credentials(result.final_url),
            status_code=result.status_code,
            bytes=result.body_size,
            truncated=result.truncated,
            redirects=result.redirects,
            retries=result.retries,
            duration_ms=round(duration_ms, 2),
        )
        return result

    def _run(self, target: Target, deadline: Deadline) -> FetchResult:
        url = target
        redirects_left = self._options.redir_retry
        retries_left = self._options.conn_retry
        redirects = 0
        retries = 0

        while True:
            if deadline.expired:
                raise self._timeout(url, deadline)

            self.transition_to(FetchState.ATTEMPTING)
            self._log.debug(
                "fetch_attempt",
                url=redact_url_credentials(url.url),
                redirects=redirects,
                retries=retries,
            )
            outcome = self._reader.read(url, deadline)
            if outcome.status_code:
                self._metrics.record_response(outcome.status_code, len(outcome.body))

            # Deadline expiry supersedes whatever went wrong in the attempt
            if outcome.kind is not ReadKind.OK and deadline.expired:
                raise self._timeout(url, deadline)

            match outcome.kind:
                case ReadKind.OK:
                    return self._succeed(url, outcome, redirects, retries)

                case ReadKind.REDIRECT:
                    destination = resolve_location(url, outcome.location)
                    validate_redirect(url, destination)
                    validate_url(destination, self._options.allow_strange_ports)
                    if redirects_left is not None:
                        if redirects_left <= 0:
                            msg = "too many redirects"
                            raise TooManyRedirectsError(msg, url=url.url)
                        redirects_left -= 1
                    self.transition_to(FetchState.REDIRECT_PENDING)
                    self._metrics.record_redirect()
                    self._log.debug(
                        "redirect_followed",
                        source=redact_url_credentials(url.url),
                        destination=redact_url_credentials(destination.url),
                        status_code=outcome.status_code,
                    )
                    url = destination
                    redirects += 1

                case ReadKind.RETRIABLE:
                    if retries_left is not None:
                        if retries_left <= 0:
                            raise TooManyConnectionsError(outcome.message, url=url.url)
                        retries_left -= 1
                    self.transition_to(FetchState.RETRY_PENDING)
                    self._metrics.record_retry()
                    self._log.debug(
                        "connection_retry",
                        url=redact_url_credentials(url.url),
                        reason=outcome.message,
                        backoff_seconds=self._options.retry_backoff,
                    )
                    retries += 1
                    deadline.sleep(self._options.retry_backoff)

                case ReadKind.TOO_BIG:
                    raise ContentTooBigError(
                        outcome.declared_length or 0,
                        self._options.max_length or 0,
                        url=url.url,
                    )

                case ReadKind.OVERFLOW:
                    raise ContentOverflowError(
                        self._options.max_length or 0, url=url.url
                    )

                case ReadKind.TIMEOUT:
                    raise FetchTimeoutError(outcome.message, url=url.url)

                case ReadKind.FAILED:
                    raise ConnectionFailedError(
                        outcome.message,
                        url=url.url,
                        status_code=outcome.status_code or None,
                    )

                case _:
                    assert_never(outcome.kind)

    def _succeed(
        self,
        url: Target,
        outcome: ReadOutcome,
        redirects: int,
        retries: int,
    ) -> FetchResult:
        self.transition_to(FetchState.SUCCEEDED)
        if outcome.truncated:
            self._metrics.record_truncation()
            self._log.info(
                "content_truncated",
                url=redact_url_credentials(url.url),
                max_length=self._options.max_length,
                declared_length=outcome.declared_length,
            )
        return FetchResult(
            final_target=url,
            status_code=outcome.status_code,
            headers=outcome.headers,
            body_bytes=outcome.body,
            truncated=outcome.truncated,
            redirects=redirects,
            retries=retries,
        )

    def _timeout(self, url: Target, deadline: Deadline) -> FetchTimeoutError:
        msg = f"Total timeout of {deadline.seconds}s exceeded"
        return FetchTimeoutError(msg, url=url.url)
