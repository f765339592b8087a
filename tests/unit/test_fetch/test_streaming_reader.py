"""Unit tests for the streaming reader."""

import socket

import httpx
import pytest

from boundfetch.fetch.config import FetchOptions
from boundfetch.fetch.deadline import Deadline
from boundfetch.fetch.models import ReadKind, ReadOutcome
from boundfetch.fetch.reader import (
    StreamingReader,
    arm_watchdog,
    collect_headers,
    parse_content_length,
    shutdown_socket,
)
from boundfetch.fetch.url import parse_target
from tests.helpers.transport import (
    RecordingTransport,
    TrackingStream,
    html_response,
    redirect_response,
)


URL = "http://example.com/"


@pytest.fixture
def router() -> RecordingTransport:
    """Transport with no routes registered."""
    return RecordingTransport()


def read(router: RecordingTransport, url: str = URL, **options: object) -> ReadOutcome:
    reader = StreamingReader(
        FetchOptions.model_validate(options), transport=router.transport
    )
    return reader.read(parse_target(url), Deadline(0))


class TestStatusClassification:
    """Tests for response status handling."""

    def test_ok(self, router: RecordingTransport) -> None:
        """Test that a 2xx response yields the body."""
        router.add(URL, html_response("<p>hi</p>"))

        outcome = read(router)

        assert outcome.kind == ReadKind.OK
        assert outcome.status_code == 200
        assert outcome.body == b"<p>hi</p>"
        assert outcome.truncated is False

    def test_redirect(self, router: RecordingTransport) -> None:
        """Test that a 3xx with Location is a redirect."""
        router.add(URL, redirect_response("/next", status_code=301))

        outcome = read(router)

        assert outcome.kind == ReadKind.REDIRECT
        assert outcome.location == "/next"

    def test_redirect_without_location_is_retriable(
        self, router: RecordingTransport
    ) -> None:
        """Test that a 3xx without Location is treated as a failed attempt."""
        router.add(URL, httpx.Response(302))

        outcome = read(router)

        assert outcome.kind == ReadKind.RETRIABLE
        assert "without Location" in outcome.message

    @pytest.mark.parametrize("status", [404, 500, 418])
    def test_other_status_failed(
        self, router: RecordingTransport, status: int
    ) -> None:
        """Test that non-2xx, non-3xx statuses fail."""
        router.add(URL, httpx.Response(status))

        outcome = read(router)

        assert outcome.kind == ReadKind.FAILED
        assert outcome.status_code == status
        assert outcome.message.startswith(str(status))

    def test_unparseable_location_failed(self, router: RecordingTransport) -> None:
        """Test that a Location httpx cannot build a request from fails."""
        router.add(URL, redirect_response("mailto:bob@evil.com"))

        outcome = read(router)

        assert outcome.kind == ReadKind.FAILED
        assert outcome.message.startswith("Invalid URL")


class TestTransportFailures:
    """Tests for mapping of httpx exceptions."""

    def test_connect_error_is_retriable(self, router: RecordingTransport) -> None:
        """Test that a connection failure can be retried."""
        outcome = read(router, url="http://unrouted.example/")

        assert outcome.kind == ReadKind.RETRIABLE
        assert outcome.message.startswith("Connection failed")
        assert outcome.status_code == 0

    def test_timeout(self, router: RecordingTransport) -> None:
        """Test that an httpx timeout is reported as a timeout."""

        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        router.add(URL, slow)

        assert read(router).kind == ReadKind.TIMEOUT

    def test_protocol_error_failed(self, router: RecordingTransport) -> None:
        """Test that protocol errors are not retried."""

        def broken(request: httpx.Request) -> httpx.Response:
            raise httpx.RemoteProtocolError("bad response", request=request)

        router.add(URL, broken)

        assert read(router).kind == ReadKind.FAILED


class TestByteLimit:
    """Tests for byte limit enforcement."""

    def test_declared_too_big_reads_no_body(
        self, router: RecordingTransport
    ) -> None:
        """Test that an oversized Content-Length is rejected before reading."""
        stream = TrackingStream([b"x" * 2000])
        router.add(
            URL,
            lambda _: httpx.Response(
                200, headers={"content-length": "2000"}, stream=stream
            ),
        )

        outcome = read(router, max_length=1000)

        assert outcome.kind == ReadKind.TOO_BIG
        assert outcome.declared_length == 2000
        assert stream.chunks_read == 0

    def test_undeclared_overflow(self, router: RecordingTransport) -> None:
        """Test that reading past the limit without a length overflows."""
        router.add(
            URL,
            lambda _: httpx.Response(200, content=iter([b"a" * 600, b"b" * 600])),
        )

        outcome = read(router, max_length=1000)

        assert outcome.kind == ReadKind.OVERFLOW
        assert len(outcome.body) == 1000

    def test_lying_content_length_overflows(
        self, router: RecordingTransport
    ) -> None:
        """Test that the limit applies to bytes read, not bytes declared."""
        stream = TrackingStream([b"a" * 800, b"b" * 800])
        router.add(
            URL,
            lambda _: httpx.Response(
                200, headers={"content-length": "10"}, stream=stream
            ),
        )

        assert read(router, max_length=1000).kind == ReadKind.OVERFLOW

    def test_ignore_policy_truncates_exactly(
        self, router: RecordingTransport
    ) -> None:
        """Test that the ignore policy keeps exactly max_length bytes."""
        router.add(URL, html_response(b"x" * 5000))

        outcome = read(router, max_length=1000, ignore_content_overflows=True)

        assert outcome.kind == ReadKind.OK
        assert outcome.truncated is True
        assert outcome.body == b"x" * 1000

    def test_body_at_limit_not_truncated(self, router: RecordingTransport) -> None:
        """Test that a body of exactly max_length bytes is complete."""
        router.add(URL, html_response(b"x" * 1000))

        outcome = read(router, max_length=1000)

        assert outcome.kind == ReadKind.OK
        assert outcome.truncated is False
        assert len(outcome.body) == 1000

    def test_unbounded(self, router: RecordingTransport) -> None:
        """Test that max_length=None reads everything."""
        router.add(URL, html_response(b"x" * 100_000))

        outcome = read(router, max_length=None)

        assert len(outcome.body) == 100_000


class TestRequest:
    """Tests for the request sent."""

    def test_request_headers(self, router: RecordingTransport) -> None:
        """Test the User-Agent and identity encoding headers."""
        router.add(URL, html_response("ok"))

        read(router, user_agent="probe/1.0")

        request = router.requests[0]
        assert request.method == "GET"
        assert request.headers["user-agent"] == "probe/1.0"
        assert request.headers["accept-encoding"] == "identity"


class TestHeaderHelpers:
    """Tests for header helpers."""

    def test_last_duplicate_wins(self) -> None:
        """Test that header names are lower-cased and the last value wins."""
        response = httpx.Response(
            200, headers=[("X-Tag", "first"), ("x-tag", "second")]
        )

        assert collect_headers(response)["x-tag"] == "second"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("123", 123), (" 7 ", 7), ("", None), ("abc", None), ("-1", None)],
    )
    def test_parse_content_length(self, value: str, expected: int | None) -> None:
        """Test Content-Length parsing."""
        assert parse_content_length({"content-length": value}) == expected


class TestWatchdog:
    """Tests for the deadline watchdog on body reads."""

    def test_not_armed_without_deadline(self) -> None:
        """Test that an unbounded deadline needs no watchdog."""
        assert arm_watchdog(httpx.Response(200), Deadline(0)) is None

    def test_not_armed_without_socket(self) -> None:
        """Test that responses without a network stream are skipped."""
        assert arm_watchdog(httpx.Response(200), Deadline(5)) is None

    def test_shutdown_wakes_blocked_read(self) -> None:
        """Test that shutting a socket down ends a pending read."""
        left, right = socket.socketpair()
        with left, right:
            shutdown_socket(left)

            assert left.recv(1) == b""

    def test_shutdown_of_closed_socket_is_ignored(self) -> None:
        """Test that a socket closed before the deadline is left alone."""
        sock = socket.socket()
        sock.close()

        shutdown_socket(sock)
