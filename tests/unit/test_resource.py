"""Unit tests for the lazily fetched Resource."""

import threading

import httpx
import pytest

from boundfetch.fetch.config import FetchOptions, OptionsRegistry, UnknownOptionError
from boundfetch.fetch.errors import (
    BadPortError,
    BadProtocolError,
    ConnectionFailedError,
    ContentOverflowError,
    ContentTooBigError,
    MalformedURIError,
    RedirectProhibitedError,
    TooManyRedirectsError,
)
from boundfetch.resource import Resource
from tests.helpers.transport import (
    RecordingTransport,
    TrackingStream,
    html_response,
    redirect_response,
)


@pytest.fixture
def router() -> RecordingTransport:
    """Transport with no routes registered."""
    return RecordingTransport()


@pytest.fixture
def registry() -> OptionsRegistry:
    """Isolated registry without retry pauses."""
    return OptionsRegistry(FetchOptions(retry_backoff=0))


def make(
    url: str,
    router: RecordingTransport,
    registry: OptionsRegistry,
    **options: object,
) -> Resource:
    return Resource(url, options, registry=registry, transport=router.transport)


class TestConstruction:
    """Tests for validation at construction time."""

    def test_no_network_until_needed(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Creating a resource and reading URL parts does not fetch."""
        resource = make("Example.PL/page", router, registry)

        assert resource.host == "example.pl"
        assert resource.port == 80
        assert resource.path == "/page"
        assert resource.protocol == "http"
        assert resource.domain == "pl"
        assert resource.is_fetched is False
        assert router.request_count == 0

    def test_unknown_option(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Unknown option names are rejected before any request."""
        with pytest.raises(UnknownOptionError, match="max_lenght"):
            make("example.com", router, registry, max_lenght=10)

    def test_bad_port(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """A strange port is rejected unless allowed."""
        with pytest.raises(BadPortError):
            make("http://example.com:8080/", router, registry)

        resource = make(
            "http://example.com:8080/", router, registry, allow_strange_ports=True
        )
        assert resource.port == 8080

    def test_bad_protocol(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Only http and https may be fetched."""
        with pytest.raises(BadProtocolError):
            make("ftp://example.com/", router, registry)

    def test_mailto_is_bad_protocol(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """An opaque mailto URI is not mistaken for a host."""
        with pytest.raises(BadProtocolError):
            make("mailto:alice@example.com", router, registry)

        assert router.request_count == 0

    def test_malformed(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """An empty URL is malformed."""
        with pytest.raises(MalformedURIError):
            make("", router, registry)

    def test_options_snapshot(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Later registry changes do not affect an existing resource."""
        resource = make("example.com", router, registry)

        registry.configure(max_length=1)

        assert resource.options.max_length == 524288


class TestFetching:
    """Tests for lazy fetching and caching."""

    def test_single_request_for_all_accessors(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Every accessor shares one response."""
        router.add(
            "http://example.com/",
            html_response('<html lang="fr">salut</html>'),
        )
        resource = make("example.com", router, registry)

        first = resource.charset
        assert resource.charset == first
        assert resource.content_type == "text/html"
        assert resource.language == "fr"
        assert resource.body.startswith(b"<html")
        assert resource.headers["content-type"] == "text/html; charset=utf-8"
        assert resource.status_code == 200
        assert router.request_count == 1
        assert resource.is_fetched is True

    def test_aliases(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Alias accessors return the same values."""
        router.add("http://example.com/", html_response("<p>x</p>"))
        resource = make("example.com", router, registry)

        assert resource.content_charset == resource.charset == "utf-8"
        assert resource.lang == resource.language
        assert resource.header == resource.headers
        assert resource.fetch() == resource.body

    def test_headers_copy(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Mutating the returned headers does not change the resource."""
        router.add("http://example.com/", html_response("<p>x</p>"))
        resource = make("example.com", router, registry)

        resource.headers["content-type"] = "image/png"

        assert resource.content_type == "text/html"

    def test_url_change_refetches_once(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Assigning a new URL discards the response and derived values."""
        router.add("http://example.com/", html_response('<html lang="fr">'))
        router.add(
            "http://example.de/",
            html_response('<html lang="de">', "text/html; charset=iso-8859-1"),
        )
        resource = make("example.com", router, registry)
        assert resource.language == "fr"

        resource.url = "example.de"

        assert resource.is_fetched is False
        assert resource.language == "de"
        assert resource.charset == "iso-8859-1"
        assert resource.real_url == "http://example.de/"
        assert router.request_count == 2

    def test_url_change_validated(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """An invalid new URL is rejected and the old target kept."""
        resource = make("example.com", router, registry)

        with pytest.raises(BadPortError):
            resource.url = "http://example.com:81/"

        assert resource.url.url == "http://example.com/"

    def test_concurrent_access_fetches_once(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Threads reading the same resource share a single fetch."""
        router.add("http://example.com/", html_response("<p>x</p>"))
        resource = make("example.com", router, registry)

        threads = [threading.Thread(target=lambda: resource.body) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert router.request_count == 1

    def test_failed_fetch_retried_on_next_access(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """A failure is raised and nothing is cached."""
        router.add("http://example.com/", httpx.Response(500))
        resource = make("example.com", router, registry)

        with pytest.raises(ConnectionFailedError):
            _ = resource.charset
        assert resource.is_fetched is False

        router.add("http://example.com/", html_response("<p>ok</p>"))
        assert resource.status_code == 200


class TestRedirects:
    """Tests for redirect handling through the resource."""

    def test_real_url_after_redirect(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Real accessors describe the final URL."""
        router.add(
            "http://example.com/", redirect_response("http://www.example.pl/home")
        )
        router.add("http://www.example.pl/home", html_response("<p>x</p>"))
        resource = make("example.com", router, registry)

        assert resource.real_url == "http://www.example.pl/home"
        assert resource.real_host == "www.example.pl"
        assert resource.real_port == 80
        assert resource.real_path == "/home"
        assert resource.real_protocol == "http"
        assert resource.real_domain == "pl"
        assert resource.host == "example.com"

    def test_redirect_chain_budget(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """A chain one longer than the budget fails; the budget itself passes."""
        for i in range(3):
            router.add(f"http://example.com/{i}", redirect_response(f"/{i + 1}"))
        router.add("http://example.com/3", html_response("<p>end</p>"))

        ok = make("http://example.com/0", router, registry, redir_retry=3)
        assert ok.real_path == "/3"

        too_short = make("http://example.com/0", router, registry, redir_retry=2)
        with pytest.raises(TooManyRedirectsError):
            _ = too_short.body

    def test_https_downgrade_prohibited(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """A redirect from https to http fails."""
        router.add("https://example.com/", redirect_response("http://example.com/"))
        resource = make("https://example.com/", router, registry)

        with pytest.raises(RedirectProhibitedError):
            _ = resource.body

    def test_unparseable_location_is_typed_failure(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """A Location httpx rejects fails the fetch with a library error."""
        router.add("http://start.com/", redirect_response("mailto:bob@evil.com"))
        resource = make("http://start.com/", router, registry)

        with pytest.raises(ConnectionFailedError, match="Invalid URL"):
            _ = resource.real_url

        assert router.request_count == 1


class TestSizeLimits:
    """Tests for byte limit handling through the resource."""

    def test_too_big_without_reading_body(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """A declared oversize fails before the body is read."""
        stream = TrackingStream([b"x" * 5000])
        router.add(
            "http://example.com/",
            lambda _: httpx.Response(
                200, headers={"content-length": "5000"}, stream=stream
            ),
        )
        resource = make("example.com", router, registry, max_length=1000)

        with pytest.raises(ContentTooBigError) as exc_info:
            _ = resource.body

        assert exc_info.value.declared == 5000
        assert stream.chunks_read == 0

    def test_overflow(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """An undeclared oversize fails while reading."""
        router.add(
            "http://example.com/",
            lambda _: httpx.Response(200, content=iter([b"x" * 3000])),
        )
        resource = make("example.com", router, registry, max_length=1000)

        with pytest.raises(ContentOverflowError):
            _ = resource.body

    def test_truncated_exactly(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """The ignore policy keeps exactly max_length bytes."""
        router.add("http://example.com/", html_response(b"y" * 5000))
        resource = make(
            "example.com",
            router,
            registry,
            max_length=1000,
            ignore_content_overflows=True,
        )

        assert resource.body == b"y" * 1000
        assert resource.truncated is True


class TestMetadata:
    """Tests for metadata through the resource."""

    def test_html_lang_on_generic_domain(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """html lang gives the language of a .com page."""
        router.add(
            "http://example.com/",
            html_response('<html lang="fr"><body>Bonjour</body></html>'),
        )

        assert make("example.com", router, registry).language == "fr"

    def test_national_domain_fallback(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """English declared on a .pl site with a national charset is Polish."""
        router.add(
            "http://example.pl/",
            html_response(
                "<p>tekst</p>",
                "text/html; charset=iso-8859-2",
                headers={"content-language": "en"},
            ),
        )

        assert make("example.pl", router, registry).language == "pl"

    def test_content_language_default(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """A per-call default applies only without evidence."""
        router.add(
            "http://example.com/", html_response("<p>x</p>", "text/html")
        )
        resource = make("example.com", router, registry)

        assert resource.content_language() == "en"
        assert resource.content_language("sv") == "sv"

    def test_type_parts(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Major and minor media type parts are exposed."""
        router.add(
            "http://example.com/", html_response(b"{}", "application/json")
        )
        resource = make("example.com", router, registry)

        assert resource.content_type_major == "application"
        assert resource.content_type_minor == "json"


class TestText:
    """Tests for decoded and cleaned text."""

    def test_text_decoded_with_charset(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """The body is decoded with the detected charset."""
        body = "<p>Zażółć</p>".encode("iso-8859-2")
        router.add(
            "http://example.pl/",
            html_response(body, "text/html; charset=iso-8859-2"),
        )
        resource = make("example.pl", router, registry)

        assert "Zażółć" in resource.text
        assert resource.clean_text() == "zazoc"
        assert resource.words() == ["zazoc"]

    def test_cleaning_given_text(
        self, router: RecordingTransport, registry: OptionsRegistry
    ) -> None:
        """Cleaning helpers accept text and then do not fetch."""
        resource = make("example.com", router, registry)

        assert resource.strip_html("<b>Hi</b>").strip() == "Hi"
        assert resource.clean_words("<p>Hi there!</p>") == "hi there"
        assert router.request_count == 0
