"""Lazily fetched web resource with derived charset, type and language."""

import threading
from collections.abc import Mapping
from typing import Any

import httpx

from boundfetch.cache import CachedValue
from boundfetch.fetch.config import FetchOptions, OptionsRegistry
from boundfetch.fetch.models import FetchResult
from boundfetch.fetch.state_machine import FetchStateMachine
from boundfetch.fetch.url import Target, parse_target, validate_url
from boundfetch.metadata.resolver import MetadataResolver
from boundfetch.text.normalizer import HtmlTextNormalizer, TextNormalizer


class Resource:
    """A single web resource fetched on first use.

    Nothing touches the network until an accessor needs the response. The
    response is fetched at most once per target; assigning a new ``url``
    discards the response and every value derived from it.

    Example:
        page = Resource("example.pl", {"ignore_content_overflows": True})
        print(page.real_url, page.language, page.charset)
    """

    def __init__(
        self,
        url: str | Target,
        options: FetchOptions | Mapping[str, Any] | None = None,
        *,
        registry: OptionsRegistry | None = None,
        transport: httpx.BaseTransport | None = None,
        normalizer: TextNormalizer | None = None,
    ) -> None:
        """Initialize the resource.

        Args:
            url: URL to fetch; a bare host is read as http.
            options: Complete options, or overrides for the registry defaults.
            registry: Defaults registry (the process-wide one if omitted).
            transport: Optional httpx transport, e.g. httpx.MockTransport.
            normalizer: Text normalizer for the cleaning helpers.

        Raises:
            UnknownOptionError: If options contain unrecognized names.
            BadURIError: If the URL may not be fetched.
        """
        registry = registry or OptionsRegistry.get_instance()
        self._options = registry.resolve(options)
        self._transport = transport
        self._normalizer = normalizer or HtmlTextNormalizer()
        self._lock = threading.RLock()
        self._result: CachedValue[FetchResult] = CachedValue()
        self._resolver: MetadataResolver | None = None
        self._target = self._validate(url)

    def __repr__(self) -> str:
        state = "fetched" if self.is_fetched else "pending"
        return f"<Resource {self._target.url} ({state})>"

    # Target

    @property
    def options(self) -> FetchOptions:
        """Get the options in effect for this resource."""
        return self._options

    @property
    def url(self) -> Target:
        """Get the target URL."""
        return self._target

    @url.setter
    def url(self, url: str | Target) -> None:
        """Set a new target, discarding the response and derived values."""
        target = self._validate(url)
        with self._lock:
            self._target = target
            self._result.invalidate()
            self._resolver = None

    @property
    def is_fetched(self) -> bool:
        """Check if the response for the current target was obtained."""
        return self._result.is_computed

    @property
    def host(self) -> str:
        """Host name of the target."""
        return self._target.host

    @property
    def port(self) -> int | None:
        """Port of the target."""
        return self._target.port

    @property
    def path(self) -> str:
        """Path of the target."""
        return self._target.path

    @property
    def protocol(self) -> str:
        """Scheme of the target."""
        return self._target.scheme

    @property
    def domain(self) -> str:
        """Top-level domain of the target."""
        return self._target.tld

    # Response

    @property
    def body(self) -> bytes:
        """Response body, at most max_length bytes."""
        return self._fetch_result().body_bytes

    def fetch(self) -> bytes:
        """Fetch the resource if needed and return the body."""
        return self.body

    @property
    def headers(self) -> dict[str, str]:
        """Response headers keyed by lower-cased name."""
        return dict(self._fetch_result().headers)

    header = headers

    @property
    def status_code(self) -> int:
        """HTTP status of the final response."""
        return self._fetch_result().status_code

    @property
    def truncated(self) -> bool:
        """Check if the body was cut at max_length."""
        return self._fetch_result().truncated

    @property
    def real_target(self) -> Target:
        """Target actually used after redirects."""
        return self._fetch_result().final_target

    @property
    def real_url(self) -> str:
        """URL actually used after redirects."""
        return self.real_target.url

    @property
    def real_host(self) -> str:
        """Host name actually used after redirects."""
        return self.real_target.host

    @property
    def real_port(self) -> int | None:
        """Port actually used after redirects."""
        return self.real_target.port

    @property
    def real_path(self) -> str:
        """Request path actually used after redirects."""
        return self.real_target.path

    @property
    def real_protocol(self) -> str:
        """Scheme actually used after redirects, e.g. "https"."""
        return self.real_target.scheme

    @property
    def real_domain(self) -> str:
        """Top-level domain of the final host, e.g. "pl"."""
        return self.real_target.tld

    # Metadata

    @property
    def charset(self) -> str:
        """Detected charset label, e.g. "utf-8"."""
        return self._metadata().charset

    content_charset = charset

    @property
    def content_type(self) -> str:
        """Detected media type, e.g. "text/html"."""
        return self._metadata().content_type

    @property
    def content_type_major(self) -> str | None:
        """Media type before the slash, e.g. "text"."""
        return self._metadata().content_type_major

    @property
    def content_type_minor(self) -> str | None:
        """Media subtype after the slash, e.g. "html"."""
        return self._metadata().content_type_minor

    def content_language(self, default: str | None = None) -> str:
        """Detected language code.

        Args:
            default: Fallback overriding the configured default language.
        """
        return self._metadata().resolve_language(default)

    @property
    def language(self) -> str:
        """Detected language code (configured default as fallback)."""
        return self.content_language()

    lang = language

    # Text

    @property
    def text(self) -> str:
        """Body decoded with the detected charset."""
        return self.body.decode(self.charset, errors="replace")

    def strip_html(self, text: str | None = None) -> str:
        """Text of the document (or given HTML) without markup."""
        return self._normalizer.strip_html(self.text if text is None else text)

    def clean_text(self, text: str | None = None) -> str:
        """Lower-case ASCII text of the document (or given HTML)."""
        return self._normalizer.clean_text(self.text if text is None else text)

    def clean_words(self, text: str | None = None) -> str:
        """Space-separated words of the document (or given HTML)."""
        return self._normalizer.clean_words(self.text if text is None else text)

    def words(self) -> list[str]:
        """Words of the document."""
        return self.clean_words().split()

    # Internals

    def _validate(self, url: str | Target) -> Target:
        target = parse_target(url)
        validate_url(target, self._options.allow_strange_ports)
        return target

    def _fetch_result(self) -> FetchResult:
        # The lock keeps a second caller from starting another fetch
        with self._lock:
            return self._result.get(self._run_fetch)

    def _run_fetch(self) -> FetchResult:
        machine = FetchStateMachine(self._options, transport=self._transport)
        return machine.resolve(self._target)

    def _metadata(self) -> MetadataResolver:
        with self._lock:
            result = self._fetch_result()
            if self._resolver is None:
                self._resolver = MetadataResolver(
                    headers=result.headers,
                    body=result.body_bytes,
                    final_target=result.final_target,
                    options=self._options,
                )
            return self._resolver
