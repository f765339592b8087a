"""Content metadata resolution: charset, content type and language.

Each value is derived through a fixed-order cascade of evidence sources
that stops at the first non-empty result:

    content type / charset:
        <meta http-equiv="content-type"> (text documents only)
        Content-Type header
        configured defaults

    language:
        <meta http-equiv="content-language"> (text documents only)
        lang / xml:lang of <html>, then of <body> (text documents only)
        Content-Language header, replaced by the domain fallback when it
        is empty or English and the fallback has an answer
        caller-supplied or configured default
"""

from collections.abc import Mapping

import structlog

from boundfetch.cache import CachedValue
from boundfetch.fetch.config import FetchOptions
from boundfetch.fetch.url import Target
from boundfetch.metadata.domains import language_for_domain
from boundfetch.metadata.extract import (
    content_type_major,
    content_type_minor,
    extract_charset,
    extract_content_language,
    extract_content_type,
)
from boundfetch.metadata.patterns import MarkupScanner


logger = structlog.get_logger()

# Charset families suggesting a national (non-English) site
NATIONAL_CHARSET_PREFIXES = ("iso", "win", "cp-", "koi", "utf")

# (tag, attribute) pairs consulted for the document language, in order
_LANGUAGE_ATTRIBUTES = (
    ("root", "lang"),
    ("root", "xml:lang"),
    ("body", "lang"),
    ("body", "xml:lang"),
)


class MetadataResolver:
    """Derives metadata from one fetched response.

    Every derivation is memoized; the resolver is discarded with the fetch
    result it was built from.
    """

    def __init__(
        self,
        headers: Mapping[str, str],
        body: bytes,
        final_target: Target,
        options: FetchOptions,
    ) -> None:
        """Initialize the resolver.

        Args:
            headers: Lower-cased response headers.
            body: Response body bytes.
            final_target: URL the content was obtained from.
            options: Options carrying the fallback defaults.
        """
        self._headers = headers
        self._body = body
        self._final_target = final_target
        self._options = options
        self._scanner: MarkupScanner | None = None
        self._type_info: CachedValue[tuple[str, str]] = CachedValue()
        self._language: CachedValue[str | None] = CachedValue()
        self._log = logger.bind(component="metadata", tld=final_target.tld)

    @property
    def is_textual(self) -> bool:
        """Check if the server declared a text/* content type."""
        declared = extract_content_type(self._headers.get("content-type"))
        return content_type_major(declared) == "text"

    @property
    def content_type(self) -> str:
        """Resolved media type, e.g. "text/html"."""
        return self.resolve_type_and_charset()[0]

    @property
    def content_type_major(self) -> str | None:
        """Major part of the resolved media type."""
        return content_type_major(self.content_type)

    @property
    def content_type_minor(self) -> str | None:
        """Minor part of the resolved media type."""
        return content_type_minor(self.content_type)

    @property
    def charset(self) -> str:
        """Resolved charset label, e.g. "utf-8"."""
        return self.resolve_type_and_charset()[1]

    def resolve_type_and_charset(self) -> tuple[str, str]:
        """Resolve the content type and charset.

        Returns:
            Tuple of (content_type, charset), defaults applied.
        """
        return self._type_info.get(self._detect_type_and_charset)

    def resolve_language(self, default: str | None = None) -> str:
        """Resolve the content language.

        Args:
            default: Fallback overriding the configured default language.

        Returns:
            Lower-cased language code.
        """
        language = self._language.get(self._detect_language)
        if language:
            return language
        if default and default.strip():
            return default.strip().lower()
        return self._options.default_content_language

    def domain_language(self) -> str | None:
        """Language suggested by the final URL's two-letter domain.

        Only consulted for national charset families; None otherwise.
        """
        if not self.charset.lower().startswith(NATIONAL_CHARSET_PREFIXES):
            return None
        return language_for_domain(self._final_target.tld)

    def _markup(self) -> MarkupScanner | None:
        """Scanner over the body, None when markup is not worth inspecting."""
        if not self._body or not self.is_textual:
            return None
        if self._scanner is None:
            self._scanner = MarkupScanner(self._body)
        return self._scanner

    def _detect_type_and_charset(self) -> tuple[str, str]:
        content_type: str | None = None
        charset: str | None = None

        markup = self._markup()
        if markup is not None:
            meta = markup.meta_content("content-type")
            content_type = extract_content_type(meta)
            charset = extract_charset(meta)

        # Type and charset fall back independently
        header = self._headers.get("content-type")
        if content_type is None:
            content_type = extract_content_type(header)
        if charset is None:
            charset = extract_charset(header)

        self._log.debug(
            "type_and_charset_resolved",
            content_type=content_type,
            charset=charset,
        )
        return (
            content_type or self._options.default_content_type,
            charset or self._options.default_charset,
        )

    def _detect_language(self) -> str | None:
        language: str | None = None

        markup = self._markup()
        if markup is not None:
            meta = markup.meta_content("content-language")
            language = extract_content_language(meta)
            for tag, attribute in _LANGUAGE_ATTRIBUTES:
                if language is not None:
                    break
                if tag == "root":
                    value = markup.root_attribute(attribute)
                else:
                    value = markup.body_attribute(attribute)
                language = extract_content_language(value)

        if language is None:
            header = self._headers.get("content-language")
            declared = extract_content_language(header)
            if declared is None or declared.startswith("en"):
                language = self.domain_language() or declared
            else:
                language = declared

        self._log.debug("language_resolved", language=language)
        return language
