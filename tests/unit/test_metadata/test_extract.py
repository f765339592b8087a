"""Unit tests for header value extraction."""

import pytest

from boundfetch.metadata.extract import (
    content_type_major,
    content_type_minor,
    extract_charset,
    extract_content_language,
    extract_content_type,
    normalize_charset,
)


class TestNormalizeCharset:
    """Tests for normalize_charset."""

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("UTF-8", "utf-8"),
            ("utf8", "utf-8"),
            (" 'ISO-8859-2' ", "iso-8859-2"),
            ("windows-1250", "windows-1250"),
        ],
    )
    def test_known(self, label: str, expected: str) -> None:
        """Test that known labels are lower-cased and kept as declared."""
        assert normalize_charset(label) == expected

    @pytest.mark.parametrize("label", ["", "  ", "x-klingon", "base64"])
    def test_unknown_or_not_text(self, label: str) -> None:
        """Test that unusable labels give None."""
        assert normalize_charset(label) is None


class TestExtractFromContentType:
    """Tests for content type and charset extraction."""

    def test_type_and_charset(self) -> None:
        """Test a typical header value."""
        value = "Text/HTML;  Charset=ISO-8859-2"

        assert extract_content_type(value) == "text/html"
        assert extract_charset(value) == "iso-8859-2"

    def test_charset_missing(self) -> None:
        """Test a value without parameters."""
        assert extract_charset("text/html") is None
        assert extract_content_type("text/html") == "text/html"

    def test_quoted_charset(self) -> None:
        """Test that quotes around the charset are removed."""
        assert extract_charset('text/html; charset="utf-8"') == "utf-8"

    def test_charset_after_other_parameters(self) -> None:
        """Test that the charset parameter is found among others."""
        assert extract_charset("text/html; q=1; charset=utf8") == "utf-8"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty(self, value: str | None) -> None:
        """Test that empty values give None."""
        assert extract_content_type(value) is None
        assert extract_charset(value) is None


class TestExtractContentLanguage:
    """Tests for extract_content_language."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("PL", "pl"),
            ("pl, en;q=0.5", "pl"),
            ("de-AT ", "de-at"),
            ("", None),
            (None, None),
        ],
    )
    def test_first_language(self, value: str | None, expected: str | None) -> None:
        """Test that the first language is lower-cased."""
        assert extract_content_language(value) == expected


class TestMediaTypeParts:
    """Tests for content_type_major and content_type_minor."""

    def test_parts(self) -> None:
        """Test splitting a media type."""
        assert content_type_major("text/html") == "text"
        assert content_type_minor("text/html") == "html"

    def test_no_minor(self) -> None:
        """Test a media type without a slash."""
        assert content_type_major("text") == "text"
        assert content_type_minor("text") is None

    def test_empty(self) -> None:
        """Test empty input."""
        assert content_type_major(None) is None
        assert content_type_minor("") is None
