"""Unit tests for the domain to language table."""

import pytest

from boundfetch.metadata.domains import DOMAIN_TO_LANGUAGE, language_for_domain


class TestLanguageForDomain:
    """Tests for language_for_domain."""

    @pytest.mark.parametrize(
        ("tld", "expected"),
        [("pl", "pl"), ("PL", "pl"), ("cz", "cs"), ("br", "pt"), ("uk", "en")],
    )
    def test_known(self, tld: str, expected: str) -> None:
        """Test lookups of known two-letter domains."""
        assert language_for_domain(tld) == expected

    @pytest.mark.parametrize("tld", ["com", "org", "x", "", "zz"])
    def test_unknown(self, tld: str) -> None:
        """Test that generic or unknown domains give None."""
        assert language_for_domain(tld) is None

    def test_table_is_read_only(self) -> None:
        """Test that the table cannot be modified."""
        with pytest.raises(TypeError):
            DOMAIN_TO_LANGUAGE["pl"] = "en"  # type: ignore[index]

    def test_keys_are_two_letters(self) -> None:
        """Test the shape of the table."""
        assert all(len(key) == 2 and key.islower() for key in DOMAIN_TO_LANGUAGE)
