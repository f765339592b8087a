"""Unit tests for HTML text normalization."""

from boundfetch.text.normalizer import HtmlTextNormalizer


class TestStripHtml:
    """Tests for strip_html."""

    def test_markup_removed(self) -> None:
        """Test that tags are removed and text kept."""
        normalizer = HtmlTextNormalizer()

        text = normalizer.strip_html("<html><body><b>Hello</b> world</body></html>")

        assert text.strip() == "Hello world"

    def test_scripts_styles_comments_removed(self) -> None:
        """Test that non-text content never reaches the output."""
        html = (
            "<html><head><style>p {color: red}</style></head><body>"
            "<script>var x = 1;</script><!-- note -->Visible</body></html>"
        )

        text = HtmlTextNormalizer().strip_html(html)

        assert text.strip() == "Visible"

    def test_line_breaks(self) -> None:
        """Test that br and p start new lines."""
        text = HtmlTextNormalizer().strip_html("<body>one<br>two<p>three</p></body>")

        assert text.split() == ["one", "two", "three"]
        assert text.count("\n") >= 2


class TestCleanText:
    """Tests for clean_text and clean_words."""

    def test_transliterated_lowercase(self) -> None:
        """Test that accents are folded and text lower-cased."""
        text = HtmlTextNormalizer().clean_text("<p>Zażółć GĘŚLĄ Jaźń</p>")

        assert text == "zazoc gesla jazn"

    def test_sentence_punctuation_removed(self) -> None:
        """Test that sentence punctuation becomes spaces."""
        text = HtmlTextNormalizer().clean_text("<p>Hi! How are you? Fine.</p>")

        assert text == "hi how are you fine"

    def test_empty_lines_dropped(self) -> None:
        """Test that blank lines are removed."""
        text = HtmlTextNormalizer().clean_text("<body><p>a</p><p> </p><p>b</p></body>")

        assert text == "a\nb"

    def test_clean_words(self) -> None:
        """Test that only words remain."""
        words = HtmlTextNormalizer().clean_words("<p>C'est (très) bien: 100%</p>")

        assert words.split() == ["c", "est", "tres", "bien", "100"]
