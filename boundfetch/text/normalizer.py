"""Text extraction and ASCII cleaning for fetched documents."""

import re
import unicodedata
from typing import Protocol

from bs4 import BeautifulSoup, Comment


# Characters kept by clean_text besides letters, digits and whitespace
_DISALLOWED = re.compile(r"[^a-z0-9\-_\[\]()*=@#$%^&{}:;,<>+'\s]+")
_SENTENCE_PUNCTUATION = re.compile(r"[.!?]")
_SPACES = re.compile(r"[ \t\x0b\x0c]+")
_NON_WORD = re.compile(r"[^a-z0-9]+")

# Elements whose content is never document text
_NON_TEXT_TAGS = ["script", "style", "noscript", "template"]


class TextNormalizer(Protocol):
    """Turns a decoded document into plain or cleaned text."""

    def strip_html(self, html: str) -> str:
        """Remove markup, keeping text and line breaks."""
        ...

    def clean_text(self, text: str) -> str:
        """Strip markup and transliterate to lower-case ASCII."""
        ...

    def clean_words(self, text: str) -> str:
        """Like clean_text, but leaving only words separated by spaces."""
        ...


class HtmlTextNormalizer:
    """Default normalizer built on BeautifulSoup."""

    def __init__(self, parser: str = "lxml") -> None:
        """Initialize the normalizer.

        Args:
            parser: BeautifulSoup tree builder name.
        """
        self._parser = parser

    def strip_html(self, html: str) -> str:
        soup = BeautifulSoup(html, self._parser)
        for tag in soup(_NON_TEXT_TAGS):
            tag.decompose()
        for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()
        for tag in soup(["br", "p"]):
            tag.insert_before("\n")

        root = soup.body or soup
        return root.get_text().replace("\r", "").replace("\t", " ")

    def clean_text(self, text: str) -> str:
        # Decompose accents, then drop everything outside ASCII
        folded = unicodedata.normalize("NFKD", self.strip_html(text))
        ascii_text = folded.encode("ascii", "ignore").decode("ascii").lower()
        ascii_text = _SENTENCE_PUNCTUATION.sub(" ", ascii_text)
        ascii_text = _DISALLOWED.sub("", ascii_text)

        lines = (_SPACES.sub(" ", line).strip() for line in ascii_text.split("\n"))
        return "\n".join(line for line in lines if line)

    def clean_words(self, text: str) -> str:
        return _NON_WORD.sub(" ", self.clean_text(text)).strip()
