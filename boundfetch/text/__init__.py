"""Text extraction utilities."""

from boundfetch.text.normalizer import HtmlTextNormalizer, TextNormalizer


__all__ = ["HtmlTextNormalizer", "TextNormalizer"]
