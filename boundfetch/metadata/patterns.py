"""Bounded pattern scanning of markup for metadata tags.

No document model is built. Tags are located with patterns that never cross
a '>' and only the first SCAN_LIMIT_BYTES of the body are inspected, so the
cost is linear in a bounded input. Malformed markup yields no value.
"""

import re


# Only the head of a document is expected to carry metadata tags
SCAN_LIMIT_BYTES = 512 * 1024

_META_TAG = re.compile(r"<meta(?:\s[^>]*)?>", re.IGNORECASE)
_ROOT_TAG = re.compile(r"<x?html(?:\s[^>]*)?>", re.IGNORECASE)
_BODY_TAG = re.compile(r"<body(?:\s[^>]*)?>", re.IGNORECASE)
_TAG_NAME = re.compile(r"^<[^\s/>]+")
_ATTRIBUTE = re.compile(
    r"""([^\s"'<>/=]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+)))?"""
)


def parse_attributes(tag: str) -> dict[str, str]:
    """Parse the attributes of a single start tag.

    Names are lower-cased; values may be double-, single- or unquoted; an
    attribute without a value maps to an empty string; the first occurrence
    of a name wins.

    Args:
        tag: Start tag text, e.g. '<html lang="fr">'.

    Returns:
        Mapping of attribute name to value.
    """
    inner = _TAG_NAME.sub("", tag.rstrip(">").rstrip("/"), count=1)
    attributes: dict[str, str] = {}
    for match in _ATTRIBUTE.finditer(inner):
        name = match.group(1).lower()
        value = next((g for g in match.groups()[1:] if g is not None), "")
        attributes.setdefault(name, value)
    return attributes


class MarkupScanner:
    """Finds metadata in the leading part of a document body."""

    def __init__(self, body: bytes, limit: int = SCAN_LIMIT_BYTES) -> None:
        """Initialize the scanner.

        Args:
            body: Raw document bytes.
            limit: Number of leading bytes to inspect.
        """
        # latin-1 maps every byte to one character, ASCII markup stays intact
        self._text = body[:limit].decode("latin-1")
        self._meta: list[dict[str, str]] | None = None

    def meta_content(self, http_equiv: str) -> str | None:
        """Content of the first <meta http-equiv=...> tag with that name.

        Args:
            http_equiv: Header name the tag stands in for, e.g. "content-type".

        Returns:
            Stripped, non-empty content attribute value, or None.
        """
        wanted = http_equiv.lower()
        for attributes in self._meta_tags():
            if attributes.get("http-equiv", "").strip().lower() != wanted:
                continue
            content = attributes.get("content", "").strip()
            if content:
                return content
        return None

    def root_attribute(self, name: str) -> str | None:
        """Attribute of the root <html> (or <xhtml>) tag."""
        return _first_tag_attribute(_ROOT_TAG, self._text, name)

    def body_attribute(self, name: str) -> str | None:
        """Attribute of the <body> tag."""
        return _first_tag_attribute(_BODY_TAG, self._text, name)

    def _meta_tags(self) -> list[dict[str, str]]:
        if self._meta is None:
            self._meta = [
                parse_attributes(match.group(0))
                for match in _META_TAG.finditer(self._text)
            ]
        return self._meta


def _first_tag_attribute(pattern: re.Pattern[str], text: str, name: str) -> str | None:
    match = pattern.search(text)
    if match is None:
        return None
    value = parse_attributes(match.group(0)).get(name.lower(), "").strip()
    return value or None
