"""Extraction of charset, content type and language from header-like values."""

import re


_SPACES = re.compile(r" +")

# Labels that name the same charset but are spelled differently in the wild
CHARSET_ALIASES: dict[str, str] = {"utf8": "utf-8"}


def _squeeze(value: str) -> str:
    return _SPACES.sub(" ", value.strip())


def normalize_charset(label: str) -> str | None:
    """Normalize a charset label and check that Python knows it.

    The declared label is kept (lower-cased) rather than replaced by the
    codec's canonical name, so e.g. "windows-1250" stays "windows-1250".

    Args:
        label: Charset label, e.g. "UTF8" or "ISO-8859-2".

    Returns:
        Normalized label, or None if empty or unknown to the codec registry.
    """
    label = label.strip().strip("\"'").strip().lower()
    label = CHARSET_ALIASES.get(label, label)
    if not label:
        return None
    try:
        b"".decode(label)
    except LookupError:
        return None
    return label


def _parameters(value: str) -> dict[str, str]:
    """Parse "type; key=value; ..." parameters, keys lower-cased."""
    parameters: dict[str, str] = {}
    for segment in value.split(";")[1:]:
        key, sep, param = segment.partition("=")
        if sep and key.strip():
            parameters[key.strip().lower()] = param
    return parameters


def extract_charset(value: str | None) -> str | None:
    """Extract the charset parameter from a Content-Type style value.

    Args:
        value: e.g. "text/html; charset=ISO-8859-2".

    Returns:
        Normalized charset, or None if absent or unknown.
    """
    if not value:
        return None
    charset = _parameters(_squeeze(value).lower()).get("charset")
    if charset is None:
        return None
    return normalize_charset(charset)


def extract_content_type(value: str | None) -> str | None:
    """Extract the media type from a Content-Type style value.

    Args:
        value: e.g. "Text/HTML; charset=utf-8".

    Returns:
        Lower-cased media type such as "text/html", or None.
    """
    if not value:
        return None
    media_type = _squeeze(value).split(";", 1)[0].strip().lower()
    return media_type or None


def extract_content_language(value: str | None) -> str | None:
    """Extract the first language from a Content-Language style value.

    Args:
        value: e.g. "pl, en;q=0.5".

    Returns:
        Lower-cased language code, or None.
    """
    if not value:
        return None
    language = _squeeze(value).split(";", 1)[0].split(",", 1)[0].strip().lower()
    return language or None


def content_type_major(content_type: str | None) -> str | None:
    """Major part of a media type ("text" for "text/html")."""
    if not content_type:
        return None
    major = content_type.split("/", 1)[0].strip()
    return major or None


def content_type_minor(content_type: str | None) -> str | None:
    """Minor part of a media type ("html" for "text/html")."""
    if not content_type or "/" not in content_type:
        return None
    minor = content_type.split("/", 1)[1].strip()
    return minor or None
