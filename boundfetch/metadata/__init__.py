"""Heuristic detection of charset, content type and language."""

from boundfetch.metadata.domains import DOMAIN_TO_LANGUAGE, language_for_domain
from boundfetch.metadata.extract import (
    content_type_major,
    content_type_minor,
    extract_charset,
    extract_content_language,
    extract_content_type,
    normalize_charset,
)
from boundfetch.metadata.patterns import SCAN_LIMIT_BYTES, MarkupScanner
from boundfetch.metadata.resolver import NATIONAL_CHARSET_PREFIXES, MetadataResolver


__all__ = [
    "DOMAIN_TO_LANGUAGE",
    "NATIONAL_CHARSET_PREFIXES",
    "SCAN_LIMIT_BYTES",
    "MarkupScanner",
    "MetadataResolver",
    "content_type_major",
    "content_type_minor",
    "extract_charset",
    "extract_content_language",
    "extract_content_type",
    "language_for_domain",
    "normalize_charset",
]
