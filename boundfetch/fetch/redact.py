"""Redaction of credentials before URLs and headers reach the logs."""

from urllib.parse import urlsplit, urlunsplit


REDACTED_VALUE = "[REDACTED]"

# Response headers that must never appear in logs
SENSITIVE_HEADERS = frozenset({"set-cookie", "www-authenticate", "authorization"})


def redact_url_credentials(url: str) -> str:
    """Replace user:password in a URL authority with placeholders.

    Args:
        url: URL that may contain credentials.

    Returns:
        URL with credentials redacted; unparseable input is returned as is.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if "@" not in parts.netloc:
        return url
    host = parts.netloc.rpartition("@")[2]
    netloc = f"{REDACTED_VALUE}:{REDACTED_VALUE}@{host}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of response headers safe for logging."""
    return {
        key: REDACTED_VALUE if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }
