"""HTTP constants for the fetch layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_REDIRECT_MIN = 300
HTTP_STATUS_REDIRECT_MAX = 400

# Schemes and their standard ports
ALLOWED_SCHEMES = frozenset({"http", "https"})
STANDARD_PORTS: dict[str, int] = {"http": 80, "https": 443}

# Built-in option defaults
DEFAULT_REDIRECT_BUDGET = 8
DEFAULT_CONNECTION_RETRY_BUDGET = 3
DEFAULT_OPEN_TIMEOUT_SECONDS = 15.0
DEFAULT_READ_TIMEOUT_SECONDS = 10.0
DEFAULT_TOTAL_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_LENGTH_BYTES = 512 * 1024  # 512 KB
DEFAULT_RETRY_BACKOFF_SECONDS = 1.0
DEFAULT_CONTENT_LANGUAGE = "en"
DEFAULT_CONTENT_TYPE = "text/html"
DEFAULT_CHARSET = "iso-8859-1"
DEFAULT_USER_AGENT = "boundfetch/0.1"
