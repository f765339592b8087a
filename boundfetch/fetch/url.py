"""Target URL parsing and validation."""

import re
from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit, urlunsplit

from boundfetch.fetch.constants import ALLOWED_SCHEMES, STANDARD_PORTS
from boundfetch.fetch.errors import (
    BadPortError,
    BadProtocolError,
    MalformedURIError,
    RedirectProhibitedError,
)


# "name:" prefix of an absolute URI
_SCHEME_PATTERN = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*):")

# "host:port" rest of a bare host, e.g. "localhost:8080/page"
_PORT_PATTERN = re.compile(r"^\d+(?:[/?#]|$)")


@dataclass(frozen=True)
class Target:
    """A parsed, normalized absolute URL.

    Attributes:
        scheme: Lower-cased scheme.
        host: Lower-cased host name (IPv6 literals without brackets).
        port: Explicit port, or the scheme's standard port.
        path: Request path, never empty.
        query: Query string without the leading '?'.
        userinfo: Credentials part of the authority, if any.
    """

    scheme: str
    host: str
    port: int | None
    path: str
    query: str = ""
    userinfo: str = ""

    @property
    def url(self) -> str:
        """Serialized URL (fragment dropped)."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        netloc = host
        if self.port is not None and self.port != STANDARD_PORTS.get(self.scheme):
            netloc = f"{host}:{self.port}"
        if self.userinfo:
            netloc = f"{self.userinfo}@{netloc}"
        return urlunsplit((self.scheme, netloc, self.path, self.query, ""))

    @property
    def request_target(self) -> str:
        """Path plus query as sent in the request line."""
        return f"{self.path}?{self.query}" if self.query else self.path

    @property
    def tld(self) -> str:
        """Top-level domain: last label of the host name."""
        return self.host.rstrip(".").rsplit(".", 1)[-1].lower()

    def __str__(self) -> str:
        return self.url


def parse_target(url: "str | Target") -> Target:
    """Parse a URL into a normalized Target.

    A bare host such as "example.com/page" or "localhost:8080" is treated
    as an http URL; an empty path becomes '/'. Schemes with an authority
    are not checked here, see validate_url.

    Args:
        url: URL string or an already parsed Target.

    Returns:
        Normalized Target.

    Raises:
        MalformedURIError: If the URL is empty, unparseable or has no host.
        BadProtocolError: If the URL is an opaque URI such as "mailto:...".
    """
    if isinstance(url, Target):
        return url

    raw = str(url).strip()
    if not raw:
        msg = "malformed URI"
        raise MalformedURIError(msg, url=raw)
    if not has_scheme(raw):
        raw = f"http://{raw}"

    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError as e:
        msg = f"malformed URI: {e}"
        raise MalformedURIError(msg, url=raw) from e

    if not parts.netloc and parts.scheme.lower() not in ALLOWED_SCHEMES:
        msg = f"bad protocol: {parts.scheme.lower()}"
        raise BadProtocolError(msg, url=raw)

    host = parts.hostname or ""
    if not host:
        msg = "malformed URI: missing host"
        raise MalformedURIError(msg, url=raw)

    scheme = parts.scheme.lower()
    userinfo = parts.netloc.rpartition("@")[0] if "@" in parts.netloc else ""
    return Target(
        scheme=scheme,
        host=host.lower(),
        port=port if port is not None else STANDARD_PORTS.get(scheme),
        path=parts.path or "/",
        query=parts.query,
        userinfo=userinfo,
    )


def has_scheme(raw: str) -> bool:
    """Check if a URL string starts with a scheme rather than a bare host.

    "mailto:a@b.com" has a scheme; "example.com:8080/x" and "localhost:80"
    are a host and a port.
    """
    match = _SCHEME_PATTERN.match(raw)
    if match is None:
        return False
    rest = raw[match.end() :]
    if rest.startswith("//"):
        return True
    return "." not in match.group(1) and not _PORT_PATTERN.match(rest)


def validate_url(target: Target, allow_strange_ports: bool = False) -> None:
    """Check that a target may be requested.

    Args:
        target: Parsed target.
        allow_strange_ports: Whether non-standard ports are accepted.

    Raises:
        BadProtocolError: If the scheme is not http or https.
        BadPortError: If the port is non-standard and not allowed.
    """
    if target.scheme not in ALLOWED_SCHEMES:
        msg = f"bad protocol: {target.scheme}"
        raise BadProtocolError(msg, url=target.url)
    if not allow_strange_ports and target.port != STANDARD_PORTS[target.scheme]:
        raise BadPortError(target.port or 0, url=target.url)


def validate_redirect(source: Target, destination: Target) -> None:
    """Reject redirects that change the scheme (e.g. https -> http).

    Raises:
        RedirectProhibitedError: If the schemes differ.
    """
    if source.scheme != destination.scheme:
        raise RedirectProhibitedError(source.url, destination.url)


def resolve_location(base: Target, location: str) -> Target:
    """Resolve a Location header value against the URL that returned it.

    Raises:
        MalformedURIError: If the result cannot be parsed.
    """
    return parse_target(urljoin(base.url, location.strip()))
