"""Metrics collection for the fetch layer."""

from dataclasses import dataclass, field
from typing import ClassVar

from boundfetch.fetch.errors import FetchErrorKind


@dataclass
class FetchMetrics:
    """Metrics for fetch operations.

    Singleton class that tracks request counts by status, redirects,
    connection retries, truncations and failures by kind.
    """

    requests_total: dict[int, int] = field(default_factory=dict)
    redirects_total: int = 0
    retries_total: int = 0
    truncations_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)
    bytes_total: int = 0
    fetches_total: int = 0
    duration_ms_total: float = 0.0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_response(self, status_code: int, bytes_received: int) -> None:
        """Record one response received from a server.

        Args:
            status_code: HTTP status code.
            bytes_received: Number of body bytes kept.
        """
        self.requests_total[status_code] = self.requests_total.get(status_code, 0) + 1
        self.bytes_total += bytes_received

    def record_redirect(self) -> None:
        """Record a followed redirect."""
        self.redirects_total += 1

    def record_retry(self) -> None:
        """Record a connection retry."""
        self.retries_total += 1

    def record_truncation(self) -> None:
        """Record a body cut at the byte limit under the ignore policy."""
        self.truncations_total += 1

    def record_failure(self, kind: FetchErrorKind) -> None:
        """Record a failed fetch.

        Args:
            kind: Classification of the failure.
        """
        key = kind.value
        self.failures_total[key] = self.failures_total.get(key, 0) + 1

    def record_fetch(self, duration_ms: float) -> None:
        """Record a completed fetch (all attempts included).

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.fetches_total += 1
        self.duration_ms_total += duration_ms

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary."""
        return {
            "requests_total": dict(self.requests_total),
            "redirects_total": self.redirects_total,
            "retries_total": self.retries_total,
            "truncations_total": self.truncations_total,
            "failures_total": dict(self.failures_total),
            "bytes_total": self.bytes_total,
            "fetches_total": self.fetches_total,
            "duration_ms_total": self.duration_ms_total,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average fetch duration in milliseconds."""
        if self.fetches_total == 0:
            return 0.0
        return self.duration_ms_total / self.fetches_total
