"""Single overall deadline shared by every attempt of one fetch."""

import time


class Deadline:
    """Monotonic deadline; a non-positive budget means no deadline."""

    def __init__(self, seconds: float) -> None:
        """Start the deadline.

        Args:
            seconds: Total budget in seconds (0 disables the deadline).
        """
        self._seconds = seconds
        self._expires_at = time.monotonic() + seconds if seconds > 0 else None

    @property
    def seconds(self) -> float:
        """Get the total budget in seconds."""
        return self._seconds

    @property
    def is_bounded(self) -> bool:
        """Check if this deadline can expire."""
        return self._expires_at is not None

    def remaining(self) -> float | None:
        """Seconds left, never negative; None if unbounded."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        """Check if the deadline has passed."""
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def cap(self, timeout: float) -> float | None:
        """Limit a per-operation timeout to the time left.

        Args:
            timeout: Per-operation timeout in seconds (0 = no limit).

        Returns:
            Effective timeout in seconds, or None for no limit.
        """
        limit = timeout if timeout > 0 else None
        remaining = self.remaining()
        if remaining is None:
            return limit
        if limit is None:
            return remaining
        return min(limit, remaining)

    def sleep(self, seconds: float) -> None:
        """Pause, but never past the deadline."""
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        if seconds > 0:
            time.sleep(seconds)
