"""Explicit tri-state memoization for lazily derived values."""

from collections.abc import Callable
from enum import Enum
from typing import Generic, TypeVar


T = TypeVar("T")


class CacheState(str, Enum):
    """State of a cached value.

    - NOT_COMPUTED: Never computed since creation
    - COMPUTED: Holds a value (which may legitimately be None or empty)
    - INVALIDATED: Cleared after the inputs changed
    """

    NOT_COMPUTED = "NOT_COMPUTED"
    COMPUTED = "COMPUTED"
    INVALIDATED = "INVALIDATED"


class CachedValue(Generic[T]):
    """A value computed at most once until invalidated."""

    def __init__(self) -> None:
        self._state = CacheState.NOT_COMPUTED
        self._value: T | None = None

    @property
    def state(self) -> CacheState:
        """Get the cache state."""
        return self._state

    @property
    def is_computed(self) -> bool:
        """Check if a value is held."""
        return self._state is CacheState.COMPUTED

    def get(self, compute: Callable[[], T]) -> T:
        """Return the cached value, computing it first if needed.

        Args:
            compute: Producer called only when no value is held.

        Returns:
            The cached value.
        """
        if self._state is not CacheState.COMPUTED:
            self.set(compute())
        return self._value  # type: ignore[return-value]

    def set(self, value: T) -> None:
        """Store a value."""
        self._value = value
        self._state = CacheState.COMPUTED

    def invalidate(self) -> None:
        """Drop the held value."""
        self._value = None
        self._state = CacheState.INVALIDATED
