"""Observability helpers."""

from boundfetch.observability.logging import (
    bind_fetch_context,
    clear_fetch_context,
    configure_logging,
    get_logger,
    parse_level,
)


__all__ = [
    "bind_fetch_context",
    "clear_fetch_context",
    "configure_logging",
    "get_logger",
    "parse_level",
]
