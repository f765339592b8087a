"""Shared fixtures for all tests."""

import logging
from collections.abc import Iterator

import pytest
import structlog

from boundfetch.fetch.config import OptionsRegistry
from boundfetch.fetch.metrics import FetchMetrics


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Give every test fresh metrics, registry and logging configuration."""
    for name in ("BOUNDFETCH_MAX_LENGTH", "BOUNDFETCH_TOTAL_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    root_handlers = logging.root.handlers[:]
    FetchMetrics.reset()
    OptionsRegistry.reset_instance()
    yield
    FetchMetrics.reset()
    OptionsRegistry.reset_instance()
    structlog.reset_defaults()
    logging.root.handlers[:] = root_handlers
