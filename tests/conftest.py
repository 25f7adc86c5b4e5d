"""Pytest configuration for test isolation.

The CLI configures package logging once per process. An autouse fixture
resets the package logger around every test so each test sees an
unconfigured package. Environment variables read by the CLI are cleared so a
developer's ``.env`` or shell cannot leak into assertions.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from transaction_patterns.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_logging_and_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "TRANSACTION_PATTERNS_LOG_LEVEL",
        "TRANSACTION_PATTERNS_LOG_FORMAT",
        "TP_TRANSACTIONS_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_logging()
    yield
    reset_logging()
