"""Pytest configuration for test isolation.

The package reads its log level and category exclusions from environment
variables, and the CLI installs a handler on the package logger. To keep
tests hermetic, each test starts from a clean environment and the package
logger's handlers, level and propagation are restored afterwards.
"""

from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def _isolate_env_and_logging(monkeypatch: pytest.MonkeyPatch):
    """Clear package env vars and undo any logging configuration after the test."""

    monkeypatch.delenv("SPEND_ANOMALIES_EXCLUDED_CATEGORIES", raising=False)
    # Keep INFO records out of CLI output captured by the runner.
    monkeypatch.setenv("SPEND_ANOMALIES_LOG_LEVEL", "WARNING")

    logger = logging.getLogger("spend_anomalies")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
