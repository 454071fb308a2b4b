"""Pytest configuration for test isolation.

``configure_logging`` runs once per process and the CLI reads its defaults
from the environment, so each test starts from an unconfigured package logger
and without any ``REPORT_RECONCILIATION_*`` variables a developer's shell or
``.env`` may have set.
"""

from __future__ import annotations

import os

import pytest

from report_reconciliation.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch):
    for key in list(os.environ):
        if key.startswith("REPORT_RECONCILIATION_"):
            monkeypatch.delenv(key, raising=False)
    reset_logging()
    yield
    reset_logging()
