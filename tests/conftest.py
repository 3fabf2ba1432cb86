"""
Shared pytest fixtures and configuration for unitline tests.

This module provides:
- Settings isolation (no UNITLINE_* variables leak between tests)
- Fault registry cleanup
- A fresh ``Journal`` for recording unit activity

Usage:
    def test_something(journal):
        Charge = recording_unit("Charge", journal)
        ...
"""

from __future__ import annotations

import os
from collections.abc import Generator

import pytest
import structlog

from unitline.core.settings import reset_settings

from tests._support import Journal
from tests._support.fault_injection import clear_faults


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop UNITLINE_* env vars and cached settings around each test."""
    for key in list(os.environ):
        if key.startswith("UNITLINE_"):
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def clean_faults() -> Generator[None, None, None]:
    """Clear installed faults before and after each test."""
    clear_faults()
    yield
    clear_faults()


@pytest.fixture(autouse=True)
def clean_log_context() -> Generator[None, None, None]:
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Recording Fixtures
# =============================================================================


@pytest.fixture
def journal() -> Journal:
    """Fresh journal for recording perform/rollback order."""
    return Journal()
