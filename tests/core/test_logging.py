"""
Tests for the logging module.

Tests verify:
- configure_logging installs the structlog processor chain
- LogContext binds and restores context vars
- Unit lifecycle events are emitted with the run_id bound
"""

import pytest
import structlog
from structlog.testing import capture_logs

from unitline import MissingInput, Unit
from unitline.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    unbind_context,
)


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_chain(self, reset_structlog):
        configure_logging(level="DEBUG", json_format=True, service="orders")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert structlog.contextvars.merge_contextvars in processors

    def test_console_chain(self, reset_structlog):
        configure_logging(json_format=False)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_settings_pick_format(self, monkeypatch, reset_structlog):
        monkeypatch.setenv("UNITLINE_LOG_JSON", "true")
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)


class TestContextBinding:
    def test_bind_and_unbind(self):
        bind_context(run_id="abc")
        assert structlog.contextvars.get_contextvars() == {"run_id": "abc"}
        unbind_context("run_id")
        assert structlog.contextvars.get_contextvars() == {}

    def test_clear(self):
        bind_context(a=1, b=2)
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_restores_outer_value(self):
        bind_context(run_id="outer")
        with LogContext(run_id="inner"):
            assert structlog.contextvars.get_contextvars()["run_id"] == "inner"
        assert structlog.contextvars.get_contextvars()["run_id"] == "outer"

    def test_log_context_removes_new_keys(self):
        with LogContext(run_id="x"):
            pass
        assert "run_id" not in structlog.contextvars.get_contextvars()


class TestLifecycleEvents:
    def test_failure_events(self):
        class Declines(Unit):
            def perform(self):
                self.fail(error="declined")

        with capture_logs() as logs:
            state = Declines.call()

        events = [entry["event"] for entry in logs]
        assert "unit.start" in events
        assert "state.failed" in events
        assert "unit.failed" in events
        failed = next(entry for entry in logs if entry["event"] == "state.failed")
        assert failed["error"] == "declined"
        assert failed["run_id"] == state.run_id

    def test_success_events(self):
        class Noop(Unit):
            pass

        with capture_logs() as logs:
            Noop.call()

        assert [entry["event"] for entry in logs] == ["unit.start", "unit.succeeded"]
        assert logs[0]["unit"] == "Noop"

    @pytest.mark.parametrize(
        "error, category",
        [
            (MissingInput("Missing required input: x"), "CONTRACT"),
            (RuntimeError("kaboom"), "INTERNAL"),
        ],
    )
    def test_error_events_carry_category(self, error, category):
        class Broken(Unit):
            def perform(self):
                raise error

        with capture_logs() as logs, pytest.raises(type(error)):
            Broken.call()

        entry = next(entry for entry in logs if entry["event"] == "unit.error")
        assert entry["category"] == category
        assert entry["error_type"] == type(error).__name__
