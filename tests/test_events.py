"""Tests for lifecycle events and built-in listeners."""

from __future__ import annotations

import logging

import pytest

from pytest_bastion.events import (
    BastionErrorEvent,
    BastionFailedEvent,
    BastionFinishedEvent,
    BastionListener,
    BastionStartedEvent,
    EventRecorder,
    LoggingListener,
)
from pytest_bastion.execution.response import ModelResponse, Response


def _model_response(status_code: int = 200) -> ModelResponse:
    return ModelResponse(Response(status_code), {"ok": True})


class TestEvents:
    """Tests for event values."""

    def test_events_are_immutable(self):
        """Test events cannot be modified."""
        event = BastionStartedEvent("GET /")
        with pytest.raises(AttributeError):
            event.descriptive_text = "other"

    def test_failed_event_fields(self):
        """Test failed events carry the cause and response."""
        cause = AssertionError("nope")
        event = BastionFailedEvent("GET /", None, cause)

        assert event.cause is cause
        assert event.model_response is None


class TestBastionListener:
    """Tests for the listener base class."""

    def test_default_methods_are_no_ops(self):
        """Test an unmodified listener ignores every event."""
        listener = BastionListener()

        listener.call_started(BastionStartedEvent("x"))
        listener.call_failed(BastionFailedEvent("x", None, AssertionError()))
        listener.call_error(BastionErrorEvent("x", None, RuntimeError()))
        listener.call_finished(BastionFinishedEvent("x", None))


class TestEventRecorder:
    """Tests for EventRecorder."""

    def test_records_in_order(self):
        """Test events are kept in arrival order."""
        recorder = EventRecorder()
        started = BastionStartedEvent("x")
        finished = BastionFinishedEvent("x", None)

        recorder.call_started(started)
        recorder.call_finished(finished)

        assert recorder.events == [started, finished]

    def test_outcome_pending(self):
        """Test outcome is None before a call finishes."""
        recorder = EventRecorder()
        assert recorder.outcome is None
        recorder.call_started(BastionStartedEvent("x"))
        assert recorder.outcome is None

    @pytest.mark.parametrize(
        ("middle", "expected"),
        [
            ([], "passed"),
            ([BastionFailedEvent("x", None, AssertionError())], "failed"),
            ([BastionErrorEvent("x", None, RuntimeError())], "error"),
        ],
    )
    def test_outcome(self, middle, expected):
        """Test the outcome of the latest call."""
        recorder = EventRecorder()
        recorder.call_started(BastionStartedEvent("x"))
        for event in middle:
            recorder.events.append(event)
        recorder.call_finished(BastionFinishedEvent("x", None))

        assert recorder.outcome == expected

    def test_outcome_only_considers_latest_call(self):
        """Test an earlier failure does not taint a later pass."""
        recorder = EventRecorder()
        recorder.call_started(BastionStartedEvent("first"))
        recorder.call_failed(BastionFailedEvent("first", None, AssertionError()))
        recorder.call_finished(BastionFinishedEvent("first", None))
        recorder.call_started(BastionStartedEvent("second"))
        recorder.call_finished(BastionFinishedEvent("second", None))

        assert recorder.outcome == "passed"
        assert len(recorder.failures) == 1

    def test_clear(self):
        """Test clear() forgets all events."""
        recorder = EventRecorder()
        recorder.call_started(BastionStartedEvent("x"))
        recorder.clear()
        assert recorder.events == []


class TestLoggingListener:
    """Tests for LoggingListener."""

    def test_logs_lifecycle(self, caplog):
        """Test started and finished are logged at INFO."""
        listener = LoggingListener()

        with caplog.at_level(logging.INFO, logger="pytest_bastion"):
            listener.call_started(BastionStartedEvent("GET /status"))
            listener.call_finished(BastionFinishedEvent("GET /status", _model_response(204)))

        assert "Bastion call started: GET /status" in caplog.text
        assert "Bastion call finished: GET /status (status 204)" in caplog.text

    def test_logs_failure_as_warning(self, caplog):
        """Test failures are logged at WARNING."""
        with caplog.at_level(logging.WARNING, logger="pytest_bastion"):
            LoggingListener().call_failed(BastionFailedEvent("GET /", None, AssertionError("bad code")))

        assert caplog.records[0].levelno == logging.WARNING
        assert "bad code" in caplog.text

    def test_logs_error_with_traceback(self, caplog):
        """Test errors are logged at ERROR with exception info."""
        try:
            raise RuntimeError("transport down")
        except RuntimeError as e:
            cause = e

        with caplog.at_level(logging.ERROR, logger="pytest_bastion"):
            LoggingListener().call_error(BastionErrorEvent("GET /", None, cause))

        record = caplog.records[0]
        assert record.levelno == logging.ERROR
        assert record.exc_info[1] is cause

    def test_custom_logger(self, caplog):
        """Test a custom logger can be supplied."""
        logger = logging.getLogger("my.api.tests")

        with caplog.at_level(logging.INFO, logger="my.api.tests"):
            LoggingListener(logger).call_finished(BastionFinishedEvent("GET /", None))

        assert caplog.records[0].name == "my.api.tests"
        assert "(status -)" in caplog.text
