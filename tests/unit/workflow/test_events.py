"""Unit tests for run events."""

import json

import pytest

from onboard.workflow import Event, EventType


@pytest.mark.unit
class TestEvent:
    """Tests for Event."""

    def test_new_event(self) -> None:
        event = Event.new("run-1", EventType.PROGRESS, "Preparing Issue - Task")

        assert event.run_id == "run-1"
        assert event.kind is EventType.PROGRESS
        assert event.error is None
        assert event.timestamp > 0

    def test_failure_event(self) -> None:
        event = Event.failure("run-1", "Failed to create milestone - Welcome", "HTTP 500")

        assert event.kind is EventType.ERROR
        assert event.error == "HTTP 500"

    def test_to_dict_omits_missing_error(self) -> None:
        """The wire form only carries an error when there is one."""
        event = Event("run-1", EventType.START, "Starting", timestamp=1700000000)

        assert event.to_dict() == {
            "kind": "start",
            "timestamp": 1700000000,
            "message": "Starting",
        }

    def test_to_dict_with_error(self) -> None:
        event = Event.failure("run-1", "Failed", "boom")

        assert event.to_dict()["error"] == "boom"

    def test_to_sse(self) -> None:
        """SSE frames name the event kind and carry the JSON payload."""
        event = Event("run-1", EventType.COMPLETE, "Done", timestamp=1)

        lines = event.to_sse().split("\n")

        assert lines[0] == "event: complete"
        assert json.loads(lines[1].removeprefix("data: ")) == event.to_dict()
        assert event.to_sse().endswith("\n\n")

    def test_events_are_immutable(self) -> None:
        event = Event.new("run-1", EventType.START, "Starting")

        with pytest.raises(AttributeError):
            event.message = "changed"  # type: ignore[misc]
