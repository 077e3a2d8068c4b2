"""Progress events emitted by a workflow run."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class EventType(StrEnum):
    """Kinds of events a run can emit."""

    START = "start"
    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class Event:
    """A single step of a run, as seen by the caller.

    The ordered sequence of events is the run's only audit log.
    """

    run_id: str
    kind: EventType
    message: str
    error: str | None = None
    timestamp: int = field(default_factory=lambda: int(time.time()))

    @classmethod
    def new(cls, run_id: str, kind: EventType, message: str) -> Event:
        """Create an event of the given kind."""
        return cls(run_id=run_id, kind=kind, message=message)

    @classmethod
    def failure(cls, run_id: str, message: str, error: str) -> Event:
        """Create an error event carrying the source error."""
        return cls(run_id=run_id, kind=EventType.ERROR, message=message, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire representation ``{kind, timestamp, message, error?}``."""
        data: dict[str, Any] = {
            "kind": self.kind.value,
            "timestamp": self.timestamp,
            "message": self.message,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.kind.value}\ndata: {json.dumps(self.to_dict())}\n\n"
