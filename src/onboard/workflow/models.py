"""Data models for the onboarding workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class RunState(StrEnum):
    """Lifecycle of a workflow run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def finished(self) -> bool:
        return self in (RunState.COMPLETED, RunState.FAILED, RunState.CANCELLED)


@dataclass(frozen=True)
class TaskEntry:
    """A single onboarding task.

    Attributes:
        title: Issue title.
        description: Issue body.
        assignee: GitHub login of the task owner; empty for no assignee.
    """

    title: str
    description: str = ""
    assignee: str = ""


@dataclass(frozen=True)
class WorkflowSpec:
    """The whole onboarding workload for one repository."""

    organization: str
    repository: str
    tasks: tuple[TaskEntry, ...] = field(default_factory=tuple)

    @property
    def full_name(self) -> str:
        return f"{self.organization}/{self.repository}"
