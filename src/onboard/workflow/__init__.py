"""Workflow package - onboarding run state machine and its events."""

from onboard.workflow.events import Event, EventType
from onboard.workflow.exceptions import RunAlreadyStartedError, WorkflowError
from onboard.workflow.models import RunState, TaskEntry, WorkflowSpec
from onboard.workflow.runner import (
    BOARD_COLUMNS,
    START_COLUMN,
    WorkflowRunner,
    run_workflow,
)
from onboard.workflow.schedule import milestone_due_date

__all__ = [
    "BOARD_COLUMNS",
    "START_COLUMN",
    "Event",
    "EventType",
    "RunAlreadyStartedError",
    "RunState",
    "TaskEntry",
    "WorkflowError",
    "WorkflowRunner",
    "WorkflowSpec",
    "milestone_due_date",
    "run_workflow",
]
