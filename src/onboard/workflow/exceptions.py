"""Exceptions for the workflow runner."""


class WorkflowError(Exception):
    """Base exception for workflow errors."""

    pass


class RunAlreadyStartedError(WorkflowError):
    """A runner was asked to run a second time."""

    pass
