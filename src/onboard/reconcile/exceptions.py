"""Exceptions for the reconciliation layer."""


class ReconcileError(Exception):
    """Base exception for reconciliation errors."""

    pass


class IdentityResolutionError(ReconcileError):
    """The acting GitHub identity could not be resolved.

    Fatal for a run: raised before any event is emitted.
    """

    pass
