"""Reconciliation - idempotent find-or-create of milestones, projects, issues and cards."""

from onboard.reconcile.client import WorkflowClient
from onboard.reconcile.exceptions import IdentityResolutionError, ReconcileError
from onboard.reconcile.repository import RepositoryHandle

__all__ = [
    "IdentityResolutionError",
    "ReconcileError",
    "RepositoryHandle",
    "WorkflowClient",
]
