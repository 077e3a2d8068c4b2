"""Unit tests for WorkflowClient."""

import pytest

from onboard.reconcile import IdentityResolutionError, WorkflowClient
from onboard.tracker import InMemoryTrackerClient, RepositoryNotFoundError


@pytest.mark.unit
class TestWorkflowClient:
    """Tests for WorkflowClient."""

    def test_get_repository(self, tracker: InMemoryTrackerClient) -> None:
        """Repositories are bound to a handle."""
        repo = WorkflowClient(tracker).get_repository("acme", "onboarding")

        assert repo.owner == "acme"
        assert repo.name == "onboarding"

    def test_missing_repository(self, tracker: InMemoryTrackerClient) -> None:
        with pytest.raises(RepositoryNotFoundError):
            WorkflowClient(tracker).get_repository("acme", "missing")

    def test_resolve_user(self, tracker: InMemoryTrackerClient) -> None:
        assert WorkflowClient(tracker).resolve_user("newhire").name == "New Hire"

    def test_unknown_user(self, tracker: InMemoryTrackerClient) -> None:
        """Tracker failures become IdentityResolutionError."""
        with pytest.raises(IdentityResolutionError, match="ghost"):
            WorkflowClient(tracker).resolve_user("ghost")
