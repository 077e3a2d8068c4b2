"""WorkflowClient - entry point from an authenticated tracker to repositories."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from onboard.reconcile.exceptions import IdentityResolutionError
from onboard.reconcile.repository import RepositoryHandle
from onboard.tracker.exceptions import TrackerError

if TYPE_CHECKING:
    from onboard.tracker.client import TrackerClient
    from onboard.tracker.models import User

logger = logging.getLogger(__name__)


class WorkflowClient:
    """Resolves users and repositories for the onboarding workflow."""

    def __init__(self, client: TrackerClient) -> None:
        self.client = client

    def get_repository(self, owner: str, name: str) -> RepositoryHandle:
        """Resolve a repository and bind it for reconciliation.

        Args:
            owner: Organization or user owning the repository.
            name: Repository name.

        Returns:
            RepositoryHandle scoped to the repository.

        Raises:
            RepositoryNotFoundError: If the repository does not exist.
            TrackerError: If the lookup fails.
        """
        repository = self.client.repositories.get(owner, name)
        logger.debug("Resolved repository %s", repository.full_name)
        return RepositoryHandle(self.client, repository)

    def resolve_user(self, username: str) -> User:
        """Look up the acting user.

        Args:
            username: GitHub login.

        Returns:
            The resolved user.

        Raises:
            IdentityResolutionError: If the user cannot be resolved.
        """
        try:
            return self.client.users.get(username)
        except TrackerError as e:
            logger.error("Failed to resolve user %r: %s", username, e)
            raise IdentityResolutionError(f"Failed to resolve user {username!r}: {e}") from e
