"""Capability interfaces over the remote issue tracker.

Only the operations the onboarding workflow needs are described here. A
network adapter (``GitHubTrackerClient``) and an in-memory double
(``InMemoryTrackerClient``) both satisfy ``TrackerClient``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from onboard.tracker.models import (
        Card,
        Column,
        Issue,
        IssueRequest,
        Milestone,
        Page,
        Project,
        Repository,
        User,
    )


class UsersService(Protocol):
    """User lookup."""

    def get(self, username: str) -> User:
        """Get a user by login; an empty login means the authenticated user."""
        ...


class IssuesService(Protocol):
    """Issues and milestones of a repository."""

    def list_milestones(
        self,
        owner: str,
        repo: str,
        *,
        sort: str = "due_on",
        direction: str = "desc",
        page: int = 0,
    ) -> Page[Milestone]:
        """List one page of milestones."""
        ...

    def create_milestone(
        self,
        owner: str,
        repo: str,
        title: str,
        description: str,
        due_on: datetime | None,
    ) -> Milestone:
        """Create a milestone."""
        ...

    def list_by_repo(
        self,
        owner: str,
        repo: str,
        *,
        assignee: str = "*",
        milestone: str = "*",
        page: int = 0,
    ) -> Page[Issue]:
        """List one page of issues matching the assignee and milestone filters."""
        ...

    def create(self, owner: str, repo: str, request: IssueRequest) -> Issue:
        """Create an issue."""
        ...

    def edit(self, owner: str, repo: str, number: int, request: IssueRequest) -> Issue:
        """Edit an issue by number."""
        ...


class RepositoriesService(Protocol):
    """Repository lookup and repository-level project listing."""

    def get(self, owner: str, repo: str) -> Repository:
        """Get a repository."""
        ...

    def list_projects(self, owner: str, repo: str, *, page: int = 0) -> Page[Project]:
        """List one page of the repository's projects."""
        ...

    def create_project(self, owner: str, repo: str, name: str, body: str) -> Project:
        """Create a repository project."""
        ...


class ProjectsService(Protocol):
    """Project, column and card mutation."""

    def update_project(self, project_id: int, name: str, body: str) -> Project:
        """Update a project's name and body."""
        ...

    def list_columns(self, project_id: int, *, page: int = 0) -> Page[Column]:
        """List one page of a project's columns."""
        ...

    def create_column(self, project_id: int, name: str) -> Column:
        """Create a column at the end of a project."""
        ...

    def list_cards(self, column_id: int, *, page: int = 0) -> Page[Card]:
        """List one page of a column's cards."""
        ...

    def create_card(self, column_id: int, content_id: int, content_type: str = "Issue") -> Card:
        """Create a card referencing an issue."""
        ...


class TrackerClient(Protocol):
    """An authenticated session against the issue tracker."""

    @property
    def users(self) -> UsersService: ...

    @property
    def issues(self) -> IssuesService: ...

    @property
    def repositories(self) -> RepositoriesService: ...

    @property
    def projects(self) -> ProjectsService: ...

    def close(self) -> None:
        """Release the underlying transport."""
        ...
