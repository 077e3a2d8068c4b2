"""RepositoryHandle - find-or-create reconciliation for one repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from onboard.tracker.models import ANY, NONE, IssueRequest
from onboard.tracker.pagination import fetch_all

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from onboard.tracker.client import TrackerClient
    from onboard.tracker.models import (
        Card,
        Column,
        Issue,
        Milestone,
        Project,
        Repository,
    )

logger = logging.getLogger(__name__)


class RepositoryHandle:
    """Tracker access scoped to a single repository.

    Each ``create_or_update_*`` operation looks for an existing entity by
    title before creating one, so repeated runs converge on the same remote
    state instead of duplicating it. Tracker errors propagate to the caller
    unchanged; nothing is retried.
    """

    def __init__(self, client: TrackerClient, repository: Repository) -> None:
        """Bind a tracker client to a repository.

        Args:
            client: Authenticated tracker client.
            repository: Repository all operations are scoped to.
        """
        self.client = client
        self.repository = repository

    @property
    def owner(self) -> str:
        return self.repository.owner

    @property
    def name(self) -> str:
        return self.repository.name

    def project_url(self, project: Project) -> str:
        """Web URL of a project board in this repository."""
        if project.html_url:
            return project.html_url
        base = self.repository.html_url or f"https://github.com/{self.repository.full_name}"
        return f"{base}/projects/{project.number}"

    # Milestones

    def fetch_milestones(self) -> list[Milestone]:
        """Fetch all milestones, latest due date first."""
        return fetch_all(
            lambda page: self.client.issues.list_milestones(
                self.owner, self.name, sort="due_on", direction="desc", page=page
            )
        )

    def create_or_update_milestone(
        self,
        title: str,
        description: str,
        due_on: datetime | None,
    ) -> Milestone:
        """Return the milestone with this title, creating it if needed.

        An existing milestone is returned as-is; its description and due date
        are never modified.

        Args:
            title: Milestone title, the lookup key.
            description: Description used on creation.
            due_on: Due date used on creation.

        Returns:
            The existing or newly created milestone.
        """
        for milestone in self.fetch_milestones():
            if milestone.title == title:
                logger.info("Reusing milestone #%d %r", milestone.number, title)
                return milestone

        milestone = self.client.issues.create_milestone(
            self.owner, self.name, title, description, due_on
        )
        logger.info(
            "Created milestone #%d %r in %s", milestone.number, title, self.repository.full_name
        )
        return milestone

    # Projects and columns

    def fetch_projects(self) -> list[Project]:
        return fetch_all(
            lambda page: self.client.repositories.list_projects(self.owner, self.name, page=page)
        )

    def create_or_update_project(
        self,
        title: str,
        description: str,
        columns: Sequence[str],
    ) -> Project:
        """Return the project with this title, creating it with columns if needed.

        When the project exists and its description differs, the description
        is updated. Columns are only created together with a new project and
        are never re-synced afterwards.

        Args:
            title: Project name, the lookup key.
            description: Desired project description.
            columns: Column names, in board order; empty names are skipped.

        Returns:
            The existing, updated or newly created project.
        """
        found = next((p for p in self.fetch_projects() if p.name == title), None)

        if found is not None and found.number > 0:
            if found.body == description:
                logger.info("Reusing project #%d %r", found.number, title)
                return found
            logger.info("Updating description of project #%d %r", found.number, title)
            return self.client.projects.update_project(found.id, title, description)

        project = self.client.repositories.create_project(self.owner, self.name, title, description)
        logger.info(
            "Created project #%d %r in %s", project.number, title, self.repository.full_name
        )
        self._create_columns(project, columns)
        return project

    def _create_columns(self, project: Project, names: Sequence[str]) -> list[Column]:
        created = []
        for name in names:
            if not name:
                continue
            created.append(self.client.projects.create_column(project.id, name))
        logger.info("Created %d column(s) in project #%d", len(created), project.number)
        return created

    def fetch_columns(self, project: Project) -> list[Column]:
        return fetch_all(lambda page: self.client.projects.list_columns(project.id, page=page))

    def fetch_columns_by_name(self, project: Project) -> dict[str, Column]:
        """Map column names to columns; the last one wins on duplicate names."""
        return {column.name: column for column in self.fetch_columns(project)}

    def columns_present(self, project: Project, names: Sequence[str]) -> bool:
        """Check whether every named column exists in the project."""
        present = {column.name for column in self.fetch_columns(project)}
        missing = [name for name in names if name not in present]
        return not missing

    def get_first_column(self, project: Project) -> Column | None:
        """Return the column with the smallest ID, i.e. the one created first."""
        columns = self.fetch_columns(project)
        if not columns:
            return None
        return min(columns, key=lambda column: column.id)

    # Issues

    def fetch_issues(self, assignee: str = ANY, milestone: str = ANY) -> list[Issue]:
        return fetch_all(
            lambda page: self.client.issues.list_by_repo(
                self.owner, self.name, assignee=assignee, milestone=milestone, page=page
            )
        )

    def find_issues_by_filter(self, request: IssueRequest) -> list[Issue]:
        """Find issues matching a request's title, milestone and assignee.

        Assignee and milestone are filtered remotely; the exact title match is
        applied locally. Only a single assignee can be filtered on: any other
        number of requested assignees matches every assignee.

        Args:
            request: Filter; ``None`` fields match anything.

        Returns:
            Matching issues, in server order.
        """
        assignee = ANY
        if request.assignees is not None and len(request.assignees) == 1:
            assignee = request.assignees[0]

        milestone = ANY
        if request.milestone == NONE:
            milestone = NONE
        elif isinstance(request.milestone, int) and request.milestone > 0:
            milestone = str(request.milestone)

        issues = self.fetch_issues(assignee=assignee, milestone=milestone)
        if request.title is None:
            return issues
        return [issue for issue in issues if issue.title == request.title]

    def create_or_update_issue(
        self,
        assignee: str | None,
        title: str,
        body: str,
        milestone: int = 0,
    ) -> Issue:
        """Return the issue matching title, assignee and milestone, creating it if needed.

        A newly created issue whose body came back different from the
        requested one (server-side normalization) is edited once to correct
        it. Existing issues are returned untouched.

        Args:
            assignee: Assignee login, or None for no assignee filter.
            title: Issue title.
            body: Issue description.
            milestone: Milestone number; 0 for none.

        Returns:
            The existing or newly created issue.
        """
        request = IssueRequest(
            title=title,
            body=body,
            milestone=milestone if milestone > 0 else None,
            assignees=[assignee] if assignee is not None else None,
        )

        for issue in self.find_issues_by_filter(request):
            logger.info("Reusing issue #%d %r", issue.number, title)
            return issue

        issue = self.client.issues.create(self.owner, self.name, request)
        logger.info("Created issue #%d %r", issue.number, title)

        if issue.body != body:
            logger.debug("Correcting body of issue #%d", issue.number)
            issue = self.client.issues.edit(self.owner, self.name, issue.number, request)

        return issue

    # Cards

    def fetch_project_cards(self, column: Column) -> list[Card]:
        return fetch_all(lambda page: self.client.projects.list_cards(column.id, page=page))

    def create_card_for_issue(self, issue: Issue, column: Column) -> Card:
        """Create a card for an issue in a column.

        No existence check is made; the tracker rejects a second card for the
        same issue with ``DuplicateCardError``.
        """
        logger.info(
            "Creating card for issue #%d %r in column %r #%d",
            issue.number,
            issue.title,
            column.name,
            column.id,
        )
        return self.client.projects.create_card(column.id, issue.id, "Issue")
