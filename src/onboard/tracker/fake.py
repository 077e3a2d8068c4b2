"""In-memory issue tracker implementing the TrackerClient interfaces.

Mirrors the server-side behavior the onboarding workflow relies on: paginated
listing, assignee/milestone filters, and the rejection of a second card for
the same issue within one project. Failures can be injected per operation.
"""

from __future__ import annotations

import itertools
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TypeVar

from onboard.tracker.exceptions import (
    DuplicateCardError,
    NotFoundError,
    RepositoryNotFoundError,
    TrackerError,
)
from onboard.tracker.models import (
    ANY,
    NONE,
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

T = TypeVar("T")


@dataclass
class _Failure:
    error: Exception
    on_call: int | None = None


@dataclass
class _RepositoryState:
    repository: Repository
    milestones: list[Milestone] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    next_number: Callable[[], int] = field(default_factory=lambda: itertools.count(1).__next__)


class _FakeStore:
    """State shared by the fake services of one client."""

    def __init__(self, page_size: int, normalize_body: Callable[[str], str] | None) -> None:
        self.page_size = page_size
        self.normalize_body = normalize_body
        self.users: dict[str, User] = {}
        self.viewer: str | None = None
        self.repositories: dict[str, _RepositoryState] = {}
        self.columns: dict[int, list[Column]] = {}
        self.cards: dict[int, list[Card]] = {}
        self.calls: Counter[str] = Counter()
        self.failures: dict[str, _Failure] = {}
        self._ids = itertools.count(1000)

    def new_id(self) -> int:
        return next(self._ids)

    def hit(self, operation: str) -> None:
        """Record a call and raise the injected failure, if any."""
        self.calls[operation] += 1
        failure = self.failures.get(operation)
        if failure is None:
            return
        if failure.on_call is None or failure.on_call == self.calls[operation]:
            raise failure.error

    def repo(self, owner: str, name: str) -> _RepositoryState:
        state = self.repositories.get(f"{owner}/{name}")
        if state is None:
            raise RepositoryNotFoundError(f"Repository {owner}/{name} not found", status=404)
        return state

    def page(self, items: list[T], page: int) -> Page[T]:
        index = max(page, 1)
        start = (index - 1) * self.page_size
        chunk = items[start : start + self.page_size]
        more = start + self.page_size < len(items)
        return Page(list(chunk), index + 1 if more else 0)

    def project(self, project_id: int) -> tuple[_RepositoryState, Project]:
        for state in self.repositories.values():
            for project in state.projects:
                if project.id == project_id:
                    return state, project
        raise NotFoundError(f"Project {project_id} not found", status=404)

    def column_project(self, column_id: int) -> int:
        for project_id, columns in self.columns.items():
            if any(column.id == column_id for column in columns):
                return project_id
        raise NotFoundError(f"Column {column_id} not found", status=404)


class _FakeUsers:
    def __init__(self, store: _FakeStore) -> None:
        self._store = store

    def get(self, username: str) -> User:
        self._store.hit("users.get")
        # An empty login means the authenticated user
        user = self._store.users.get(username or self._store.viewer or "")
        if user is None:
            raise NotFoundError(f"User {username!r} not found", status=404)
        return user


class _FakeIssues:
    def __init__(self, store: _FakeStore) -> None:
        self._store = store

    def list_milestones(
        self,
        owner: str,
        repo: str,
        *,
        sort: str = "due_on",
        direction: str = "desc",
        page: int = 0,
    ) -> Page[Milestone]:
        self._store.hit("issues.list_milestones")
        milestones = list(self._store.repo(owner, repo).milestones)
        if sort == "due_on":
            milestones.sort(
                key=lambda m: m.due_on.timestamp() if m.due_on else float("-inf"),
                reverse=direction == "desc",
            )
        return self._store.page(milestones, page)

    def create_milestone(
        self,
        owner: str,
        repo: str,
        title: str,
        description: str,
        due_on: datetime | None,
    ) -> Milestone:
        self._store.hit("issues.create_milestone")
        state = self._store.repo(owner, repo)
        if any(m.title == title for m in state.milestones):
            raise TrackerError(f"Milestone {title!r} already exists", status=422)
        milestone = Milestone(
            number=len(state.milestones) + 1,
            title=title,
            description=description,
            due_on=due_on,
        )
        state.milestones.append(milestone)
        return replace(milestone)

    def list_by_repo(
        self,
        owner: str,
        repo: str,
        *,
        assignee: str = ANY,
        milestone: str = ANY,
        page: int = 0,
    ) -> Page[Issue]:
        self._store.hit("issues.list_by_repo")
        matching = [
            replace(issue)
            for issue in self._store.repo(owner, repo).issues
            if _assignee_matches(issue, assignee) and _milestone_matches(issue, milestone)
        ]
        return self._store.page(matching, page)

    def create(self, owner: str, repo: str, request: IssueRequest) -> Issue:
        self._store.hit("issues.create")
        state = self._store.repo(owner, repo)
        body = request.body or ""
        if self._store.normalize_body is not None:
            body = self._store.normalize_body(body)
        milestone = request.milestone if isinstance(request.milestone, int) else None
        issue = Issue(
            id=self._store.new_id(),
            number=state.next_number(),
            title=request.title or "",
            body=body,
            milestone_number=milestone,
            assignees=list(request.assignees or []),
        )
        state.issues.append(issue)
        return replace(issue, assignees=list(issue.assignees))

    def edit(self, owner: str, repo: str, number: int, request: IssueRequest) -> Issue:
        self._store.hit("issues.edit")
        state = self._store.repo(owner, repo)
        for issue in state.issues:
            if issue.number == number:
                if request.title is not None:
                    issue.title = request.title
                if request.body is not None:
                    issue.body = request.body
                if isinstance(request.milestone, int):
                    issue.milestone_number = request.milestone
                if request.assignees is not None:
                    issue.assignees = list(request.assignees)
                return replace(issue, assignees=list(issue.assignees))
        raise NotFoundError(f"Issue #{number} not found", status=404)


class _FakeRepositories:
    def __init__(self, store: _FakeStore) -> None:
        self._store = store

    def get(self, owner: str, repo: str) -> Repository:
        self._store.hit("repositories.get")
        return self._store.repo(owner, repo).repository

    def list_projects(self, owner: str, repo: str, *, page: int = 0) -> Page[Project]:
        self._store.hit("repositories.list_projects")
        projects = [replace(p) for p in self._store.repo(owner, repo).projects]
        return self._store.page(projects, page)

    def create_project(self, owner: str, repo: str, name: str, body: str) -> Project:
        self._store.hit("repositories.create_project")
        state = self._store.repo(owner, repo)
        number = len(state.projects) + 1
        project = Project(
            id=self._store.new_id(),
            number=number,
            name=name,
            body=body,
            html_url=f"{state.repository.html_url}/projects/{number}",
        )
        state.projects.append(project)
        self._store.columns[project.id] = []
        return replace(project)


class _FakeProjects:
    def __init__(self, store: _FakeStore) -> None:
        self._store = store

    def update_project(self, project_id: int, name: str, body: str) -> Project:
        self._store.hit("projects.update_project")
        _, project = self._store.project(project_id)
        project.name = name
        project.body = body
        return replace(project)

    def list_columns(self, project_id: int, *, page: int = 0) -> Page[Column]:
        self._store.hit("projects.list_columns")
        self._store.project(project_id)
        return self._store.page(list(self._store.columns[project_id]), page)

    def create_column(self, project_id: int, name: str) -> Column:
        self._store.hit("projects.create_column")
        self._store.project(project_id)
        column = Column(id=self._store.new_id(), name=name, project_id=project_id)
        self._store.columns[project_id].append(column)
        self._store.cards[column.id] = []
        return replace(column)

    def list_cards(self, column_id: int, *, page: int = 0) -> Page[Card]:
        self._store.hit("projects.list_cards")
        self._store.column_project(column_id)
        return self._store.page(list(self._store.cards[column_id]), page)

    def create_card(self, column_id: int, content_id: int, content_type: str = "Issue") -> Card:
        self._store.hit("projects.create_card")
        project_id = self._store.column_project(column_id)
        for column in self._store.columns[project_id]:
            if any(card.content_id == content_id for card in self._store.cards[column.id]):
                raise DuplicateCardError(
                    "Project already has the associated issue",
                    status=422,
                )
        card = Card(
            id=self._store.new_id(),
            column_id=column_id,
            content_id=content_id,
            content_type=content_type,
        )
        self._store.cards[column_id].append(card)
        return replace(card)


def _assignee_matches(issue: Issue, assignee: str) -> bool:
    if assignee == ANY:
        return True
    if assignee == NONE:
        return not issue.assignees
    return assignee in issue.assignees


def _milestone_matches(issue: Issue, milestone: str) -> bool:
    if milestone == ANY:
        return True
    if milestone == NONE:
        return issue.milestone_number is None
    return str(issue.milestone_number) == milestone


class InMemoryTrackerClient:
    """TrackerClient double holding all state in memory.

    Example:
        client = InMemoryTrackerClient()
        client.add_user("octocat")
        client.add_repository("acme", "onboarding")
        client.fail("projects.create_card", on_call=2)
    """

    def __init__(
        self,
        page_size: int = 2,
        normalize_body: Callable[[str], str] | None = None,
    ) -> None:
        """Initialize the fake tracker.

        Args:
            page_size: Items per page for every list operation.
            normalize_body: Optional transform applied to issue bodies on
                creation, simulating server-side normalization.
        """
        self._store = _FakeStore(page_size, normalize_body)
        self._users = _FakeUsers(self._store)
        self._issues = _FakeIssues(self._store)
        self._repositories = _FakeRepositories(self._store)
        self._projects = _FakeProjects(self._store)
        self.closed = False

    @property
    def users(self) -> _FakeUsers:
        return self._users

    @property
    def issues(self) -> _FakeIssues:
        return self._issues

    @property
    def repositories(self) -> _FakeRepositories:
        return self._repositories

    @property
    def projects(self) -> _FakeProjects:
        return self._projects

    @property
    def calls(self) -> Counter[str]:
        """Number of calls per operation, e.g. ``calls["issues.create"]``."""
        return self._store.calls

    def close(self) -> None:
        self.closed = True

    def add_user(self, login: str, name: str | None = None, *, viewer: bool = False) -> User:
        """Register a user; ``viewer`` makes it the authenticated user."""
        user = User(login=login, name=name, id=self._store.new_id())
        self._store.users[login] = user
        if viewer:
            self._store.viewer = login
        return user

    def add_repository(self, owner: str, name: str) -> Repository:
        repository = Repository(
            owner=owner,
            name=name,
            html_url=f"https://github.com/{owner}/{name}",
            id=self._store.new_id(),
        )
        self._store.repositories[repository.full_name] = _RepositoryState(repository)
        return repository

    def fail(
        self,
        operation: str,
        error: Exception | None = None,
        *,
        on_call: int | None = None,
    ) -> None:
        """Make an operation raise.

        Args:
            operation: Operation name, e.g. ``"issues.create_milestone"``.
            error: Exception to raise; defaults to a TrackerError with HTTP 500.
            on_call: Only fail the n-th call (1-based); every call when None.
        """
        if error is None:
            error = TrackerError(f"{operation} failed", status=500)
        self._store.failures[operation] = _Failure(error, on_call)

    def milestones(self, owner: str, name: str) -> list[Milestone]:
        return list(self._store.repo(owner, name).milestones)

    def issues_of(self, owner: str, name: str) -> list[Issue]:
        return list(self._store.repo(owner, name).issues)

    def projects_of(self, owner: str, name: str) -> list[Project]:
        return list(self._store.repo(owner, name).projects)

    def columns_of(self, project_id: int) -> list[Column]:
        return list(self._store.columns.get(project_id, []))

    def cards_of(self, column_id: int) -> list[Card]:
        return list(self._store.cards.get(column_id, []))
