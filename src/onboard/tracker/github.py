"""GitHubTrackerClient - REST adapter for GitHub issues, milestones and projects."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from onboard.logging import sanitize_for_log
from onboard.tracker.exceptions import (
    DuplicateCardError,
    NotFoundError,
    RepositoryNotFoundError,
    TrackerError,
)
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

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PER_PAGE = 100
HTTP_ERROR_STATUS = 400
HTTP_NOT_FOUND = 404
HTTP_UNPROCESSABLE = 422

# Classic Projects still require the inertia preview media type; every other
# REST endpoint accepts it too.
ACCEPT = "application/vnd.github.inertia-preview+json"


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _next_page(response: httpx.Response) -> int:
    """Read the next page number from the Link header, 0 when there is none."""
    next_url = response.links.get("next", {}).get("url")
    if not next_url:
        return 0
    return int(httpx.URL(next_url).params.get("page", 0))


def _user(data: dict[str, Any]) -> User:
    return User(login=data["login"], name=data.get("name"), id=data.get("id", 0))


def _repository(data: dict[str, Any]) -> Repository:
    return Repository(
        owner=data["owner"]["login"],
        name=data["name"],
        html_url=data.get("html_url") or "",
        id=data.get("id", 0),
    )


def _milestone(data: dict[str, Any]) -> Milestone:
    return Milestone(
        number=data["number"],
        title=data["title"],
        description=data.get("description") or "",
        due_on=_parse_time(data.get("due_on")),
    )


def _project(data: dict[str, Any]) -> Project:
    return Project(
        id=data["id"],
        number=data.get("number") or 0,
        name=data["name"],
        body=data.get("body") or "",
        html_url=data.get("html_url") or "",
    )


def _issue(data: dict[str, Any]) -> Issue:
    milestone = data.get("milestone") or {}
    return Issue(
        id=data["id"],
        number=data["number"],
        title=data["title"],
        body=data.get("body") or "",
        milestone_number=milestone.get("number"),
        assignees=[user["login"] for user in data.get("assignees") or []],
    )


def _issue_payload(request: IssueRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    if request.title is not None:
        payload["title"] = request.title
    if request.body is not None:
        payload["body"] = request.body
    if isinstance(request.milestone, int) and request.milestone > 0:
        payload["milestone"] = request.milestone
    if request.assignees is not None:
        payload["assignees"] = list(request.assignees)
    return payload


class GitHubTrackerClient:
    """Adapter for the GitHub REST API (v3).

    Exposes the users, issues, repositories and projects services needed by
    the onboarding workflow.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: OAuth access token or personal access token
            base_url: GitHub REST API URL (for testing/enterprise)
            timeout: Per-request timeout in seconds
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.Client | None = None
        self._users = _UsersAPI(self)
        self._issues = _IssuesAPI(self)
        self._repositories = _RepositoriesAPI(self)
        self._projects = _ProjectsAPI(self)

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the REST API."""
        if self._client is None:
            self._client = httpx.Client(
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": ACCEPT,
                },
                timeout=self.timeout,
            )
        return self._client

    @property
    def users(self) -> _UsersAPI:
        return self._users

    @property
    def issues(self) -> _IssuesAPI:
        return self._issues

    @property
    def repositories(self) -> _RepositoriesAPI:
        return self._repositories

    @property
    def projects(self) -> _ProjectsAPI:
        return self._projects

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Execute a REST request.

        Args:
            method: HTTP method
            path: Path relative to the API URL
            params: Query parameters
            json_body: JSON request body

        Returns:
            The successful response

        Raises:
            NotFoundError: If the resource does not exist
            TrackerError: If the request fails or returns an error status
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("%s %s %s", method, sanitize_for_log(url), params or "")

        try:
            response = self.client.request(method, url, params=params, json=json_body)
        except httpx.HTTPError as e:
            raise TrackerError(f"GitHub API {method} {path} failed: {e}") from e

        if response.status_code == HTTP_NOT_FOUND:
            raise NotFoundError(
                f"GitHub API {method} {path} not found",
                status=response.status_code,
                response_text=response.text,
            )
        if response.status_code >= HTTP_ERROR_STATUS:
            raise TrackerError(
                f"GitHub API {method} {path} failed: {response.status_code} - {response.text}",
                status=response.status_code,
                response_text=response.text,
            )
        return response

    def list_page(
        self, path: str, page: int, params: dict[str, Any] | None = None
    ) -> tuple[list[dict[str, Any]], int]:
        """Fetch one page of a list endpoint.

        Args:
            path: Path relative to the API URL
            page: Page cursor, 0 for the first page
            params: Extra query parameters

        Returns:
            Raw items and the next page number (0 when exhausted)
        """
        query: dict[str, Any] = {"per_page": PER_PAGE, **(params or {})}
        if page > 0:
            query["page"] = page
        response = self.request("GET", path, params=query)
        return list(response.json()), _next_page(response)


class _UsersAPI:
    def __init__(self, github: GitHubTrackerClient) -> None:
        self._github = github

    def get(self, username: str) -> User:
        path = f"users/{username}" if username else "user"
        return _user(self._github.request("GET", path).json())


class _IssuesAPI:
    def __init__(self, github: GitHubTrackerClient) -> None:
        self._github = github

    def list_milestones(
        self,
        owner: str,
        repo: str,
        *,
        sort: str = "due_on",
        direction: str = "desc",
        page: int = 0,
    ) -> Page[Milestone]:
        items, next_page = self._github.list_page(
            f"repos/{owner}/{repo}/milestones",
            page,
            {"state": "all", "sort": sort, "direction": direction},
        )
        return Page([_milestone(item) for item in items], next_page)

    def create_milestone(
        self,
        owner: str,
        repo: str,
        title: str,
        description: str,
        due_on: datetime | None,
    ) -> Milestone:
        payload: dict[str, Any] = {"title": title, "description": description}
        if due_on is not None:
            payload["due_on"] = _format_time(due_on)
        response = self._github.request(
            "POST", f"repos/{owner}/{repo}/milestones", json_body=payload
        )
        return _milestone(response.json())

    def list_by_repo(
        self,
        owner: str,
        repo: str,
        *,
        assignee: str = "*",
        milestone: str = "*",
        page: int = 0,
    ) -> Page[Issue]:
        items, next_page = self._github.list_page(
            f"repos/{owner}/{repo}/issues",
            page,
            {"state": "all", "assignee": assignee, "milestone": milestone},
        )
        # The issues endpoint also lists pull requests
        issues = [_issue(item) for item in items if "pull_request" not in item]
        return Page(issues, next_page)

    def create(self, owner: str, repo: str, request: IssueRequest) -> Issue:
        response = self._github.request(
            "POST", f"repos/{owner}/{repo}/issues", json_body=_issue_payload(request)
        )
        return _issue(response.json())

    def edit(self, owner: str, repo: str, number: int, request: IssueRequest) -> Issue:
        response = self._github.request(
            "PATCH", f"repos/{owner}/{repo}/issues/{number}", json_body=_issue_payload(request)
        )
        return _issue(response.json())


class _RepositoriesAPI:
    def __init__(self, github: GitHubTrackerClient) -> None:
        self._github = github

    def get(self, owner: str, repo: str) -> Repository:
        try:
            response = self._github.request("GET", f"repos/{owner}/{repo}")
        except NotFoundError as e:
            raise RepositoryNotFoundError(
                f"Repository {owner}/{repo} not found",
                status=e.status,
                response_text=e.response_text,
            ) from e
        return _repository(response.json())

    def list_projects(self, owner: str, repo: str, *, page: int = 0) -> Page[Project]:
        items, next_page = self._github.list_page(
            f"repos/{owner}/{repo}/projects", page, {"state": "all"}
        )
        return Page([_project(item) for item in items], next_page)

    def create_project(self, owner: str, repo: str, name: str, body: str) -> Project:
        response = self._github.request(
            "POST", f"repos/{owner}/{repo}/projects", json_body={"name": name, "body": body}
        )
        return _project(response.json())


class _ProjectsAPI:
    def __init__(self, github: GitHubTrackerClient) -> None:
        self._github = github

    def update_project(self, project_id: int, name: str, body: str) -> Project:
        response = self._github.request(
            "PATCH", f"projects/{project_id}", json_body={"name": name, "body": body}
        )
        return _project(response.json())

    def list_columns(self, project_id: int, *, page: int = 0) -> Page[Column]:
        items, next_page = self._github.list_page(f"projects/{project_id}/columns", page)
        columns = [
            Column(id=item["id"], name=item["name"], project_id=project_id) for item in items
        ]
        return Page(columns, next_page)

    def create_column(self, project_id: int, name: str) -> Column:
        response = self._github.request(
            "POST", f"projects/{project_id}/columns", json_body={"name": name}
        )
        data = response.json()
        return Column(id=data["id"], name=data["name"], project_id=project_id)

    def list_cards(self, column_id: int, *, page: int = 0) -> Page[Card]:
        items, next_page = self._github.list_page(f"projects/columns/{column_id}/cards", page)
        cards = [Card(id=item["id"], column_id=column_id) for item in items]
        return Page(cards, next_page)

    def create_card(self, column_id: int, content_id: int, content_type: str = "Issue") -> Card:
        try:
            response = self._github.request(
                "POST",
                f"projects/columns/{column_id}/cards",
                json_body={"content_id": content_id, "content_type": content_type},
            )
        except TrackerError as e:
            if e.status == HTTP_UNPROCESSABLE:
                raise DuplicateCardError(
                    f"Issue {content_id} already has a card in this project",
                    status=e.status,
                    response_text=e.response_text,
                ) from e
            raise
        data = response.json()
        return Card(
            id=data["id"],
            column_id=column_id,
            content_id=content_id,
            content_type=content_type,
        )
