"""Data models for issue tracker entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

T = TypeVar("T")

# Filter values understood by the remote issue listing
ANY = "*"
NONE = "none"


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a list operation.

    Attributes:
        items: Entities on this page, in server order.
        next_page: Cursor of the following page, 0 when exhausted.
    """

    items: list[T]
    next_page: int = 0


@dataclass
class User:
    """A GitHub account."""

    login: str
    name: str | None = None
    id: int = 0


@dataclass
class Repository:
    """A repository, identified by owner login and name."""

    owner: str
    name: str
    html_url: str = ""
    id: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class Milestone:
    """A dated goal grouping issues."""

    number: int
    title: str
    description: str = ""
    due_on: datetime | None = None


@dataclass
class Project:
    """A repository project board (classic Projects)."""

    id: int
    number: int
    name: str
    body: str = ""
    html_url: str = ""


@dataclass
class Column:
    """A named lane of a project board."""

    id: int
    name: str
    project_id: int = 0


@dataclass
class Card:
    """Placement of an issue in a column."""

    id: int
    column_id: int
    content_id: int | None = None
    content_type: str = "Issue"


@dataclass
class Issue:
    """A repository issue."""

    id: int
    number: int
    title: str
    body: str = ""
    milestone_number: int | None = None
    assignees: list[str] = field(default_factory=list)


@dataclass
class IssueRequest:
    """Desired issue fields, used both as a search filter and a create/edit body.

    Attributes:
        title: Exact issue title, None to match any title.
        body: Issue description.
        milestone: Milestone number, "none" for issues without a milestone,
            or None for any milestone.
        assignees: Assignee logins; ["none"] selects unassigned issues.
    """

    title: str | None = None
    body: str | None = None
    milestone: int | str | None = None
    assignees: list[str] | None = None
