"""Issue tracker clients - GitHub REST adapter and in-memory double."""

from onboard.tracker.client import (
    IssuesService,
    ProjectsService,
    RepositoriesService,
    TrackerClient,
    UsersService,
)
from onboard.tracker.exceptions import (
    DuplicateCardError,
    NotFoundError,
    RepositoryNotFoundError,
    TrackerError,
)
from onboard.tracker.fake import InMemoryTrackerClient
from onboard.tracker.github import GitHubTrackerClient
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
from onboard.tracker.pagination import fetch_all

__all__ = [
    "ANY",
    "NONE",
    "Card",
    "Column",
    "DuplicateCardError",
    "GitHubTrackerClient",
    "InMemoryTrackerClient",
    "Issue",
    "IssueRequest",
    "IssuesService",
    "Milestone",
    "NotFoundError",
    "Page",
    "Project",
    "ProjectsService",
    "RepositoriesService",
    "Repository",
    "RepositoryNotFoundError",
    "TrackerClient",
    "TrackerError",
    "User",
    "UsersService",
    "fetch_all",
]
