"""Shared pytest fixtures and configuration."""

import logging
from collections.abc import Iterator
from datetime import datetime, timezone

import pytest

from onboard.tracker import InMemoryTrackerClient
from onboard.workflow import TaskEntry, WorkflowSpec

ORG = "acme"
REPO = "onboarding"
NEW_HIRE = "newhire"


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def tracker() -> InMemoryTrackerClient:
    """In-memory tracker with the new hire and the onboarding repository."""
    client = InMemoryTrackerClient()
    client.add_user(NEW_HIRE, "New Hire", viewer=True)
    client.add_repository(ORG, REPO)
    return client


@pytest.fixture
def tasks() -> tuple[TaskEntry, ...]:
    """Three distinct onboarding tasks."""
    return (
        TaskEntry("Set up your laptop", "Install the standard toolchain.", NEW_HIRE),
        TaskEntry("Read the handbook", "Start with the engineering section.", NEW_HIRE),
        TaskEntry("Meet your buddy", "", NEW_HIRE),
    )


@pytest.fixture
def spec(tasks: tuple[TaskEntry, ...]) -> WorkflowSpec:
    """Workflow input for the onboarding repository."""
    return WorkflowSpec(organization=ORG, repository=REPO, tasks=tasks)


@pytest.fixture
def monday() -> datetime:
    """A Monday morning, used as the run's reference time."""
    return datetime(2024, 1, 8, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_onboard_logger() -> Iterator[None]:
    """Drop handlers installed by setup_logging during a test."""
    yield
    logger = logging.getLogger("onboard")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
