"""Configuration loading for the onboarding service.

The setup file is YAML with ``${NAME}`` placeholders filled from the
environment before parsing, e.g.::

    githubOrganization: acme
    githubRepository: onboarding
    clientId: ${GITHUB_CLIENT_ID}
    clientSecret: ${GITHUB_CLIENT_SECRET}
    task_owners:
      new_hire: &new_hire
        github_username: ${GITHUB_USER}
    tasks:
      - title: Set up your laptop
        assignee: *new_hire
        description: Install the standard toolchain.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Any

import yaml

from onboard.logging import DEFAULT_LOG_DIR, DEFAULT_LOG_LEVEL
from onboard.workflow.models import TaskEntry, WorkflowSpec

DEFAULT_CONFIG_FILE = "onboard.yaml"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 9000
DEFAULT_API_URL = "https://api.github.com"


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


def _username(value: Any) -> str:
    """Read an assignee given either as a mapping or a plain login."""
    if value is None:
        return ""
    if isinstance(value, Mapping):
        return str(value.get("github_username") or "")
    return str(value)


@dataclass
class SetupScheme:
    """The whole onboarding workload, plus the GitHub application credentials.

    A ``task_owners`` section may hold YAML anchors for assignees; it is only
    read through the tasks that reference it.
    """

    client_id: str
    client_secret: str
    organization: str
    repository: str
    tasks: list[TaskEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SetupScheme:
        """Create a setup scheme from parsed YAML.

        Args:
            data: Configuration dictionary from YAML.

        Returns:
            Parsed setup scheme.

        Raises:
            ConfigError: If required fields are missing or malformed.
        """
        required_fields = ["githubOrganization", "githubRepository", "clientId", "clientSecret"]
        missing = [f for f in required_fields if not data.get(f)]
        if missing:
            raise ConfigError(f"Missing required fields: {', '.join(missing)}")

        raw_tasks = data.get("tasks") or []
        if not isinstance(raw_tasks, list):
            raise ConfigError("'tasks' must be a list")

        tasks = []
        for index, raw in enumerate(raw_tasks):
            if not isinstance(raw, Mapping) or not raw.get("title"):
                raise ConfigError(f"Task {index} has no title")
            tasks.append(
                TaskEntry(
                    title=str(raw["title"]),
                    description=str(raw.get("description") or ""),
                    assignee=_username(raw.get("assignee")),
                )
            )

        return cls(
            client_id=str(data["clientId"]),
            client_secret=str(data["clientSecret"]),
            organization=str(data["githubOrganization"]),
            repository=str(data["githubRepository"]),
            tasks=tasks,
        )

    def workflow_spec(self) -> WorkflowSpec:
        """Build the immutable workflow input for a run."""
        return WorkflowSpec(
            organization=self.organization,
            repository=self.repository,
            tasks=tuple(self.tasks),
        )


def render_setup(text: str, environ: Mapping[str, str] | None = None) -> str:
    """Substitute ``${NAME}`` placeholders; unknown names are left as-is."""
    if environ is None:
        environ = os.environ
    return Template(text).safe_substitute(environ)


def parse_setup(text: str, environ: Mapping[str, str] | None = None) -> SetupScheme:
    """Render and parse a setup document.

    Args:
        text: YAML document with optional ``${NAME}`` placeholders.
        environ: Values for placeholders. Defaults to the process environment.

    Returns:
        Parsed setup scheme.

    Raises:
        ConfigError: If the document is not valid YAML or misses fields.
    """
    try:
        data = yaml.safe_load(render_setup(text, environ))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Setup file must contain a mapping")

    return SetupScheme.from_dict(data)


def load_setup(path: str | Path, environ: Mapping[str, str] | None = None) -> SetupScheme:
    """Load a setup scheme from a file.

    Args:
        path: Path to the YAML setup file.
        environ: Values for placeholders. Defaults to the process environment.

    Returns:
        Parsed setup scheme.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Setup file not found: {path}")
    return parse_setup(path.read_text(encoding="utf-8"), environ)


@dataclass
class AppSettings:
    """Process-level settings, read from the environment."""

    config_path: Path = field(default_factory=lambda: Path(DEFAULT_CONFIG_FILE))
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_url: str = DEFAULT_API_URL
    redirect_url: str | None = None
    log_dir: Path = field(default_factory=lambda: Path(DEFAULT_LOG_DIR))
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppSettings:
        """Read settings from ONBOARD_* and GITHUB_API_URL variables."""
        if environ is None:
            environ = os.environ
        port = environ.get("ONBOARD_PORT", str(DEFAULT_PORT))
        if not port.isdigit():
            raise ConfigError(f"ONBOARD_PORT must be a number, got {port!r}")
        return cls(
            config_path=Path(environ.get("ONBOARD_CONFIG", DEFAULT_CONFIG_FILE)),
            host=environ.get("ONBOARD_HOST", DEFAULT_HOST),
            port=int(port),
            api_url=environ.get("GITHUB_API_URL", DEFAULT_API_URL),
            redirect_url=environ.get("ONBOARD_REDIRECT_URL") or None,
            log_dir=Path(environ.get("ONBOARD_LOG_DIR", DEFAULT_LOG_DIR)),
            log_level=environ.get("ONBOARD_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
