"""Unit tests for setup and settings loading."""

from pathlib import Path

import pytest

from onboard.config import (
    AppSettings,
    ConfigError,
    SetupScheme,
    load_setup,
    parse_setup,
    render_setup,
)
from onboard.workflow import TaskEntry

SETUP_YAML = """\
githubOrganization: acme
githubRepository: onboarding
clientId: ${GITHUB_CLIENT_ID}
clientSecret: ${GITHUB_CLIENT_SECRET}
task_owners:
  new_hire: &new_hire
    github_username: ${GITHUB_USER}
  lead: &lead
    github_username: teamlead
tasks:
  - title: Set up your laptop
    assignee: *new_hire
    description: Install the standard toolchain.
  - title: Review the onboarding plan
    assignee: *lead
  - title: Read the wiki
"""

ENV = {
    "GITHUB_CLIENT_ID": "client-123",
    "GITHUB_CLIENT_SECRET": "secret-456",
    "GITHUB_USER": "newhire",
}


@pytest.mark.unit
class TestParseSetup:
    """Tests for parsing setup documents."""

    def test_full_document(self) -> None:
        setup = parse_setup(SETUP_YAML, ENV)

        assert setup.organization == "acme"
        assert setup.repository == "onboarding"
        assert setup.client_id == "client-123"
        assert setup.client_secret == "secret-456"
        assert setup.tasks == [
            TaskEntry("Set up your laptop", "Install the standard toolchain.", "newhire"),
            TaskEntry("Review the onboarding plan", "", "teamlead"),
            TaskEntry("Read the wiki", "", ""),
        ]

    def test_workflow_spec(self) -> None:
        spec = parse_setup(SETUP_YAML, ENV).workflow_spec()

        assert spec.full_name == "acme/onboarding"
        assert len(spec.tasks) == 3
        assert isinstance(spec.tasks, tuple)

    def test_plain_string_assignee(self) -> None:
        setup = parse_setup(
            "githubOrganization: a\ngithubRepository: b\nclientId: c\nclientSecret: d\n"
            "tasks:\n  - title: T\n    assignee: someone\n",
            {},
        )

        assert setup.tasks[0].assignee == "someone"

    def test_missing_fields(self) -> None:
        with pytest.raises(ConfigError, match="clientId, clientSecret"):
            parse_setup("githubOrganization: a\ngithubRepository: b\n", {})

    def test_unset_placeholder_is_kept(self) -> None:
        """Unknown placeholders are left in place rather than blanked."""
        setup = parse_setup(SETUP_YAML, {"GITHUB_CLIENT_SECRET": "s", "GITHUB_CLIENT_ID": "i"})

        assert setup.tasks[0].assignee == "${GITHUB_USER}"

    def test_task_without_title(self) -> None:
        with pytest.raises(ConfigError, match="Task 0 has no title"):
            SetupScheme.from_dict(
                {
                    "githubOrganization": "a",
                    "githubRepository": "b",
                    "clientId": "c",
                    "clientSecret": "d",
                    "tasks": [{"description": "no title"}],
                }
            )

    def test_tasks_must_be_a_list(self) -> None:
        with pytest.raises(ConfigError, match="must be a list"):
            parse_setup(
                "githubOrganization: a\ngithubRepository: b\nclientId: c\nclientSecret: d\n"
                "tasks: nope\n",
                {},
            )

    def test_invalid_yaml(self) -> None:
        with pytest.raises(ConfigError, match="Invalid YAML"):
            parse_setup("tasks: [unclosed", {})

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            parse_setup("- just\n- a list\n", {})


@pytest.mark.unit
class TestRenderAndLoad:
    """Tests for templating and file loading."""

    def test_render_substitutes_environment(self) -> None:
        assert render_setup("id: ${GITHUB_CLIENT_ID}", ENV) == "id: client-123"

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "onboard.yaml"
        path.write_text(SETUP_YAML, encoding="utf-8")

        setup = load_setup(path, ENV)

        assert setup.tasks[0].assignee == "newhire"

    def test_load_from_process_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        for name, value in ENV.items():
            monkeypatch.setenv(name, value)
        path = tmp_path / "onboard.yaml"
        path.write_text(SETUP_YAML, encoding="utf-8")

        assert load_setup(path).client_id == "client-123"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_setup(tmp_path / "absent.yaml")


@pytest.mark.unit
class TestAppSettings:
    """Tests for AppSettings.from_env."""

    def test_defaults(self) -> None:
        settings = AppSettings.from_env({})

        assert settings.config_path == Path("onboard.yaml")
        assert settings.host == "127.0.0.1"
        assert settings.port == 9000
        assert settings.api_url == "https://api.github.com"
        assert settings.redirect_url is None
        assert settings.log_dir == Path("logs")
        assert settings.log_level == "INFO"

    def test_overrides(self) -> None:
        settings = AppSettings.from_env(
            {
                "ONBOARD_CONFIG": "/etc/onboard.yaml",
                "ONBOARD_HOST": "0.0.0.0",
                "ONBOARD_PORT": "8080",
                "GITHUB_API_URL": "https://ghe.example.com/api/v3",
                "ONBOARD_REDIRECT_URL": "https://onboard.example.com/auth/callback",
                "ONBOARD_LOG_DIR": "/var/log/onboard",
                "ONBOARD_LOG_LEVEL": "debug",
            }
        )

        assert settings.config_path == Path("/etc/onboard.yaml")
        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.api_url == "https://ghe.example.com/api/v3"
        assert settings.redirect_url == "https://onboard.example.com/auth/callback"
        assert settings.log_dir == Path("/var/log/onboard")
        assert settings.log_level == "DEBUG"

    def test_invalid_port(self) -> None:
        with pytest.raises(ConfigError, match="ONBOARD_PORT"):
            AppSettings.from_env({"ONBOARD_PORT": "eighty"})
