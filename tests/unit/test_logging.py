"""Unit tests for onboarding logging configuration."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from onboard.logging import CredentialFilter, sanitize_for_log, setup_logging


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord("onboard.auth", logging.INFO, __file__, 1, msg, args, None)


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_creates_log_directory(self, tmp_path: Path) -> None:
        """Log directory is created if it doesn't exist."""
        log_dir = tmp_path / "nested" / "logs"

        setup_logging(log_dir=log_dir, console=False)

        assert (log_dir / "onboard.log").exists()

    def test_component_loggers_share_the_file(self, tmp_path: Path) -> None:
        """Every onboard.* logger writes to the same file with its name."""
        setup_logging(log_dir=tmp_path, console=False)

        logging.getLogger("onboard.tracker.github").info("tracker log")
        logging.getLogger("onboard.workflow.runner").info("runner log")

        content = (tmp_path / "onboard.log").read_text()
        assert "tracker log" in content
        assert "runner log" in content
        assert " | INFO     | onboard.workflow.runner | " in content

    def test_log_level_configurable(self, tmp_path: Path) -> None:
        """Log level filters messages appropriately."""
        logger = setup_logging(log_dir=tmp_path, level="warning", console=False)
        logger.info("should not appear")
        logger.warning("should appear")

        content = (tmp_path / "onboard.log").read_text()
        assert "should not appear" not in content
        assert "should appear" in content

    def test_repeated_setup_replaces_handlers(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, console=True)
        setup_logging(log_dir=tmp_path, console=False)

        assert len(logging.getLogger("onboard").handlers) == 1

    def test_rotation_configured(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, max_bytes=1024, backup_count=3, console=False)

        (handler,) = logging.getLogger("onboard").handlers
        assert isinstance(handler, RotatingFileHandler)
        assert handler.maxBytes == 1024
        assert handler.backupCount == 3

    def test_configured_secrets_never_reach_the_file(self, tmp_path: Path) -> None:
        """The client secret is scrubbed even when logged as a plain argument."""
        setup_logging(log_dir=tmp_path, console=False, secrets=["s3cr3t-value"])

        logging.getLogger("onboard.auth").error("Token exchange with %s failed", "s3cr3t-value")
        logging.getLogger("onboard.api").info("callback ?code=abc123&state=xyz")

        content = (tmp_path / "onboard.log").read_text()
        assert "s3cr3t-value" not in content
        assert "Token exchange with [REDACTED] failed" in content
        assert "abc123" not in content
        assert "state=xyz" in content


@pytest.mark.unit
class TestCredentialFilter:
    """Tests for CredentialFilter."""

    def test_rewrites_message_with_secret(self) -> None:
        record = _record("secret is %s", "hunter2")

        assert CredentialFilter(["hunter2"]).filter(record)
        assert record.getMessage() == "secret is [REDACTED]"

    def test_leaves_clean_records_untouched(self) -> None:
        record = _record("Created issue #%d", 3)

        CredentialFilter(["hunter2"]).filter(record)

        assert record.args == (3,)
        assert record.getMessage() == "Created issue #3"

    def test_ignores_empty_secrets(self) -> None:
        """An unset secret must not blank out every message."""
        record = _record("Created issue")

        CredentialFilter(["", "hunter2"]).filter(record)

        assert record.getMessage() == "Created issue"


@pytest.mark.unit
class TestSanitizeForLog:
    """Tests for sanitize_for_log function."""

    def test_redacts_personal_access_token(self) -> None:
        token = "ghp_" + "a" * 36

        assert sanitize_for_log(f"token {token}") == "token [GITHUB_TOKEN]"

    def test_redacts_oauth_token(self) -> None:
        assert "gho_" not in sanitize_for_log("gho_" + "B1" * 18)

    def test_redacts_bearer_header(self) -> None:
        assert sanitize_for_log("Authorization: Bearer abc.def") == (
            "Authorization: Bearer [REDACTED]"
        )

    def test_redacts_oauth_parameters(self) -> None:
        """OAuth codes, secrets and tokens in query strings are hidden."""
        text = "client_secret=s3cr3t&code=xyz&access_token=tok123"

        sanitized = sanitize_for_log(text)

        assert "s3cr3t" not in sanitized
        assert "xyz" not in sanitized
        assert "tok123" not in sanitized

    def test_status_code_is_not_a_code(self) -> None:
        assert sanitize_for_log("status_code=404") == "status_code=404"

    def test_redacts_literal_secrets(self) -> None:
        assert sanitize_for_log("sent abc to github", ["abc"]) == "sent [REDACTED] to github"

    def test_leaves_plain_text(self) -> None:
        assert sanitize_for_log("Created issue #3") == "Created issue #3"
