"""Logging for the onboarding service.

Everything logs under the ``onboard`` logger into one rotating file. The
service handles OAuth codes, access tokens and the application's client
secret, so every handler installed here scrubs them before a record is
written.
"""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "INFO"
LOG_FILE = "onboard.log"
MAX_BYTES = 10 * 1024 * 1024  # 10MB
BACKUP_COUNT = 5

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

REDACTED = "[REDACTED]"

_CREDENTIAL_PATTERNS = [
    # GitHub personal, OAuth, user-to-server, server-to-server and refresh tokens
    (re.compile(r"\bgh[pousr]_[A-Za-z0-9]{36}\b"), "[GITHUB_TOKEN]"),
    (re.compile(r"\bgithub_pat_[A-Za-z0-9_]{82}\b"), "[GITHUB_TOKEN]"),
    (re.compile(r"\bBearer [A-Za-z0-9._~+/=-]+"), f"Bearer {REDACTED}"),
    # OAuth form and query parameters
    (
        re.compile(r"\b(access_token|refresh_token|client_secret|code)=[^&\s\"']+"),
        rf"\1={REDACTED}",
    ),
]


def sanitize_for_log(text: str, secrets: Iterable[str] = ()) -> str:
    """Remove credentials from text before it is logged.

    Args:
        text: Text that may contain tokens, OAuth codes or client secrets.
        secrets: Literal values to hide as well, e.g. the configured client secret.

    Returns:
        Sanitized text safe for logging.
    """
    for pattern, replacement in _CREDENTIAL_PATTERNS:
        text = pattern.sub(replacement, text)
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


class CredentialFilter(logging.Filter):
    """Handler filter that scrubs credentials from each record's message."""

    def __init__(self, secrets: Iterable[str] = ()) -> None:
        super().__init__()
        self.secrets = tuple(s for s in secrets if s)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        clean = sanitize_for_log(message, self.secrets)
        if clean != message:
            record.msg = clean
            record.args = None
        return True


def setup_logging(
    log_dir: str | Path = DEFAULT_LOG_DIR,
    level: str = DEFAULT_LOG_LEVEL,
    console: bool = True,
    secrets: Iterable[str] = (),
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
) -> logging.Logger:
    """Configure the ``onboard`` logger.

    Calling it again replaces the handlers from the previous call.

    Args:
        log_dir: Directory for ``onboard.log``; created if missing.
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        console: Whether to also log to stderr.
        secrets: Configured credentials (client secret, access token) to
            redact from every record.
        max_bytes: Size at which the log file rotates.
        backup_count: Number of rotated files to keep.

    Returns:
        The ``onboard`` logger.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("onboard")
    logger.setLevel(log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    redact = CredentialFilter(secrets)

    log_path = log_dir / LOG_FILE
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler.addFilter(redact)
        logger.addHandler(handler)

    logger.info("Onboard logging initialized (level=%s, file=%s)", level, log_path)
    return logger
