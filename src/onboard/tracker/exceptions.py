"""Custom exceptions for the issue tracker clients."""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for issue tracker failures.

    Raised for any transport error or error response from the remote API.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.response_text = response_text


class NotFoundError(TrackerError):
    """Requested entity does not exist (HTTP 404)."""


class RepositoryNotFoundError(NotFoundError):
    """Repository with given owner and name does not exist."""


class DuplicateCardError(TrackerError):
    """The project already holds a card for this issue.

    The remote API rejects the request (HTTP 422); callers may skip it.
    """
