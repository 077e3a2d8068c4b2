"""GitHub OAuth - authorization code exchange and authenticated clients.

Keeps the OAuth dance apart from the workflow, which only ever sees an
authenticated ``TrackerClient``.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import httpx

from onboard.logging import sanitize_for_log
from onboard.tracker.exceptions import TrackerError
from onboard.tracker.github import DEFAULT_API_URL, GitHubTrackerClient

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
DEFAULT_SCOPES = ("user", "repo", "issues", "milestones")


class AuthError(Exception):
    """OAuth exchange or identity lookup failed."""


@dataclass
class Credentials:
    """Credentials of the GitHub OAuth application."""

    client_id: str
    client_secret: str
    scopes: list[str] = field(default_factory=lambda: list(DEFAULT_SCOPES))


def new_state() -> str:
    """Generate an unguessable OAuth state string."""
    return secrets.token_urlsafe(16)


class OAuthProvider:
    """GitHub OAuth authorization code flow."""

    def __init__(
        self,
        credentials: Credentials,
        api_url: str = DEFAULT_API_URL,
        redirect_url: str | None = None,
        authorize_url: str = AUTHORIZE_URL,
        token_url: str = TOKEN_URL,
        http: httpx.Client | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            credentials: OAuth application credentials.
            api_url: GitHub REST API URL used for authenticated clients.
            redirect_url: Callback URL; GitHub uses the app's default when None.
            authorize_url: Authorization endpoint (for testing/enterprise).
            token_url: Token endpoint (for testing/enterprise).
            http: HTTP client for the token exchange.
        """
        self.credentials = credentials
        self.api_url = api_url
        self.redirect_url = redirect_url
        self.authorize_url = authorize_url
        self.token_url = token_url
        self._http = http

    @property
    def http(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(timeout=30.0)
        return self._http

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None

    def auth_code_url(self, state: str) -> str:
        """Build the URL the user is redirected to for authorization."""
        params: dict[str, str] = {
            "client_id": self.credentials.client_id,
            "scope": " ".join(self.credentials.scopes),
            "state": state,
        }
        if self.redirect_url:
            params["redirect_uri"] = self.redirect_url
        return f"{self.authorize_url}?{urlencode(params)}"

    def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token.

        Args:
            code: Code received on the OAuth callback.

        Returns:
            The access token.

        Raises:
            AuthError: If the exchange fails.
        """
        payload: dict[str, Any] = {
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
            "code": code,
        }
        if self.redirect_url:
            payload["redirect_uri"] = self.redirect_url

        try:
            response = self.http.post(
                self.token_url, data=payload, headers={"Accept": "application/json"}
            )
        except httpx.HTTPError as e:
            raise AuthError(f"OAuth exchange failed: {e}") from e

        if response.status_code != 200:
            raise AuthError(
                f"OAuth exchange failed: {response.status_code} - "
                f"{sanitize_for_log(response.text)}"
            )

        data = response.json()
        token = data.get("access_token")
        if not token:
            raise AuthError(f"OAuth exchange failed: {data.get('error', 'no access token')}")
        return str(token)

    def client_for(self, token: str) -> GitHubTrackerClient:
        """Create a tracker client authenticated with a token."""
        return authenticated_client(token, self.api_url)

    def username(self, token: str) -> str:
        """Look up the login of the token's owner.

        Raises:
            AuthError: If the lookup fails.
        """
        client = self.client_for(token)
        try:
            return client.users.get("").login
        except TrackerError as e:
            logger.error("Failed to get GitHub user: %s", e)
            raise AuthError(f"Failed to get GitHub user: {e}") from e
        finally:
            client.close()


def authenticated_client(token: str, api_url: str = DEFAULT_API_URL) -> GitHubTrackerClient:
    """Create a GitHub tracker client from a bearer credential."""
    return GitHubTrackerClient(token, base_url=api_url)
