"""Unit tests for the GitHub OAuth provider."""

from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from onboard.auth import (
    AuthError,
    Credentials,
    OAuthProvider,
    authenticated_client,
    new_state,
)
from onboard.tracker import GitHubTrackerClient, NotFoundError, User


@pytest.fixture
def mock_http() -> MagicMock:
    """Create a mock HTTP client."""
    return MagicMock()


@pytest.fixture
def provider(mock_http: MagicMock) -> OAuthProvider:
    """OAuth provider with mocked token endpoint."""
    return OAuthProvider(
        Credentials("client-123", "secret-456"),
        api_url="https://api.test",
        redirect_url="https://onboard.test/auth/callback",
        http=mock_http,
    )


def _token_response(data: dict, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = data
    response.text = str(data)
    return response


@pytest.mark.unit
class TestAuthCodeURL:
    """Tests for the authorization redirect."""

    def test_contains_client_scopes_and_state(self, provider: OAuthProvider) -> None:
        url = urlparse(provider.auth_code_url("state-abc"))
        query = parse_qs(url.query)

        assert url.netloc == "github.com"
        assert query["client_id"] == ["client-123"]
        assert query["state"] == ["state-abc"]
        assert query["scope"] == ["user repo issues milestones"]
        assert query["redirect_uri"] == ["https://onboard.test/auth/callback"]

    def test_no_redirect_uri_by_default(self) -> None:
        provider = OAuthProvider(Credentials("id", "secret"))

        assert "redirect_uri" not in provider.auth_code_url("s")

    def test_states_are_unique(self) -> None:
        assert new_state() != new_state()


@pytest.mark.unit
class TestExchangeCode:
    """Tests for exchanging the authorization code."""

    def test_returns_token(self, provider: OAuthProvider, mock_http: MagicMock) -> None:
        mock_http.post.return_value = _token_response({"access_token": "gho_token"})

        assert provider.exchange_code("code-1") == "gho_token"

        _, kwargs = mock_http.post.call_args
        assert kwargs["data"]["code"] == "code-1"
        assert kwargs["data"]["client_secret"] == "secret-456"
        assert kwargs["headers"] == {"Accept": "application/json"}

    def test_error_payload(self, provider: OAuthProvider, mock_http: MagicMock) -> None:
        """GitHub reports bad codes with a 200 and an error field."""
        mock_http.post.return_value = _token_response({"error": "bad_verification_code"})

        with pytest.raises(AuthError, match="bad_verification_code"):
            provider.exchange_code("stale")

    def test_error_status(self, provider: OAuthProvider, mock_http: MagicMock) -> None:
        mock_http.post.return_value = _token_response({}, status_code=500)

        with pytest.raises(AuthError, match="500"):
            provider.exchange_code("code-1")

    def test_transport_error(self, provider: OAuthProvider, mock_http: MagicMock) -> None:
        mock_http.post.side_effect = httpx.ConnectError("refused")

        with pytest.raises(AuthError, match="refused"):
            provider.exchange_code("code-1")

    def test_close_releases_http_client(
        self, provider: OAuthProvider, mock_http: MagicMock
    ) -> None:
        provider.close()

        mock_http.close.assert_called_once()


@pytest.mark.unit
class TestUsername:
    """Tests for resolving the token's owner."""

    def test_returns_login(self, provider: OAuthProvider) -> None:
        client = MagicMock()
        client.users.get.return_value = User(login="newhire")

        with patch.object(provider, "client_for", return_value=client):
            assert provider.username("gho_token") == "newhire"

        client.users.get.assert_called_once_with("")
        client.close.assert_called_once()

    def test_lookup_failure(self, provider: OAuthProvider) -> None:
        client = MagicMock()
        client.users.get.side_effect = NotFoundError("gone", status=404)

        with (
            patch.object(provider, "client_for", return_value=client),
            pytest.raises(AuthError, match="gone"),
        ):
            provider.username("gho_token")
        client.close.assert_called_once()


@pytest.mark.unit
class TestAuthenticatedClient:
    """Tests for authenticated_client."""

    def test_builds_github_client(self) -> None:
        client = authenticated_client("gho_token", "https://ghe.test/api/v3")

        assert isinstance(client, GitHubTrackerClient)
        assert client.token == "gho_token"
        assert client.base_url == "https://ghe.test/api/v3"

    def test_provider_clients_use_api_url(self, provider: OAuthProvider) -> None:
        assert provider.client_for("tok").base_url == "https://api.test"
