"""
Tests for AuthClient and LocalAuthClient.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from lunestock.infrastructure.auth.auth_client import (
    AuthClient,
    AuthenticationError,
    AuthUnavailableError,
    Credential,
    LocalAuthClient,
)

POST = "lunestock.infrastructure.auth.auth_client.requests.post"
GET = "lunestock.infrastructure.auth.auth_client.requests.get"


@pytest.fixture
def client() -> AuthClient:
    return AuthClient(base_url="https://store.example.com", api_key="anon-key", timeout=5)


def test_login_success(client: AuthClient) -> None:
    """Password grant returns the access token."""
    resp = MagicMock(status_code=200, json=lambda: {"access_token": "tok", "refresh_token": "ref", "expires_in": 3600})
    with patch(POST, return_value=resp) as mock_post:
        cred = client.login("ana@lune.pe", "secret")
    assert cred == Credential(access_token="tok", refresh_token="ref", expires_in=3600)
    args, kwargs = mock_post.call_args
    assert args[0] == "https://store.example.com/auth/v1/token"
    assert kwargs["params"] == {"grant_type": "password"}
    assert kwargs["json"] == {"email": "ana@lune.pe", "password": "secret"}


def test_login_rejected(client: AuthClient) -> None:
    """Any non-200 answer is reported as invalid credentials."""
    with patch(POST, return_value=MagicMock(status_code=400, json=lambda: {"error": "invalid_grant"})):
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            client.login("ana@lune.pe", "wrong")


def test_login_unreachable(client: AuthClient) -> None:
    with patch(POST, side_effect=requests.Timeout("slow")):
        with pytest.raises(AuthenticationError, match="Could not reach"):
            client.login("ana@lune.pe", "secret")


def test_login_without_token(client: AuthClient) -> None:
    with patch(POST, return_value=MagicMock(status_code=200, json=lambda: {})):
        with pytest.raises(AuthenticationError):
            client.login("ana@lune.pe", "secret")


def test_current_user(client: AuthClient) -> None:
    """The username comes from user metadata when present."""
    body = {"id": "u1", "email": "ana@lune.pe", "user_metadata": {"username": "ana"}}
    with patch(GET, return_value=MagicMock(status_code=200, json=lambda: body)) as mock_get:
        user = client.current_user(Credential(access_token="tok"))
    assert (user.id, user.email, user.username) == ("u1", "ana@lune.pe", "ana")
    assert mock_get.call_args.kwargs["headers"]["Authorization"] == "Bearer tok"


def test_current_user_expired(client: AuthClient) -> None:
    with patch(GET, return_value=MagicMock(status_code=401, json=lambda: {})):
        with pytest.raises(AuthenticationError):
            client.current_user(Credential(access_token="old"))


def test_current_user_malformed(client: AuthClient) -> None:
    """A profile without an email is not accepted."""
    with patch(GET, return_value=MagicMock(status_code=200, json=lambda: {"id": "u1"})):
        with pytest.raises(AuthenticationError):
            client.current_user(Credential(access_token="tok"))


def test_logout_is_best_effort(client: AuthClient) -> None:
    """Logout does not raise when the provider is unreachable."""
    with patch(POST, side_effect=requests.ConnectionError("down")):
        client.logout(Credential(access_token="tok"))


def test_local_auth_roundtrip() -> None:
    auth = LocalAuthClient({"ana@lune.pe": "secret"})
    with pytest.raises(AuthenticationError):
        auth.login("ana@lune.pe", "nope")
    cred = auth.login("ana@lune.pe", "secret")
    assert auth.current_user(cred).username == "ana"
    auth.logout(cred)
    with pytest.raises(AuthenticationError):
        auth.current_user(cred)


def test_current_user_unreachable(client: AuthClient) -> None:
    """A transport failure is reported apart from a rejected token."""
    with patch(GET, side_effect=requests.ConnectionError("down")):
        with pytest.raises(AuthUnavailableError):
            client.current_user(Credential(access_token="tok"))


def test_local_tokens_are_unique() -> None:
    """Signing out one login never invalidates another."""
    auth = LocalAuthClient({"ana@lune.pe": "secret"})
    a = auth.login("ana@lune.pe", "secret")
    b = auth.login("ana@lune.pe", "secret")
    auth.logout(a)
    c = auth.login("ana@lune.pe", "secret")
    assert c.access_token != b.access_token
    auth.logout(c)
    assert auth.current_user(b).email == "ana@lune.pe"
