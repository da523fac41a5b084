"""
Identity provider client: password login, token check and logout.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

import requests

from lunestock.domains.inventory.errors import RecordDecodeError
from lunestock.domains.inventory.models import User, parse_row
from lunestock.utils.config import request_timeout, store_api_key, store_url
from lunestock.utils.logger import get_logger

logger = get_logger("auth")

AUTH_PATH = "/auth/v1"


class AuthenticationError(RuntimeError):
    """Invalid credentials, or a token the provider no longer accepts."""


class AuthUnavailableError(AuthenticationError):
    """The identity provider could not be reached; the token was not checked."""


@dataclass(frozen=True)
class Credential:
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None


def _user_from_payload(data: Any) -> User:
    if not isinstance(data, dict):
        raise AuthenticationError("Identity provider returned no user")
    meta = data.get("user_metadata") or {}
    row = {
        "id": data.get("id"),
        "email": data.get("email"),
        "username": data.get("username") or meta.get("username") or "",
    }
    try:
        return parse_row(User, "auth.users", row)
    except RecordDecodeError as e:
        raise AuthenticationError(str(e)) from e


class AuthClient:
    """Bearer-token auth against `{base_url}/auth/v1`."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._base_url = (base_url or store_url()).rstrip("/")
        self._api_key = api_key or store_api_key()
        self._timeout = timeout if timeout is not None else request_timeout()

    def _headers(self, token: str | None = None) -> dict[str, str]:
        return {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token or self._api_key}",
            "Content-Type": "application/json",
        }

    def login(self, email: str, password: str) -> Credential:
        """
        Exchange email and password for a credential.

        Raises:
            AuthenticationError: Wrong credentials, or the provider is unreachable.
        """
        try:
            r = requests.post(
                f"{self._base_url}{AUTH_PATH}/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=self._headers(),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("Login request failed: %s", e)
            raise AuthUnavailableError("Could not reach the identity provider") from e
        if r.status_code != 200:
            logger.info("Login rejected for %s (HTTP %s)", email, r.status_code)
            raise AuthenticationError("Invalid credentials")
        try:
            data = r.json()
        except ValueError as e:
            raise AuthenticationError("Identity provider returned invalid JSON") from e
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError("Identity provider returned no token")
        return Credential(
            access_token=token,
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
        )

    def current_user(self, credential: Credential) -> User:
        """Return the profile for `credential`, or raise AuthenticationError."""
        try:
            r = requests.get(
                f"{self._base_url}{AUTH_PATH}/user",
                headers=self._headers(credential.access_token),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise AuthUnavailableError("Could not reach the identity provider") from e
        if r.status_code != 200:
            raise AuthenticationError(f"Session is no longer valid (HTTP {r.status_code})")
        try:
            data = r.json()
        except ValueError as e:
            raise AuthenticationError("Identity provider returned invalid JSON") from e
        return _user_from_payload(data)

    def logout(self, credential: Credential) -> None:
        """Revoke the token. Failures are logged; local logout proceeds anyway."""
        try:
            r = requests.post(
                f"{self._base_url}{AUTH_PATH}/logout",
                headers=self._headers(credential.access_token),
                timeout=self._timeout,
            )
            if r.status_code >= 400:
                logger.warning("Logout returned HTTP %s", r.status_code)
        except requests.RequestException as e:
            logger.warning("Logout request failed: %s", e)


class LocalAuthClient:
    """
    Auth for the offline backend: a fixed set of email/password pairs.
    Tokens are opaque strings valid for the lifetime of the process.
    """

    def __init__(self, users: dict[str, str] | None = None) -> None:
        self._passwords = dict(users or {"admin@lunestock.local": "admin"})
        self._tokens: dict[str, str] = {}

    def login(self, email: str, password: str) -> Credential:
        if self._passwords.get(email) != password:
            raise AuthenticationError("Invalid credentials")
        token = f"local-{uuid.uuid4().hex}"
        self._tokens[token] = email
        return Credential(access_token=token)

    def current_user(self, credential: Credential) -> User:
        email = self._tokens.get(credential.access_token)
        if email is None:
            raise AuthenticationError("Session is no longer valid")
        return User(id=email, email=email, username=email.split("@", 1)[0])

    def logout(self, credential: Credential) -> None:
        self._tokens.pop(credential.access_token, None)
