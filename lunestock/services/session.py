"""
Login session for one visitor.

Each browser session gets its own Session object, handed to the services
that need a bearer token. `restore()` picks up a token saved by a previous run;
`logout()` forgets it, both in memory and on disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from lunestock.domains.inventory.models import User
from lunestock.infrastructure.auth.auth_client import (
    AuthenticationError,
    AuthUnavailableError,
    Credential,
)
from lunestock.utils.logger import get_logger

logger = get_logger("session")


class IdentityProvider(Protocol):
    def login(self, email: str, password: str) -> Credential: ...

    def current_user(self, credential: Credential) -> User: ...

    def logout(self, credential: Credential) -> None: ...


class Session:
    def __init__(self, auth: IdentityProvider, token_file: Path | None = None) -> None:
        self._auth = auth
        self._token_file = Path(token_file) if token_file else None
        self._credential: Credential | None = None
        self._user: User | None = None

    # --- state ---

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def access_token(self) -> str | None:
        return self._credential.access_token if self._credential else None

    def require_user(self) -> User:
        if self._user is None:
            raise AuthenticationError("Not signed in")
        return self._user

    # --- lifecycle ---

    def restore(self) -> User | None:
        """
        Try to resume a saved session. An unreadable or rejected token is
        removed and the session stays signed out. When the provider cannot
        be reached the token file is kept so a later restore can succeed.
        """
        credential = self._read_token()
        if credential is None:
            return None
        try:
            user = self._auth.current_user(credential)
        except AuthUnavailableError as e:
            logger.warning("Could not check saved session, keeping it for later: %s", e)
            return None
        except AuthenticationError as e:
            logger.info("Saved session rejected: %s", e)
            self._clear()
            return None
        self._credential, self._user = credential, user
        logger.info("Session restored for %s", user.email)
        return user

    def login(self, email: str, password: str) -> User:
        """
        Sign in and persist the token.

        Raises:
            AuthenticationError: Rejected credentials or unreachable provider.
        """
        credential = self._auth.login(email, password)
        user = self._auth.current_user(credential)
        self._credential, self._user = credential, user
        self._write_token(credential)
        logger.info("Signed in as %s", user.email)
        return user

    def logout(self) -> None:
        if self._credential is not None:
            self._auth.logout(self._credential)
        self._clear()
        logger.info("Signed out")

    # --- persistence ---

    def _read_token(self) -> Credential | None:
        if self._token_file is None or not self._token_file.is_file():
            return None
        try:
            with open(self._token_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            token = data.get("access_token") if isinstance(data, dict) else None
        except (OSError, ValueError) as e:
            logger.warning("Session file unreadable (%s); discarding it", e)
            self._clear()
            return None
        if not token:
            self._clear()
            return None
        return Credential(access_token=token, refresh_token=data.get("refresh_token"))

    def _write_token(self, credential: Credential) -> None:
        if self._token_file is None:
            return
        self._token_file.parent.mkdir(parents=True, exist_ok=True)
        payload = {"access_token": credential.access_token, "refresh_token": credential.refresh_token}
        with open(self._token_file, "w", encoding="utf-8") as f:
            json.dump(payload, f)

    def _clear(self) -> None:
        self._credential = None
        self._user = None
        if self._token_file is not None and self._token_file.exists():
            try:
                self._token_file.unlink()
            except OSError as e:
                logger.warning("Could not remove session file %s: %s", self._token_file, e)
