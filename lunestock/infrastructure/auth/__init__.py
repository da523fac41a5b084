from lunestock.infrastructure.auth.auth_client import (
    AuthClient,
    AuthenticationError,
    AuthUnavailableError,
    Credential,
    LocalAuthClient,
)

__all__ = ["AuthClient", "AuthenticationError", "AuthUnavailableError", "Credential", "LocalAuthClient"]
