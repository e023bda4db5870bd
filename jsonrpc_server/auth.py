"""Bearer token authentication for RPC endpoints."""

from typing import Annotated

from fastapi import Header, HTTPException, Request, status

from .config import Config

ANONYMOUS = "anonymous"


class AuthError(Exception):
    """Raised when a bearer token is missing or invalid."""


class AuthManager:
    """Manages bearer token authentication.

    Attributes:
        config: Server configuration with auth settings.
    """

    def __init__(self, config: Config) -> None:
        """Initialize auth manager.

        Args:
            config: Server configuration.
        """
        self._config = config

    def authenticate(self, authorization: str) -> str:
        """Resolve the user for an Authorization header value.

        Args:
            authorization: Authorization header value ("Bearer <token>").

        Returns:
            User name, or "anonymous" when authentication is disabled.

        Raises:
            AuthError: If the token is missing or invalid.
        """
        if not self._config.auth.enabled:
            return ANONYMOUS

        if not authorization:
            raise AuthError("Authorization header required")

        if not authorization.startswith("Bearer "):
            raise AuthError("Invalid authorization scheme, expected Bearer")

        token = authorization[7:]  # Remove "Bearer " prefix
        user = self._config.auth.validate_token(token)

        if not user:
            raise AuthError("Invalid or expired token")

        return user

    def verify_token(self, authorization: str) -> str:
        """Verify bearer token for an HTTP request.

        Raises:
            HTTPException: If token is missing or invalid.
        """
        try:
            return self.authenticate(authorization)
        except AuthError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(e),
                headers={"WWW-Authenticate": "Bearer"},
            ) from e


async def verify_bearer_token(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """FastAPI dependency for bearer token verification.

    Args:
        request: Incoming request (used to reach the app's auth manager).
        authorization: Authorization header from request.

    Returns:
        Authenticated user name.

    Raises:
        HTTPException: If authentication fails.
    """
    manager: AuthManager = request.app.state.auth_manager
    return manager.verify_token(authorization or "")
