"""
Bearer token gate and per-route role checks.
authenticate proves the token and resolves an Identity; require_roles decides whether
that identity may call a given route.
"""
import logging
from typing import Annotated

from fastapi import Depends, Header, Request

from object_gateway.config import Settings
from object_gateway.errors import AuthenticationError, AuthorizationError, TokenError
from object_gateway.models import Identity, Role
from object_gateway.tokens import verify_token

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

FORBIDDEN_MESSAGE = "Recognized but you are not allowed to perform this operation"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_bearer_token(authorization: Annotated[str | None, Header()] = None) -> str:
    """Extract the token from the Authorization header. Raises 401 at the first failed stage."""
    header = (authorization or "").strip()
    if not header:
        raise AuthenticationError("Missing Authorization header")
    if not header.startswith(BEARER_PREFIX):
        raise AuthenticationError("Authentication required")
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Authentication required")
    return token


def authenticate(
    request: Request,
    token: Annotated[str, Depends(get_bearer_token)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Identity:
    """Dependency: valid Bearer token -> Identity carrying the role claim."""
    try:
        role = verify_token(token, settings.auth_secret_key)
    except TokenError as e:
        logger.warning("token rejected for %s %s: %s", request.method, request.url.path, e)
        raise AuthenticationError("Invalid or expired token")

    logger.info("successfully authenticated role=%s", role)
    return Identity(role=role)


def require_roles(*allowed: Role):
    """Dependency factory: the authenticated role must be one of allowed."""
    allowed_values = {role.value for role in allowed}

    def _check(identity: Annotated[Identity, Depends(authenticate)]) -> Identity:
        if identity.role not in allowed_values:
            logger.info("role %r not allowed; requires one of %s", identity.role, sorted(allowed_values))
            raise AuthorizationError(FORBIDDEN_MESSAGE)
        return identity

    return Depends(_check)


# Convenience dependencies for read and write routes
RequireReader = require_roles(Role.ADMIN, Role.MEMBER)
RequireAdmin = require_roles(Role.ADMIN)
