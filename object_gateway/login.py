"""
Login endpoint (GET /login?role=...). Issues a role token; no credentials are checked.
"""
import logging
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends

from object_gateway.auth import get_settings
from object_gateway.config import Settings
from object_gateway.envelope import send_response
from object_gateway.errors import ConfigurationError
from object_gateway.models import Role
from object_gateway.tokens import issue_token

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/login")
def login(
    settings: Annotated[Settings, Depends(get_settings)],
    role: str | None = None,
):
    """201 with {"token": ...} for admin/member; 400 for any other role."""
    parsed = Role.parse(role)
    if parsed is None:
        return send_response(400, "invalid role option")

    try:
        token = issue_token(parsed.value, settings.auth_secret_key)
    except ConfigurationError as e:
        logger.critical("cannot issue tokens: %s", e)
        return send_response(500, "could not authenticate. Try again later")
    except jwt.PyJWTError as e:
        logger.error("token signing failed: %s", e)
        return send_response(500, "could not authenticate. Try again later")

    return send_response(201, "Successfully authenticated", {"token": token})
