"""
Role tokens: short-lived HS256 JWTs carrying a single role claim.
Nothing is stored server-side; a token is valid until exp.
"""
import logging
from datetime import datetime, timedelta, timezone

import jwt

from object_gateway.errors import ConfigurationError, InvalidTokenError, UnexpectedAlgorithmError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
HMAC_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})

# Token lifetime (seconds)
TOKEN_TTL = 120


def issue_token(role: str, secret: str, *, ttl: int = TOKEN_TTL, now: datetime | None = None) -> str:
    """Sign a token for role, valid for ttl seconds from now."""
    if not secret:
        raise ConfigurationError("auth secret key is not configured")

    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "role": role,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(seconds=ttl)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM, headers={"typ": "JWT"})


def verify_token(token: str, secret: str) -> str:
    """
    Verify signature, algorithm and expiry; return the role claim.
    Raises UnexpectedAlgorithmError for non-HMAC headers, InvalidTokenError otherwise.
    """
    if not secret:
        raise ConfigurationError("auth secret key is not configured")

    try:
        header = jwt.get_unverified_header(token)
    except jwt.PyJWTError as e:
        raise InvalidTokenError(f"malformed token: {e}") from e

    algorithm = header.get("alg")
    if algorithm not in HMAC_ALGORITHMS:
        raise UnexpectedAlgorithmError(algorithm)

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "iat"], "verify_exp": True},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidTokenError("token expired") from e
    except jwt.PyJWTError as e:
        raise InvalidTokenError(f"token not valid: {e}") from e

    role = claims.get("role")
    if not isinstance(role, str) or not role:
        raise InvalidTokenError("token missing role claim")
    return role
