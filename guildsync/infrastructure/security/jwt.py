"""JWT verification for API callers.

Tokens are issued by the platform's auth service; this service only verifies
them. create_access_token exists for operators' tooling and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from guildsync.core.config import get_settings

DEFAULT_TOKEN_TTL = timedelta(minutes=30)

ADMIN_ROLE_CLAIM = "admin"


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Encode claims (sub, role) into a signed token that expires after expires_delta."""
    settings = get_settings()
    claims = {**data, "exp": datetime.now(UTC) + (expires_delta or DEFAULT_TOKEN_TTL)}
    return cast(
        str,
        jwt.encode(claims, settings.secret_key.get_secret_value(), algorithm=settings.algorithm),
    )


def verify_token(token: str) -> dict[str, Any]:
    """Decode a bearer token and return its claims.

    exp and a non-empty sub are required; sub is returned as a string.

    Raises:
        ValueError: If the signature, expiry or claims are invalid.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    subject = claims.get("sub")
    if subject in (None, ""):
        raise ValueError("Token missing required claim: sub")
    claims["sub"] = str(subject)
    return claims


def is_admin_claims(claims: dict[str, Any]) -> bool:
    """True when the token's role claim grants admin routes."""
    return claims.get("role") == ADMIN_ROLE_CLAIM
