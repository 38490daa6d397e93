"""Bearer token dependencies: current actor and admin gate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from guildsync.domain.exceptions import AuthenticationException, AuthorizationException
from guildsync.infrastructure.security.jwt import is_admin_claims, verify_token
from guildsync.shared.context import set_current_actor
from guildsync.shared.enums import ActorType

_http_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentActor:
    """Caller identity taken from the verified token."""

    id: str
    is_admin: bool = False


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> CurrentActor:
    """Verify the bearer token and bind its subject to the activity-log context."""
    if not credentials:
        raise AuthenticationException("Not authenticated")
    try:
        payload = verify_token(credentials.credentials)
    except ValueError:
        raise AuthenticationException("Invalid or expired token") from None
    actor = CurrentActor(id=payload["sub"], is_admin=is_admin_claims(payload))
    set_current_actor(actor.id, ActorType.ADMIN if actor.is_admin else ActorType.USER)
    return actor


async def require_admin(
    actor: Annotated[CurrentActor, Depends(get_current_actor)],
) -> CurrentActor:
    if not actor.is_admin:
        raise AuthorizationException()
    return actor


def require_self_or_admin(actor: CurrentActor, user_id: str) -> None:
    """Raise unless the actor is user_id or an admin."""
    if actor.id != user_id and not actor.is_admin:
        raise AuthorizationException("You can only act on your own account")
