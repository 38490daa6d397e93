"""UserRole repository: the user-role grant ledger.

Rows are never deleted. grant() reactivates a revoked row in place, which keeps
one row per (user, role) pair and the unique constraint meaningful.
"""

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guildsync.application.dtos.role import RoleResult, UserRoleGrantResult
from guildsync.domain.entities.grant import GrantState, grant_transition, revoke_transition
from guildsync.domain.enums import GrantAction
from guildsync.domain.exceptions import DuplicateAssignmentException
from guildsync.infrastructure.persistence.models.grants import UserRoleGrant
from guildsync.infrastructure.persistence.models.role import Role
from guildsync.infrastructure.persistence.repositories.role_repo import _role_to_result
from guildsync.shared.utils.datetime import utc_now


def _grant_state(g: UserRoleGrant) -> GrantState:
    return GrantState(
        granted_at=g.granted_at,
        granted_by=g.granted_by,
        grant_reason=g.grant_reason,
        revoked_at=g.revoked_at,
        revoked_by=g.revoked_by,
        revoke_reason=g.revoke_reason,
        is_system_granted=g.is_system_granted,
    )


def _apply_state(g: UserRoleGrant, state: GrantState) -> None:
    g.granted_at = state.granted_at
    g.granted_by = state.granted_by
    g.grant_reason = state.grant_reason
    g.revoked_at = state.revoked_at
    g.revoked_by = state.revoked_by
    g.revoke_reason = state.revoke_reason
    g.is_system_granted = state.is_system_granted


def _grant_to_result(g: UserRoleGrant) -> UserRoleGrantResult:
    """Map ORM UserRoleGrant to application UserRoleGrantResult."""
    return UserRoleGrantResult(
        id=g.id,
        user_id=g.user_id,
        role_id=g.role_id,
        role_name=g.role.name,
        granted_at=g.granted_at,
        granted_by=g.granted_by,
        grant_reason=g.grant_reason,
        revoked_at=g.revoked_at,
        revoked_by=g.revoked_by,
        revoke_reason=g.revoke_reason,
        is_system_granted=g.is_system_granted,
    )


class UserRoleRepository:
    """User-role ledger only. Grant/revoke and list active roles for a user."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_row(self, user_id: str, role_id: str) -> UserRoleGrant | None:
        result = await self.db.execute(
            select(UserRoleGrant).where(
                UserRoleGrant.user_id == user_id, UserRoleGrant.role_id == role_id
            )
        )
        return result.scalar_one_or_none()

    async def get_grant(self, user_id: str, role_id: str) -> UserRoleGrantResult | None:
        row = await self._get_row(user_id, role_id)
        return _grant_to_result(row) if row else None

    async def grant(
        self,
        user_id: str,
        role_id: str,
        granted_by: str | None,
        reason: str,
    ) -> tuple[GrantAction, UserRoleGrantResult]:
        row = await self._get_row(user_id, role_id)
        transition = grant_transition(
            _grant_state(row) if row else None,
            granted_by=granted_by,
            reason=reason,
            now=utc_now(),
        )
        if transition.action == GrantAction.SKIP:
            return transition.action, _grant_to_result(row)
        if row is None:
            row = UserRoleGrant(user_id=user_id, role_id=role_id)
            _apply_state(row, transition.state)
            self.db.add(row)
        else:
            _apply_state(row, transition.state)
        try:
            await self.db.flush()
        except IntegrityError:
            raise DuplicateAssignmentException(
                "Role already assigned to user",
                assignment_type="user_role",
                details_extra={"user_id": user_id, "role_id": role_id},
            ) from None
        await self.db.refresh(row, attribute_names=["role"])
        return transition.action, _grant_to_result(row)

    async def revoke(
        self,
        user_id: str,
        role_id: str,
        revoked_by: str | None,
        reason: str,
    ) -> UserRoleGrantResult | None:
        row = await self._get_row(user_id, role_id)
        if row is None:
            return None
        state = revoke_transition(
            _grant_state(row), revoked_by=revoked_by, reason=reason, now=utc_now()
        )
        if state is None:
            return None
        _apply_state(row, state)
        await self.db.flush()
        return _grant_to_result(row)

    async def get_active_roles(self, user_id: str) -> list[RoleResult]:
        result = await self.db.execute(
            select(Role)
            .join(UserRoleGrant, UserRoleGrant.role_id == Role.id)
            .where(
                UserRoleGrant.user_id == user_id,
                UserRoleGrant.revoked_at.is_(None),
                Role.is_archived.is_(False),
            )
            .order_by(Role.sort_order, Role.name)
        )
        return [_role_to_result(r) for r in result.scalars().all()]

    async def count_active_for_role(self, role_id: str) -> int:
        total = await self.db.scalar(
            select(func.count())
            .select_from(UserRoleGrant)
            .where(UserRoleGrant.role_id == role_id, UserRoleGrant.revoked_at.is_(None))
        )
        return int(total or 0)
