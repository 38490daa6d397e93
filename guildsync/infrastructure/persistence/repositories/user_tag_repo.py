"""UserTag repository: the user-tag grant ledger and primary tag flag."""

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guildsync.application.dtos.tag import UserTagResult
from guildsync.domain.entities.grant import GrantState, grant_transition, revoke_transition
from guildsync.domain.enums import GrantAction
from guildsync.domain.exceptions import DuplicateAssignmentException
from guildsync.infrastructure.persistence.models.grants import UserTagGrant
from guildsync.infrastructure.persistence.models.tag import Tag
from guildsync.infrastructure.persistence.repositories.tag_repo import _tag_to_result
from guildsync.shared.utils.datetime import utc_now


def _grant_state(g: UserTagGrant) -> GrantState:
    return GrantState(
        granted_at=g.granted_at,
        granted_by=g.granted_by,
        grant_reason=g.grant_reason,
        revoked_at=g.revoked_at,
        revoked_by=g.revoked_by,
        revoke_reason=g.revoke_reason,
    )


def _apply_state(g: UserTagGrant, state: GrantState) -> None:
    g.granted_at = state.granted_at
    g.granted_by = state.granted_by
    g.grant_reason = state.grant_reason
    g.revoked_at = state.revoked_at
    g.revoked_by = state.revoked_by
    g.revoke_reason = state.revoke_reason


def _user_tag_to_result(g: UserTagGrant) -> UserTagResult:
    """Map ORM UserTagGrant (with its tag) to application UserTagResult."""
    return UserTagResult(
        id=g.id,
        user_id=g.user_id,
        tag=_tag_to_result(g.tag),
        granted_at=g.granted_at,
        granted_by=g.granted_by,
        grant_reason=g.grant_reason,
        revoked_at=g.revoked_at,
        revoked_by=g.revoked_by,
        revoke_reason=g.revoke_reason,
        is_primary=g.is_primary,
        notes=g.notes,
    )


class UserTagRepository:
    """User-tag ledger. At most one active primary row per user."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_row(self, user_id: str, tag_id: str) -> UserTagGrant | None:
        result = await self.db.execute(
            select(UserTagGrant).where(
                UserTagGrant.user_id == user_id, UserTagGrant.tag_id == tag_id
            )
        )
        return result.scalar_one_or_none()

    async def get_grant(self, user_id: str, tag_id: str) -> UserTagResult | None:
        row = await self._get_row(user_id, tag_id)
        return _user_tag_to_result(row) if row else None

    async def grant(
        self,
        user_id: str,
        tag_id: str,
        granted_by: str | None,
        reason: str,
        notes: str | None = None,
    ) -> tuple[GrantAction, UserTagResult]:
        row = await self._get_row(user_id, tag_id)
        transition = grant_transition(
            _grant_state(row) if row else None,
            granted_by=granted_by,
            reason=reason,
            now=utc_now(),
        )
        if transition.action == GrantAction.SKIP:
            return transition.action, _user_tag_to_result(row)
        if row is None:
            row = UserTagGrant(user_id=user_id, tag_id=tag_id, is_primary=False)
            self.db.add(row)
        _apply_state(row, transition.state)
        row.notes = notes
        try:
            await self.db.flush()
        except IntegrityError:
            raise DuplicateAssignmentException(
                "Tag already assigned to user",
                assignment_type="user_tag",
                details_extra={"user_id": user_id, "tag_id": tag_id},
            ) from None
        await self.db.refresh(row, attribute_names=["tag"])
        return transition.action, _user_tag_to_result(row)

    async def revoke(
        self,
        user_id: str,
        tag_id: str,
        revoked_by: str | None,
        reason: str,
    ) -> UserTagResult | None:
        row = await self._get_row(user_id, tag_id)
        if row is None:
            return None
        state = revoke_transition(
            _grant_state(row), revoked_by=revoked_by, reason=reason, now=utc_now()
        )
        if state is None:
            return None
        _apply_state(row, state)
        row.is_primary = False
        await self.db.flush()
        return _user_tag_to_result(row)

    async def clear_primary(self, user_id: str) -> int:
        result = await self.db.execute(
            update(UserTagGrant)
            .where(UserTagGrant.user_id == user_id, UserTagGrant.is_primary.is_(True))
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def set_primary(self, user_id: str, tag_id: str) -> bool:
        row = await self._get_row(user_id, tag_id)
        if row is None or row.revoked_at is not None:
            return False
        row.is_primary = True
        await self.db.flush()
        return True

    async def get_active_tags(self, user_id: str) -> list[UserTagResult]:
        result = await self.db.execute(
            select(UserTagGrant)
            .join(Tag, UserTagGrant.tag_id == Tag.id)
            .where(
                UserTagGrant.user_id == user_id,
                UserTagGrant.revoked_at.is_(None),
                Tag.is_archived.is_(False),
            )
            .order_by(UserTagGrant.is_primary.desc(), Tag.name)
        )
        return [_user_tag_to_result(g) for g in result.scalars().unique().all()]

    async def count_active_for_tag(self, tag_id: str) -> int:
        total = await self.db.scalar(
            select(func.count())
            .select_from(UserTagGrant)
            .where(UserTagGrant.tag_id == tag_id, UserTagGrant.revoked_at.is_(None))
        )
        return int(total or 0)

    async def list_active_user_ids(self, tag_id: str) -> list[str]:
        result = await self.db.execute(
            select(UserTagGrant.user_id).where(
                UserTagGrant.tag_id == tag_id, UserTagGrant.revoked_at.is_(None)
            )
        )
        return list(result.scalars().all())
