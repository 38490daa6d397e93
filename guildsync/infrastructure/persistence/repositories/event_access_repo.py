"""Event access repository: voice access rows and participant records."""

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from guildsync.application.dtos.event import VoiceAccessResult
from guildsync.domain.enums import ParticipantStatus, VoiceAccessStatus
from guildsync.domain.exceptions import DuplicateAssignmentException
from guildsync.infrastructure.persistence.models.event_access import (
    EventParticipant,
    EventVoiceAccess,
)
from guildsync.shared.utils.datetime import utc_now


def _access_to_result(a: EventVoiceAccess) -> VoiceAccessResult:
    return VoiceAccessResult(
        id=a.id,
        event_id=a.event_id,
        user_id=a.user_id,
        remote_user_id=a.remote_user_id,
        status=VoiceAccessStatus(a.status),
        granted_at=a.granted_at,
        granted_by=a.granted_by,
        revoked_at=a.revoked_at,
        revoke_reason=a.revoke_reason,
    )


class EventAccessRepository:
    """One access row per (event, user); status flips between active and revoked."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_row(self, event_id: str, user_id: str) -> EventVoiceAccess | None:
        result = await self.db.execute(
            select(EventVoiceAccess).where(
                EventVoiceAccess.event_id == event_id,
                EventVoiceAccess.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_access(self, event_id: str, user_id: str) -> VoiceAccessResult | None:
        row = await self._get_row(event_id, user_id)
        return _access_to_result(row) if row else None

    async def count_active(self, event_id: str) -> int:
        total = await self.db.scalar(
            select(func.count())
            .select_from(EventVoiceAccess)
            .where(
                EventVoiceAccess.event_id == event_id,
                EventVoiceAccess.status == VoiceAccessStatus.ACTIVE.value,
            )
        )
        return int(total or 0)

    async def list_active(self, event_id: str) -> list[VoiceAccessResult]:
        result = await self.db.execute(
            select(EventVoiceAccess).where(
                EventVoiceAccess.event_id == event_id,
                EventVoiceAccess.status == VoiceAccessStatus.ACTIVE.value,
            )
        )
        return [_access_to_result(a) for a in result.scalars().all()]

    async def grant_access(
        self,
        event_id: str,
        user_id: str,
        remote_user_id: str,
        granted_by: str | None,
    ) -> VoiceAccessResult:
        row = await self._get_row(event_id, user_id)
        if row is None:
            row = EventVoiceAccess(event_id=event_id, user_id=user_id)
            self.db.add(row)
        row.remote_user_id = remote_user_id
        row.status = VoiceAccessStatus.ACTIVE.value
        row.granted_at = utc_now()
        row.granted_by = granted_by
        row.revoked_at = None
        row.revoke_reason = None
        try:
            await self.db.flush()
        except IntegrityError:
            raise DuplicateAssignmentException(
                "Event access already granted",
                assignment_type="event_access",
                details_extra={"event_id": event_id, "user_id": user_id},
            ) from None
        return _access_to_result(row)

    async def revoke_access(
        self, event_id: str, user_id: str, reason: str
    ) -> VoiceAccessResult | None:
        row = await self._get_row(event_id, user_id)
        if row is None or row.status != VoiceAccessStatus.ACTIVE.value:
            return None
        row.status = VoiceAccessStatus.REVOKED.value
        row.revoked_at = utc_now()
        row.revoke_reason = reason
        await self.db.flush()
        return _access_to_result(row)

    async def revoke_all(self, event_id: str, reason: str) -> int:
        result = await self.db.execute(
            update(EventVoiceAccess)
            .where(
                EventVoiceAccess.event_id == event_id,
                EventVoiceAccess.status == VoiceAccessStatus.ACTIVE.value,
            )
            .values(
                status=VoiceAccessStatus.REVOKED.value,
                revoked_at=utc_now(),
                revoke_reason=reason,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def upsert_participant(
        self, event_id: str, user_id: str, status: ParticipantStatus
    ) -> None:
        result = await self.db.execute(
            select(EventParticipant).where(
                EventParticipant.event_id == event_id,
                EventParticipant.user_id == user_id,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            self.db.add(EventParticipant(event_id=event_id, user_id=user_id, status=status.value))
        else:
            row.status = status.value
        await self.db.flush()
