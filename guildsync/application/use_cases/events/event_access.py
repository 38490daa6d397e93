"""Event voice access: eligibility, grant with compensation, revoke, cleanup.

A grant changes remote state first (the per-user channel overwrite) and then
writes the local access row. If the local write fails the overwrite is
deleted again so the guild never keeps access the ledger does not know about.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from guildsync.application.dtos.event import (
    AccessStatus,
    CleanupResult,
    EligibilityResult,
    EventAccessGrant,
    EventAccessRevoke,
    EventResult,
    MissingTag,
)
from guildsync.application.dtos.result import OperationResult
from guildsync.application.dtos.user import UserResult
from guildsync.application.interfaces.repositories import IUnitOfWork
from guildsync.application.interfaces.services import IRemoteGuildAdapter
from guildsync.application.operations import UnitOfWorkFactory, record_activity, run_operation
from guildsync.core.constants import (
    DISCONNECT_REVOKE_REASONS,
    EVENT_ACCESS_ALLOW,
    EVENT_ACCESS_DENY,
)
from guildsync.domain.entities.event import ALLOWED_STATUS_TRANSITIONS
from guildsync.domain.enums import EventStatus, ParticipantStatus
from guildsync.domain.exceptions import (
    DuplicateAssignmentException,
    EventAccessException,
    EventNotFoundException,
    RemoteSyncError,
    UserNotFoundException,
)
from guildsync.shared.enums import ActivityAction, EntityType
from guildsync.shared.telemetry.logging import get_logger
from guildsync.shared.utils.datetime import minutes_until, utc_now

logger = get_logger(__name__)


class EventAccessService:
    """Grant and revoke per-user voice access to event channels."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        adapter: IRemoteGuildAdapter,
        *,
        grace_minutes: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow_factory = uow_factory
        self._adapter = adapter
        self._grace = timedelta(minutes=grace_minutes)
        self._clock = clock

    async def request_event_access(
        self, event_id: str, user_id: str
    ) -> OperationResult[EventAccessGrant]:
        """Grant the user voice access if the event is open and they are eligible."""
        return await run_operation(
            self._request_access(event_id, user_id), name="request_event_access"
        )

    async def revoke_event_access(
        self,
        event_id: str,
        user_id: str,
        reason: str = "manual",
        revoked_by: str | None = None,
    ) -> OperationResult[EventAccessRevoke]:
        return await run_operation(
            self._revoke_access(event_id, user_id, reason, revoked_by),
            name="revoke_event_access",
            failure_code="REVOKE_FAILED",
        )

    async def cleanup_event(
        self, event_id: str, reason: str = "event_ended"
    ) -> OperationResult[CleanupResult]:
        """Revoke all access, drop the event role and complete the event if allowed."""
        return await run_operation(
            self._cleanup(event_id, reason), name="cleanup_event", failure_code="CLEANUP_FAILED"
        )

    async def admin_grant_access(
        self, event_id: str, user_id: str, admin_user_id: str
    ) -> OperationResult[EventAccessGrant]:
        """Grant access bypassing status, timing, eligibility and capacity checks."""
        return await run_operation(
            self._admin_grant(event_id, user_id, admin_user_id),
            name="admin_grant_access",
            failure_code="ADMIN_GRANT_FAILED",
        )

    async def check_event_eligibility(
        self, event_id: str, user_id: str
    ) -> OperationResult[EligibilityResult]:
        return await run_operation(
            self._check_eligibility(event_id, user_id), name="check_event_eligibility"
        )

    async def get_user_access_status(
        self, event_id: str, user_id: str
    ) -> OperationResult[AccessStatus]:
        return await run_operation(
            self._access_status(event_id, user_id), name="get_user_access_status"
        )

    # -- lookups -----------------------------------------------------------

    @staticmethod
    async def _require_event(
        uow: IUnitOfWork, event_id: str, *, include_archived: bool = False
    ) -> EventResult:
        event = await uow.events.get_by_id(event_id, include_archived=include_archived)
        if event is None:
            raise EventNotFoundException(event_id)
        return event

    @staticmethod
    async def _require_user(uow: IUnitOfWork, user_id: str) -> UserResult:
        user = await uow.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    @staticmethod
    def _require_remote_identity(user: UserResult) -> str:
        if not user.remote_user_id:
            raise EventAccessException(
                "REMOTE_IDENTITY_MISSING",
                "Link your Discord account before joining voice events",
                {"user_id": user.id},
            )
        return user.remote_user_id

    async def _eligibility(
        self, uow: IUnitOfWork, event: EventResult, user_id: str
    ) -> EligibilityResult:
        """Compare the event prerequisites with the user's active tags and roles."""
        tags = await uow.user_tags.get_active_tags(user_id)
        roles = await uow.user_roles.get_active_roles(user_id)
        tag_names = [g.tag.name for g in tags]
        held = set(tag_names) | {r.name for r in roles}
        missing_names = [n for n in dict.fromkeys(event.prerequisite_roles) if n not in held]

        missing: list[MissingTag] = []
        if missing_names:
            known_tags = {t.name: t for t in await uow.tags.get_by_names(missing_names)}
            known_roles = {r.name: r for r in await uow.roles.get_by_names(missing_names)}
            for name in missing_names:
                if tag := known_tags.get(name):
                    missing.append(
                        MissingTag(tag.id, name, tag.display_name, tag.color, tag.icon)
                    )
                elif role := known_roles.get(name):
                    missing.append(MissingTag(role.id, name, name, role.color, None))
                else:
                    missing.append(MissingTag(None, name, name, None, None))
        return EligibilityResult(
            is_eligible=not missing,
            has_all_required_tags=not missing,
            missing_tags=missing,
            user_tags=sorted(tag_names),
        )

    # -- grant -------------------------------------------------------------

    async def _request_access(
        self, event_id: str, user_id: str
    ) -> EventAccessGrant:
        async with self._uow_factory() as uow:
            event = await self._require_event(uow, event_id)
            if event.status != EventStatus.ACTIVE:
                raise EventAccessException(
                    "EVENT_NOT_ACTIVE",
                    "Event is not active",
                    {"current_status": event.status.value},
                )
            now = self._clock()
            opens_at = event.scheduled_at - self._grace
            if now < opens_at:
                raise EventAccessException(
                    "EVENT_TOO_EARLY",
                    "Event access is not open yet",
                    {"minutes_until_access": minutes_until(opens_at, now)},
                )
            existing = await uow.event_access.get_access(event_id, user_id)
            if existing is not None and existing.is_active:
                return EventAccessGrant(
                    has_access=True,
                    voice_channel_id=event.remote_channel_id,
                    event_title=event.title,
                    already_had_access=True,
                )
            user = await self._require_user(uow, user_id)
            remote_user_id = self._require_remote_identity(user)
            eligibility = await self._eligibility(uow, event, user_id)
            if not eligibility.is_eligible:
                raise EventAccessException(
                    "MISSING_REQUIRED_TAGS",
                    "You do not have the tags required for this event",
                    {"missing_tags": [asdict(m) for m in eligibility.missing_tags]},
                )
            current = await uow.event_access.count_active(event_id)
            if event.capacity is not None and current >= event.capacity:
                raise EventAccessException(
                    "EVENT_FULL",
                    "Event is full",
                    {"max_participants": event.capacity, "current_count": current},
                )
        return await self._grant(event, user_id, remote_user_id, granted_by=user_id)

    async def _admin_grant(
        self, event_id: str, user_id: str, admin_user_id: str
    ) -> EventAccessGrant:
        async with self._uow_factory() as uow:
            event = await self._require_event(uow, event_id)
            existing = await uow.event_access.get_access(event_id, user_id)
            if existing is not None and existing.is_active:
                return EventAccessGrant(
                    has_access=True,
                    voice_channel_id=event.remote_channel_id,
                    event_title=event.title,
                    already_had_access=True,
                )
            user = await self._require_user(uow, user_id)
            remote_user_id = self._require_remote_identity(user)
        return await self._grant(
            event, user_id, remote_user_id, granted_by=admin_user_id, enforce_capacity=False
        )

    async def _grant(
        self,
        event: EventResult,
        user_id: str,
        remote_user_id: str,
        *,
        granted_by: str,
        enforce_capacity: bool = True,
    ) -> EventAccessGrant:
        """Remote overwrite, then local rows; undo the remote side if the local write fails."""
        if not event.remote_channel_id:
            raise EventAccessException(
                "DISCORD_ACCESS_FAILED",
                "Event has no voice channel configured",
                {"event_id": event.id},
            )
        try:
            await self._adapter.create_channel_permission_overwrite(
                event.remote_channel_id,
                remote_user_id,
                list(EVENT_ACCESS_ALLOW),
                list(EVENT_ACCESS_DENY),
                reason=f"Event access: {event.title}",
            )
        except RemoteSyncError as exc:
            logger.error(
                "Failed to grant voice access for event %s to user %s (%s): %s",
                event.id,
                user_id,
                remote_user_id,
                exc.message,
            )
            raise EventAccessException(
                "DISCORD_ACCESS_FAILED",
                "Failed to grant voice channel access",
                {"error": exc.message},
            ) from exc

        warnings: list[str] = []
        role_added = False
        if event.event_role_id:
            try:
                await self._adapter.add_member_to_role(remote_user_id, event.event_role_id)
                role_added = True
            except RemoteSyncError as exc:
                logger.warning(
                    "Failed to add user %s to event role %s: %s",
                    user_id,
                    event.event_role_id,
                    exc.message,
                )
                warnings.append(f"Failed to add event role: {exc.message}")

        full_details: dict[str, int] | None = None
        try:
            async with self._uow_factory() as uow:
                locked = await uow.events.lock(event.id)
                if locked is None:
                    raise EventNotFoundException(event.id)
                current = await uow.event_access.count_active(event.id)
                if enforce_capacity and locked.capacity is not None and current >= locked.capacity:
                    full_details = {"max_participants": locked.capacity, "current_count": current}
                else:
                    await uow.event_access.grant_access(
                        event.id, user_id, remote_user_id, granted_by
                    )
                    await uow.event_access.upsert_participant(
                        event.id, user_id, ParticipantStatus.GRANTED
                    )
                    await uow.activity.record(
                        ActivityAction.EVENT_ACCESS_GRANTED,
                        EntityType.EVENT,
                        event.id,
                        {"user_id": user_id, "remote_user_id": remote_user_id},
                        actor_id=granted_by,
                    )
                    await uow.commit()
        except DuplicateAssignmentException:
            # A concurrent request for the same user won; the overwrite is theirs too.
            logger.info("Concurrent access grant for event %s user %s", event.id, user_id)
            return EventAccessGrant(
                has_access=True,
                voice_channel_id=event.remote_channel_id,
                event_title=event.title,
                already_had_access=True,
                sync_warnings=warnings,
            )
        except (SQLAlchemyError, EventNotFoundException) as exc:
            logger.error(
                "Local access write failed for event %s user %s, compensating: %s",
                event.id,
                user_id,
                exc,
            )
            await self._compensate(event, user_id, remote_user_id, role_added, "database_error")
            if isinstance(exc, EventNotFoundException):
                raise
            raise EventAccessException(
                "DATABASE_ERROR", "Failed to record event access", {"event_id": event.id}
            ) from exc

        if full_details is not None:
            await self._compensate(event, user_id, remote_user_id, role_added, "event_full")
            raise EventAccessException("EVENT_FULL", "Event is full", full_details)

        logger.info("Voice access granted: event=%s user=%s", event.id, user_id)
        return EventAccessGrant(
            has_access=True,
            voice_channel_id=event.remote_channel_id,
            event_title=event.title,
            sync_warnings=warnings,
        )

    async def _compensate(
        self,
        event: EventResult,
        user_id: str,
        remote_user_id: str,
        role_added: bool,
        cause: str,
    ) -> None:
        """Remove the remote grant that has no local row behind it."""
        details: dict[str, object] = {"user_id": user_id, "cause": cause}
        try:
            await self._adapter.delete_channel_permission_overwrite(
                event.remote_channel_id, remote_user_id, reason="Event access rolled back"
            )
        except RemoteSyncError as exc:
            logger.error(
                "Compensation failed: overwrite for user %s on channel %s remains: %s",
                remote_user_id,
                event.remote_channel_id,
                exc.message,
            )
            details["overwrite_error"] = exc.message
        if role_added:
            try:
                await self._adapter.remove_member_from_role(remote_user_id, event.event_role_id)
            except RemoteSyncError as exc:
                logger.error(
                    "Compensation failed: user %s still holds event role %s: %s",
                    remote_user_id,
                    event.event_role_id,
                    exc.message,
                )
                details["role_error"] = exc.message
        await record_activity(
            self._uow_factory,
            [(ActivityAction.EVENT_ACCESS_COMPENSATED, EntityType.EVENT, event.id, details)],
        )

    # -- revoke / cleanup --------------------------------------------------

    async def _revoke_access(
        self, event_id: str, user_id: str, reason: str, revoked_by: str | None
    ) -> EventAccessRevoke:
        async with self._uow_factory() as uow:
            event = await self._require_event(uow, event_id, include_archived=True)
            access = await uow.event_access.get_access(event_id, user_id)
        if access is None or not access.is_active:
            return EventAccessRevoke(has_access=False, revoked=False)

        remote_user_id = access.remote_user_id
        warnings: list[str] = []
        if event.remote_channel_id:
            try:
                await self._adapter.delete_channel_permission_overwrite(
                    event.remote_channel_id, remote_user_id, reason=f"Access revoked: {reason}"
                )
            except RemoteSyncError as exc:
                logger.warning(
                    "Failed to delete overwrite for user %s on channel %s: %s",
                    remote_user_id,
                    event.remote_channel_id,
                    exc.message,
                )
                warnings.append(f"Failed to remove channel access: {exc.message}")
        if event.event_role_id:
            try:
                await self._adapter.remove_member_from_role(remote_user_id, event.event_role_id)
            except RemoteSyncError as exc:
                logger.warning(
                    "Failed to remove event role %s from user %s: %s",
                    event.event_role_id,
                    remote_user_id,
                    exc.message,
                )
                warnings.append(f"Failed to remove event role: {exc.message}")

        disconnected = False
        if reason in DISCONNECT_REVOKE_REASONS and event.remote_channel_id:
            try:
                member = await self._adapter.get_member(remote_user_id)
                if member is not None and member.voice_channel_id == event.remote_channel_id:
                    await self._adapter.disconnect_member_from_voice(
                        remote_user_id, f"Event access revoked: {reason}"
                    )
                    disconnected = True
            except RemoteSyncError as exc:
                logger.warning("Failed to disconnect user %s: %s", remote_user_id, exc.message)
                warnings.append(f"Failed to disconnect from voice: {exc.message}")

        async with self._uow_factory() as uow:
            revoked = await uow.event_access.revoke_access(event_id, user_id, reason)
            if revoked is not None:
                await uow.event_access.upsert_participant(
                    event_id, user_id, ParticipantStatus.REVOKED
                )
                await uow.activity.record(
                    ActivityAction.EVENT_ACCESS_REVOKED,
                    EntityType.EVENT,
                    event_id,
                    {"user_id": user_id, "reason": reason, "disconnected": disconnected},
                    actor_id=revoked_by,
                )
            await uow.commit()
        return EventAccessRevoke(
            has_access=False,
            revoked=revoked is not None,
            disconnected=disconnected,
            sync_warnings=warnings,
        )

    async def _cleanup(self, event_id: str, reason: str) -> CleanupResult:
        async with self._uow_factory() as uow:
            event = await self._require_event(uow, event_id, include_archived=True)
            active = await uow.event_access.list_active(event_id)

        users_revoked = 0
        errors = 0
        for access in active:
            outcome = await self.revoke_event_access(event_id, access.user_id, reason)
            if not outcome.success:
                errors += 1
            elif outcome.data.revoked:
                users_revoked += 1

        role_deleted = False
        if event.event_role_id:
            try:
                await self._adapter.delete_temporary_event_role(event.event_role_id)
                role_deleted = True
            except RemoteSyncError as exc:
                logger.warning(
                    "Failed to delete event role %s for event %s: %s",
                    event.event_role_id,
                    event_id,
                    exc.message,
                )
                errors += 1

        async with self._uow_factory() as uow:
            if role_deleted:
                await uow.events.update_event(event_id, {"event_role_id": None})
            users_revoked += await uow.event_access.revoke_all(event_id, reason)
            current = await self._require_event(uow, event_id, include_archived=True)
            status = current.status
            if EventStatus.COMPLETED in ALLOWED_STATUS_TRANSITIONS[status]:
                await uow.events.set_status(event_id, EventStatus.COMPLETED)
                status = EventStatus.COMPLETED
            await uow.activity.record(
                ActivityAction.EVENT_CLEANED_UP,
                EntityType.EVENT,
                event_id,
                {
                    "reason": reason,
                    "users_revoked": users_revoked,
                    "discord_role_deleted": role_deleted,
                    "errors": errors,
                },
            )
            await uow.commit()
        logger.info(
            "Event %s cleaned up: revoked=%d role_deleted=%s errors=%d",
            event_id,
            users_revoked,
            role_deleted,
            errors,
        )
        return CleanupResult(
            users_revoked=users_revoked,
            discord_role_deleted=role_deleted,
            errors=errors,
            event_status=status,
        )

    # -- queries -----------------------------------------------------------

    async def _check_eligibility(self, event_id: str, user_id: str) -> EligibilityResult:
        async with self._uow_factory() as uow:
            event = await self._require_event(uow, event_id)
            await self._require_user(uow, user_id)
            return await self._eligibility(uow, event, user_id)

    async def _access_status(self, event_id: str, user_id: str) -> AccessStatus:
        async with self._uow_factory() as uow:
            event = await self._require_event(uow, event_id)
            await self._require_user(uow, user_id)
            access = await uow.event_access.get_access(event_id, user_id)
            eligibility = await self._eligibility(uow, event, user_id)
        return AccessStatus(
            has_access=access is not None and access.is_active,
            access_details=access,
            eligibility=eligibility,
        )
