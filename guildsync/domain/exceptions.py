"""Domain exceptions for guildsync.

Business rule violations raised inside services and repositories. Public
engine methods convert them to OperationResult failures; the HTTP layer maps
error_code to a status code in guildsync.core.exception_handlers.
"""

from typing import Any


class GuildSyncException(Exception):
    """Base exception for all guildsync errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional context (e.g. missing names, current status).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(GuildSyncException):
    """Raised when input validation fails (e.g. malformed tag name)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(GuildSyncException):
    """Raised when the bearer token is missing or invalid."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(GuildSyncException):
    """Raised when the caller is not allowed to perform an admin operation."""

    def __init__(self, message: str = "Admin privileges required") -> None:
        super().__init__(message, "PERMISSION_DENIED")


class ResourceNotFoundException(GuildSyncException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'role', 'tag').
            resource_id: The id or name that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class UserNotFoundException(GuildSyncException):
    """Raised when the target user does not exist."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            f"User not found: {user_id}", "USER_NOT_FOUND", {"user_id": user_id}
        )


class EventNotFoundException(GuildSyncException):
    """Raised when an event does not exist or is archived."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            "Event not found", "EVENT_NOT_FOUND", {"event_id": event_id}
        )


class RolesNotFoundException(GuildSyncException):
    """Raised when one or more role names cannot be resolved (nothing is applied)."""

    def __init__(self, missing_roles: list[str]) -> None:
        """Initialize with the unresolved names.

        Args:
            missing_roles: Role names with no non-archived role record.
        """
        super().__init__(
            f"Roles not found: {', '.join(missing_roles)}",
            "ROLES_NOT_FOUND",
            {"missing_roles": missing_roles},
        )


class NewbieRoleNotConfiguredException(GuildSyncException):
    """Raised when the well-known newcomer role is missing from the role store."""

    def __init__(self, role_name: str) -> None:
        super().__init__(
            f"{role_name} role not configured",
            "NEWBIE_ROLE_NOT_CONFIGURED",
            {"role_name": role_name},
        )


class RoleAlreadyExistsException(GuildSyncException):
    """Raised when creating or renaming a role to a name that is taken."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Role with name '{name}' already exists",
            "ROLE_ALREADY_EXISTS",
            {"name": name},
        )


class RoleInUseException(GuildSyncException):
    """Raised when archiving a role that still has active grants."""

    def __init__(self, role_name: str, active_grants: int) -> None:
        """Initialize with the role and its active grant count.

        Args:
            role_name: Role that cannot be archived.
            active_grants: Number of active grants referencing it.
        """
        super().__init__(
            f"Role '{role_name}' is assigned to {active_grants} user(s) and cannot be deleted",
            "ROLE_IN_USE",
            {"role_name": role_name, "active_grants": active_grants},
        )


class TagAlreadyExistsException(GuildSyncException):
    """Raised when creating or renaming a tag to a name that is taken."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f'Tag "{name}" already exists', "TAG_ALREADY_EXISTS", {"name": name}
        )


class TagInUseException(GuildSyncException):
    """Raised when archiving a tag that is still actively held."""

    def __init__(self, tag_name: str, active_grants: int) -> None:
        super().__init__(
            f"Tag '{tag_name}' is held by {active_grants} user(s) and cannot be deleted",
            "TAG_IN_USE",
            {"tag_name": tag_name, "active_grants": active_grants},
        )


class TagNotAssignableException(GuildSyncException):
    """Raised when assigning a tag that is inactive or not manually assignable."""

    def __init__(self, tag_name: str) -> None:
        super().__init__(
            f"Tag '{tag_name}' cannot be assigned",
            "TAG_NOT_ASSIGNABLE",
            {"tag_name": tag_name},
        )


class TagNotHeldException(GuildSyncException):
    """Raised when setting a primary tag the user does not actively hold."""

    def __init__(self, user_id: str, tag_name: str) -> None:
        super().__init__(
            f"User does not hold tag '{tag_name}'",
            "TAG_NOT_HELD",
            {"user_id": user_id, "tag_name": tag_name},
        )


class PrerequisitesNotFoundException(GuildSyncException):
    """Raised when an event names prerequisites that are neither roles nor tags."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Prerequisite roles not found: {', '.join(missing)}",
            "PREREQUISITES_NOT_FOUND",
            {"missing": missing},
        )


class DuplicateAssignmentException(GuildSyncException):
    """Raised when a concurrent request inserted the same grant row first."""

    def __init__(
        self,
        message: str,
        assignment_type: str,
        details_extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and assignment context.

        Args:
            message: Human-readable description.
            assignment_type: 'user_role', 'user_tag' or 'event_access'.
            details_extra: Optional extra keys (e.g. user_id, role_id).
        """
        details = dict(details_extra or {})
        details["assignment_type"] = assignment_type
        super().__init__(message, "DUPLICATE_ASSIGNMENT", details)


class InvalidStatusTransitionException(GuildSyncException):
    """Raised when an event status change is not in the transition table."""

    def __init__(self, current: str, target: str, allowed: list[str]) -> None:
        """Initialize with the rejected pair and the legal destinations.

        Args:
            current: Current status.
            target: Requested status.
            allowed: Statuses reachable from current.
        """
        allowed_text = ", ".join(allowed) if allowed else "none"
        super().__init__(
            f"Invalid status transition from '{current}' to '{target}'. "
            f"Allowed transitions: {allowed_text}",
            "INVALID_STATUS_TRANSITION",
            {"current_status": current, "target_status": target, "allowed": allowed},
        )


class EventAccessException(GuildSyncException):
    """Raised when an event access request is refused.

    The error_code is one of EVENT_NOT_ACTIVE, EVENT_TOO_EARLY,
    REMOTE_IDENTITY_MISSING, MISSING_REQUIRED_TAGS, EVENT_FULL or
    DISCORD_ACCESS_FAILED; details carry what the client needs to render it.
    """

    def __init__(
        self, error_code: str, message: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, error_code, details)


class RemoteSyncError(GuildSyncException):
    """Raised by the remote guild adapter on any failed call (HTTP, timeout, rate limit)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = dict(details or {})
        if status_code is not None:
            merged["status_code"] = status_code
        self.status_code = status_code
        super().__init__(message, "REMOTE_SYNC_FAILED", merged)


class SqlNotConfiguredException(GuildSyncException):
    """Raised when a session is requested but DATABASE_URL produced no engine."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
