"""Tests for domain exceptions: error codes, details and to_dict()."""

from guildsync.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    DuplicateAssignmentException,
    EventAccessException,
    GuildSyncException,
    RemoteSyncError,
    ResourceNotFoundException,
    RoleInUseException,
    RolesNotFoundException,
    ValidationException,
)


def test_base_exception_defaults_code_to_class_name() -> None:
    exc = GuildSyncException("boom")
    assert exc.error_code == "GuildSyncException"
    assert exc.details == {}
    assert str(exc) == "boom"


def test_to_dict_shape() -> None:
    exc = ResourceNotFoundException("role", "r1")
    assert exc.to_dict() == {
        "error": "RESOURCE_NOT_FOUND",
        "message": "role not found: r1",
        "details": {"resource_type": "role", "resource_id": "r1"},
    }


def test_validation_exception_field_is_optional() -> None:
    assert ValidationException("bad").details == {}
    assert ValidationException("bad", field="name").details == {"field": "name"}


def test_roles_not_found_lists_missing_names() -> None:
    exc = RolesNotFoundException(["MENTOR", "EXPERT"])
    assert exc.error_code == "ROLES_NOT_FOUND"
    assert exc.details["missing_roles"] == ["MENTOR", "EXPERT"]
    assert "MENTOR, EXPERT" in exc.message


def test_role_in_use_carries_grant_count() -> None:
    exc = RoleInUseException("MENTOR", 3)
    assert exc.details == {"role_name": "MENTOR", "active_grants": 3}


def test_duplicate_assignment_merges_type_into_details() -> None:
    exc = DuplicateAssignmentException(
        "already granted", "user_role", {"user_id": "u1", "role_id": "r1"}
    )
    assert exc.error_code == "DUPLICATE_ASSIGNMENT"
    assert exc.details == {"user_id": "u1", "role_id": "r1", "assignment_type": "user_role"}


def test_event_access_exception_uses_given_code() -> None:
    exc = EventAccessException("EVENT_FULL", "Event is full", {"max_participants": 5})
    assert exc.error_code == "EVENT_FULL"
    assert exc.details == {"max_participants": 5}


def test_remote_sync_error_records_status_code() -> None:
    exc = RemoteSyncError("Discord API error 403", status_code=403, details={"path": "/x"})
    assert exc.error_code == "REMOTE_SYNC_FAILED"
    assert exc.status_code == 403
    assert exc.details == {"path": "/x", "status_code": 403}
    assert RemoteSyncError("down").details == {}


def test_auth_exceptions_codes() -> None:
    assert AuthenticationException().error_code == "AUTHENTICATION_ERROR"
    assert AuthorizationException().error_code == "PERMISSION_DENIED"
