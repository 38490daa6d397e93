"""Tagged result values returned by every public service operation.

Services raise GuildSyncException subclasses internally; the public methods
convert them here so callers branch on success/error.code instead of catching.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from guildsync.domain.exceptions import GuildSyncException

T = TypeVar("T")


@dataclass(frozen=True)
class OperationError:
    """Machine-readable failure: code, message and structured details."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Success flag plus data on success or error on failure.

    A failure may still carry data for soft outcomes such as an absent remote
    member (REMOTE_ACTOR_NOT_PRESENT) or partial cleanup stats.
    """

    success: bool
    data: T | None = None
    error: OperationError | None = None

    @classmethod
    def ok(cls, data: T) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        data: T | None = None,
    ) -> "OperationResult[T]":
        """Failure result; data may carry partial information (e.g. cleanup stats)."""
        return cls(
            success=False,
            data=data,
            error=OperationError(code=code, message=message, details=details or {}),
        )

    @classmethod
    def from_exception(cls, exc: GuildSyncException) -> "OperationResult[T]":
        """Failure result built from a domain exception's code, message and details."""
        return cls.fail(exc.error_code, exc.message, exc.details)
