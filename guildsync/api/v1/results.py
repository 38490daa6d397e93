"""Turn OperationResult values into endpoint return values or HTTP errors."""

from collections.abc import Iterable
from typing import TypeVar

from guildsync.application.dtos.result import OperationResult
from guildsync.domain.exceptions import GuildSyncException

T = TypeVar("T")


def unwrap(result: OperationResult[T], *, soft_codes: Iterable[str] = ()) -> T:
    """Return result.data, or raise so the exception handlers pick the status.

    Failures whose code is in soft_codes and that carry data are returned as data.
    """
    if result.success:
        return result.data
    error = result.error
    if error.code in soft_codes and result.data is not None:
        return result.data
    raise GuildSyncException(error.message, error.code, error.details)
