from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

from domain.errors import StorageUnavailableError


log = structlog.get_logger(__name__)

T = TypeVar("T")


def storage_errors(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Re-raise driver/ORM failures as ``StorageUnavailableError``."""

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await fn(*args, **kwargs)
        except SQLAlchemyError as exc:
            log.warning("storage_error", op=fn.__qualname__, error=str(exc))
            raise StorageUnavailableError(str(exc)) from exc

    return wrapper
