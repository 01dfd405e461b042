"""Store access helpers shared by views and the query builder.

Two concerns live here:

- ``store_operation`` bounds a unit of store work with the configured
  query timeout and translates transient driver failures into
  :class:`StoreUnavailableError`.
- ``upsert_statement`` builds a dialect-native ``INSERT .. ON CONFLICT
  DO UPDATE`` keyed on the primary key.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from content_service.core.exceptions import StoreUnavailableError
from content_service.core.settings import get_db_settings
from content_service.infra.metrics.tracking import track_store_unavailable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql.dml import Insert

    from content_service.core.database.base import Base

logger = logging.getLogger(__name__)


@asynccontextmanager
async def store_operation(operation: str, *, timeout: float | None = None) -> AsyncIterator[None]:
    """Bound a block of store calls and normalize transient failures.

    Args:
        operation: Short name used in logs and metrics (e.g. "post_aggregates.find_all").
        timeout: Seconds before the block is cancelled. Defaults to DB_QUERY_TIMEOUT.

    Raises:
        StoreUnavailableError: On timeout, connection loss or pool exhaustion.

    Example:
        async with store_operation("post_aggregates.refresh"):
            await session.execute(stmt)
    """
    limit = timeout if timeout is not None else get_db_settings().query_timeout
    try:
        async with asyncio.timeout(limit):
            yield
    except TimeoutError as exc:
        _report(operation, "timeout", exc)
        raise StoreUnavailableError(
            f"Store operation '{operation}' timed out after {limit}s",
            operation=operation,
        ) from exc
    except (OperationalError, InterfaceError, PoolTimeoutError) as exc:
        _report(operation, type(exc).__name__, exc)
        raise StoreUnavailableError(operation=operation) from exc
    except DBAPIError as exc:
        if not exc.connection_invalidated:
            raise
        _report(operation, "connection_invalidated", exc)
        raise StoreUnavailableError(operation=operation) from exc


def _report(operation: str, reason: str, exc: BaseException) -> None:
    track_store_unavailable(operation)
    logger.warning(
        "Store unavailable",
        extra={"operation": operation, "reason": reason, "error": str(exc)},
    )


def upsert_statement(
    session: AsyncSession,
    model: type[Base],
    values: dict[str, Any],
    *,
    key: str = "id",
) -> Insert:
    """Build an upsert for ``model`` keyed on ``key``.

    Every column in ``values`` other than the key is overwritten on
    conflict, so the statement is a whole-document replace.

    Raises:
        NotImplementedError: For dialects without ON CONFLICT support.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        msg = f"Upsert is not supported for dialect '{dialect}'"
        raise NotImplementedError(msg)

    stmt = insert(model).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=[key],
        set_={name: stmt.excluded[name] for name in values if name != key},
    )


__all__ = ["store_operation", "upsert_statement"]
