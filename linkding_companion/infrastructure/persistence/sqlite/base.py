from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from linkding_companion.db.session import DatabaseSessionManager


class SqliteBaseRepository:
    """Base repository for SQLite implementations.

    Queries are plain synchronous peewee callables; ``_read`` and ``_write``
    hand them to the session manager, which runs them off the event loop.
    """

    def __init__(self, session_manager: DatabaseSessionManager) -> None:
        self._session = session_manager

    async def _read(self, operation: Callable[..., Any], *args: Any, operation_name: str) -> Any:
        return await self._session._safe_db_operation(
            operation, *args, operation_name=operation_name, read_only=True
        )

    async def _write(self, operation: Callable[..., Any], *args: Any, operation_name: str) -> Any:
        return await self._session._safe_db_operation(
            operation, *args, operation_name=operation_name, read_only=False
        )
