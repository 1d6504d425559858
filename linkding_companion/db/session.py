"""Database session management.

``DatabaseSessionManager`` owns the SQLite connection, creates the schema
and runs repository operations in a worker thread with a timeout so the
event loop never blocks on disk I/O.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import peewee
from playhouse.sqlite_ext import SqliteExtDatabase

from linkding_companion.db.models import ALL_MODELS, database_proxy

DB_OPERATION_TIMEOUT = 30.0
DB_MAX_RETRIES = 3


class RowSqliteDatabase(SqliteExtDatabase):
    """SQLite database subclass that configures the row factory for dict-like access."""

    def _connect(self) -> sqlite3.Connection:
        conn = super()._connect()
        conn.row_factory = sqlite3.Row
        return conn


@dataclass
class DatabaseSessionManager:
    """Peewee-backed database session manager.

    Attributes:
        path: Path to the SQLite database file, or ":memory:" for in-memory
        operation_timeout: Default timeout for database operations in seconds
        max_retries: Maximum retries when SQLite reports the database as locked
    """

    path: str
    operation_timeout: float = field(default=DB_OPERATION_TIMEOUT)
    max_retries: int = field(default=DB_MAX_RETRIES)
    _logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))
    _database: peewee.SqliteDatabase = field(init=False)
    _write_lock: asyncio.Lock = field(init=False)

    def __post_init__(self) -> None:
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        self._database = RowSqliteDatabase(
            self.path,
            pragmas={
                "journal_mode": "wal",
                "synchronous": "normal",
            },
            check_same_thread=False,
        )
        database_proxy.initialize(self._database)
        # Single writer; WAL lets readers proceed concurrently.
        self._write_lock = asyncio.Lock()

    @property
    def database(self) -> peewee.SqliteDatabase:
        """Access the underlying Peewee database instance."""
        return self._database

    def connection_context(self) -> Any:
        """Return a connection context manager."""
        return self._database.connection_context()

    def migrate(self) -> None:
        """Create tables. Safe to call on every start."""
        with self._database.connection_context(), self._database.bind_ctx(ALL_MODELS):
            self._database.create_tables(ALL_MODELS, safe=True)
        self._logger.info("db_migrated", extra={"path": self._mask_path(self.path)})

    def close(self) -> None:
        if not self._database.is_closed():
            self._database.close()

    async def _safe_db_operation(
        self,
        operation: Any,
        *args: Any,
        timeout: float | None = None,
        operation_name: str = "database_operation",
        read_only: bool = False,
        **kwargs: Any,
    ) -> Any:
        """Execute a database operation in a worker thread with a timeout.

        Args:
            operation: The database operation to execute
            *args: Positional arguments for the operation
            timeout: Timeout in seconds (default: self.operation_timeout)
            operation_name: Name for logging purposes
            read_only: Skip the write lock
            **kwargs: Keyword arguments for the operation

        Raises:
            TimeoutError: If operation times out
            peewee.OperationalError: If database is locked or busy after retries
        """
        if timeout is None:
            timeout = self.operation_timeout

        retries = 0
        while True:
            try:

                async def _run_with_lock() -> Any:
                    def _op_wrapper() -> Any:
                        with self._database.connection_context():
                            return operation(*args, **kwargs)

                    if read_only:
                        return await asyncio.to_thread(_op_wrapper)

                    async with self._write_lock:
                        return await asyncio.to_thread(_op_wrapper)

                return await asyncio.wait_for(_run_with_lock(), timeout=timeout)

            except TimeoutError:
                self._logger.exception(
                    "db_operation_timeout",
                    extra={"operation": operation_name, "timeout": timeout, "retries": retries},
                )
                raise

            except peewee.OperationalError as e:
                error_msg = str(e).lower()
                if ("locked" in error_msg or "busy" in error_msg) and retries < self.max_retries:
                    retries += 1
                    wait_time = 0.1 * (2**retries)
                    self._logger.warning(
                        "db_locked_retrying",
                        extra={
                            "operation": operation_name,
                            "retry": retries,
                            "max_retries": self.max_retries,
                            "wait_time": wait_time,
                            "error": str(e),
                        },
                    )
                    await asyncio.sleep(wait_time)
                    continue

                self._logger.exception(
                    "db_operational_error",
                    extra={"operation": operation_name, "retries": retries, "error": str(e)},
                )
                raise

    @staticmethod
    def _mask_path(path: str) -> str:
        """Mask a path for logging (show only parent/filename)."""
        try:
            p = Path(path)
            if not p.name:
                return str(p)
            parent = p.parent.name
            if parent:
                return f".../{parent}/{p.name}"
            return p.name
        except (OSError, ValueError, AttributeError):
            return "..."
