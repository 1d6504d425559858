"""SQLite repository implementations."""

from linkding_companion.infrastructure.persistence.sqlite.repositories.event_log_repository import (
    SqliteEventLogRepository,
)

__all__ = ["SqliteEventLogRepository"]
