from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TaskOutcome(StrEnum):
    COMPLETED = "completed"  # event appended
    NO_OP = "no_op"  # ran, nothing to change
    SKIPPED = "skipped"  # a guard tripped before any work


@dataclass
class SweepResult:
    """Counters for one walk over the bookmark listing."""

    scanned: int = 0
    submitted: int = 0
    skipped_seen: int = 0
    skipped_archived: int = 0
    total_count: int | None = None
    duration_seconds: float = 0.0
    limit_reached: bool = False

    def to_dict(self) -> dict[str, int | float | bool | None]:
        return {
            "scanned": self.scanned,
            "submitted": self.submitted,
            "skipped_seen": self.skipped_seen,
            "skipped_archived": self.skipped_archived,
            "total_count": self.total_count,
            "duration_seconds": round(self.duration_seconds, 3),
            "limit_reached": self.limit_reached,
        }
