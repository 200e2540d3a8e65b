# src/task_manager/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, raw: str | None) -> Priority | None:
        """Case-insensitive lookup ("high" -> HIGH). None if unknown."""
        if not raw:
            return None
        needle = raw.strip().lower()
        for p in cls:
            if p.value.lower() == needle:
                return p
        return None


DEFAULT_PRIORITY = Priority.MEDIUM

# Anything unknown ranks with Low.
PRIORITY_RANK: dict[str, int] = {
    Priority.HIGH.value: 1,
    Priority.MEDIUM.value: 2,
    Priority.LOW.value: 3,
}
UNKNOWN_PRIORITY_RANK = 3


class FilterMode(StrEnum):
    ALL = "all"
    COMPLETED = "completed"
    PENDING = "pending"


class SortMode(StrEnum):
    NEWEST = "newest"
    DUE = "due"
    PRIORITY = "priority"


class RecurringInterval(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw)
    return s if s != "" else None


@dataclass(frozen=True, slots=True)
class Task:
    """
    One row of the tasks table as returned by the service.

    priority is kept verbatim (unknown values survive a round trip);
    use PRIORITY_RANK for ordering.
    """

    id: str
    title: str
    priority: str = DEFAULT_PRIORITY.value
    completed: bool = False
    due_date: str | None = None
    note: str | None = None
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Task:
        if "id" not in row or row["id"] is None:
            raise ValueError("task row has no id")
        return cls(
            id=str(row["id"]),
            title=str(row.get("title") or ""),
            priority=str(row.get("priority") or DEFAULT_PRIORITY.value),
            completed=bool(row.get("completed")),
            due_date=_opt_str(row.get("due_date")),
            note=_opt_str(row.get("note")),
            created_at=_opt_str(row.get("created_at")),
        )

    @property
    def priority_rank(self) -> int:
        return PRIORITY_RANK.get(self.priority, UNKNOWN_PRIORITY_RANK)
