# src/task_manager/tasks/task_view.py

"""
Derived list view: filter + sort over the in-memory task list.

Everything here is pure. visible_tasks() is memoized on its inputs, so
re-rendering an unchanged list does not re-sort it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from functools import lru_cache

from .task_models import FilterMode, SortMode, Task


def normalize_completed(tasks: Iterable[Task]) -> list[Task]:
    """Coerce completed to a strict bool (the service may send 0/1/None)."""
    out: list[Task] = []
    for t in tasks:
        if type(t.completed) is bool:
            out.append(t)
        else:
            out.append(replace(t, completed=bool(t.completed)))
    return out


def filter_tasks(tasks: Iterable[Task], mode: FilterMode) -> list[Task]:
    if mode == FilterMode.COMPLETED:
        return [t for t in tasks if t.completed]
    if mode == FilterMode.PENDING:
        return [t for t in tasks if not t.completed]
    return list(tasks)


def _due_key(task: Task) -> tuple[bool, str]:
    # Missing due dates go after every present one; ties keep list order.
    due = task.due_date or ""
    return (due == "", due)


def sort_tasks(tasks: Iterable[Task], mode: SortMode) -> list[Task]:
    if mode == SortMode.DUE:
        return sorted(tasks, key=_due_key)
    if mode == SortMode.PRIORITY:
        return sorted(tasks, key=lambda t: t.priority_rank)
    # newest: sorted() stays stable with reverse=True
    return sorted(tasks, key=lambda t: t.created_at or "", reverse=True)


@lru_cache(maxsize=16)
def _visible(tasks: tuple[Task, ...], mode: FilterMode, sort: SortMode) -> tuple[Task, ...]:
    result = normalize_completed(tasks)
    result = filter_tasks(result, mode)
    return tuple(sort_tasks(result, sort))


def visible_tasks(
    tasks: Iterable[Task],
    mode: FilterMode = FilterMode.ALL,
    sort: SortMode = SortMode.NEWEST,
) -> list[Task]:
    return list(_visible(tuple(tasks), FilterMode(mode), SortMode(sort)))
