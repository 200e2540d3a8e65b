# src/task_manager/tasks/task_store.py

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Union

from .task_models import FilterMode, SortMode, Task
from .task_view import visible_tasks

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TaskListState:
    tasks: tuple[Task, ...] = ()
    filter_mode: FilterMode = FilterMode.ALL
    sort_mode: SortMode = SortMode.NEWEST


# ---- actions ----


@dataclass(frozen=True, slots=True)
class TasksLoaded:
    tasks: tuple[Task, ...]


@dataclass(frozen=True, slots=True)
class TaskAdded:
    task: Task


@dataclass(frozen=True, slots=True)
class TaskReplaced:
    task: Task


@dataclass(frozen=True, slots=True)
class TaskRemoved:
    task_id: str


@dataclass(frozen=True, slots=True)
class TasksCleared:
    pass


@dataclass(frozen=True, slots=True)
class FilterChanged:
    mode: FilterMode


@dataclass(frozen=True, slots=True)
class SortChanged:
    mode: SortMode


TaskAction = Union[
    TasksLoaded, TaskAdded, TaskReplaced, TaskRemoved, TasksCleared, FilterChanged, SortChanged
]


def reduce_tasks(state: TaskListState, action: TaskAction) -> TaskListState:
    """
    Pure transition function. Returns the same object when nothing changes.
    """
    if isinstance(action, TasksLoaded):
        return replace(state, tasks=tuple(action.tasks))

    if isinstance(action, TaskAdded):
        return replace(state, tasks=(action.task, *state.tasks))

    if isinstance(action, TaskReplaced):
        if not any(t.id == action.task.id for t in state.tasks):
            return state
        return replace(
            state,
            tasks=tuple(action.task if t.id == action.task.id else t for t in state.tasks),
        )

    if isinstance(action, TaskRemoved):
        kept = tuple(t for t in state.tasks if t.id != action.task_id)
        if len(kept) == len(state.tasks):
            return state
        return replace(state, tasks=kept)

    if isinstance(action, TasksCleared):
        return replace(state, tasks=())

    if isinstance(action, FilterChanged):
        return replace(state, filter_mode=FilterMode(action.mode))

    if isinstance(action, SortChanged):
        return replace(state, sort_mode=SortMode(action.mode))

    raise TypeError(f"Unknown task action: {action!r}")


class TaskStore:
    """
    Local cache of the signed-in user's tasks.

    Holds one TaskListState and moves it only through reduce_tasks().
    """

    def __init__(self, state: TaskListState | None = None) -> None:
        self._state = state or TaskListState()

    @property
    def state(self) -> TaskListState:
        return self._state

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._state.tasks

    def dispatch(self, action: TaskAction) -> TaskListState:
        self._state = reduce_tasks(self._state, action)
        logger.debug("TaskStore %s -> %d tasks", type(action).__name__, len(self._state.tasks))
        return self._state

    def get(self, task_id: str) -> Task | None:
        for t in self._state.tasks:
            if t.id == task_id:
                return t
        return None

    def visible(self) -> list[Task]:
        s = self._state
        return visible_tasks(s.tasks, s.filter_mode, s.sort_mode)
