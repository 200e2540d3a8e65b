# tests/test_task_store.py

from __future__ import annotations

import pytest

from task_manager.tasks.task_models import FilterMode, SortMode, Task
from task_manager.tasks.task_store import (
    FilterChanged,
    SortChanged,
    TaskAdded,
    TaskListState,
    TaskRemoved,
    TaskReplaced,
    TasksCleared,
    TasksLoaded,
    TaskStore,
    reduce_tasks,
)


def _state(*ids: str) -> TaskListState:
    return TaskListState(tasks=tuple(Task(id=i, title=f"t{i}") for i in ids))


def test_added_task_is_prepended() -> None:
    s = reduce_tasks(_state("1", "2"), TaskAdded(Task(id="9", title="new")))
    assert [t.id for t in s.tasks] == ["9", "1", "2"]


def test_replaced_swaps_only_matching_id() -> None:
    s = reduce_tasks(_state("1", "2", "3"), TaskReplaced(Task(id="2", title="changed", completed=True)))
    assert [t.id for t in s.tasks] == ["1", "2", "3"]
    assert s.tasks[1].title == "changed"
    assert s.tasks[1].completed is True
    assert s.tasks[0].title == "t1"


def test_replaced_unknown_id_is_noop() -> None:
    before = _state("1")
    assert reduce_tasks(before, TaskReplaced(Task(id="x", title=""))) is before


def test_removed_drops_exactly_one_and_keeps_order() -> None:
    s = reduce_tasks(_state("1", "2", "3", "4"), TaskRemoved("3"))
    assert [t.id for t in s.tasks] == ["1", "2", "4"]


def test_removed_unknown_id_is_noop() -> None:
    before = _state("1", "2")
    assert reduce_tasks(before, TaskRemoved("nope")) is before


def test_loaded_cleared_and_view_modes() -> None:
    s = reduce_tasks(TaskListState(), TasksLoaded((Task(id="1", title=""),)))
    assert len(s.tasks) == 1

    s = reduce_tasks(s, FilterChanged(FilterMode.PENDING))
    s = reduce_tasks(s, SortChanged(SortMode.DUE))
    assert (s.filter_mode, s.sort_mode) == (FilterMode.PENDING, SortMode.DUE)

    s = reduce_tasks(s, TasksCleared())
    assert s.tasks == ()
    # view settings survive a clear
    assert s.filter_mode == FilterMode.PENDING


def test_unknown_action_raises() -> None:
    with pytest.raises(TypeError):
        reduce_tasks(TaskListState(), object())  # type: ignore[arg-type]


def test_store_visible_uses_current_modes() -> None:
    store = TaskStore()
    store.dispatch(
        TasksLoaded(
            (
                Task(id="1", title="", priority="Low"),
                Task(id="2", title="", priority="High", completed=True),
            )
        )
    )
    store.dispatch(SortChanged(SortMode.PRIORITY))
    assert [t.id for t in store.visible()] == ["2", "1"]

    store.dispatch(FilterChanged(FilterMode.PENDING))
    assert [t.id for t in store.visible()] == ["1"]
    assert store.get("2") is not None
    assert store.get("missing") is None
