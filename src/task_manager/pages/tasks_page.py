# src/task_manager/pages/tasks_page.py

"""
Task screen controller.

Owns the local task cache (TaskStore), the creation wizard and the session
guard. Every remote call's error is logged and swallowed here; callers get
an outcome enum back instead of an exception.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from ..core.ports import AuthApi, TaskTable
from ..tasks.task_models import FilterMode, SortMode, Task
from ..tasks.task_store import (
    FilterChanged,
    SortChanged,
    TaskAdded,
    TaskRemoved,
    TaskReplaced,
    TasksCleared,
    TasksLoaded,
    TaskStore,
)
from ..tasks.task_wizard import TaskWizard
from .navigation import Navigator
from .session_guard import SessionGuard

logger = logging.getLogger(__name__)


class SubmitOutcome(StrEnum):
    CREATED = "created"
    EMPTY_TITLE = "empty_title"
    NO_SESSION = "no_session"
    BUSY = "busy"
    FAILED = "failed"


class MutationOutcome(StrEnum):
    APPLIED = "applied"
    # Another toggle/delete on the same task has not come back yet.
    BUSY = "busy"
    FAILED = "failed"


def _rows_to_tasks(rows: list[dict[str, Any]]) -> list[Task]:
    out: list[Task] = []
    for row in rows:
        try:
            out.append(Task.from_row(row))
        except (TypeError, ValueError):
            logger.warning("Skipping malformed task row: %r", row)
    return out


class TasksPage:
    def __init__(self, auth: AuthApi, table: TaskTable, navigator: Navigator) -> None:
        self._auth = auth
        self._table = table
        self.navigator = navigator

        self.store = TaskStore()
        self.wizard = TaskWizard()
        self.guard = SessionGuard(auth, navigator, on_signed_out=self._discard_local_state)

        self.loaded = False
        self._in_flight: set[str] = set()
        self._submitting = False

    # ---- lifecycle ----

    async def mount(self) -> bool:
        """Returns True when a session was found (tasks were requested)."""
        session = await self.guard.mount()
        if session is None:
            return False
        await self.load_tasks()
        return True

    def unmount(self) -> None:
        self.guard.unmount()

    def _discard_local_state(self) -> None:
        self.store.dispatch(TasksCleared())
        self.wizard.reset()
        self.loaded = False

    # ---- loading ----

    async def load_tasks(self) -> bool:
        res = await self._table.select_all(order_by="created_at", ascending=False)
        if res.error is not None:
            logger.error("Error fetching tasks: %s", res.error.message)
            return False

        tasks = _rows_to_tasks(res.data or [])
        self.store.dispatch(TasksLoaded(tuple(tasks)))
        self.loaded = True
        logger.info("Loaded %d tasks", len(tasks))
        return True

    # ---- wizard ----

    def next_step(self) -> int:
        return self.wizard.next()

    def back_step(self) -> int:
        return self.wizard.back()

    def set_field(self, name: str, value: Any) -> None:
        self.wizard.set_field(name, value)

    async def submit(self) -> SubmitOutcome:
        draft = self.wizard.draft
        if not draft.has_title():
            logger.debug("Submit ignored: empty title")
            return SubmitOutcome.EMPTY_TITLE

        if self._submitting:
            return SubmitOutcome.BUSY

        self._submitting = True
        try:
            sres = await self._auth.get_session()
            session = sres.data if sres.error is None else None
            if session is None:
                logger.debug("Submit ignored: no active session")
                return SubmitOutcome.NO_SESSION

            res = await self._table.insert_one(draft.to_insert_row(session.user.id))
            if res.error is not None:
                logger.error("Error adding task: %s", res.error.message)
                return SubmitOutcome.FAILED

            if res.data:
                try:
                    self.store.dispatch(TaskAdded(Task.from_row(res.data)))
                except (TypeError, ValueError):
                    logger.warning("Service returned a malformed task: %r", res.data)

            if draft.tag_list or draft.subtask_list or draft.recurring_interval:
                logger.debug(
                    "Not persisted: tags=%s subtasks=%s recurring=%s",
                    draft.tag_list,
                    draft.subtask_list,
                    draft.recurring_interval,
                )
            self.wizard.reset()
            return SubmitOutcome.CREATED
        finally:
            self._submitting = False

    # ---- row mutations ----

    async def toggle(self, task: Task) -> MutationOutcome:
        if task.id in self._in_flight:
            return MutationOutcome.BUSY

        self._in_flight.add(task.id)
        try:
            res = await self._table.update_one(task.id, {"completed": not bool(task.completed)})
            if res.error is not None:
                logger.error("Error toggling task: %s", res.error.message)
                return MutationOutcome.FAILED

            if res.data:
                try:
                    self.store.dispatch(TaskReplaced(Task.from_row(res.data)))
                except (TypeError, ValueError):
                    logger.warning("Service returned a malformed task: %r", res.data)
                    return MutationOutcome.FAILED
            return MutationOutcome.APPLIED
        finally:
            self._in_flight.discard(task.id)

    async def delete(self, task_id: str) -> MutationOutcome:
        if task_id in self._in_flight:
            return MutationOutcome.BUSY

        self._in_flight.add(task_id)
        try:
            res = await self._table.delete_one(task_id)
            if res.error is not None:
                logger.error("Error deleting task: %s", res.error.message)
                return MutationOutcome.FAILED

            self.store.dispatch(TaskRemoved(task_id))
            return MutationOutcome.APPLIED
        finally:
            self._in_flight.discard(task_id)

    # ---- view ----

    def set_filter(self, mode: FilterMode | str) -> None:
        self.store.dispatch(FilterChanged(FilterMode(mode)))

    def set_sort(self, mode: SortMode | str) -> None:
        self.store.dispatch(SortChanged(SortMode(mode)))

    def visible_tasks(self) -> list[Task]:
        return self.store.visible()

    async def sign_out(self) -> None:
        res = await self._auth.sign_out()
        if res.error is not None:
            logger.error("Error signing out: %s", res.error.message)
