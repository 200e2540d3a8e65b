# src/task_manager/tasks/task_wizard.py

"""
Three-step task creation form.

Step 1: title, priority
Step 2: due_date, note
Step 3: tags, subtasks, recurring_interval (submit happens here)

Back/next only move the step; they never touch the draft.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Union

from .task_models import DEFAULT_PRIORITY, Priority, RecurringInterval

FIRST_STEP = 1
LAST_STEP = 3

FIELD_STEPS: dict[str, int] = {
    "title": 1,
    "priority": 1,
    "due_date": 2,
    "note": 2,
    "tags": 3,
    "subtasks": 3,
    "recurring_interval": 3,
}


def split_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


@dataclass(frozen=True, slots=True)
class FormDraft:
    title: str = ""
    priority: Priority | None = None
    due_date: str | None = None
    note: str | None = None
    tags: str | None = None
    subtasks: str | None = None
    recurring_interval: RecurringInterval | None = None

    @property
    def effective_priority(self) -> Priority:
        return self.priority or DEFAULT_PRIORITY

    @property
    def tag_list(self) -> list[str]:
        return split_csv(self.tags)

    @property
    def subtask_list(self) -> list[str]:
        return split_csv(self.subtasks)

    def has_title(self) -> bool:
        return bool(self.title and self.title.strip())

    def to_insert_row(self, user_id: str) -> dict[str, Any]:
        """
        Row sent to the service.

        tags, subtasks and recurring_interval stay client-side: the tasks
        table has no columns for them.
        """
        return {
            "user_id": user_id,
            "title": self.title,
            "due_date": self.due_date or None,
            "note": self.note or None,
            "priority": self.effective_priority.value,
        }


@dataclass(frozen=True, slots=True)
class WizardState:
    step: int = FIRST_STEP
    draft: FormDraft = field(default_factory=FormDraft)


# ---- actions ----


@dataclass(frozen=True, slots=True)
class NextStep:
    pass


@dataclass(frozen=True, slots=True)
class PrevStep:
    pass


@dataclass(frozen=True, slots=True)
class FieldChanged:
    name: str
    value: Any


@dataclass(frozen=True, slots=True)
class FormReset:
    pass


WizardAction = Union[NextStep, PrevStep, FieldChanged, FormReset]

_DRAFT_FIELDS = {f.name for f in fields(FormDraft)}


def _coerce(name: str, value: Any) -> Any:
    if value is None:
        return "" if name == "title" else None
    if name == "priority":
        if isinstance(value, Priority):
            return value
        p = Priority.parse(str(value))
        if p is None:
            raise ValueError(f"Unknown priority: {value!r}")
        return p
    if name == "recurring_interval":
        s = str(value).strip().lower()
        return RecurringInterval(s) if s else None
    s = str(value)
    if name == "title":
        return s
    return s if s.strip() else None


def reduce_wizard(state: WizardState, action: WizardAction) -> WizardState:
    if isinstance(action, NextStep):
        if state.step < LAST_STEP:
            return replace(state, step=state.step + 1)
        return state

    if isinstance(action, PrevStep):
        if state.step > FIRST_STEP:
            return replace(state, step=state.step - 1)
        return state

    if isinstance(action, FieldChanged):
        if action.name not in _DRAFT_FIELDS:
            raise ValueError(f"Unknown form field: {action.name!r}")
        value = _coerce(action.name, action.value)
        return replace(state, draft=replace(state.draft, **{action.name: value}))

    if isinstance(action, FormReset):
        return WizardState()

    raise TypeError(f"Unknown wizard action: {action!r}")


class TaskWizard:
    """Mutable holder around WizardState, mirroring TaskStore."""

    def __init__(self) -> None:
        self._state = WizardState()

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def step(self) -> int:
        return self._state.step

    @property
    def draft(self) -> FormDraft:
        return self._state.draft

    @property
    def is_last_step(self) -> bool:
        return self._state.step == LAST_STEP

    def dispatch(self, action: WizardAction) -> WizardState:
        self._state = reduce_wizard(self._state, action)
        return self._state

    def next(self) -> int:
        return self.dispatch(NextStep()).step

    def back(self) -> int:
        return self.dispatch(PrevStep()).step

    def set_field(self, name: str, value: Any) -> FormDraft:
        return self.dispatch(FieldChanged(name, value)).draft

    def reset(self) -> None:
        self.dispatch(FormReset())
