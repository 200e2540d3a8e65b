# src/task_manager/cli/render.py

from __future__ import annotations

from datetime import datetime

from ..core.state import AppState
from ..pages.navigation import Screen
from ..tasks.task_models import Priority, Task

_PRIORITY_MARK = {
    Priority.HIGH.value: "!!!",
    Priority.MEDIUM.value: "!! ",
    Priority.LOW.value: "!  ",
}

_STEP_TITLES = {
    1: "Step 1/3 - basics: /title <text>, /priority low|medium|high",
    2: "Step 2/3 - schedule: /due YYYY-MM-DD, /note <text>",
    3: "Step 3/3 - extras: /tags a, b, /subtasks x, y, /repeat daily|weekly|monthly|none, then /add",
}


def _local_time(raw: str) -> str:
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return raw
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def render_task(index: int, task: Task) -> str:
    box = "[x]" if task.completed else "[ ]"
    mark = _PRIORITY_MARK.get(task.priority, "   ")
    title = f"~{task.title}~" if task.completed else task.title
    lines = [f"{index:>3}. {box} {mark} {title} ({task.priority})"]
    if task.due_date:
        lines.append(f"         Due: {task.due_date}")
    if task.note:
        lines.append(f"         {task.note}")
    if task.created_at:
        lines.append(f"         Created: {_local_time(task.created_at)}")
    return "\n".join(lines)


def render_task_list(tasks: list[Task]) -> str:
    if not tasks:
        return "No tasks to show."
    return "\n".join(render_task(i, t) for i, t in enumerate(tasks, start=1))


def render_wizard(state: AppState) -> str:
    wizard = state.tasks_page.wizard
    d = wizard.draft
    lines = [f"New task - {_STEP_TITLES.get(wizard.step, '')}"]

    if wizard.step == 1:
        lines.append(f"  title:    {d.title or '-'}")
        lines.append(f"  priority: {d.effective_priority.value}")
    elif wizard.step == 2:
        lines.append(f"  due:      {d.due_date or '-'}")
        lines.append(f"  note:     {d.note or '-'}")
    else:
        lines.append(f"  tags:     {', '.join(d.tag_list) or '-'}")
        lines.append(f"  subtasks: {', '.join(d.subtask_list) or '-'}")
        lines.append(f"  repeat:   {d.recurring_interval.value if d.recurring_interval else '-'}")

    nav = []
    if wizard.step > 1:
        nav.append("/back")
    if wizard.step < 3:
        nav.append("/next")
    else:
        nav.append("/add")
    lines.append("  " + "  ".join(nav))
    return "\n".join(lines)


def render_tasks_screen(state: AppState) -> str:
    page = state.tasks_page
    s = page.store.state
    header = f"== {getattr(state.settings, 'app_name', 'Task Manager')} ==  filter: {s.filter_mode.value}  sort: {s.sort_mode.value}"
    return "\n".join([header, render_wizard(state), "", render_task_list(page.visible_tasks())])


def render_login_screen(state: AppState) -> str:
    page = state.login_page
    lines = ["== Login / Sign Up ==", "  /login <email> <password>   /signup <email> <password>"]
    if page.error:
        lines.append(f"  Error: {page.error}")
    if page.notice:
        lines.append(f"  {page.notice}")
    return "\n".join(lines)


def render_screen(state: AppState) -> str:
    if state.navigator.current == Screen.LOGIN:
        return render_login_screen(state)
    return render_tasks_screen(state)
