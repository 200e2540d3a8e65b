# src/task_manager/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import date

from ..core.state import AppState
from ..pages.navigation import Screen
from ..pages.tasks_page import MutationOutcome, SubmitOutcome
from ..tasks.task_models import FilterMode, SortMode, Task
from ..tasks.task_wizard import FIELD_STEPS
from .render import render_screen, render_task_list

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)

ALL_SCREENS = frozenset(Screen)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._screens: dict[str, frozenset[Screen]] = {}
        self._help: dict[str, str] = {}
        # Commands whose argument is free text, passed on as one untouched string.
        self._raw_text: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        screens: frozenset[Screen] = ALL_SCREENS,
        raw_text: bool = False,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._help[key] = help_text
        for k in [key, *(a.lower() for a in aliases)]:
            self._handlers[k] = handler
            self._screens[k] = screens
            if raw_text:
                self._raw_text.add(k)

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(maxsplit=1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        rest = parts[1].strip() if len(parts) > 1 else ""
        if name in self._raw_text:
            args = [rest] if rest else []
        else:
            args = rest.split()

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        screen = state.navigator.current
        if screen not in self._screens.get(name, ALL_SCREENS):
            return f"/{name} is not available on the {screen.value} screen."

        return await handler(state, args)

    def build_help(self, screen: Screen | None = None) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            if screen is not None and screen not in self._screens[name]:
                continue
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()

LOGIN_ONLY = frozenset({Screen.LOGIN})
TASKS_ONLY = frozenset({Screen.TASKS})


def _pick_task(state: AppState, args: list[str]) -> Task | str:
    """Resolve "/done 3" against the list as currently shown."""
    if not args:
        return "Usage: give the task number from /list."
    visible = state.tasks_page.visible_tasks()
    try:
        n = int(args[0])
    except ValueError:
        return f"Not a task number: {args[0]}"
    if n < 1 or n > len(visible):
        return f"No task #{n} (showing {len(visible)})."
    return visible[n - 1]


# ---- any screen ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help(state.navigator.current)


async def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    page = state.tasks_page
    s = page.store.state
    session = getattr(getattr(state.backend, "auth", None), "current_session", None)
    who = (session.user.email or session.user.id) if session is not None else "(signed out)"
    return (
        "Status:\n"
        f"  Screen: {state.navigator.current.value}\n"
        f"  User: {who}\n"
        f"  Service: {getattr(settings, 'supabase_url', None) or '-'}\n"
        f"  Tasks: {len(s.tasks)} loaded, filter={s.filter_mode.value}, sort={s.sort_mode.value}"
    )


# ---- login screen ----


async def cmd_login(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /login <email> <password>"
    ok = await state.login_page.sign_in(args[0], args[1])
    return "Signed in." if ok else f"Error: {state.login_page.error}"


async def cmd_signup(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /signup <email> <password>"
    ok = await state.login_page.sign_up(args[0], args[1])
    if not ok:
        return f"Error: {state.login_page.error}"
    return state.login_page.notice or "Signed up."


# ---- task screen ----


async def cmd_list(state: AppState, args: list[str]) -> str:
    return render_screen(state)


async def cmd_reload(state: AppState, args: list[str]) -> str:
    ok = await state.tasks_page.load_tasks()
    if not ok:
        return "Could not load tasks (see log)."
    return render_task_list(state.tasks_page.visible_tasks())


async def cmd_filter(state: AppState, args: list[str]) -> str:
    try:
        mode = FilterMode((args[0] if args else "").lower())
    except ValueError:
        return "Usage: /filter all|completed|pending"
    state.tasks_page.set_filter(mode)
    return render_task_list(state.tasks_page.visible_tasks())


async def cmd_sort(state: AppState, args: list[str]) -> str:
    try:
        mode = SortMode((args[0] if args else "").lower())
    except ValueError:
        return "Usage: /sort newest|due|priority"
    state.tasks_page.set_sort(mode)
    return render_task_list(state.tasks_page.visible_tasks())


def _field_command(field_name: str, usage: str) -> CommandHandler:
    async def handler(state: AppState, args: list[str]) -> str:
        page = state.tasks_page
        step = FIELD_STEPS[field_name]
        if page.wizard.step != step:
            return f"'{field_name}' is on step {step} (current step: {page.wizard.step})."

        value: str | None = (args[0] if args else "").strip() or None
        if field_name == "recurring_interval" and value and value.lower() == "none":
            value = None
        if field_name == "due_date" and value:
            try:
                date.fromisoformat(value)
            except ValueError:
                return "Usage: /due YYYY-MM-DD"
        try:
            page.set_field(field_name, value)
        except ValueError:
            return f"Usage: {usage}"
        return render_screen(state)

    return handler


async def cmd_next(state: AppState, args: list[str]) -> str:
    state.tasks_page.next_step()
    return render_screen(state)


async def cmd_back(state: AppState, args: list[str]) -> str:
    state.tasks_page.back_step()
    return render_screen(state)


async def cmd_add(state: AppState, args: list[str]) -> str:
    page = state.tasks_page
    if not page.wizard.is_last_step:
        return "Finish the form first: /next until step 3, then /add."

    outcome = await page.submit()
    if outcome == SubmitOutcome.CREATED:
        return render_screen(state)
    if outcome == SubmitOutcome.EMPTY_TITLE:
        return "Title is empty; go /back to step 1 and set /title."
    if outcome == SubmitOutcome.BUSY:
        return "Still saving the previous task."
    if outcome == SubmitOutcome.NO_SESSION:
        return "Not signed in."
    return "Could not add the task (see log). Try /add again."


async def cmd_done(state: AppState, args: list[str]) -> str:
    task = _pick_task(state, args)
    if isinstance(task, str):
        return task
    outcome = await state.tasks_page.toggle(task)
    if outcome == MutationOutcome.BUSY:
        return "That task is still being updated."
    return render_task_list(state.tasks_page.visible_tasks())


async def cmd_rm(state: AppState, args: list[str]) -> str:
    task = _pick_task(state, args)
    if isinstance(task, str):
        return task
    outcome = await state.tasks_page.delete(task.id)
    if outcome == MutationOutcome.BUSY:
        return "That task is still being updated."
    return render_task_list(state.tasks_page.visible_tasks())


async def cmd_logout(state: AppState, args: list[str]) -> str:
    await state.tasks_page.sign_out()
    return "Signed out."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show session and list settings.")

registry.register("login", cmd_login, help_text="Sign in: /login <email> <password>.", screens=LOGIN_ONLY)
registry.register("signup", cmd_signup, help_text="Create an account: /signup <email> <password>.", screens=LOGIN_ONLY)

registry.register("list", cmd_list, help_text="Show the form and the task list.", aliases=["ls"], screens=TASKS_ONLY)
registry.register("reload", cmd_reload, help_text="Fetch tasks from the service again.", screens=TASKS_ONLY)
registry.register("filter", cmd_filter, help_text="Filter: /filter all | completed | pending.", screens=TASKS_ONLY)
registry.register("sort", cmd_sort, help_text="Sort: /sort newest | due | priority.", screens=TASKS_ONLY)

FIELD_COMMANDS = [
    ("title", "title", "/title <text>", "Step 1: task title."),
    ("priority", "priority", "/priority low|medium|high", "Step 1: low | medium | high."),
    ("due", "due_date", "/due YYYY-MM-DD", "Step 2: due date."),
    ("note", "note", "/note <text>", "Step 2: note."),
    ("tags", "tags", "/tags a, b", "Step 3: comma separated tags."),
    ("subtasks", "subtasks", "/subtasks a, b", "Step 3: comma separated subtasks."),
    ("repeat", "recurring_interval", "/repeat daily|weekly|monthly|none", "Step 3: daily | weekly | monthly | none."),
]
for _name, _field, _usage, _help in FIELD_COMMANDS:
    registry.register(_name, _field_command(_field, _usage), help_text=_help, screens=TASKS_ONLY, raw_text=True)

registry.register("next", cmd_next, help_text="Next form step.", screens=TASKS_ONLY)
registry.register("back", cmd_back, help_text="Previous form step.", screens=TASKS_ONLY)
registry.register("add", cmd_add, help_text="Create the task (step 3).", screens=TASKS_ONLY)
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.", aliases=["toggle"], screens=TASKS_ONLY)
registry.register("rm", cmd_rm, help_text="Delete: /rm <n>.", aliases=["delete"], screens=TASKS_ONLY)
registry.register("logout", cmd_logout, help_text="Sign out.", screens=TASKS_ONLY)
