# src/task_manager/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds the remote service client and wires it into the screens,
- mounts/unmounts screen controllers when navigation changes.
"""

from __future__ import annotations

import logging

from ..backend.client import BackendClient, create_backend_client
from ..config import get_settings
from ..core.ports import AuthApi, TaskTable
from ..core.state import AppState
from ..pages.login_page import LoginPage
from ..pages.navigation import Navigator, Screen
from ..pages.tasks_page import TasksPage

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def build_state(settings, *, auth: AuthApi, table: TaskTable, backend=None) -> AppState:
    """Wire screens around any AuthApi/TaskTable pair (real client or fakes)."""
    # Start on the task screen; its guard sends anonymous users to login.
    navigator = Navigator(initial=Screen.TASKS)
    return AppState(
        settings=settings,
        navigator=navigator,
        login_page=LoginPage(auth, navigator),
        tasks_page=TasksPage(auth, table, navigator),
        backend=backend,
    )


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    Raises ConfigError when the service URL/key are missing.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    backend: BackendClient = create_backend_client(settings)
    return build_state(settings, auth=backend.auth, table=backend.tasks, backend=backend)


async def sync_screen(state: AppState) -> bool:
    """
    Mount the navigator's current screen (unmounting the previous one).

    Mounting can navigate again (guard redirect), so loop until stable.
    Returns True if the mounted screen changed.
    """
    changed = False
    # Two screens: more than a few hops means the pages are bouncing.
    for _ in range(4):
        target = state.navigator.current
        if state.mounted == target:
            return changed

        if state.mounted is not None:
            state.page_for(state.mounted).unmount()
        state.mounted = target
        changed = True
        logger.debug("Mounting screen %s", target.value)
        await state.page_for(target).mount()

    logger.warning("Navigation did not settle (current=%s)", state.navigator.current.value)
    return changed


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        if state.mounted is not None:
            state.page_for(state.mounted).unmount()
            state.mounted = None
    except Exception:
        logger.exception("Failed to unmount screen.")

    backend = state.backend
    try:
        if backend is not None and hasattr(backend, "aclose"):
            await backend.aclose()
    except Exception:
        logger.debug("Backend close failed.", exc_info=True)
