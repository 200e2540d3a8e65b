# src/task_manager/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..pages.login_page import LoginPage
from ..pages.navigation import Navigator, Screen
from ..pages.tasks_page import TasksPage


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    navigator: Navigator
    login_page: LoginPage
    tasks_page: TasksPage

    # Remote service client (BackendClient in production, fakes in tests).
    backend: Any = None

    # Screen whose controller is currently mounted (None before first mount).
    mounted: Screen | None = None

    def page_for(self, screen: Screen) -> LoginPage | TasksPage:
        return self.login_page if screen == Screen.LOGIN else self.tasks_page
