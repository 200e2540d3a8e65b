# src/task_manager/pages/navigation.py

from __future__ import annotations

import logging
from enum import StrEnum

logger = logging.getLogger(__name__)


class Screen(StrEnum):
    LOGIN = "login"
    TASKS = "tasks"


class Navigator:
    """
    Client-side navigation between the two screens.

    push() only records the target; the connector mounts/unmounts the
    screen controllers when it sees current change.
    """

    def __init__(self, initial: Screen = Screen.TASKS) -> None:
        self.current = initial

    def push(self, screen: Screen) -> None:
        screen = Screen(screen)
        if screen == self.current:
            return
        logger.info("Navigate %s -> %s", self.current.value, screen.value)
        self.current = screen
