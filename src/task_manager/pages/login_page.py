# src/task_manager/pages/login_page.py

from __future__ import annotations

import logging

from ..core.ports import AuthApi
from .navigation import Navigator, Screen

logger = logging.getLogger(__name__)

CONFIRM_EMAIL_NOTICE = "Check your email for confirmation link!"


class LoginPage:
    """
    Login / sign-up screen. The only screen that shows service errors to the user.
    """

    def __init__(self, auth: AuthApi, navigator: Navigator) -> None:
        self._auth = auth
        self.navigator = navigator
        self.error = ""
        self.notice = ""

    async def mount(self) -> None:
        return None

    def unmount(self) -> None:
        self.notice = ""

    async def sign_in(self, email: str, password: str) -> bool:
        self.notice = ""
        res = await self._auth.sign_in_with_password(email, password)
        if res.error is not None:
            self.error = res.error.message
            return False

        self.error = ""
        self.navigator.push(Screen.TASKS)
        return True

    async def sign_up(self, email: str, password: str) -> bool:
        self.notice = ""
        res = await self._auth.sign_up(email, password)
        if res.error is not None:
            self.error = res.error.message
            return False

        self.error = ""
        if res.data is not None and res.data.session is not None:
            self.navigator.push(Screen.TASKS)
        else:
            self.notice = CONFIRM_EMAIL_NOTICE
        return True
