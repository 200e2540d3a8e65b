# src/task_manager/pages/session_guard.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..backend.auth import AuthEvent
from ..backend.session import Session
from ..core.ports import AuthApi, SubscriptionHandle
from .navigation import Navigator, Screen

logger = logging.getLogger(__name__)


class SessionGuard:
    """
    Gate for screens that need a signed-in user.

    mount():
    - no session -> navigate to login, return None
    - session    -> return it (caller loads its data)
    and in both cases keep one session-change listener until unmount().
    """

    def __init__(
        self,
        auth: AuthApi,
        navigator: Navigator,
        *,
        on_signed_out: Callable[[], None] | None = None,
    ) -> None:
        self._auth = auth
        self._navigator = navigator
        self._on_signed_out = on_signed_out
        self._subscription: SubscriptionHandle | None = None

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def mount(self) -> Session | None:
        if self._subscription is None:
            self._subscription = self._auth.on_auth_state_change(self._handle_change)

        res = await self._auth.get_session()
        if res.error is not None:
            logger.error("Error reading session: %s", res.error.message)

        session = res.data if res.error is None else None
        if session is None:
            self._navigator.push(Screen.LOGIN)
            return None
        return session

    def unmount(self) -> None:
        sub, self._subscription = self._subscription, None
        if sub is not None:
            sub.unsubscribe()

    def _handle_change(self, event: AuthEvent, session: Session | None) -> None:
        if session is not None:
            return
        logger.info("Session ended (%s); returning to login", event)
        if self._on_signed_out is not None:
            self._on_signed_out()
        self._navigator.push(Screen.LOGIN)
