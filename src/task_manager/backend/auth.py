# src/task_manager/backend/auth.py

from __future__ import annotations

"""
Auth half of the remote service client (GoTrue endpoints under /auth/v1).

Keeps the current Session in memory (and optionally in session.json) and
pushes session changes to subscribers. Nothing here polls: a session only
changes on sign-in/sign-out, on a refresh triggered by get_session() or by a
401 from the table API.
"""

import asyncio
import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

from .errors import BackendError, Result, error_from_exception, error_from_response
from .session import Session, SessionFile, User

logger = logging.getLogger(__name__)

AUTH_PREFIX = "/auth/v1"


class AuthEvent(StrEnum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


AuthListener = Callable[[AuthEvent, Session | None], None]


@dataclass(frozen=True, slots=True)
class SignUpData:
    user: User | None
    # Present only when the project auto-confirms new accounts.
    session: Session | None


class Subscription:
    """Handle returned by on_auth_state_change(). unsubscribe() is idempotent."""

    def __init__(self, owner: AuthClient, sub_id: int, callback: AuthListener) -> None:
        self._owner = owner
        self.id = sub_id
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._owner._remove_subscription(self.id)


class AuthClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        api_key: str,
        session_file: SessionFile | None = None,
        clock: Callable[[], float] = time.time,
        refresh_margin_seconds: float = 10.0,
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._session_file = session_file
        self._clock = clock
        self._refresh_margin = refresh_margin_seconds

        self._session: Session | None = None
        self._restored = session_file is None
        self._subs: dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._refresh_lock = asyncio.Lock()

    # ---- subscriptions ----

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        sub = Subscription(self, next(self._ids), callback)
        self._subs[sub.id] = sub
        logger.debug("Auth listener registered id=%s (total=%d)", sub.id, len(self._subs))
        return sub

    def _remove_subscription(self, sub_id: int) -> None:
        self._subs.pop(sub_id, None)
        logger.debug("Auth listener released id=%s (total=%d)", sub_id, len(self._subs))

    @property
    def listener_count(self) -> int:
        return len(self._subs)

    def _emit(self, event: AuthEvent, session: Session | None) -> None:
        logger.info("Auth event %s", event.value)
        for sub in list(self._subs.values()):
            # A listener may release another one mid-emit.
            if not sub.active:
                continue
            try:
                sub.callback(event, session)
            except Exception:
                logger.exception("Auth listener id=%s failed on %s", sub.id, event.value)

    # ---- session state ----

    def _restore_once(self) -> None:
        if self._restored:
            return
        self._restored = True
        if self._session is None and self._session_file is not None:
            self._session = self._session_file.load()

    def _set_session(self, session: Session, event: AuthEvent) -> None:
        self._session = session
        if self._session_file is not None:
            self._session_file.save(session)
        self._emit(event, session)

    def _drop_session(self) -> None:
        self._session = None
        if self._session_file is not None:
            self._session_file.clear()
        self._emit(AuthEvent.SIGNED_OUT, None)

    @property
    def current_session(self) -> Session | None:
        """Last known session without any refresh (no network)."""
        self._restore_once()
        return self._session

    def bearer_token(self) -> str:
        s = self.current_session
        return s.access_token if s is not None else self._api_key

    # ---- HTTP ----

    async def _post(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        token: str | None = None,
    ) -> Result[Any]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token or self._api_key}",
        }
        try:
            resp = await self._http.post(f"{AUTH_PREFIX}{path}", json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            return Result(error=error_from_exception(e))

        if resp.status_code >= 400:
            return Result(error=error_from_response(resp))

        if resp.status_code == 204 or not resp.content:
            return Result(data=None)
        try:
            return Result(data=resp.json())
        except ValueError:
            return Result(error=BackendError("Invalid JSON from auth service", status=resp.status_code))

    # ---- public API ----

    async def get_session(self) -> Result[Session]:
        """
        Current session, refreshed first if it is (about to be) expired.

        data is None when nobody is signed in.
        """
        session = self.current_session
        if session is None:
            return Result(data=None)

        if session.is_expired(self._clock(), margin=self._refresh_margin):
            logger.info("Session expired, refreshing")
            return await self._refresh_locked(session.access_token)

        return Result(data=session)

    async def sign_in_with_password(self, email: str, password: str) -> Result[Session]:
        res = await self._post(
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if res.error is not None:
            logger.info("Sign in failed for %s: %s", email, res.error.message)
            return Result(error=res.error)

        try:
            session = Session.from_payload(res.data or {}, now=self._clock())
        except ValueError as e:
            return Result(error=BackendError(f"Malformed session: {e}"))

        self._restored = True
        self._set_session(session, AuthEvent.SIGNED_IN)
        return Result(data=session)

    async def sign_up(self, email: str, password: str) -> Result[SignUpData]:
        res = await self._post("/signup", json={"email": email, "password": password})
        if res.error is not None:
            logger.info("Sign up failed for %s: %s", email, res.error.message)
            return Result(error=res.error)

        payload = res.data if isinstance(res.data, dict) else {}

        if payload.get("access_token"):
            try:
                session = Session.from_payload(payload, now=self._clock())
            except ValueError as e:
                return Result(error=BackendError(f"Malformed session: {e}"))
            self._restored = True
            self._set_session(session, AuthEvent.SIGNED_IN)
            return Result(data=SignUpData(user=session.user, session=session))

        # Email confirmation pending: the body is the user object itself.
        user_raw = payload.get("user") if isinstance(payload.get("user"), dict) else payload
        try:
            user = User.from_payload(user_raw)
        except ValueError:
            user = None
        return Result(data=SignUpData(user=user, session=None))

    async def sign_out(self) -> Result[None]:
        """
        Revoke the session remotely (best-effort) and always clear it locally.
        """
        session = self.current_session
        error: BackendError | None = None

        if session is not None:
            res = await self._post("/logout", token=session.access_token)
            if res.error is not None and res.error.status not in (401, 403, 404):
                logger.warning("Remote sign out failed: %s", res.error.message)
                error = res.error

        self._drop_session()
        return Result(data=None, error=error)

    async def handle_unauthorized(self, stale_token: str) -> bool:
        """
        Called by the table client on HTTP 401.

        Returns True when a fresh token is available for one retry.
        """
        res = await self._refresh_locked(stale_token)
        return res.ok and res.data is not None

    async def _refresh_locked(self, stale_token: str | None) -> Result[Session]:
        async with self._refresh_lock:
            current = self.current_session
            # Someone else already refreshed while we waited.
            if current is not None and stale_token is not None and current.access_token != stale_token:
                return Result(data=current)
            return await self._refresh(current)

    async def _refresh(self, session: Session | None) -> Result[Session]:
        if session is None:
            return Result(error=BackendError("Auth session missing!"))

        res = await self._post(
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": session.refresh_token},
        )
        if res.error is not None:
            if res.error.status is None:
                # Network trouble: keep the session, the next call may succeed.
                logger.warning("Session refresh failed (network): %s", res.error.message)
                return Result(error=res.error)
            logger.info("Session refresh rejected: %s", res.error.message)
            self._drop_session()
            return Result(error=res.error)

        try:
            fresh = Session.from_payload(res.data or {}, now=self._clock())
        except ValueError as e:
            self._drop_session()
            return Result(error=BackendError(f"Malformed session: {e}"))

        self._set_session(fresh, AuthEvent.TOKEN_REFRESHED)
        return Result(data=fresh)
