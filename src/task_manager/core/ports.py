# src/task_manager/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the screens.

Screens depend on Protocols instead of the concrete HTTP client.
This keeps the remote service swappable and makes testing easier.
"""

from typing import Any, Callable, Protocol

from ..backend.auth import AuthEvent, SignUpData
from ..backend.errors import Result
from ..backend.session import Session

AuthListener = Callable[[AuthEvent, Session | None], None]


class SubscriptionHandle(Protocol):
    @property
    def active(self) -> bool: ...
    def unsubscribe(self) -> None: ...


class AuthApi(Protocol):
    """Session side of the remote service."""

    async def get_session(self) -> Result[Session]: ...
    async def sign_in_with_password(self, email: str, password: str) -> Result[Session]: ...
    async def sign_up(self, email: str, password: str) -> Result[SignUpData]: ...
    async def sign_out(self) -> Result[None]: ...
    def on_auth_state_change(self, callback: AuthListener) -> SubscriptionHandle: ...


class TaskTable(Protocol):
    """
    Row-level CRUD over the tasks table.

    Every call yields Result(data, error); error precludes trusting data.
    """

    async def select_all(
            self,
            *,
            order_by: str | None = None,
            ascending: bool = True,
            filters: dict[str, str] | None = None,
    ) -> Result[list[dict[str, Any]]]: ...

    async def insert_one(self, row: dict[str, Any]) -> Result[dict[str, Any]]: ...
    async def update_one(self, row_id: str, values: dict[str, Any]) -> Result[dict[str, Any]]: ...
    async def delete_one(self, row_id: str) -> Result[None]: ...
