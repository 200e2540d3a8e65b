# src/task_manager/backend/client.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from ..config import require_backend
from .auth import AuthClient
from .rest import TableClient
from .session import SessionFile

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BackendClient:
    """Remote service client: auth + the tasks table over one HTTP connection pool."""

    http: httpx.AsyncClient
    auth: AuthClient
    tasks: TableClient

    async def aclose(self) -> None:
        if not self.http.is_closed:
            await self.http.aclose()


def create_backend_client(
    settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Callable[[], float] = time.time,
) -> BackendClient:
    """
    Build the client from settings.

    Raises ConfigError when the service URL or API key is missing.
    transport is for tests (httpx.MockTransport).
    """
    url, api_key = require_backend(settings)

    connect_s = float(getattr(settings, "http_connect_timeout_seconds", 5.0))
    read_s = float(getattr(settings, "http_read_timeout_seconds", 20.0))
    timeout = httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)

    http = httpx.AsyncClient(
        base_url=url,
        timeout=timeout,
        transport=transport,
        headers={"X-Client-Info": "task-manager-python"},
    )

    session_file = None
    if getattr(settings, "persist_session", False):
        session_file = SessionFile(settings.session_path)

    auth = AuthClient(http, api_key=api_key, session_file=session_file, clock=clock)
    tasks = TableClient(http, auth, api_key=api_key, table=getattr(settings, "tasks_table", "tasks"))

    logger.info("Backend client ready url=%s table=%s persist_session=%s", url, tasks.table, session_file is not None)
    return BackendClient(http=http, auth=auth, tasks=tasks)
