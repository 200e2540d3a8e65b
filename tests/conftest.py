# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_manager.cli.bootstrap import build_state
from task_manager.core.state import AppState
from task_manager.pages.navigation import Navigator, Screen
from task_manager.pages.tasks_page import TasksPage

from .fakes import FakeAuth, FakeTaskTable, make_session


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the backend client.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="Task Manager (test)",
        log_level="DEBUG",
        supabase_url="https://project.example.co",
        supabase_anon_key="anon-key",
        tasks_table="tasks",
        http_connect_timeout_seconds=1.0,
        http_read_timeout_seconds=1.0,
        data_dir=tmp_path,
        session_path=tmp_path / "session.json",
        persist_session=False,
    )


@pytest.fixture()
def rows() -> list[dict]:
    return [
        {"id": "1", "title": "A", "priority": "Low", "due_date": None, "completed": False, "created_at": "2024-01-01"},
        {"id": "2", "title": "B", "priority": "High", "due_date": "2024-02-01", "completed": False, "created_at": "2024-01-02"},
        {"id": "3", "title": "C", "priority": "Medium", "due_date": "2024-01-15", "completed": True, "created_at": "2024-01-03"},
    ]


@pytest.fixture()
def auth() -> FakeAuth:
    return FakeAuth(session=make_session())


@pytest.fixture()
def table(rows: list[dict]) -> FakeTaskTable:
    return FakeTaskTable(rows)


@pytest.fixture()
def navigator() -> Navigator:
    return Navigator(initial=Screen.TASKS)


@pytest.fixture()
def page(auth: FakeAuth, table: FakeTaskTable, navigator: Navigator) -> TasksPage:
    return TasksPage(auth, table, navigator)


@pytest.fixture()
def state(settings: SimpleNamespace, auth: FakeAuth, table: FakeTaskTable) -> AppState:
    """
    AppState wired with in-memory fakes instead of the HTTP client.
    """
    return build_state(settings, auth=auth, table=table)
