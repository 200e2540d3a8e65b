# tests/test_config.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from task_manager.config import ConfigError, Settings, require_backend

_SERVICE_VARS = (
    "TASKMGR_SUPABASE_URL",
    "SUPABASE_URL",
    "NEXT_PUBLIC_SUPABASE_URL",
    "TASKMGR_SUPABASE_ANON_KEY",
    "SUPABASE_ANON_KEY",
    "NEXT_PUBLIC_SUPABASE_ANON_KEY",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _SERVICE_VARS:
        monkeypatch.delenv(name, raising=False)
    for suffix in ("DATA_DIR", "SESSION_PATH", "PERSIST_SESSION", "HTTP_READ_TIMEOUT_SECONDS", "TASKS_TABLE"):
        monkeypatch.delenv(f"TASKMGR_{suffix}", raising=False)
    return monkeypatch


def test_prefixed_vars_win_over_fallbacks(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("NEXT_PUBLIC_SUPABASE_URL", "https://web.example.co")
    clean_env.setenv("TASKMGR_SUPABASE_URL", " https://cli.example.co ")
    clean_env.setenv("SUPABASE_ANON_KEY", "plain-key")

    s = Settings.from_env()

    assert s.supabase_url == "https://cli.example.co"
    assert s.supabase_anon_key == "plain-key"
    assert s.tasks_table == "tasks"


def test_paths_timeouts_and_flags(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    clean_env.setenv("TASKMGR_DATA_DIR", str(tmp_path))
    clean_env.setenv("TASKMGR_PERSIST_SESSION", "off")
    clean_env.setenv("TASKMGR_HTTP_READ_TIMEOUT_SECONDS", "not-a-number")

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    assert s.session_path == tmp_path / "session.json"
    assert s.persist_session is False
    assert s.http_read_timeout_seconds == 20.0
    assert s.supabase_url is None


def test_require_backend_reports_missing_values() -> None:
    with pytest.raises(ConfigError, match="URL"):
        require_backend(SimpleNamespace(supabase_url="  ", supabase_anon_key="k"))
    with pytest.raises(ConfigError, match="API key"):
        require_backend(SimpleNamespace(supabase_url="https://x.example.co", supabase_anon_key=None))

    assert require_backend(SimpleNamespace(supabase_url="https://x.example.co/", supabase_anon_key="k")) == (
        "https://x.example.co",
        "k",
    )
