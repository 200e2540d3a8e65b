# src/task_manager/config.py

"""Settings for the task manager, read from TASKMGR_* env vars (+ optional .env).

Importing this module never fails on missing credentials: the service URL
and anon key are checked by require_backend() when the client is built.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "TASKMGR"


class ConfigError(RuntimeError):
    """Raised when a required setting is missing at startup."""


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Remote service ----
    supabase_url: Optional[str]
    supabase_anon_key: Optional[str]
    tasks_table: str

    # ---- HTTP ----
    http_connect_timeout_seconds: float
    http_read_timeout_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    session_path: Path
    persist_session: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _first_env(_k("APP_NAME"), default="Advanced Task Manager") or "Advanced Task Manager"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        # The web build used NEXT_PUBLIC_* names; accept them so one .env serves both.
        supabase_url = _first_env(
            _k("SUPABASE_URL"), "SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL", default=None
        )
        supabase_anon_key = _first_env(
            _k("SUPABASE_ANON_KEY"), "SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY", default=None
        )
        tasks_table = _env(_k("TASKS_TABLE"), "tasks").strip() or "tasks"

        connect_timeout = _env_float(_k("HTTP_CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("HTTP_READ_TIMEOUT_SECONDS"), 20.0)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task_manager"))
        session_path = _env_path(_k("SESSION_PATH"), data_dir / "session.json")
        persist_session = _env_bool(_k("PERSIST_SESSION"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            supabase_url=supabase_url.strip() if supabase_url else None,
            supabase_anon_key=supabase_anon_key.strip() if supabase_anon_key else None,
            tasks_table=tasks_table,
            http_connect_timeout_seconds=max(0.5, connect_timeout),
            http_read_timeout_seconds=max(1.0, read_timeout),
            data_dir=data_dir,
            session_path=session_path,
            persist_session=persist_session,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
# Prefer .env for secrets; use config_local.py only for safe overrides.
try:
    import config_local as _config_local  # type: ignore

    if hasattr(_config_local, "LOG_LEVEL"):
        object.__setattr__(SETTINGS, "log_level", str(_config_local.LOG_LEVEL))  # type: ignore[misc]
    if hasattr(_config_local, "PERSIST_SESSION"):
        object.__setattr__(SETTINGS, "persist_session", bool(_config_local.PERSIST_SESSION))  # type: ignore[misc]
except Exception:
    pass


def get_settings() -> Settings:
    return SETTINGS


def require_backend(settings) -> tuple[str, str]:
    """
    Return (url, anon_key) or raise ConfigError.

    Both values are mandatory to construct the remote service client.
    """
    url = (getattr(settings, "supabase_url", None) or "").strip()
    key = (getattr(settings, "supabase_anon_key", None) or "").strip()

    if not url:
        raise ConfigError("Service URL is not set. Set TASKMGR_SUPABASE_URL in your .env.")
    if not key:
        raise ConfigError("Service API key is not set. Set TASKMGR_SUPABASE_ANON_KEY in your .env.")

    return url.rstrip("/"), key
