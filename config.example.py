# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKMGR_APP_NAME": "App display name (default: Advanced Task Manager).",
    "TASKMGR_LOG_LEVEL": "Console logging level (default: INFO).",
    # Remote service (required)
    "TASKMGR_SUPABASE_URL": "Service URL, e.g. https://<project>.supabase.co (also read from SUPABASE_URL).",
    "TASKMGR_SUPABASE_ANON_KEY": "Public (anon) API key (also read from SUPABASE_ANON_KEY).",
    "TASKMGR_TASKS_TABLE": "Table holding tasks (default: tasks).",
    # HTTP
    "TASKMGR_HTTP_CONNECT_TIMEOUT_SECONDS": "Connect timeout (default: 5).",
    "TASKMGR_HTTP_READ_TIMEOUT_SECONDS": "Read timeout (default: 20).",
    # Paths (gitignored)
    "TASKMGR_DATA_DIR": "Local data directory for logs and session (default: .local/task_manager).",
    "TASKMGR_SESSION_PATH": "Saved session JSON (default: <data_dir>/session.json).",
    "TASKMGR_PERSIST_SESSION": "Keep the session between runs (true/false, default: true).",
}
