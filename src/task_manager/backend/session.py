# src/task_manager/backend/session.py

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class User:
    id: str
    email: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> User:
        uid = payload.get("id")
        if not uid:
            raise ValueError("user payload has no id")
        email = payload.get("email")
        return cls(id=str(uid), email=str(email) if email else None)


@dataclass(frozen=True, slots=True)
class Session:
    access_token: str
    refresh_token: str
    user: User
    expires_at: float | None = None
    token_type: str = "bearer"

    @classmethod
    def from_payload(cls, payload: dict[str, Any], *, now: float | None = None) -> Session:
        """Build from a token endpoint response (or from session.json)."""
        access_token = payload.get("access_token")
        refresh_token = payload.get("refresh_token")
        user_raw = payload.get("user")
        if not access_token or not refresh_token or not isinstance(user_raw, dict):
            raise ValueError("session payload is missing required fields")

        expires_at = payload.get("expires_at")
        if expires_at is None and payload.get("expires_in") is not None:
            base = time.time() if now is None else now
            expires_at = base + float(payload["expires_in"])

        return cls(
            access_token=str(access_token),
            refresh_token=str(refresh_token),
            user=User.from_payload(user_raw),
            expires_at=float(expires_at) if expires_at is not None else None,
            token_type=str(payload.get("token_type") or "bearer"),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "token_type": self.token_type,
            "user": {"id": self.user.id, "email": self.user.email},
        }

    def is_expired(self, now: float, *, margin: float = 0.0) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at - margin <= now


class SessionFile:
    """
    session.json under a gitignored local dir.

    Holds live tokens: written atomically and chmod 600.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Session | None:
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text("utf-8"))
            if not isinstance(raw, dict):
                raise ValueError("Expected JSON object")
            session = Session.from_payload(raw)
            logger.info("Session restored from %s (user=%s)", self.path, session.user.email or session.user.id)
            return session
        except Exception as e:
            logger.warning("Failed to restore session from %s: %r", self.path, e)
            return None

    def save(self, session: Session) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            tmp.unlink(missing_ok=True)
            # 0600 from creation: holds live tokens.
            fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(json.dumps(session.to_payload(), ensure_ascii=False))
            os.replace(tmp, self.path)
        except Exception:
            logger.exception("Failed to write session file %s", self.path)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except Exception:
            logger.exception("Failed to remove session file %s", self.path)
