# src/task_manager/backend/errors.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Iterator, TypeVar

import httpx

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class BackendError:
    """Failure reported by (or while talking to) the remote service."""

    message: str
    status: int | None = None
    code: str | None = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """
    (data, error) pair returned by every remote call.

    When error is set, data must not be trusted.
    Unpacks like a tuple: `data, error = await table.insert_one(row)`.
    """

    data: T | None = None
    error: BackendError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self) -> Iterator[Any]:
        yield self.data
        yield self.error


def _message_from_body(body: Any) -> tuple[str | None, str | None]:
    if not isinstance(body, dict):
        return None, None
    # GoTrue uses msg / error_description, PostgREST uses message.
    for key in ("msg", "message", "error_description", "error"):
        val = body.get(key)
        if isinstance(val, str) and val.strip():
            code = body.get("error_code") or body.get("code")
            return val.strip(), (str(code) if code is not None else None)
    return None, None


def error_from_response(resp: httpx.Response) -> BackendError:
    try:
        body = resp.json()
    except ValueError:
        body = None

    message, code = _message_from_body(body)
    if not message:
        text = (resp.text or "").strip()
        message = text[:200] if text else f"HTTP {resp.status_code}"
    return BackendError(message=message, status=resp.status_code, code=code)


def error_from_exception(exc: Exception) -> BackendError:
    if isinstance(exc, httpx.TimeoutException):
        return BackendError(message="Request timed out", code=exc.__class__.__name__)
    msg = str(exc).strip() or exc.__class__.__name__
    return BackendError(message=msg, code=exc.__class__.__name__)
