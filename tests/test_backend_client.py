# tests/test_backend_client.py

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from task_manager.backend.auth import AuthEvent
from task_manager.backend.client import BackendClient, create_backend_client

EXPIRES_AT = 2_000_000_000


def token_payload(access: str = "at1", refresh: str = "rt1") -> dict:
    return {
        "access_token": access,
        "refresh_token": refresh,
        "token_type": "bearer",
        "expires_in": 3600,
        "expires_at": EXPIRES_AT,
        "user": {"id": "u1", "email": "ann@example.com"},
    }


class Recorder:
    """MockTransport handler: answers from a route table and records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], list[Callable[[httpx.Request], httpx.Response]]] = {}

    def on(self, method: str, path: str, *responders: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes.setdefault((method, path), []).extend(responders)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": f"no route {request.method} {request.url.path}"})
        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        return responder(request)


def _client(settings, rec: Recorder, now: float = 1_000.0) -> BackendClient:
    return create_backend_client(settings, transport=httpx.MockTransport(rec), clock=lambda: now)


def _grant(request: httpx.Request) -> str:
    return request.url.params.get("grant_type", "")


async def _sign_in(client: BackendClient, rec: Recorder) -> None:
    rec.on("POST", "/auth/v1/token", lambda r: httpx.Response(200, json=token_payload()))
    res = await client.auth.sign_in_with_password("ann@example.com", "secret")
    assert res.ok
    rec.routes.pop(("POST", "/auth/v1/token"))


@pytest.mark.asyncio
async def test_sign_in_sets_session_and_notifies(settings) -> None:
    rec = Recorder()
    client = _client(settings, rec)
    events: list[tuple[AuthEvent, object]] = []
    client.auth.on_auth_state_change(lambda e, s: events.append((e, s)))

    await _sign_in(client, rec)

    req = rec.requests[0]
    assert req.url.path == "/auth/v1/token"
    assert _grant(req) == "password"
    assert json.loads(req.content) == {"email": "ann@example.com", "password": "secret"}
    assert req.headers["apikey"] == "anon-key"

    session = (await client.auth.get_session()).data
    assert session is not None
    assert session.user.id == "u1"
    assert [e for e, _ in events] == [AuthEvent.SIGNED_IN]
    await client.aclose()


@pytest.mark.asyncio
async def test_sign_in_error_message_comes_from_service(settings) -> None:
    rec = Recorder()
    rec.on(
        "POST",
        "/auth/v1/token",
        lambda r: httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"}),
    )
    client = _client(settings, rec)

    data, error = await client.auth.sign_in_with_password("ann@example.com", "nope")

    assert data is None
    assert error is not None
    assert error.message == "Invalid login credentials"
    assert error.status == 400
    assert (await client.auth.get_session()).data is None
    await client.aclose()


@pytest.mark.asyncio
async def test_sign_up_without_session_returns_user_only(settings) -> None:
    rec = Recorder()
    rec.on("POST", "/auth/v1/signup", lambda r: httpx.Response(200, json={"id": "new", "email": "new@example.com"}))
    client = _client(settings, rec)

    res = await client.auth.sign_up("new@example.com", "secret")

    assert res.ok and res.data is not None
    assert res.data.session is None
    assert res.data.user is not None and res.data.user.id == "new"
    await client.aclose()


@pytest.mark.asyncio
async def test_select_all_sends_order_and_user_token(settings) -> None:
    rec = Recorder()
    client = _client(settings, rec)
    await _sign_in(client, rec)
    rec.on("GET", "/rest/v1/tasks", lambda r: httpx.Response(200, json=[{"id": 1, "title": "A"}]))

    data, error = await client.tasks.select_all(order_by="created_at", ascending=False)

    assert error is None
    assert data == [{"id": 1, "title": "A"}]
    req = rec.requests[-1]
    assert req.url.params["select"] == "*"
    assert req.url.params["order"] == "created_at.desc"
    assert req.headers["Authorization"] == "Bearer at1"
    assert req.headers["apikey"] == "anon-key"
    await client.aclose()


@pytest.mark.asyncio
async def test_insert_update_delete_requests(settings) -> None:
    rec = Recorder()
    client = _client(settings, rec)
    await _sign_in(client, rec)
    rec.on("POST", "/rest/v1/tasks", lambda r: httpx.Response(201, json={"id": "5", "title": "New"}))
    rec.on("PATCH", "/rest/v1/tasks", lambda r: httpx.Response(200, json={"id": "5", "completed": True}))
    rec.on("DELETE", "/rest/v1/tasks", lambda r: httpx.Response(204))

    inserted = await client.tasks.insert_one({"title": "New", "user_id": "u1"})
    ins_req = rec.requests[-1]
    updated = await client.tasks.update_one("5", {"completed": True})
    upd_req = rec.requests[-1]
    deleted = await client.tasks.delete_one("5")
    del_req = rec.requests[-1]

    assert inserted.data == {"id": "5", "title": "New"}
    assert json.loads(ins_req.content) == [{"title": "New", "user_id": "u1"}]
    assert ins_req.headers["Prefer"] == "return=representation"
    assert ins_req.headers["Accept"] == "application/vnd.pgrst.object+json"

    assert updated.data == {"id": "5", "completed": True}
    assert upd_req.url.params["id"] == "eq.5"
    assert json.loads(upd_req.content) == {"completed": True}

    assert deleted.ok and deleted.data is None
    assert del_req.url.params["id"] == "eq.5"
    await client.aclose()


@pytest.mark.asyncio
async def test_expired_jwt_is_refreshed_and_request_retried(settings) -> None:
    rec = Recorder()
    client = _client(settings, rec)
    await _sign_in(client, rec)
    events: list[AuthEvent] = []
    client.auth.on_auth_state_change(lambda e, s: events.append(e))

    rec.on(
        "GET",
        "/rest/v1/tasks",
        lambda r: httpx.Response(401, json={"code": "PGRST301", "message": "JWT expired"}),
        lambda r: httpx.Response(200, json=[]),
    )
    rec.on("POST", "/auth/v1/token", lambda r: httpx.Response(200, json=token_payload("at2", "rt2")))

    res = await client.tasks.select_all()

    assert res.ok and res.data == []
    assert events == [AuthEvent.TOKEN_REFRESHED]
    refresh_req = [r for r in rec.requests if r.url.path == "/auth/v1/token"][-1]
    assert _grant(refresh_req) == "refresh_token"
    assert json.loads(refresh_req.content) == {"refresh_token": "rt1"}
    assert rec.requests[-1].headers["Authorization"] == "Bearer at2"
    await client.aclose()


@pytest.mark.asyncio
async def test_rejected_refresh_signs_out(settings) -> None:
    rec = Recorder()
    client = _client(settings, rec)
    await _sign_in(client, rec)
    events: list[tuple[AuthEvent, object]] = []
    client.auth.on_auth_state_change(lambda e, s: events.append((e, s)))

    rec.on("GET", "/rest/v1/tasks", lambda r: httpx.Response(401, json={"message": "JWT expired"}))
    rec.on(
        "POST",
        "/auth/v1/token",
        lambda r: httpx.Response(400, json={"error_description": "Invalid Refresh Token: Already Used"}),
    )

    res = await client.tasks.select_all()

    assert res.error is not None and res.error.message == "JWT expired"
    assert events == [(AuthEvent.SIGNED_OUT, None)]
    assert (await client.auth.get_session()).data is None
    await client.aclose()


@pytest.mark.asyncio
async def test_expired_session_is_refreshed_on_get_session(settings) -> None:
    rec = Recorder()
    client = _client(settings, rec, now=EXPIRES_AT + 5)
    await _sign_in(client, rec)
    rec.on("POST", "/auth/v1/token", lambda r: httpx.Response(200, json=token_payload("at2", "rt2")))

    session = (await client.auth.get_session()).data

    assert session is not None
    assert session.access_token == "at2"
    await client.aclose()


@pytest.mark.asyncio
async def test_network_error_becomes_result_error(settings) -> None:
    def boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    rec = Recorder()
    rec.on("GET", "/rest/v1/tasks", boom)
    client = _client(settings, rec)

    res = await client.tasks.select_all()

    assert res.error is not None
    assert res.error.message == "connection refused"
    assert res.error.status is None
    await client.aclose()


@pytest.mark.asyncio
async def test_sign_out_clears_persisted_session(settings) -> None:
    settings.persist_session = True
    rec = Recorder()
    client = _client(settings, rec)
    await _sign_in(client, rec)
    assert settings.session_path.exists()

    # a second client (next run) restores the session without any request
    rec2 = Recorder()
    client2 = _client(settings, rec2)
    restored = (await client2.auth.get_session()).data
    assert restored is not None and restored.access_token == "at1"
    assert rec2.requests == []
    await client2.aclose()

    events: list[AuthEvent] = []
    client.auth.on_auth_state_change(lambda e, s: events.append(e))
    rec.on("POST", "/auth/v1/logout", lambda r: httpx.Response(204))

    res = await client.auth.sign_out()

    assert res.ok
    assert rec.requests[-1].headers["Authorization"] == "Bearer at1"
    assert events == [AuthEvent.SIGNED_OUT]
    assert not settings.session_path.exists()
    await client.aclose()


@pytest.mark.asyncio
async def test_unsubscribed_listener_gets_nothing(settings) -> None:
    rec = Recorder()
    client = _client(settings, rec)
    seen: list[AuthEvent] = []
    sub = client.auth.on_auth_state_change(lambda e, s: seen.append(e))

    sub.unsubscribe()
    sub.unsubscribe()
    await _sign_in(client, rec)

    assert not sub.active
    assert client.auth.listener_count == 0
    assert seen == []
    await client.aclose()
