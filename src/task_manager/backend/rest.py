# src/task_manager/backend/rest.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from .auth import AuthClient
from .errors import BackendError, Result, error_from_exception, error_from_response

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"

# PostgREST returns a bare object (and 406 unless exactly one row matched).
_SINGLE_OBJECT = "application/vnd.pgrst.object+json"


class TableClient:
    """
    One PostgREST table. Row ownership is enforced by the service (RLS),
    so the client never adds a user filter on its own.
    """

    def __init__(self, http: httpx.AsyncClient, auth: AuthClient, *, api_key: str, table: str) -> None:
        self._http = http
        self._auth = auth
        self._api_key = api_key
        self.table = table

    @property
    def _path(self) -> str:
        return f"{REST_PREFIX}/{self.table}"

    def _headers(self, token: str, *, single: bool, returning: bool) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {token}",
        }
        if returning:
            headers["Prefer"] = "return=representation"
        if single:
            headers["Accept"] = _SINGLE_OBJECT
        return headers

    async def _send(
        self,
        method: str,
        *,
        params: dict[str, str] | None,
        json: Any,
        single: bool,
        returning: bool,
    ) -> tuple[httpx.Response | None, BackendError | None, str]:
        token = self._auth.bearer_token()
        try:
            resp = await self._http.request(
                method,
                self._path,
                params=params,
                json=json,
                headers=self._headers(token, single=single, returning=returning),
            )
        except httpx.HTTPError as e:
            return None, error_from_exception(e), token
        return resp, None, token

    async def _request(
        self,
        method: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        single: bool = False,
        returning: bool = False,
    ) -> Result[Any]:
        resp, err, token = await self._send(method, params=params, json=json, single=single, returning=returning)
        if err is not None:
            logger.warning("%s %s failed: %s", method, self._path, err.message)
            return Result(error=err)
        assert resp is not None

        if resp.status_code == 401 and await self._auth.handle_unauthorized(token):
            logger.debug("%s %s retried after token refresh", method, self._path)
            resp, err, _ = await self._send(method, params=params, json=json, single=single, returning=returning)
            if err is not None:
                return Result(error=err)
            assert resp is not None

        if resp.status_code >= 400:
            error = error_from_response(resp)
            logger.debug("%s %s -> %s %s", method, self._path, resp.status_code, error.message)
            return Result(error=error)

        if resp.status_code == 204 or not resp.content:
            return Result(data=None)
        try:
            return Result(data=resp.json())
        except ValueError:
            return Result(error=BackendError("Invalid JSON from service", status=resp.status_code))

    # ---- public API ----

    async def select_all(
        self,
        *,
        order_by: str | None = None,
        ascending: bool = True,
        filters: dict[str, str] | None = None,
    ) -> Result[list[dict[str, Any]]]:
        """
        filters are raw PostgREST conditions, e.g. {"completed": "eq.false"}.
        """
        params: dict[str, str] = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.{'asc' if ascending else 'desc'}"
        if filters:
            params.update(filters)

        res = await self._request("GET", params=params)
        if res.error is not None:
            return res
        rows = res.data if isinstance(res.data, list) else []
        return Result(data=rows)

    async def insert_one(self, row: dict[str, Any]) -> Result[dict[str, Any]]:
        return await self._request("POST", json=[row], single=True, returning=True)

    async def update_one(self, row_id: str, values: dict[str, Any]) -> Result[dict[str, Any]]:
        return await self._request(
            "PATCH",
            params={"id": f"eq.{row_id}"},
            json=values,
            single=True,
            returning=True,
        )

    async def delete_one(self, row_id: str) -> Result[None]:
        res = await self._request("DELETE", params={"id": f"eq.{row_id}"})
        if res.error is not None:
            return res
        return Result(data=None)
