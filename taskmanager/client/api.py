from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional
from uuid import UUID

import httpx
from pydantic.alias_generators import to_camel

from taskmanager.client.session import AuthSession
from taskmanager.core.config import settings

logger = logging.getLogger(__name__)

RequestHook = Callable[[httpx.Request], None]
ResponseHook = Callable[[httpx.Response], None]


class ApiError(Exception):
    def __init__(self, status_code: int, payload: Dict[str, Any]):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"{status_code}: {self.message}")

    @property
    def message(self) -> str:
        return str(self.payload.get("error") or self.payload.get("detail") or "Request failed")

    @property
    def errors(self) -> List[Dict[str, Any]]:
        return list(self.payload.get("errors") or [])


def _to_wire(fields: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        out[to_camel(key) if "_" in key else key] = value
    return out


class TaskManagerClient:
    """
    Thin httpx client for the Task Manager API.

    Request hooks run in order before each call (bearer token first), response
    hooks after it (401 handling first). A 401 on an authenticated session
    clears the session, which fires its invalidation hooks.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[AuthSession] = None,
        *,
        http: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 10.0,
        request_hooks: Iterable[RequestHook] = (),
        response_hooks: Iterable[ResponseHook] = (),
    ):
        self.session = session or AuthSession()
        hooks = {
            "request": [self._attach_token, *request_hooks],
            "response": [self._invalidate_on_unauthorized, *response_hooks],
        }
        if http is None:
            http = httpx.Client(
                base_url=base_url or settings.api_url,
                timeout=timeout,
                transport=transport,
                event_hooks=hooks,
            )
        else:
            existing = http.event_hooks
            http.event_hooks = {
                "request": hooks["request"] + list(existing.get("request", [])),
                "response": hooks["response"] + list(existing.get("response", [])),
            }
        self._http = http

    # ---- hooks ----
    def _attach_token(self, request: httpx.Request) -> None:
        if self.session.token and "Authorization" not in request.headers:
            request.headers["Authorization"] = f"Bearer {self.session.token}"

    def _invalidate_on_unauthorized(self, response: httpx.Response) -> None:
        if response.status_code == 401 and self.session.is_authenticated:
            logger.info("Got 401 from %s; clearing session", response.request.url.path)
            self.session.clear()

    # ---- transport ----
    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self._http.request(method, path, **kwargs)
        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = {"error": response.text}
            if not isinstance(payload, dict):
                payload = {"error": payload}
            raise ApiError(response.status_code, payload)
        return response.json()

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "TaskManagerClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---- auth ----
    def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        data = self._request(
            "POST", "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        self.session.establish(data["token"], data["user"])
        return data["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.session.establish(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        self.session.clear()

    def get_profile(self) -> Dict[str, Any]:
        return self._request("GET", "/auth/profile")["user"]

    def update_profile(self, **fields: Any) -> Dict[str, Any]:
        user = self._request("PUT", "/auth/profile", json=_to_wire(fields))["user"]
        self.session.user = user
        return user

    # ---- tasks ----
    def list_tasks(
        self,
        *,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params = {
            "status": status,
            "priority": priority,
            "sortBy": sort_by,
            "sortOrder": sort_order,
            "limit": limit,
        }
        return self._request("GET", "/tasks", params={k: v for k, v in params.items() if v is not None})

    def get_task(self, task_id: UUID | str) -> Dict[str, Any]:
        return self._request("GET", f"/tasks/{task_id}")

    def create_task(self, title: str, **fields: Any) -> Dict[str, Any]:
        return self._request("POST", "/tasks", json=_to_wire({"title": title, **fields}))

    def update_task(self, task_id: UUID | str, **fields: Any) -> Dict[str, Any]:
        return self._request("PUT", f"/tasks/{task_id}", json=_to_wire(fields))

    def delete_task(self, task_id: UUID | str) -> str:
        return self._request("DELETE", f"/tasks/{task_id}")["message"]

    def stats(self) -> Dict[str, int]:
        return self._request("GET", "/tasks/stats/summary")
