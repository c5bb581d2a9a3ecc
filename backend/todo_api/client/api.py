import logging
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from todo_api.client.session import SessionGuard
from todo_api.client.storage import KeyValueStore

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str, details: Any = None) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"{status_code} {code}: {message}")

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            error = response.json().get("error") or {}
        except (ValueError, AttributeError):
            error = {}
        return cls(
            response.status_code,
            error.get("code", "HTTP_ERROR"),
            error.get("message") or f"HTTP {response.status_code}",
            error.get("details"),
        )


def _unwrap(response: httpx.Response) -> Any:
    if not response.is_success:
        raise ApiError.from_response(response)
    if response.status_code == 204:
        return None
    return response.json()["data"]


class ApiClient:
    """Async client for the todo API.

    Authenticated calls carry the guard's access token. A 401 triggers one
    refresh through the guard and one retry; a second 401 is raised.
    """

    def __init__(
        self,
        base_url: str,
        store: Optional[KeyValueStore] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self.guard = SessionGuard(self.http, store)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    @property
    def session(self):
        return self.guard.session

    async def register(self, email: str, password: str, name: str) -> Dict[str, Any]:
        response = await self.http.post(
            "/auth/register", json={"email": email, "password": password, "name": name}
        )
        data = _unwrap(response)
        self.guard.login(data)
        return data

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        response = await self.http.post("/auth/login", json={"email": email, "password": password})
        data = _unwrap(response)
        self.guard.login(data)
        return data

    async def logout(self) -> None:
        refresh_token = self.guard.session.refresh_token
        try:
            if refresh_token:
                response = await self.http.post("/auth/logout", json={"refreshToken": refresh_token})
                if not response.is_success:
                    logger.warning("Server-side logout failed with status %s", response.status_code)
        except httpx.HTTPError as exc:
            logger.warning("Server-side logout failed: %s", exc)
        finally:
            self.guard.logout()

    async def _send(self, method: str, path: str, token: Optional[str], **kwargs) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return await self.http.request(method, path, headers=headers, **kwargs)

    async def request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._send(method, path, self.guard.session.access_token, **kwargs)
        if response.status_code == 401:
            new_token = await self.guard.refresh_access_token()
            if new_token:
                response = await self._send(method, path, new_token, **kwargs)
        return _unwrap(response)

    async def list_todos(
        self,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {
            key: value
            for key, value in (("page", page), ("pageSize", page_size), ("status", status), ("priority", priority))
            if value is not None
        }
        return await self.request("GET", "/todos", params=params)

    async def get_todo(self, todo_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/todos/{todo_id}")

    async def create_todo(
        self,
        title: str,
        description: Optional[str] = None,
        priority: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"title": title}
        if description is not None:
            body["description"] = description
        if priority is not None:
            body["priority"] = priority
        if due_date is not None:
            body["dueDate"] = due_date.isoformat()
        return await self.request("POST", "/todos", json=body)

    async def update_todo(self, todo_id: str, **changes: Any) -> Dict[str, Any]:
        body = {}
        for key, value in changes.items():
            if key == "due_date":
                key, value = "dueDate", value.isoformat() if isinstance(value, datetime) else value
            body[key] = value
        return await self.request("PATCH", f"/todos/{todo_id}", json=body)

    async def delete_todo(self, todo_id: str) -> None:
        await self.request("DELETE", f"/todos/{todo_id}")
