"""Client-side session holder with single-flight access-token refresh.

The session kept here is a cache: the server decides whether a refresh
token is still valid. Any doubt about the session ends in a full logout.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import httpx

from todo_api.client.storage import KeyValueStore, MemoryStore

logger = logging.getLogger(__name__)

TOKEN_KEY = "todo_api_token"
REFRESH_TOKEN_KEY = "todo_api_refresh_token"
USER_KEY = "todo_api_user"


@dataclass
class ClientSession:
    access_token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    refresh_token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None


class SessionGuard:
    def __init__(
        self,
        http: httpx.AsyncClient,
        store: Optional[KeyValueStore] = None,
        refresh_path: str = "/auth/refresh",
    ) -> None:
        self.http = http
        self.store = store or MemoryStore()
        self.refresh_path = refresh_path
        self.session = self._load()
        self._pending: Optional[asyncio.Task] = None
        self._listeners: List[Callable[[ClientSession], None]] = [self._persist]

    def subscribe(self, listener: Callable[[ClientSession], None]) -> None:
        self._listeners.append(listener)

    @property
    def refreshing(self) -> bool:
        return self._pending is not None

    def login(self, auth_response: Dict[str, Any]) -> None:
        self.session = ClientSession(
            access_token=auth_response["token"],
            user=auth_response.get("user"),
            refresh_token=auth_response.get("refreshToken") or self.session.refresh_token,
        )
        self._changed()

    def logout(self) -> None:
        self.session = ClientSession()
        self._changed()

    async def refresh_access_token(self) -> Optional[str]:
        if self._pending is None:
            refresh_token = self.session.refresh_token
            if not refresh_token:
                self.logout()
                return None
            self._pending = asyncio.ensure_future(self._refresh(refresh_token))
        return await asyncio.shield(self._pending)

    async def _refresh(self, refresh_token: str) -> Optional[str]:
        try:
            response = await self.http.post(self.refresh_path, json={"refreshToken": refresh_token})
            if not response.is_success:
                logger.warning("Token refresh rejected with status %s", response.status_code)
                self.logout()
                return None
            data = response.json()["data"]
            self.login(data)
            return data["token"]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Token refresh failed: %s", exc)
            self.logout()
            return None
        finally:
            self._pending = None

    def _load(self) -> ClientSession:
        user = self.store.get(USER_KEY)
        return ClientSession(
            access_token=self.store.get(TOKEN_KEY),
            user=user if isinstance(user, dict) else None,
            refresh_token=self.store.get(REFRESH_TOKEN_KEY),
        )

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self.session)

    def _persist(self, session: ClientSession) -> None:
        for key, value in (
            (TOKEN_KEY, session.access_token),
            (USER_KEY, session.user),
            (REFRESH_TOKEN_KEY, session.refresh_token),
        ):
            if value is None:
                self.store.delete(key)
            else:
                self.store.set(key, value)
