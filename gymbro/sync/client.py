# -*- coding: utf-8 -*-
"""Sync client — pushes the local document to the backend and pulls it back.

Network and HTTP failures never escape to the caller: they are logged and
reported through the boolean / result return values, and local data is
left as it was.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import httpx

from ..errors import NetworkError, RemoteError
from ..store.local import LocalStore
from .session import Session

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    success: bool
    error: Optional[str] = None
    message: Optional[str] = None


@dataclass
class AuthResult:
    success: bool
    user: Optional[Dict[str, Any]] = None
    token: Optional[str] = None
    error: Optional[str] = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SyncClient:
    def __init__(
        self,
        base_url: str,
        store: LocalStore,
        session: Session,
        *,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
        on_pull: Optional[Callable[[], Any]] = None,
        online: bool = True,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.session = session
        self.on_pull = on_pull
        self.is_online = online
        self._http = http or httpx.Client(timeout=timeout, follow_redirects=True)
        self._owns_http = http is None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gymbro-sync")

    # ---- transport ----

    def _request(self, method: str, path: str, *, json: Any = None, auth: bool = True) -> Dict[str, Any]:
        headers = {"Accept": "application/json"}
        token = self.session.token
        if auth and token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            resp = self._http.request(method, f"{self.base_url}{path}", json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        if not resp.is_success:
            detail = body.get("detail") or body.get("error") or f"HTTP {resp.status_code}"
            raise RemoteError(str(detail), status_code=resp.status_code)
        return body

    def _data_replaced(self) -> None:
        if self.on_pull is not None:
            self.on_pull()

    @property
    def can_sync(self) -> bool:
        return self.is_online and self.session.is_authenticated

    # ---- sync ----

    def push(self) -> bool:
        if not self.can_sync:
            logger.debug("Skipping push: authenticated=%s online=%s", self.session.is_authenticated, self.is_online)
            return False
        try:
            self._request("POST", "/data/sync", json={"data": self.store.get()})
        except (NetworkError, RemoteError) as exc:
            logger.warning("Push failed: %s", exc)
            return False
        self.session.mark_synced(_now_iso())
        logger.info("Pushed local data")
        return True

    def pull(self) -> bool:
        if not self.can_sync:
            logger.debug("Skipping pull: authenticated=%s online=%s", self.session.is_authenticated, self.is_online)
            return False
        try:
            body = self._request("GET", "/data/sync")
        except (NetworkError, RemoteError) as exc:
            logger.warning("Pull failed: %s", exc)
            return False

        remote = body.get("data")
        if isinstance(remote, dict) and remote:
            # Server copy wins outright; no per-field merge.
            if not self.store.save(remote):
                logger.error("Pulled data could not be written locally")
                return False
            self._data_replaced()
            logger.info("Pulled remote data (%d data types)", len(remote))
        else:
            logger.info("Remote has no data, keeping local copy")
        self.session.mark_synced(_now_iso())
        return True

    def full_sync(self) -> SyncResult:
        if not self.session.is_authenticated:
            return SyncResult(False, error="Not authenticated")
        if not self.is_online:
            return SyncResult(False, error="Offline")
        if not self.pull():
            return SyncResult(False, error="Pull failed")
        if not self.push():
            return SyncResult(False, error="Push failed")
        return SyncResult(True, message="Sync completed")

    def push_in_background(self) -> Optional[Future]:
        if not self.can_sync:
            return None
        return self._executor.submit(self._background_push)

    def _background_push(self) -> bool:
        try:
            return self.push()
        except Exception:
            logger.exception("Background push crashed")
            return False

    def set_online(self, online: bool) -> None:
        was_online = self.is_online
        self.is_online = bool(online)
        if self.is_online and not was_online:
            logger.info("Back online, syncing")
            if self.session.is_authenticated:
                self.pull()
                self.push()
        elif was_online and not self.is_online:
            logger.info("Gone offline, changes stay local")

    # ---- auth ----

    def _authenticate(self, path: str, payload: Dict[str, Any]) -> AuthResult:
        try:
            body = self._request("POST", path, json=payload, auth=False)
        except NetworkError as exc:
            logger.warning("Auth request failed: %s", exc)
            return AuthResult(False, error="Network error")
        except RemoteError as exc:
            return AuthResult(False, error=str(exc))

        token = body.get("token")
        user = body.get("user") or {}
        if not token:
            return AuthResult(False, error="No token in response")

        self.session.store(token, user)
        # A fresh account or a different device owner starts from an empty document.
        self.store.clear()
        self._data_replaced()
        logger.info("Signed in as user %s", user.get("id"))
        return AuthResult(True, user=user, token=token)

    def register(self, email: str, password: str, name: Optional[str] = None) -> AuthResult:
        payload: Dict[str, Any] = {"email": email, "password": password}
        if name:
            payload["name"] = name
        return self._authenticate("/auth/register", payload)

    def login(self, email: str, password: str) -> AuthResult:
        result = self._authenticate("/auth/login", {"email": email, "password": password})
        if result.success and not self.pull():
            logger.warning("Logged in but the initial pull failed")
        return result

    def verify(self) -> Optional[Dict[str, Any]]:
        if not self.session.is_authenticated:
            return None
        try:
            body = self._request("GET", "/auth/verify")
        except RemoteError as exc:
            if exc.status_code == 401:
                logger.info("Session token rejected, logging out")
                self.logout()
            else:
                logger.warning("Token verification failed: %s", exc)
            return None
        except NetworkError as exc:
            logger.warning("Token verification failed: %s", exc)
            return None
        return body.get("user")

    def logout(self) -> None:
        self.session.clear()
        self.store.clear()
        self._data_replaced()
        logger.info("Logged out")

    def status(self) -> Dict[str, Any]:
        return {
            "isAuthenticated": self.session.is_authenticated,
            "isOnline": self.is_online,
            "lastSync": self.session.last_sync,
            "user": self.session.user,
        }

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        if self._owns_http:
            self._http.close()
