# -*- coding: utf-8 -*-
"""Auth session persisted next to the app document."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from ..errors import StorageError
from ..store.backends import KeyValueStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
USER_KEY = "user_data"
LAST_SYNC_KEY = "last_sync"


class Session:
    def __init__(self, storage: KeyValueStorage) -> None:
        self.storage = storage

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.storage.get_item(key)
        except StorageError as exc:
            logger.error("Could not read %s: %s", key, exc)
            return None

    def _write(self, key: str, value: Optional[str]) -> None:
        try:
            if value is None:
                self.storage.remove_item(key)
            else:
                self.storage.set_item(key, value)
        except StorageError as exc:
            logger.error("Could not write %s: %s", key, exc)

    @property
    def token(self) -> Optional[str]:
        return self._read(TOKEN_KEY) or None

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        raw = self._read(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except ValueError:
            logger.warning("Stored user data is not valid JSON, ignoring it")
            return None
        return user if isinstance(user, dict) else None

    @property
    def last_sync(self) -> Optional[str]:
        return self._read(LAST_SYNC_KEY) or None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def store(self, token: str, user: Dict[str, Any]) -> None:
        self._write(TOKEN_KEY, token)
        self._write(USER_KEY, json.dumps(user, ensure_ascii=False))

    def mark_synced(self, timestamp: str) -> None:
        self._write(LAST_SYNC_KEY, timestamp)

    def clear(self) -> None:
        for key in (TOKEN_KEY, USER_KEY, LAST_SYNC_KEY):
            self._write(key, None)
