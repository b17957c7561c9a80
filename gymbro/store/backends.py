# -*- coding: utf-8 -*-
"""Key/value storage backends standing in for the browser's localStorage."""

from __future__ import annotations

import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from ..errors import StorageError

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> List[str]: ...


def _check_quota(quota_bytes: Optional[int], used: int, key: str) -> None:
    if quota_bytes is not None and used > quota_bytes:
        raise StorageError(f"Quota exceeded writing {key!r} ({used} > {quota_bytes} bytes)")


class MemoryStorage:
    """Dict-backed storage; the whole process shares one instance per app context."""

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self._items: Dict[str, str] = {}
        self._lock = threading.Lock()
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            used = sum(len(v.encode("utf-8")) for k, v in self._items.items() if k != key)
            _check_quota(self.quota_bytes, used + len(value.encode("utf-8")), key)
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return sorted(self._items)


class FileStorage:
    """One ``<key>.json`` file per key under ``root``.

    Writes go to a temp file in the same directory and are moved over the
    target with ``os.replace``, so readers only ever see a whole value.
    """

    def __init__(self, root: Path, quota_bytes: Optional[int] = None) -> None:
        self.root = Path(root)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        payload = value.encode("utf-8")
        if self.quota_bytes is not None:
            used = sum(p.stat().st_size for p in self.root.glob("*.json") if p != path) if self.root.exists() else 0
            _check_quota(self.quota_bytes, used + len(payload), key)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.root)
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to remove {key!r}: {exc}") from exc

    def keys(self) -> List[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))
