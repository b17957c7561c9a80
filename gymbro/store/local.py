# -*- coding: utf-8 -*-
"""Local store — the single persisted AppData document."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..errors import StorageError
from .backends import KeyValueStorage
from .defaults import get_defaults, merge_with_defaults

logger = logging.getLogger(__name__)

STORAGE_KEY = "gymbro_data"
EXPORT_VERSION = "1.0"
_EXPORT_METADATA = ("exportDate", "version")


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LocalStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = STORAGE_KEY,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def get(self) -> Dict[str, Any]:
        """Return the stored document merged onto Defaults, or a fresh Defaults copy."""
        try:
            raw = self.storage.get_item(self.key)
            if raw:
                parsed = json.loads(raw)
                if not isinstance(parsed, dict):
                    raise ValueError(f"stored document is a {type(parsed).__name__}, not an object")
                merged = merge_with_defaults(parsed)
                logger.debug(
                    "Loaded document: %d workouts, %d meals, %d custom supplements",
                    len(merged.get("workoutHistory") or []),
                    len(merged.get("mealHistory") or []),
                    len(merged.get("customSupplements") or []),
                )
                return merged
        except (StorageError, ValueError) as exc:
            logger.error("Error reading stored document, falling back to defaults: %s", exc)
        logger.debug("No stored document, returning defaults")
        return get_defaults()

    def save(self, app_data: Dict[str, Any]) -> bool:
        try:
            document = {**app_data, "lastUpdated": _iso(self._clock())}
            self.storage.set_item(self.key, json.dumps(document, ensure_ascii=False))
        except (StorageError, TypeError, ValueError) as exc:
            logger.error("Error writing document: %s", exc)
            return False
        logger.debug("Document saved (%d keys)", len(app_data))
        return True

    def clear(self) -> bool:
        try:
            self.storage.remove_item(self.key)
        except StorageError as exc:
            logger.error("Error clearing document: %s", exc)
            return False
        return True

    def export(self) -> str:
        data = self.get()
        data["exportDate"] = _iso(self._clock())
        data["version"] = EXPORT_VERSION
        return json.dumps(data, ensure_ascii=False, indent=2)

    def import_(self, serialized: str) -> bool:
        try:
            imported = json.loads(serialized)
        except (TypeError, ValueError) as exc:
            logger.error("Error importing data: %s", exc)
            return False
        if not isinstance(imported, dict):
            logger.error("Error importing data: invalid data format")
            return False
        for key in _EXPORT_METADATA:
            imported.pop(key, None)
        return self.save(merge_with_defaults(imported))

    def storage_info(self) -> Optional[Dict[str, Any]]:
        try:
            raw = self.storage.get_item(self.key) or ""
        except StorageError as exc:
            logger.error("Error getting storage info: %s", exc)
            return None
        size = len(raw.encode("utf-8"))
        return {
            "sizeInBytes": size,
            "sizeInKB": f"{size / 1024:.2f}",
            "lastUpdated": self.get().get("lastUpdated") or "Unknown",
        }
