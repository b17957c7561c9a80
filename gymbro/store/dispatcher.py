# -*- coding: utf-8 -*-
"""Intent dispatcher — the single entry point UI actions go through to mutate data.

Each dispatch reports which top-level AppData keys changed, so a view layer
re-renders only what it needs, and kicks off a background push when a sync
client is attached.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Mapping, Optional

from ..errors import GymbroError, ValidationError
from .manager import DataManager

if TYPE_CHECKING:
    from ..sync.client import SyncClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Intent:
    kind: str
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class DispatchResult:
    ok: bool
    record: Any = None
    state: Dict[str, Any] = field(default_factory=dict)
    changes: FrozenSet[str] = frozenset()
    error: Optional[str] = None


def _require(payload: Mapping[str, Any], key: str) -> Any:
    value = payload.get(key)
    if value is None or value == "":
        raise ValidationError(f"Missing required field: {key}")
    return value


def _patch(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Accept either ``{"id", "patch": {...}}`` or the fields inline next to ``id``."""
    if isinstance(payload.get("patch"), Mapping):
        return payload["patch"]
    return {k: v for k, v in payload.items() if k not in ("id", "day")}


Handler = Callable[[DataManager, Mapping[str, Any]], Any]

_HANDLERS: Dict[str, Handler] = {
    "log_workout": lambda m, p: m.log_workout(p),
    "update_workout": lambda m, p: m.update_workout(_require(p, "id"), _patch(p)),
    "delete_workout": lambda m, p: m.delete_workout(_require(p, "id")),
    "log_meal": lambda m, p: m.log_meal(p),
    "delete_meal": lambda m, p: m.delete_meal(_require(p, "id")),
    "add_supplement": lambda m, p: m.add_supplement(p),
    "remove_supplement": lambda m, p: m.remove_supplement(_require(p, "id")),
    "toggle_supplement": lambda m, p: m.toggle_supplement(_require(p, "id"), bool(p.get("taken"))),
    "toggle_supplement_for_date": lambda m, p: m.toggle_supplement_for_date(
        _require(p, "name"), _require(p, "date"), bool(p.get("taken"))
    ),
    "update_weight_profile": lambda m, p: m.update_weight_profile(p),
    "add_weight_entry": lambda m, p: m.add_weight_entry(p.get("date"), p.get("weight")),
    "delete_weight_entry": lambda m, p: m.delete_weight_entry(_require(p, "timestamp")),
    "update_workout_day": lambda m, p: m.update_workout_day(_require(p, "day"), p.get("focus") or ""),
    "add_planned_exercise": lambda m, p: m.add_planned_exercise(
        _require(p, "day"), p.get("exercise") if isinstance(p.get("exercise"), Mapping) else p
    ),
    "update_planned_exercise": lambda m, p: m.update_planned_exercise(
        _require(p, "day"), _require(p, "id"), _patch(p)
    ),
    "delete_planned_exercise": lambda m, p: m.delete_planned_exercise(_require(p, "day"), _require(p, "id")),
    "update_preference": lambda m, p: m.update_preference(_require(p, "key"), p.get("value")),
    "toggle_theme": lambda m, p: m.toggle_theme(),
}

INTENT_KINDS = frozenset(_HANDLERS)


class Dispatcher:
    def __init__(self, manager: DataManager, sync_client: Optional["SyncClient"] = None) -> None:
        self.manager = manager
        self.sync_client = sync_client

    def dispatch(self, intent: Intent) -> DispatchResult:
        before = copy.deepcopy(self.manager.data)
        try:
            handler = _HANDLERS.get(intent.kind)
            if handler is None:
                raise ValidationError(f"Unknown intent: {intent.kind!r}")
            record = handler(self.manager, intent.payload or {})
        except GymbroError as exc:
            logger.warning("Intent %s rejected: %s", intent.kind, exc)
            return DispatchResult(ok=False, state=copy.deepcopy(self.manager.data), error=str(exc))

        after = self.manager.data
        changes = frozenset(
            key for key in set(before) | set(after) if before.get(key) != after.get(key)
        )
        logger.debug("Intent %s changed %s", intent.kind, sorted(changes))

        if changes and self.sync_client is not None:
            self.sync_client.push_in_background()

        return DispatchResult(ok=True, record=record, state=copy.deepcopy(after), changes=changes)
