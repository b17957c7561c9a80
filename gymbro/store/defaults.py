# -*- coding: utf-8 -*-
"""The canonical empty AppData document and the merge that fills gaps from it."""

from __future__ import annotations

import copy
from typing import Any, Dict, Mapping

DEFAULT_DATA: Dict[str, Any] = {
    "preferences": {
        "theme": "light",
        "startWeekOn": "monday",
        "notifications": True,
        "firstRun": True,
    },
    # date -> {supplement id or name -> taken}
    "supplementTracking": {},
    "workoutHistory": [],
    "mealHistory": [],
    "customSupplements": [],
    "weightTracking": {
        "profile": {
            "height": None,  # cm
            "currentWeight": None,  # kg
            "targetWeight": None,  # kg
        },
        "history": [],
    },
    # weekday -> [exercise]
    "plannedExercises": {},
    # weekday -> focus
    "customWorkoutPlan": {},
}


def get_defaults() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_DATA)


def deep_merge(target: Mapping[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """Overlay ``source`` onto ``target`` without touching either.

    Objects merge key by key; lists, scalars and ``None`` in ``source``
    replace whatever ``target`` holds.
    """
    result: Dict[str, Any] = copy.deepcopy(dict(target))
    for key, value in source.items():
        if isinstance(value, Mapping):
            base = result.get(key)
            result[key] = deep_merge(base if isinstance(base, Mapping) else {}, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def merge_with_defaults(document: Mapping[str, Any]) -> Dict[str, Any]:
    return deep_merge(get_defaults(), document)
