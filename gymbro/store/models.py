# -*- coding: utf-8 -*-
"""Tracker records — Pydantic models serialized with the document's camelCase keys."""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    # Optional keys that are left out of the stored document while unset.
    omit_if_none: ClassVar[Tuple[str, ...]] = ()

    def to_document(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True)
        for key in self.omit_if_none:
            if data.get(key) is None:
                data.pop(key, None)
        return data


class Workout(Record):
    omit_if_none: ClassVar[Tuple[str, ...]] = ("lastModified",)

    id: str
    type: str = ""
    date: str = Field("", description="YYYY-MM-DD")
    duration: int = Field(0, ge=0, description="minutes")
    exercises: str = ""
    notes: str = ""
    timestamp: str
    last_modified: Optional[str] = None


class Meal(Record):
    id: str
    type: str = ""
    time: str = Field("", description="HH:MM, optional")
    date: str = Field("", description="YYYY-MM-DD")
    food: str = ""
    calories: int = Field(0, ge=0)
    notes: str = ""
    timestamp: str


class Supplement(Record):
    id: str
    name: str = Field(..., min_length=1)
    dosage: str = ""
    time: str = "08:00"
    taken: bool = False
    is_custom: bool = True


class WeightEntry(Record):
    date: str
    weight: float = Field(..., description="kg")
    timestamp: str


class WeightProfile(Record):
    height: Optional[float] = Field(None, description="cm")
    current_weight: Optional[float] = Field(None, description="kg")
    target_weight: Optional[float] = Field(None, description="kg")


class Exercise(Record):
    id: str
    name: str
    sets: Union[int, float, str] = ""
    reps: Union[int, float, str] = ""
    weight: Union[int, float, str] = ""
    notes: str = ""


class Preferences(Record):
    theme: Literal["light", "dark"] = "light"
    start_week_on: str = "monday"
    notifications: bool = True
    first_run: bool = True


# ---- Derived views ----


class TodaysSupplement(Record):
    id: Optional[str] = None
    name: str
    dosage: str = ""
    time: str = ""
    taken: bool = False
    is_custom: bool = False


class PlannedMeal(Record):
    time: str
    meal: str
    food: str
    logged: bool = False
    logged_meal: Optional[Meal] = None


class WorkoutDay(Record):
    day: str
    focus: str


class ProgressStats(Record):
    total_workouts: int = 0
    weight_change: float = 0.0
    average_workout_duration: int = 0
    workout_types: Dict[str, int] = Field(default_factory=dict)


class WeightProgress(Record):
    difference: float
    progress: float
    direction: Literal["losing", "gaining"]


class DataStats(Record):
    storage: Optional[Dict[str, Any]] = None
    workouts: int = 0
    meals: int = 0
    custom_supplements: int = 0
    supplement_days: int = 0
    supplement_entries: int = 0
    weight_entries: int = 0
    planned_exercises: int = 0
