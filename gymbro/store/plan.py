# -*- coding: utf-8 -*-
"""Static plan configuration: default supplement schedule, meal plan and weekly split."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..errors import ValidationError

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass(frozen=True)
class SupplementSlot:
    time: str
    supplements: List[str]
    dosage: str = ""


@dataclass(frozen=True)
class MealSlot:
    time: str
    meal: str
    food: str


@dataclass(frozen=True)
class TrainingDay:
    day: str
    focus: str


def _default_meal_plan() -> List[MealSlot]:
    return [
        MealSlot(time="10:00", meal="Breakfast", food="Eggs, bacon, avocado, spinach"),
        MealSlot(time="18:00", meal="Dinner", food="Steak, zucchini noodles, butter, salad"),
    ]


def _default_workout_plan() -> List[TrainingDay]:
    return [
        TrainingDay("Monday", "Push (Chest, Shoulders, Triceps)"),
        TrainingDay("Tuesday", "Pull (Back, Biceps)"),
        TrainingDay("Wednesday", "Legs (Quads, Hamstrings, Glutes)"),
        TrainingDay("Thursday", "Push (Chest, Shoulders, Triceps)"),
        TrainingDay("Friday", "Pull (Back, Biceps)"),
        TrainingDay("Saturday", "Legs (Quads, Hamstrings, Glutes)"),
        TrainingDay("Sunday", "Rest / Recovery"),
    ]


@dataclass
class PlanConfig:
    # No built-in supplements; users add their own.
    supplement_schedule: List[SupplementSlot] = field(default_factory=list)
    meal_plan: List[MealSlot] = field(default_factory=_default_meal_plan)
    workout_plan: List[TrainingDay] = field(default_factory=_default_workout_plan)


def normalize_weekday(day: str) -> str:
    name = (day or "").strip().capitalize()
    if name not in WEEKDAYS:
        raise ValidationError(f"Unknown weekday: {day!r}")
    return name
