# -*- coding: utf-8 -*-
"""Domain data manager — typed operations over the in-memory AppData document.

Every successful mutation is written through to the :class:`LocalStore`
straight away. Invalid input and unknown ids raise before anything is
touched, so a failed call never leaves a half-applied change behind.
"""

from __future__ import annotations

import calendar
import logging
import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from ..errors import NotFoundError, ValidationError
from .local import LocalStore
from .models import (
    DataStats,
    Exercise,
    Meal,
    PlannedMeal,
    Preferences,
    ProgressStats,
    Record,
    Supplement,
    TodaysSupplement,
    WeightEntry,
    WeightProfile,
    WeightProgress,
    Workout,
    WorkoutDay,
)
from .plan import WEEKDAYS, MealSlot, PlanConfig, normalize_weekday

logger = logging.getLogger(__name__)

WORKOUT_HISTORY_CAP = 50
MEAL_HISTORY_CAP = 100
WEIGHT_HISTORY_CAP = 365

TIMEFRAMES = ("week", "month", "3months", "year", "all")

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

R = TypeVar("R", bound=Record)


def parse_int(value: Any) -> int:
    """Leading-integer parse; anything unparseable or negative becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        number = int(value) if math.isfinite(value) else 0
    else:
        match = _INT_PREFIX.match(str(value))
        number = int(match.group(1)) if match else 0
    return max(number, 0)


def parse_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _FLOAT_PREFIX.match(str(value))
        if not match:
            return None
        number = float(match.group(1))
    return number if math.isfinite(number) else None


def _optional_float(value: Any) -> Optional[float]:
    return parse_float(value) if value else None


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value or "")[:10])
    except ValueError:
        return None


def _parse_timestamp(value: Any) -> datetime:
    try:
        parsed = datetime.fromisoformat(str(value or "").replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _shift_months(day: date, months: int) -> date:
    index = day.year * 12 + (day.month - 1) + months
    year, month0 = divmod(index, 12)
    last_day = calendar.monthrange(year, month0 + 1)[1]
    return day.replace(year=year, month=month0 + 1, day=min(day.day, last_day))


def timeframe_start(timeframe: str, today: date) -> Optional[date]:
    """First date included by ``timeframe``; ``None`` means no lower bound."""
    if timeframe == "week":
        return today - timedelta(days=7)
    if timeframe == "month":
        return _shift_months(today, -1)
    if timeframe == "3months":
        return _shift_months(today, -3)
    if timeframe == "year":
        return _shift_months(today, -12)
    return None


def _get(data: Mapping[str, Any], key: str) -> Any:
    """Read a camelCase input field, accepting its snake_case spelling too."""
    if key in data:
        return data[key]
    return data.get(to_snake(key))


def _index_by_id(items: List[Any], record_id: str) -> int:
    for idx, item in enumerate(items):
        if isinstance(item, dict) and item.get("id") == record_id:
            return idx
    return -1


def _records(model: Type[R], items: Iterable[Any]) -> List[R]:
    out: List[R] = []
    for item in items:
        try:
            out.append(model.model_validate(item))
        except PydanticValidationError as exc:
            logger.warning("Skipping malformed %s record: %s", model.__name__, exc.errors()[:1])
    return out


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DataManager:
    def __init__(
        self,
        store: LocalStore,
        plan: Optional[PlanConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.plan = plan or PlanConfig()
        self._clock = clock or _utc_now
        self._last_id = 0
        self.data: Dict[str, Any] = store.get()
        self._cleanup_invalid_supplements()

    # ---- plumbing ----

    def now(self) -> datetime:
        return self._clock().astimezone(timezone.utc)

    def today(self) -> date:
        return self.now().date()

    def _timestamp(self) -> str:
        return self.now().isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def _new_id(self) -> str:
        candidate = int(self.now().timestamp() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return str(candidate)

    def _persist(self) -> bool:
        ok = self.store.save(self.data)
        if not ok:
            logger.warning("Change kept in memory but could not be persisted")
        return ok

    def _list(self, key: str) -> List[Any]:
        value = self.data.get(key)
        if not isinstance(value, list):
            value = []
            self.data[key] = value
        return value

    def _dict(self, key: str) -> Dict[str, Any]:
        value = self.data.get(key)
        if not isinstance(value, dict):
            value = {}
            self.data[key] = value
        return value

    def _weight_tracking(self) -> Dict[str, Any]:
        tracking = self._dict("weightTracking")
        if not isinstance(tracking.get("profile"), dict):
            tracking["profile"] = {}
        if not isinstance(tracking.get("history"), list):
            tracking["history"] = []
        return tracking

    def _tracking_day(self, day: str) -> Dict[str, bool]:
        tracking = self._dict("supplementTracking")
        entries = tracking.get(day)
        if not isinstance(entries, dict):
            entries = {}
            tracking[day] = entries
        return entries

    def refresh(self) -> Dict[str, Any]:
        """Reload the in-memory copy after the stored document was replaced."""
        self.data = self.store.get()
        self._cleanup_invalid_supplements()
        logger.info("Reloaded data: %d workouts", len(self.data.get("workoutHistory") or []))
        return self.data

    def _cleanup_invalid_supplements(self) -> None:
        supplements = self.data.get("customSupplements")
        if not isinstance(supplements, list):
            return
        valid = [
            s for s in supplements
            if isinstance(s, dict) and isinstance(s.get("name"), str) and s["name"].strip()
        ]
        removed = len(supplements) - len(valid)
        # Imported or pulled documents may carry supplements without an id.
        reassigned = 0
        for supplement in valid:
            ident = supplement.get("id")
            if ident is None or ident == "":
                supplement["id"] = self._new_id()
                reassigned += 1
            elif not isinstance(ident, str):
                supplement["id"] = str(ident)
                reassigned += 1
        if removed or reassigned:
            self.data["customSupplements"] = valid
            logger.info("Cleaned up supplements: %d removed, %d given new ids", removed, reassigned)
            self._persist()

    # ---- workouts ----

    def log_workout(self, workout_data: Mapping[str, Any]) -> Workout:
        workout = Workout(
            id=self._new_id(),
            type=str(workout_data.get("type") or ""),
            date=str(workout_data.get("date") or ""),
            duration=parse_int(workout_data.get("duration")),
            exercises=str(workout_data.get("exercises") or ""),
            notes=str(workout_data.get("notes") or ""),
            timestamp=self._timestamp(),
        )
        history = self._list("workoutHistory")
        history.insert(0, workout.to_document())
        del history[WORKOUT_HISTORY_CAP:]
        logger.info("Logged workout %s (%s)", workout.id, workout.type)
        self._persist()
        return workout

    def get_workout(self, workout_id: str) -> Optional[Workout]:
        history = self.data.get("workoutHistory") or []
        idx = _index_by_id(history, workout_id)
        return Workout.model_validate(history[idx]) if idx >= 0 else None

    def get_workout_history(self, type_filter: str = "all") -> List[Workout]:
        workouts = _records(Workout, self.data.get("workoutHistory") or [])
        if type_filter == "all":
            return workouts
        needle = type_filter.lower()
        return [w for w in workouts if needle in w.type.lower()]

    def update_workout(self, workout_id: str, patch: Mapping[str, Any]) -> Workout:
        history = self.data.get("workoutHistory") or []
        idx = _index_by_id(history, workout_id)
        if idx < 0:
            raise NotFoundError(f"Workout not found: {workout_id}")

        updated = dict(history[idx])
        if patch.get("type"):
            updated["type"] = str(patch["type"])
        if patch.get("date"):
            updated["date"] = str(patch["date"])
        if patch.get("duration"):
            updated["duration"] = parse_int(patch["duration"])
        for key in ("exercises", "notes"):
            if patch.get(key) is not None:
                updated[key] = str(patch[key])
        updated["lastModified"] = self._timestamp()

        workout = Workout.model_validate(updated)
        history[idx] = workout.to_document()
        logger.info("Updated workout %s", workout_id)
        self._persist()
        return workout

    def delete_workout(self, workout_id: str) -> Workout:
        history = self.data.get("workoutHistory") or []
        idx = _index_by_id(history, workout_id)
        if idx < 0:
            raise NotFoundError(f"Workout not found: {workout_id}")
        removed = history.pop(idx)
        logger.info("Deleted workout %s", workout_id)
        self._persist()
        return Workout.model_validate(removed)

    # ---- meals ----

    def log_meal(self, meal_data: Mapping[str, Any]) -> Meal:
        meal = Meal(
            id=self._new_id(),
            type=str(meal_data.get("type") or ""),
            time=str(meal_data.get("time") or ""),
            date=str(meal_data.get("date") or ""),
            food=str(meal_data.get("food") or ""),
            calories=parse_int(meal_data.get("calories")),
            notes=str(meal_data.get("notes") or ""),
            timestamp=self._timestamp(),
        )
        history = self._list("mealHistory")
        history.insert(0, meal.to_document())
        del history[MEAL_HISTORY_CAP:]
        logger.info("Logged meal %s (%s)", meal.id, meal.type)
        self._persist()
        return meal

    def delete_meal(self, meal_id: str) -> Meal:
        history = self.data.get("mealHistory") or []
        idx = _index_by_id(history, meal_id)
        if idx < 0:
            raise NotFoundError(f"Meal not found: {meal_id}")
        removed = history.pop(idx)
        self._persist()
        return Meal.model_validate(removed)

    def get_meal_history(self, type_filter: str = "all") -> List[Meal]:
        meals = _records(Meal, self.data.get("mealHistory") or [])
        if type_filter == "all":
            return meals
        needle = type_filter.lower()
        return [m for m in meals if needle in m.type.lower()]

    def get_meal_plan(self) -> List[MealSlot]:
        return list(self.plan.meal_plan)

    def get_todays_meals(self) -> List[PlannedMeal]:
        today = self.today().isoformat()
        todays = [m for m in self.get_meal_history() if m.date == today]
        planned: List[PlannedMeal] = []
        for slot in self.plan.meal_plan:
            logged = next((m for m in todays if m.type == slot.meal), None)
            planned.append(
                PlannedMeal(
                    time=slot.time,
                    meal=slot.meal,
                    food=slot.food,
                    logged=logged is not None,
                    logged_meal=logged,
                )
            )
        return planned

    # ---- supplements ----

    def _find_custom_supplement(self, key: str, *, by_id: bool = True) -> Optional[Dict[str, Any]]:
        for supplement in self.data.get("customSupplements") or []:
            if not isinstance(supplement, dict):
                continue
            if supplement.get("name") == key or (by_id and supplement.get("id") == key):
                return supplement
        return None

    def add_supplement(self, supplement_data: Mapping[str, Any]) -> Supplement:
        name = str(supplement_data.get("name") or "").strip()
        if not name:
            raise ValidationError("Supplement name is required")
        supplement = Supplement(
            id=self._new_id(),
            name=name,
            dosage=str(supplement_data.get("dosage") or "").strip(),
            time=str(supplement_data.get("time") or "08:00"),
            taken=False,
            is_custom=True,
        )
        self._list("customSupplements").append(supplement.to_document())
        logger.info("Added supplement %s (%s)", supplement.id, supplement.name)
        self._persist()
        return supplement

    def remove_supplement(self, supplement_id: str) -> Supplement:
        supplements = self.data.get("customSupplements") or []
        removed = [
            s for s in supplements
            if isinstance(s, dict) and (s.get("id") == supplement_id or s.get("name") == supplement_id)
        ]
        if not removed:
            raise NotFoundError(f"Supplement not found: {supplement_id}")
        self.data["customSupplements"] = [s for s in supplements if not any(s is r for r in removed)]
        self._persist()
        return Supplement.model_validate(removed[0])

    def toggle_supplement(self, supplement_id: str, taken: bool) -> Dict[str, bool]:
        """Record today's taken-state for a custom supplement (id or name) or a default one (name)."""
        day = self._tracking_day(self.today().isoformat())
        supplement = self._find_custom_supplement(supplement_id)
        if supplement is not None:
            supplement["taken"] = bool(taken)
            # Both keys, so lookups by either id or name agree.
            for key in (supplement.get("id"), supplement.get("name")):
                if key:
                    day[key] = bool(taken)
        else:
            day[supplement_id] = bool(taken)
        self._persist()
        return dict(day)

    def toggle_supplement_for_date(self, supplement_name: str, on_date: str, taken: bool) -> Dict[str, bool]:
        parsed = parse_date(on_date)
        if parsed is None:
            raise ValidationError(f"Invalid date: {on_date!r}")
        day_key = parsed.isoformat()
        day = self._tracking_day(day_key)
        supplement = self._find_custom_supplement(supplement_name, by_id=False)
        if supplement is not None:
            if supplement.get("id"):
                day[supplement["id"]] = bool(taken)
            day[supplement_name] = bool(taken)
            if parsed == self.today():
                supplement["taken"] = bool(taken)
        else:
            day[supplement_name] = bool(taken)
        self._persist()
        return dict(day)

    def get_todays_supplements(self) -> List[TodaysSupplement]:
        tracking = (self.data.get("supplementTracking") or {}).get(self.today().isoformat()) or {}
        result: List[TodaysSupplement] = []
        for slot in self.plan.supplement_schedule:
            for name in slot.supplements:
                result.append(
                    TodaysSupplement(
                        name=name,
                        time=slot.time,
                        dosage=slot.dosage,
                        taken=bool(tracking.get(name, False)),
                        is_custom=False,
                    )
                )
        for supplement in _records(Supplement, self.data.get("customSupplements") or []):
            if supplement.id in tracking:
                taken = tracking[supplement.id]
            else:
                taken = tracking.get(supplement.name, False)
            result.append(
                TodaysSupplement(
                    id=supplement.id,
                    name=supplement.name,
                    dosage=supplement.dosage,
                    time=supplement.time,
                    taken=bool(taken),
                    is_custom=True,
                )
            )
        return result

    def get_weekly_supplement_data(self) -> Dict[str, Dict[str, bool]]:
        today = self.today()
        first_weekday = 6 if str(self.get_preferences().start_week_on).lower() == "sunday" else 0
        start = today - timedelta(days=(today.weekday() - first_weekday) % 7)
        tracking = self.data.get("supplementTracking") or {}
        week: Dict[str, Dict[str, bool]] = {}
        for offset in range(7):
            key = (start + timedelta(days=offset)).isoformat()
            week[key] = dict(tracking.get(key) or {})
        return week

    # ---- weight ----

    def update_weight_profile(self, profile: Mapping[str, Any]) -> WeightProfile:
        """Update height and current/target weight.

        Fields missing from ``profile`` keep their stored value; a field sent
        as empty or ``None`` is cleared. A changed current weight is also
        recorded as today's weight entry.
        """
        tracking = self._weight_tracking()
        previous = tracking["profile"]
        values = {}
        for key in ("height", "currentWeight", "targetWeight"):
            if key in profile or to_snake(key) in profile:
                values[key] = _optional_float(_get(profile, key))
            else:
                values[key] = _optional_float(previous.get(key))
        updated = WeightProfile(
            height=values["height"],
            current_weight=values["currentWeight"],
            target_weight=values["targetWeight"],
        )
        tracking["profile"] = updated.to_document()

        current = updated.current_weight
        if current is not None and current != previous.get("currentWeight"):
            today = self.today().isoformat()
            history = tracking["history"]
            todays = [e for e in history if isinstance(e, dict) and e.get("date") == today]
            same = next((e for e in todays if e.get("weight") == current), None)
            existing = todays[0] if todays else None
            if same is not None:
                # Already recorded today; never store a second (date, weight) pair.
                same["timestamp"] = self._timestamp()
            elif existing is not None:
                existing["weight"] = current
                existing["timestamp"] = self._timestamp()
            else:
                entry = WeightEntry(date=today, weight=current, timestamp=self._timestamp())
                history.insert(0, entry.to_document())
                del history[WEIGHT_HISTORY_CAP:]

        self._persist()
        return updated

    def get_weight_profile(self) -> WeightProfile:
        profile = (self.data.get("weightTracking") or {}).get("profile") or {}
        return WeightProfile.model_validate(profile)

    def add_weight_entry(self, entry_date: str, weight: Any) -> WeightEntry:
        value = parse_float(weight)
        if value is None:
            raise ValidationError(f"Weight must be a number, got {weight!r}")
        if parse_date(entry_date) is None:
            raise ValidationError(f"Invalid date: {entry_date!r}")

        tracking = self._weight_tracking()
        history = tracking["history"]
        for existing in history:
            if isinstance(existing, dict) and existing.get("date") == entry_date and existing.get("weight") == value:
                logger.info("Weight %.2f on %s already recorded", value, entry_date)
                return WeightEntry.model_validate(existing)

        entry = WeightEntry(date=entry_date, weight=value, timestamp=self._timestamp())
        history.insert(0, entry.to_document())
        del history[WEIGHT_HISTORY_CAP:]

        # The most recently recorded entry sets currentWeight, whatever its date.
        newest = max(history, key=lambda e: _parse_timestamp(e.get("timestamp")))
        tracking["profile"]["currentWeight"] = newest.get("weight")

        self._persist()
        return entry

    def delete_weight_entry(self, timestamp: str) -> WeightEntry:
        history = self._weight_tracking()["history"]
        for idx, entry in enumerate(history):
            if isinstance(entry, dict) and entry.get("timestamp") == timestamp:
                removed = history.pop(idx)
                self._persist()
                return WeightEntry.model_validate(removed)
        raise NotFoundError(f"Weight entry not found: {timestamp}")

    def get_weight_history(self, limit: int = 30) -> List[WeightEntry]:
        history = (self.data.get("weightTracking") or {}).get("history") or []
        entries = _records(WeightEntry, history)
        entries.sort(key=lambda e: _parse_timestamp(e.timestamp), reverse=True)
        return entries[:limit]

    @staticmethod
    def calculate_bmi(weight: Optional[float], height_cm: Optional[float]) -> Optional[float]:
        if not weight or not height_cm:
            return None
        meters = height_cm / 100
        return weight / (meters * meters)

    @staticmethod
    def bmi_category(bmi: Optional[float]) -> str:
        if not bmi:
            return "unknown"
        if bmi < 18.5:
            return "underweight"
        if bmi < 25:
            return "normal"
        if bmi < 30:
            return "overweight"
        return "obese"

    def get_weight_progress(self) -> Optional[WeightProgress]:
        profile = self.get_weight_profile()
        if not profile.current_weight or not profile.target_weight:
            return None
        difference = profile.current_weight - profile.target_weight
        return WeightProgress(
            difference=round(difference, 2),
            progress=round(abs(difference), 2),
            direction="losing" if difference > 0 else "gaining",
        )

    # ---- weekly plan ----

    def update_workout_day(self, day: str, focus: str) -> WorkoutDay:
        """Override the focus for ``day``; an empty focus restores the default."""
        name = normalize_weekday(day)
        overrides = self._dict("customWorkoutPlan")
        focus = (focus or "").strip()
        if focus:
            overrides[name] = focus
        else:
            overrides.pop(name, None)
        self._persist()
        return next(d for d in self.get_workout_plan() if d.day == name)

    def get_workout_plan(self) -> List[WorkoutDay]:
        overrides = self.data.get("customWorkoutPlan") or {}
        plan = [WorkoutDay(day=d.day, focus=overrides.get(d.day) or d.focus) for d in self.plan.workout_plan]
        planned_days = {d.day for d in plan}
        for day in WEEKDAYS:
            if day not in planned_days and overrides.get(day):
                plan.append(WorkoutDay(day=day, focus=overrides[day]))
        return plan

    def get_todays_workout(self) -> str:
        today = WEEKDAYS[self.today().weekday()]
        match = next((d for d in self.get_workout_plan() if d.day == today), None)
        return match.focus if match else "Rest Day"

    def _planned_day(self, day: str) -> List[Any]:
        planned = self._dict("plannedExercises")
        exercises = planned.get(day)
        if not isinstance(exercises, list):
            exercises = []
            planned[day] = exercises
        return exercises

    def get_planned_exercises(self, day: str) -> List[Exercise]:
        name = normalize_weekday(day)
        return _records(Exercise, (self.data.get("plannedExercises") or {}).get(name) or [])

    def add_planned_exercise(self, day: str, exercise: Mapping[str, Any]) -> Exercise:
        name = normalize_weekday(day)
        exercise_name = str(exercise.get("name") or "").strip()
        if not exercise_name:
            raise ValidationError("Exercise name is required")
        record = Exercise(
            id=self._new_id(),
            name=exercise_name,
            sets=exercise.get("sets") or "",
            reps=exercise.get("reps") or "",
            weight=exercise.get("weight") or "",
            notes=str(exercise.get("notes") or ""),
        )
        self._planned_day(name).append(record.to_document())
        self._persist()
        return record

    def update_planned_exercise(self, day: str, exercise_id: str, patch: Mapping[str, Any]) -> Exercise:
        name = normalize_weekday(day)
        exercises = (self.data.get("plannedExercises") or {}).get(name) or []
        idx = _index_by_id(exercises, exercise_id)
        if idx < 0:
            raise NotFoundError(f"Exercise not found: {exercise_id}")
        merged = {**exercises[idx], **{k: v for k, v in patch.items() if k != "id"}}
        if not str(merged.get("name") or "").strip():
            raise ValidationError("Exercise name is required")
        try:
            record = Exercise.model_validate(merged)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc)) from exc
        exercises[idx] = record.to_document()
        self._persist()
        return record

    def delete_planned_exercise(self, day: str, exercise_id: str) -> Exercise:
        name = normalize_weekday(day)
        exercises = (self.data.get("plannedExercises") or {}).get(name) or []
        idx = _index_by_id(exercises, exercise_id)
        if idx < 0:
            raise NotFoundError(f"Exercise not found: {exercise_id}")
        removed = exercises.pop(idx)
        self._persist()
        return Exercise.model_validate(removed)

    # ---- progress views ----

    def get_filtered_weight_data(self, timeframe: str) -> List[WeightEntry]:
        history = (self.data.get("weightTracking") or {}).get("history") or []
        return self._filter_by_date(_records(WeightEntry, history), timeframe)

    def get_filtered_workout_data(self, timeframe: str) -> List[Workout]:
        return self._filter_by_date(self.get_workout_history(), timeframe)

    def _filter_by_date(self, records: List[R], timeframe: str) -> List[R]:
        start = timeframe_start(timeframe, self.today())
        dated = [(parse_date(getattr(r, "date", None)), r) for r in records]
        if start is not None:
            dated = [(d, r) for d, r in dated if d is not None and d >= start]
        dated.sort(key=lambda pair: pair[0] or date.min)
        return [r for _, r in dated]

    def get_progress_stats(self, timeframe: str) -> ProgressStats:
        weights = self.get_filtered_weight_data(timeframe)
        workouts = self.get_filtered_workout_data(timeframe)

        stats = ProgressStats(total_workouts=len(workouts))
        if len(weights) > 1:
            stats.weight_change = round(weights[-1].weight - weights[0].weight, 2)
        if workouts:
            total = sum(w.duration for w in workouts)
            stats.average_workout_duration = round(total / len(workouts))
        for workout in workouts:
            stats.workout_types[workout.type] = stats.workout_types.get(workout.type, 0) + 1
        return stats

    # ---- preferences ----

    def get_preferences(self) -> Preferences:
        try:
            return Preferences.model_validate(self.data.get("preferences") or {})
        except PydanticValidationError:
            logger.warning("Stored preferences are invalid, using defaults")
            return Preferences()

    def update_preference(self, key: str, value: Any) -> Preferences:
        field_name = to_snake(key)
        if field_name not in Preferences.model_fields:
            raise ValidationError(f"Unknown preference: {key!r}")
        current = self.get_preferences().model_dump()
        current[field_name] = value
        try:
            updated = Preferences.model_validate(current)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid value for {key!r}: {value!r}") from exc
        self.data["preferences"] = {**self._dict("preferences"), **updated.to_document()}
        self._persist()
        return updated

    def toggle_theme(self) -> Preferences:
        theme = "light" if self.get_preferences().theme == "dark" else "dark"
        return self.update_preference("theme", theme)

    # ---- maintenance ----

    def data_stats(self) -> DataStats:
        tracking = self.data.get("supplementTracking") or {}
        planned = self.data.get("plannedExercises") or {}
        return DataStats(
            storage=self.store.storage_info(),
            workouts=len(self.data.get("workoutHistory") or []),
            meals=len(self.data.get("mealHistory") or []),
            custom_supplements=len(self.data.get("customSupplements") or []),
            supplement_days=len(tracking),
            supplement_entries=sum(len(v) for v in tracking.values() if isinstance(v, dict)),
            weight_entries=len((self.data.get("weightTracking") or {}).get("history") or []),
            planned_exercises=sum(len(v) for v in planned.values() if isinstance(v, list)),
        )
