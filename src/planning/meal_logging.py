"""Marking schedule slots as eaten and totalling what was logged."""

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import List, Optional, Sequence

from src.data_layer.exceptions import (
    InvalidSlotError,
    MealNotFoundError,
    ScheduleDayNotFoundError,
)
from src.data_layer.models import (
    SLOT_NAMES,
    CustomMeal,
    Macros,
    Meal,
    ScheduleDay,
    SlotEntry,
)


@dataclass(frozen=True)
class LoggedTotals:
    """Calories and macros of the logged slots of one day."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0


def _find_meal(meal_pool: Sequence[Meal], meal_id: str) -> Optional[Meal]:
    for meal in meal_pool:
        if meal.id == meal_id:
            return meal
    return None


def _replace_slot(
    schedule: Sequence[ScheduleDay],
    day: date,
    slot: str,
    entry: SlotEntry,
) -> List[ScheduleDay]:
    if slot not in SLOT_NAMES:
        raise InvalidSlotError(slot)
    updated: List[ScheduleDay] = []
    found = False
    for schedule_day in schedule:
        if schedule_day.date == day:
            schedule_day = replace(schedule_day, **{slot: entry})
            found = True
        updated.append(schedule_day)
    if not found:
        raise ScheduleDayNotFoundError(day)
    return updated


def log_pool_meal(
    schedule: Sequence[ScheduleDay],
    day: date,
    slot: str,
    meal_id: str,
    meal_pool: Sequence[Meal],
    logged_at: datetime,
) -> List[ScheduleDay]:
    """Mark a slot as eaten with a meal from the pool.

    Any custom meal previously logged in that slot is discarded.

    Args:
        schedule: Current schedule (not modified)
        day: Date of the day to update
        slot: One of SLOT_NAMES
        meal_id: Id of the pool meal that was eaten
        meal_pool: Pool the id must belong to
        logged_at: Timestamp to record

    Returns:
        New schedule list with the slot updated

    Raises:
        InvalidSlotError: If slot is not a known slot name
        MealNotFoundError: If meal_id is not in the pool
        ScheduleDayNotFoundError: If day is not in the schedule
    """
    if slot not in SLOT_NAMES:
        raise InvalidSlotError(slot)
    if _find_meal(meal_pool, meal_id) is None:
        raise MealNotFoundError(meal_id)
    entry = SlotEntry(meal_id=meal_id, logged=True, logged_at=logged_at)
    return _replace_slot(schedule, day, slot, entry)


def log_custom_meal(
    schedule: Sequence[ScheduleDay],
    day: date,
    slot: str,
    custom_meal: CustomMeal,
    logged_at: datetime,
) -> List[ScheduleDay]:
    """Mark a slot as eaten with a free-form meal, clearing any pool reference.

    Raises:
        ValueError: If the custom meal lacks a dish name, calories or macros
        InvalidSlotError: If slot is not a known slot name
        ScheduleDayNotFoundError: If day is not in the schedule
    """
    if not custom_meal.dish or not custom_meal.calories or custom_meal.macros is None:
        raise ValueError("Custom meal data requires dish, calories, and macros.")
    entry = SlotEntry(logged=True, logged_at=logged_at, custom_meal=custom_meal)
    return _replace_slot(schedule, day, slot, entry)


def logged_totals(schedule_day: ScheduleDay, meal_pool: Sequence[Meal]) -> LoggedTotals:
    """Sum calories and macros over the logged slots of a day.

    Unlogged suggestions do not count. Pool meals contribute their estimates;
    a pool id that no longer resolves contributes nothing.
    """
    calories = protein = carbs = fats = 0.0
    for name in SLOT_NAMES:
        entry = schedule_day.slot(name)
        if not entry.logged:
            continue
        if entry.custom_meal is not None:
            meal_calories = entry.custom_meal.calories
            macros = entry.custom_meal.macros
        else:
            meal = _find_meal(meal_pool, entry.meal_id) if entry.meal_id else None
            if meal is None:
                continue
            meal_calories = meal.estimated_calories or 0
            macros = meal.estimated_macros or Macros()
        calories += meal_calories
        protein += macros.protein
        carbs += macros.carbs
        fats += macros.fats
    return LoggedTotals(calories=calories, protein=protein, carbs=carbs, fats=fats)
