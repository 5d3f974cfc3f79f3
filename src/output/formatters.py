"""Formatters for meal schedules (JSON and Markdown)."""

import json
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

from src.data_layer.ledger_store import ledger_to_json
from src.data_layer.meal_pool_db import meal_to_dict, parse_macros
from src.data_layer.models import (
    SLOT_NAMES,
    CustomMeal,
    Meal,
    ScheduleDay,
    SlotEntry,
)
from src.planning.cycle import day_of_week_label
from src.planning.meal_logging import LoggedTotals, logged_totals
from src.planning.meal_scheduler import ScheduleResult


SLOT_DISPLAY_NAMES = {
    "breakfast": "Breakfast",
    "lunch": "Lunch",
    "dinner": "Dinner",
    "snack1": "Snack 1",
    "snack2": "Snack 2",
}


def slot_to_json(entry: SlotEntry) -> Dict[str, Any]:
    """Serialize a slot. Empty slots become {}."""
    out: Dict[str, Any] = {}
    if entry.meal_id is not None:
        out["mealId"] = entry.meal_id
    if entry.logged:
        out["logged"] = True
        if entry.logged_at is not None:
            out["loggedAt"] = entry.logged_at.isoformat()
    if entry.custom_meal is not None:
        custom = entry.custom_meal
        out["customDish"] = custom.dish
        out["customIngredients"] = list(custom.ingredients)
        out["customPreparation"] = custom.preparation
        out["customCalories"] = custom.calories
        out["customMacros"] = {
            "protein": custom.macros.protein,
            "carbs": custom.macros.carbs,
            "fats": custom.macros.fats,
        }
    return out


def slot_from_json(data: Optional[Dict[str, Any]]) -> SlotEntry:
    if not data:
        return SlotEntry()
    if not isinstance(data, dict):
        raise ValueError(f"Schedule slot must be an object, got {data!r}")
    custom_meal = None
    if data.get("customDish"):
        custom_meal = CustomMeal(
            dish=data["customDish"],
            calories=float(data.get("customCalories") or 0.0),
            macros=parse_macros(data.get("customMacros") or {}),
            ingredients=tuple(data.get("customIngredients") or ()),
            preparation=data.get("customPreparation") or "",
        )
    logged_at = data.get("loggedAt")
    return SlotEntry(
        meal_id=data.get("mealId"),
        logged=bool(data.get("logged", False)),
        logged_at=datetime.fromisoformat(logged_at) if logged_at else None,
        custom_meal=custom_meal,
    )


def schedule_to_json(schedule: Sequence[ScheduleDay]) -> List[Dict[str, Any]]:
    """Serialize schedule days with ISO dates and camelCase keys."""
    days = []
    for day in schedule:
        day_json: Dict[str, Any] = {
            "date": day.date.isoformat(),
            "dayOfWeek": day.day_of_week,
        }
        for name in SLOT_NAMES:
            day_json[name] = slot_to_json(day.slot(name))
        days.append(day_json)
    return days


def schedule_from_json(data: List[Dict[str, Any]]) -> List[ScheduleDay]:
    """Parse schedule days; dayOfWeek is recomputed from the date.

    Raises:
        KeyError: If a day has no date
        ValueError: If a day, slot or date is malformed
    """
    schedule = []
    for day_json in data:
        if not isinstance(day_json, dict):
            raise ValueError(f"Schedule day must be an object, got {day_json!r}")
        day = date.fromisoformat(str(day_json["date"])[:10])
        slots = {name: slot_from_json(day_json.get(name)) for name in SLOT_NAMES}
        schedule.append(ScheduleDay(date=day, day_of_week=day_of_week_label(day), **slots))
    return schedule


def totals_to_json(totals: LoggedTotals) -> Dict[str, float]:
    return {
        "calories": totals.calories,
        "protein": totals.protein,
        "carbs": totals.carbs,
        "fats": totals.fats,
    }


def hydrate_schedule(
    schedule: Sequence[ScheduleDay],
    meal_pool: Sequence[Meal],
) -> List[Dict[str, Any]]:
    """Serialize the schedule with pool meal details merged into each slot.

    Slot fields win over pool fields. Ids missing from the pool are left as
    bare references. Each day also carries the totals of its logged slots.
    """
    meals_by_id = {meal.id: meal for meal in meal_pool}
    days = schedule_to_json(schedule)
    for day, day_json in zip(schedule, days):
        day_json["loggedTotals"] = totals_to_json(logged_totals(day, meal_pool))
        for name in SLOT_NAMES:
            slot = day_json[name]
            meal = meals_by_id.get(slot.get("mealId"))
            if meal is not None:
                day_json[name] = {**meal_to_dict(meal), **slot}
    return days


def format_schedule_json(
    result: ScheduleResult,
    meal_pool: Optional[Sequence[Meal]] = None,
) -> Dict[str, Any]:
    """Format a ScheduleResult as JSON (for API usage).

    Args:
        result: ScheduleResult from the scheduler
        meal_pool: If given, slots are hydrated with meal details

    Returns:
        Dictionary ready for JSON serialization
    """
    if meal_pool is not None:
        schedule_json = hydrate_schedule(result.schedule, meal_pool)
    else:
        schedule_json = schedule_to_json(result.schedule)

    return {
        "currentScheduleStartDate": result.start_date.isoformat() if result.start_date else None,
        "currentSchedule": schedule_json,
        "recentlyUsedMealIds": ledger_to_json(result.updated_recently_used),
        "warnings": [
            {
                "dayIndex": w.day_index,
                "date": w.date.isoformat(),
                "slot": w.slot,
                "category": w.category,
                "message": w.message,
            }
            for w in result.warnings
        ],
    }


def format_schedule_json_string(
    result: ScheduleResult,
    meal_pool: Optional[Sequence[Meal]] = None,
    indent: int = 2,
) -> str:
    """Format a ScheduleResult as a JSON string."""
    return json.dumps(format_schedule_json(result, meal_pool), indent=indent)


def format_meal_line(meal: Meal) -> str:
    """One-line summary, e.g. "Oatmeal (350 kcal, P 12g / C 55g / F 8g)"."""
    details = []
    if meal.estimated_calories is not None:
        details.append(f"{meal.estimated_calories} kcal")
    if meal.estimated_macros is not None:
        m = meal.estimated_macros
        details.append(f"P {m.protein:.0f}g / C {m.carbs:.0f}g / F {m.fats:.0f}g")
    if details:
        return f"{meal.dish} ({', '.join(details)})"
    return meal.dish


def format_schedule_markdown(
    result: ScheduleResult,
    meal_pool: Sequence[Meal],
    general_notes: Sequence[str] = (),
    flexibility_tips: Sequence[str] = (),
) -> str:
    """Format a ScheduleResult as Markdown, one section per day.

    Args:
        result: ScheduleResult from the scheduler
        meal_pool: Pool used to resolve meal ids to dishes
        general_notes: Pool-level dietary notes, listed after the days
        flexibility_tips: Advice on swapping meals, listed after the notes

    Returns:
        Formatted Markdown string
    """
    meals_by_id = {meal.id: meal for meal in meal_pool}
    lines = ["# Meal Schedule\n"]

    if result.warnings:
        lines.append("⚠️ **Schedule has gaps**\n")
        lines.append("## Warnings\n")
        for warning in result.warnings:
            lines.append(f"- {warning.message}")
        lines.append("")

    for day in result.schedule:
        lines.append(f"## {day.day_of_week}, {day.date.isoformat()}")
        for name in SLOT_NAMES:
            entry = day.slot(name)
            if entry.is_empty:
                continue
            label = SLOT_DISPLAY_NAMES[name]
            if entry.custom_meal is not None:
                text = f"{entry.custom_meal.dish} (custom)"
            else:
                meal = meals_by_id.get(entry.meal_id)
                text = format_meal_line(meal) if meal else entry.meal_id
            marker = " ✅" if entry.logged else ""
            lines.append(f"- **{label}:** {text}{marker}")
        lines.append("")

    if general_notes:
        lines.append("## Notes\n")
        lines.extend(f"- {note}" for note in general_notes)
        lines.append("")

    if flexibility_tips:
        lines.append("## Flexibility Tips\n")
        lines.extend(f"- {tip}" for tip in flexibility_tips)
        lines.append("")

    return "\n".join(lines)
