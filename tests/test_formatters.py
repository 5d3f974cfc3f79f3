"""Tests for schedule output formatters."""

import json
from datetime import date, datetime
from pathlib import Path

import pytest

from src.data_layer.meal_pool_db import MealPoolDB
from src.data_layer.models import CustomMeal, Macros, Meal, ScheduleDay, SlotEntry
from src.planning.meal_scheduler import generate_schedule
from src.output.formatters import (
    format_meal_line,
    format_schedule_json,
    format_schedule_json_string,
    format_schedule_markdown,
    hydrate_schedule,
    schedule_from_json,
    schedule_to_json,
    slot_to_json,
)


FIXTURES_DIR = Path(__file__).parent / "fixtures"

MONDAY = date(2024, 1, 1)


@pytest.fixture
def meal_pool():
    return MealPoolDB(str(FIXTURES_DIR / "meal_pool.json")).get_all_meals()


@pytest.fixture
def result(meal_pool):
    return generate_schedule(meal_pool, [], MONDAY)


class TestSlotJson:
    def test_empty_slot(self):
        assert slot_to_json(SlotEntry()) == {}

    def test_suggested_slot(self):
        assert slot_to_json(SlotEntry(meal_id="b1")) == {"mealId": "b1"}

    def test_logged_custom_slot(self):
        entry = SlotEntry(
            logged=True,
            logged_at=datetime(2024, 1, 1, 12, 0),
            custom_meal=CustomMeal(dish="Pho", calories=550, macros=Macros(30, 70, 12)),
        )
        data = slot_to_json(entry)
        assert data["logged"] is True
        assert data["loggedAt"] == "2024-01-01T12:00:00"
        assert data["customDish"] == "Pho"
        assert data["customMacros"] == {"protein": 30, "carbs": 70, "fats": 12}
        assert "mealId" not in data


class TestScheduleJson:
    def test_schedule_to_json_shape(self, result):
        days = schedule_to_json(result.schedule)
        assert len(days) == 3
        assert days[0]["date"] == "2024-01-01"
        assert days[0]["dayOfWeek"] == "Monday"
        assert days[0]["breakfast"] == {"mealId": "b1"}
        assert days[0]["snack2"] == {}

    def test_schedule_from_json_restores_days(self, result):
        assert schedule_from_json(schedule_to_json(result.schedule)) == result.schedule

    def test_schedule_from_json_logged_slot(self):
        data = [{
            "date": "2024-01-02T00:00:00.000Z",
            "dayOfWeek": "whatever",
            "lunch": {"mealId": "l1", "logged": True, "loggedAt": "2024-01-02T13:00:00"},
        }]
        [day] = schedule_from_json(data)
        assert day.date == date(2024, 1, 2)
        assert day.day_of_week == "Tuesday"
        assert day.lunch == SlotEntry(
            meal_id="l1", logged=True, logged_at=datetime(2024, 1, 2, 13, 0)
        )
        assert day.breakfast.is_empty

    def test_hydrate_merges_meal_details(self, result, meal_pool):
        days = hydrate_schedule(result.schedule, meal_pool)
        breakfast = days[0]["breakfast"]
        assert breakfast["mealId"] == "b1"
        assert breakfast["dish"] == "Scrambled Eggs with Spinach & Whole Wheat Toast"
        assert breakfast["estimatedCalories"] == 420

    def test_hydrate_leaves_unknown_ids(self):
        schedule = [ScheduleDay(date=MONDAY, day_of_week="Monday", lunch=SlotEntry(meal_id="gone"))]
        days = hydrate_schedule(schedule, [])
        assert days[0]["lunch"] == {"mealId": "gone"}

    def test_hydrate_adds_logged_totals(self, meal_pool):
        schedule = [ScheduleDay(
            date=MONDAY,
            day_of_week="Monday",
            breakfast=SlotEntry(meal_id="b2", logged=True),
            lunch=SlotEntry(meal_id="l1"),
            dinner=SlotEntry(logged=True, custom_meal=CustomMeal("Pizza", 900, Macros(30, 100, 35))),
        )]
        [day] = hydrate_schedule(schedule, meal_pool)
        assert day["loggedTotals"] == {
            "calories": 1280.0, "protein": 55.0, "carbs": 145.0, "fats": 45.0,
        }

    def test_unlogged_days_total_zero(self, result, meal_pool):
        days = hydrate_schedule(result.schedule, meal_pool)
        assert days[0]["loggedTotals"]["calories"] == 0.0

    def test_schedule_from_json_requires_date(self):
        with pytest.raises(KeyError):
            schedule_from_json([{"dayOfWeek": "Monday"}])

    @pytest.mark.parametrize("data", [["2024-01-01"], [{"date": "2024-01-01", "lunch": "l1"}]])
    def test_schedule_from_json_rejects_non_objects(self, data):
        with pytest.raises(ValueError):
            schedule_from_json(data)

    def test_format_schedule_json(self, result, meal_pool):
        data = format_schedule_json(result, meal_pool)
        assert data["currentScheduleStartDate"] == "2024-01-01"
        assert len(data["currentSchedule"]) == 3
        assert data["currentSchedule"][0]["lunch"]["dish"] == "Grilled Chicken Salad"
        assert {"mealId": "b1", "usedDate": "2024-01-01"} in data["recentlyUsedMealIds"]
        assert data["warnings"] == []

    def test_format_schedule_json_warnings(self):
        result = generate_schedule([Meal("b1", "Breakfast", "Oats")], [], MONDAY)
        data = format_schedule_json(result)
        assert data["currentSchedule"][0]["breakfast"] == {"mealId": "b1"}
        assert len(data["warnings"]) == 9
        assert data["warnings"][0]["slot"] == "lunch"
        assert data["warnings"][0]["date"] == "2024-01-01"

    def test_json_string_is_valid(self, result, meal_pool):
        parsed = json.loads(format_schedule_json_string(result, meal_pool))
        assert parsed["currentSchedule"][2]["date"] == "2024-01-03"


class TestMarkdown:
    def test_sections_per_day(self, result, meal_pool):
        text = format_schedule_markdown(result, meal_pool)
        assert text.startswith("# Meal Schedule")
        assert "## Monday, 2024-01-01" in text
        assert "## Wednesday, 2024-01-03" in text
        assert "- **Breakfast:** Scrambled Eggs with Spinach & Whole Wheat Toast (420 kcal" in text
        assert "Warnings" not in text

    def test_warnings_listed(self):
        result = generate_schedule([Meal("b1", "Breakfast", "Oats")], [], MONDAY, snack_slots=0)
        text = format_schedule_markdown(result, [Meal("b1", "Breakfast", "Oats")])
        assert "## Warnings" in text
        assert "No Lunch meal for lunch on 2024-01-01" in text

    def test_logged_marker_and_custom(self, meal_pool):
        schedule = [ScheduleDay(
            date=MONDAY,
            day_of_week="Monday",
            breakfast=SlotEntry(meal_id="b2", logged=True),
            dinner=SlotEntry(logged=True, custom_meal=CustomMeal("Pizza", 900, Macros())),
        )]
        result = generate_schedule([], [], MONDAY, cycle_length=1)
        result.schedule = schedule
        result.warnings = []
        text = format_schedule_markdown(result, meal_pool)
        assert "- **Breakfast:** Greek Yogurt Parfait (380 kcal, P 25g / C 45g / F 10g) ✅" in text
        assert "- **Dinner:** Pizza (custom) ✅" in text
        assert "Lunch" not in text

    def test_notes_and_tips_sections(self, result, meal_pool):
        text = format_schedule_markdown(
            result, meal_pool, ["Drink water."], ["Swap lunch and dinner freely."]
        )
        assert "## Notes\n\n- Drink water." in text
        assert "## Flexibility Tips\n\n- Swap lunch and dinner freely." in text
        assert text.index("## Notes") > text.index("## Wednesday, 2024-01-03")

    def test_format_meal_line_without_estimates(self):
        assert format_meal_line(Meal("x", "Snack", "Almonds")) == "Almonds"
