"""Tests for cycle calendar and regeneration policy."""

from datetime import date

import pytest

from src.data_layer.models import Meal, ScheduleDay
from src.planning.cycle import (
    cycle_dates,
    cycle_start_date,
    day_of_week_label,
    is_schedule_current,
    needs_new_pool,
    reset_ledger_for_new_pool,
)


def _pool(n: int):
    return [Meal(id=f"m{i}", category="Lunch", dish=f"Dish {i}") for i in range(n)]


class TestCycleStartDate:
    """Most recent anchor weekday on or before the reference date."""

    @pytest.mark.parametrize(
        "today, expected",
        [
            (date(2024, 1, 1), date(2024, 1, 1)),  # Monday
            (date(2024, 1, 3), date(2024, 1, 1)),  # Wednesday
            (date(2024, 1, 7), date(2024, 1, 1)),  # Sunday
            (date(2024, 1, 8), date(2024, 1, 8)),  # next Monday
        ],
    )
    def test_monday_anchor(self, today, expected):
        assert cycle_start_date(today) == expected

    def test_other_anchor_weekday(self):
        # Wednesday anchor; 2024-01-02 is a Tuesday
        assert cycle_start_date(date(2024, 1, 2), anchor_weekday=2) == date(2023, 12, 27)

    def test_crosses_year_boundary(self):
        assert cycle_start_date(date(2025, 1, 1)) == date(2024, 12, 30)

    def test_none_anchor_is_today(self):
        assert cycle_start_date(date(2024, 1, 4), anchor_weekday=None) == date(2024, 1, 4)


class TestCycleDates:
    def test_consecutive_dates(self):
        assert cycle_dates(date(2024, 2, 28), 3) == [
            date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)
        ]

    def test_day_labels_are_english(self):
        assert day_of_week_label(date(2024, 1, 1)) == "Monday"
        assert day_of_week_label(date(2024, 1, 7)) == "Sunday"


class TestIsScheduleCurrent:
    @pytest.fixture
    def schedule(self):
        return [ScheduleDay(date=date(2024, 1, 1), day_of_week="Monday")]

    def test_current_within_same_week(self, schedule):
        assert is_schedule_current(date(2024, 1, 1), schedule, date(2024, 1, 5))

    def test_expired_next_week(self, schedule):
        assert not is_schedule_current(date(2024, 1, 1), schedule, date(2024, 1, 8))

    def test_empty_schedule_is_never_current(self):
        assert not is_schedule_current(date(2024, 1, 1), [], date(2024, 1, 1))

    def test_missing_start_is_never_current(self, schedule):
        assert not is_schedule_current(None, schedule, date(2024, 1, 1))


class TestNeedsNewPool:
    def test_missing_pool(self):
        assert needs_new_pool(None, None, date(2024, 1, 1))
        assert needs_new_pool([], date(2024, 1, 1), date(2024, 1, 1))

    def test_small_pool(self):
        assert needs_new_pool(_pool(14), date(2024, 1, 1), date(2024, 1, 1))

    def test_fresh_pool_is_kept(self):
        assert not needs_new_pool(_pool(15), date(2024, 1, 1), date(2024, 1, 8))

    def test_stale_pool(self):
        assert needs_new_pool(_pool(15), date(2024, 1, 1), date(2024, 1, 9))

    def test_forced_refresh(self):
        assert needs_new_pool(_pool(15), date(2024, 1, 1), date(2024, 1, 1), refresh=True)

    def test_custom_thresholds(self):
        assert not needs_new_pool(
            _pool(5), date(2024, 1, 1), date(2024, 1, 20), min_pool_size=5, max_pool_age_days=30
        )

    def test_unknown_generation_date(self):
        assert needs_new_pool(_pool(20), None, date(2024, 1, 1))

    def test_new_pool_clears_ledger(self):
        assert reset_ledger_for_new_pool() == []
