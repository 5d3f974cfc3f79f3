"""Cycle calendar and regeneration policy.

Pure functions over explicit dates. Deciding when a schedule or a meal pool
has expired is the caller's job; these helpers encode the rules.
"""

from datetime import date, timedelta
from typing import List, Optional, Sequence

from src.data_layer.models import Meal, ScheduleDay, UsageRecord


# Fixed English labels; strftime("%A") would follow the process locale
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def day_of_week_label(day: date) -> str:
    return DAY_NAMES[day.weekday()]


def cycle_start_date(today: date, anchor_weekday: Optional[int] = 0) -> date:
    """Most recent anchor weekday on or before today.

    Args:
        today: Reference date
        anchor_weekday: 0 = Monday ... 6 = Sunday; None anchors on today

    Returns:
        First date of the cycle containing today
    """
    if anchor_weekday is None:
        return today
    offset = (today.weekday() - anchor_weekday) % 7
    return today - timedelta(days=offset)


def cycle_dates(start: date, cycle_length: int) -> List[date]:
    """Consecutive dates covered by one cycle."""
    return [start + timedelta(days=i) for i in range(cycle_length)]


def is_schedule_current(
    schedule_start: Optional[date],
    schedule: Sequence[ScheduleDay],
    today: date,
    anchor_weekday: Optional[int] = 0,
) -> bool:
    """True if a stored schedule still belongs to today's cycle.

    An empty schedule or one without a recorded start is never current.
    """
    if schedule_start is None or not schedule:
        return False
    return schedule_start == cycle_start_date(today, anchor_weekday)


def needs_new_pool(
    meal_pool: Optional[Sequence[Meal]],
    last_generation_date: Optional[date],
    today: date,
    refresh: bool = False,
    min_pool_size: int = 15,
    max_pool_age_days: int = 7,
) -> bool:
    """Whether the meal pool should be regenerated before scheduling.

    Regenerate when there is no pool, the pool is smaller than min_pool_size,
    it was generated more than max_pool_age_days ago, or a refresh is forced.
    """
    if refresh:
        return True
    if not meal_pool or len(meal_pool) < min_pool_size:
        return True
    if last_generation_date is None:
        return True
    return last_generation_date + timedelta(days=max_pool_age_days) < today


def reset_ledger_for_new_pool() -> List[UsageRecord]:
    """Ledger to use after the pool is replaced: ids of the old pool are meaningless."""
    return []
