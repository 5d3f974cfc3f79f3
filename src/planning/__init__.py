"""Planning module for meal rotation scheduling."""

from .meal_scheduler import MealScheduler, ScheduleResult, CoverageWarning, generate_schedule

__all__ = [
    "MealScheduler",
    "ScheduleResult",
    "CoverageWarning",
    "generate_schedule"
]
