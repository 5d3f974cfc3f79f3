"""Meal rotation scheduler: assigns pool meals to the slots of one cycle.

Deterministic and side-effect free. Given the same pool, ledger, date and
settings it returns the same schedule and ledger; ties always fall back to
pool order.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from src.data_layer.models import (
    MEAL_CATEGORIES,
    SLOT_CATEGORIES,
    Meal,
    ScheduleDay,
    SlotEntry,
    UsageRecord,
)
from src.data_layer.scheduler_config import SchedulerConfig
from src.planning.cycle import cycle_dates, cycle_start_date, day_of_week_label
from src.planning.recency import is_within_window, latest_usage_by_meal, merge_ledger

logger = logging.getLogger(__name__)

PLACEHOLDER_MARKER = "leftover"

MAIN_SLOTS = ("breakfast", "lunch", "dinner")
SNACK_SLOTS = ("snack1", "snack2")


@dataclass(frozen=True)
class CoverageWarning:
    """A slot left empty because its category had no usable meal."""

    day_index: int
    date: date
    slot: str
    category: str
    reason: str

    @property
    def message(self) -> str:
        return f"No {self.category} meal for {self.slot} on {self.date.isoformat()}: {self.reason}"

    def __str__(self) -> str:
        return self.message


@dataclass
class ScheduleResult:
    """Output of one generation call. The caller persists both schedule and ledger."""

    schedule: List[ScheduleDay]
    updated_recently_used: List[UsageRecord]
    warnings: List[CoverageWarning] = field(default_factory=list)

    @property
    def start_date(self) -> Optional[date]:
        return self.schedule[0].date if self.schedule else None

    @property
    def is_complete(self) -> bool:
        return not self.warnings


def is_placeholder(meal: Meal) -> bool:
    """True for generic "leftover" entries that must never be suggested."""
    return PLACEHOLDER_MARKER in meal.dish.lower()


def slot_layout(snack_slots: int) -> Tuple[str, ...]:
    """Slots filled per day, in assignment order."""
    return MAIN_SLOTS + SNACK_SLOTS[:snack_slots]


def group_by_category(meal_pool: Sequence[Meal]) -> Dict[str, List[Tuple[int, Meal]]]:
    """Non-placeholder meals per category as (pool_index, meal), in pool order."""
    groups: Dict[str, List[Tuple[int, Meal]]] = {c: [] for c in MEAL_CATEGORIES}
    for index, meal in enumerate(meal_pool):
        if meal.category not in groups or is_placeholder(meal):
            continue
        groups[meal.category].append((index, meal))
    return groups


class _CycleSelector:
    """Per-invocation selection state. Never outlives one generate call."""

    def __init__(
        self,
        meal_pool: Sequence[Meal],
        recently_used: Sequence[UsageRecord],
        today: date,
        recency_window_days: int,
    ):
        self.groups = group_by_category(meal_pool)
        self.last_used = latest_usage_by_meal(recently_used)
        self.today = today
        self.window = recency_window_days
        self.chosen_order: List[str] = []
        # meal_id -> index of the latest slot it filled this cycle
        self.last_position: Dict[str, int] = {}
        self._position = 0

    def _eligible(self, category: str) -> List[Tuple[int, Meal]]:
        eligible = []
        for index, meal in self.groups[category]:
            used = self.last_used.get(meal.id)
            if used is not None and is_within_window(used, self.today, self.window):
                continue
            eligible.append((index, meal))
        return eligible

    def _least_recent_key(self, item: Tuple[int, Meal]) -> Tuple[int, date, int]:
        index, meal = item
        ledger_date = self.last_used.get(meal.id, date.min)
        return (self.last_position.get(meal.id, -1), ledger_date, index)

    def select(self, category: str) -> Optional[Meal]:
        """Pick a meal for the next slot of category, or None if there is none."""
        candidates = self.groups[category]
        if not candidates:
            return None

        eligible = self._eligible(category)
        chosen: Optional[Meal] = None
        for _, meal in eligible:
            if meal.id not in self.last_position:
                chosen = meal
                break

        if chosen is None and eligible:
            # every eligible meal already appears this cycle
            chosen = min(eligible, key=self._least_recent_key)[1]
            logger.debug("Repeating %s meal %s within cycle", category, chosen.id)
        elif chosen is None:
            chosen = candidates[0][1]
            logger.debug(
                "All %s meals used within %d days; reusing %s",
                category, self.window, chosen.id,
            )

        self._record(chosen.id)
        return chosen

    def _record(self, meal_id: str) -> None:
        if meal_id not in self.last_position:
            self.chosen_order.append(meal_id)
        self.last_position[meal_id] = self._position
        self._position += 1


def _coverage_reason(meal_pool: Sequence[Meal], category: str) -> str:
    if any(m.category == category for m in meal_pool):
        return "pool only has placeholder (leftover) entries"
    return "pool has no meals of this category"


def generate_schedule(
    meal_pool: Sequence[Meal],
    recently_used: Sequence[UsageRecord],
    today: date,
    cycle_length: int = 3,
    recency_window_days: int = 7,
    anchor_weekday: Optional[int] = 0,
    snack_slots: int = 1,
) -> ScheduleResult:
    """Assign one meal per slot for each day of the cycle containing today.

    Per slot the choice is, in order: the first meal (pool order) that is
    outside the recency window and not yet used this cycle; else the least
    recently used meal outside the window; else the first meal of the
    category regardless of recency. "Leftover" placeholder meals are never
    chosen. A category without usable meals leaves its slots empty and
    yields a CoverageWarning instead of failing the whole schedule.

    Args:
        meal_pool: Candidate meals; list order is the tie-break priority
        recently_used: Usage ledger from the previous generation
        today: Reference date for the recency window, cycle start and new ledger entries
        cycle_length: Number of days to schedule
        recency_window_days: Days a meal cools down before reuse
        anchor_weekday: Weekday cycles start on (0 = Monday); None starts on today
        snack_slots: Number of snack slots per day (0-2)

    Returns:
        ScheduleResult with the schedule, pruned-and-extended ledger and warnings

    Raises:
        ConfigurationError: If a setting is out of range
    """
    SchedulerConfig(
        cycle_length=cycle_length,
        recency_window_days=recency_window_days,
        anchor_weekday=anchor_weekday,
        snack_slots=snack_slots,
    ).validate()

    selector = _CycleSelector(meal_pool, recently_used, today, recency_window_days)
    slots = slot_layout(snack_slots)
    start = cycle_start_date(today, anchor_weekday)

    schedule: List[ScheduleDay] = []
    warnings: List[CoverageWarning] = []
    for day_index, day in enumerate(cycle_dates(start, cycle_length)):
        entries: Dict[str, SlotEntry] = {}
        for slot in slots:
            category = SLOT_CATEGORIES[slot]
            meal = selector.select(category)
            if meal is None:
                warning = CoverageWarning(
                    day_index=day_index,
                    date=day,
                    slot=slot,
                    category=category,
                    reason=_coverage_reason(meal_pool, category),
                )
                logger.warning(warning.message)
                warnings.append(warning)
                continue
            entries[slot] = SlotEntry(meal_id=meal.id)
        schedule.append(ScheduleDay(date=day, day_of_week=day_of_week_label(day), **entries))

    updated = merge_ledger(recently_used, selector.chosen_order, today, recency_window_days)
    logger.info(
        "Scheduled %d days from %s using %d distinct meals (%d warnings)",
        cycle_length, start.isoformat(), len(selector.chosen_order), len(warnings),
    )
    return ScheduleResult(schedule=schedule, updated_recently_used=updated, warnings=warnings)


class MealScheduler:
    """Generates rotation schedules with a fixed configuration."""

    def __init__(self, config: Optional[SchedulerConfig] = None):
        """Initialize scheduler.

        Args:
            config: Scheduler settings (defaults if None)

        Raises:
            ConfigurationError: If config is invalid
        """
        self.config = config or SchedulerConfig()
        self.config.validate()

    def generate(
        self,
        meal_pool: Sequence[Meal],
        recently_used: Sequence[UsageRecord],
        today: date,
    ) -> ScheduleResult:
        return generate_schedule(
            meal_pool,
            recently_used,
            today,
            cycle_length=self.config.cycle_length,
            recency_window_days=self.config.recency_window_days,
            anchor_weekday=self.config.anchor_weekday,
            snack_slots=self.config.snack_slots,
        )
