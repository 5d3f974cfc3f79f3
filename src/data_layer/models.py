"""Data models for the meal rotation scheduler."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple


# Meal categories produced by the pool generator
BREAKFAST = "Breakfast"
LUNCH = "Lunch"
DINNER = "Dinner"
SNACK = "Snack"

MEAL_CATEGORIES: Tuple[str, ...] = (BREAKFAST, LUNCH, DINNER, SNACK)

# Slots of a schedule day, in display and assignment order
SLOT_NAMES: Tuple[str, ...] = ("breakfast", "lunch", "dinner", "snack1", "snack2")

SLOT_CATEGORIES: Dict[str, str] = {
    "breakfast": BREAKFAST,
    "lunch": LUNCH,
    "dinner": DINNER,
    "snack1": SNACK,
    "snack2": SNACK,
}


@dataclass(frozen=True)
class Macros:
    """Macronutrients in grams."""

    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0


@dataclass(frozen=True)
class Meal:
    """A candidate meal from the pool.

    Only id, category and dish are read by the scheduler; the remaining
    fields are carried through for display.
    """

    id: str
    category: str  # one of MEAL_CATEGORIES
    dish: str
    ingredients: Tuple[str, ...] = ()
    preparation: str = ""
    estimated_calories: Optional[int] = None
    estimated_macros: Optional[Macros] = None


@dataclass(frozen=True)
class UsageRecord:
    """Last date a meal was scheduled."""

    meal_id: str
    used_date: date


@dataclass(frozen=True)
class CustomMeal:
    """A free-form meal logged in place of a pool suggestion."""

    dish: str
    calories: float
    macros: Macros
    ingredients: Tuple[str, ...] = ()
    preparation: str = ""


@dataclass(frozen=True)
class SlotEntry:
    """Contents of one (day, slot) cell.

    An unlogged entry only references a pool meal. A logged entry carries
    either a pool meal_id or a custom_meal, never both.
    """

    meal_id: Optional[str] = None
    logged: bool = False
    logged_at: Optional[datetime] = None
    custom_meal: Optional[CustomMeal] = None

    @property
    def is_empty(self) -> bool:
        return self.meal_id is None and self.custom_meal is None


@dataclass
class ScheduleDay:
    """One day of a generated schedule."""

    date: date
    day_of_week: str  # display label, derived from date
    breakfast: SlotEntry = field(default_factory=SlotEntry)
    lunch: SlotEntry = field(default_factory=SlotEntry)
    dinner: SlotEntry = field(default_factory=SlotEntry)
    snack1: SlotEntry = field(default_factory=SlotEntry)
    snack2: SlotEntry = field(default_factory=SlotEntry)

    def slot(self, name: str) -> SlotEntry:
        return getattr(self, name)

    def meal_ids(self) -> List[str]:
        """Meal ids referenced by this day, in slot order."""
        return [
            self.slot(name).meal_id
            for name in SLOT_NAMES
            if self.slot(name).meal_id is not None
        ]
