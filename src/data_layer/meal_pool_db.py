"""Meal pool database for loading generated meal pools from JSON."""
import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.data_layer.exceptions import MealPoolError
from src.data_layer.models import MEAL_CATEGORIES, Macros, Meal


def parse_macros(data: Optional[Dict[str, Any]]) -> Optional[Macros]:
    """Parse an {protein, carbs, fats} mapping; None stays None."""
    if data is None:
        return None
    return Macros(
        protein=float(data.get("protein", 0.0)),
        carbs=float(data.get("carbs", 0.0)),
        fats=float(data.get("fats", 0.0)),
    )


def parse_meal(meal_data: Dict[str, Any]) -> Meal:
    """Parse a single meal from the pool generator's JSON shape.

    The generator stores the category under "name"; "category" is accepted
    as well.

    Args:
        meal_data: Dictionary containing meal data

    Returns:
        Meal object

    Raises:
        MealPoolError: If the entry is not an object, id or category is missing
            or the category is unknown
    """
    if not isinstance(meal_data, dict):
        raise MealPoolError(f"Meal entry must be an object, got {meal_data!r}")
    meal_id = meal_data.get("id")
    if not meal_id:
        raise MealPoolError(f"Meal entry without id: {meal_data!r}")
    category = meal_data.get("category", meal_data.get("name"))
    if category not in MEAL_CATEGORIES:
        raise MealPoolError(
            f"Meal '{meal_id}' has unknown category {category!r}; "
            f"expected one of {', '.join(MEAL_CATEGORIES)}"
        )

    calories = meal_data.get("estimatedCalories", meal_data.get("estimated_calories"))
    macros = meal_data.get("estimatedMacros", meal_data.get("estimated_macros"))

    return Meal(
        id=str(meal_id),
        category=category,
        dish=str(meal_data.get("dish", "")),
        ingredients=tuple(str(i) for i in meal_data.get("ingredients", [])),
        preparation=str(meal_data.get("preparation", "")),
        estimated_calories=int(calories) if calories is not None else None,
        estimated_macros=parse_macros(macros),
    )


def parse_meal_pool(meals_data: List[Dict[str, Any]]) -> List[Meal]:
    """Parse a list of meal dictionaries, enforcing unique ids.

    Raises:
        MealPoolError: On a malformed entry or a duplicate id
    """
    meals: List[Meal] = []
    seen = set()
    for meal_data in meals_data:
        meal = parse_meal(meal_data)
        if meal.id in seen:
            raise MealPoolError(f"Duplicate meal id '{meal.id}' in meal pool")
        seen.add(meal.id)
        meals.append(meal)
    return meals


def meal_to_dict(meal: Meal) -> Dict[str, Any]:
    """Serialize a meal back to the pool generator's JSON shape."""
    out: Dict[str, Any] = {
        "id": meal.id,
        "name": meal.category,
        "dish": meal.dish,
        "ingredients": list(meal.ingredients),
        "preparation": meal.preparation,
    }
    if meal.estimated_calories is not None:
        out["estimatedCalories"] = meal.estimated_calories
    if meal.estimated_macros is not None:
        out["estimatedMacros"] = {
            "protein": meal.estimated_macros.protein,
            "carbs": meal.estimated_macros.carbs,
            "fats": meal.estimated_macros.fats,
        }
    return out


class MealPoolDB:
    """Database for a meal pool loaded from JSON."""

    def __init__(self, json_path: str):
        """Initialize meal pool database from JSON file.

        Args:
            json_path: Path to JSON file with a "mealPool" array
        """
        self.json_path = Path(json_path)
        self._meals: List[Meal] = []
        self.general_notes: List[str] = []
        self.flexibility_tips: List[str] = []
        self.last_generation_date: Optional[date] = None
        self._load_meals()

    def _load_meals(self):
        """Load meals from JSON file."""
        with open(self.json_path, "r") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise MealPoolError("Meal pool file must contain a JSON object")
        self._meals = parse_meal_pool(data.get("mealPool", []))
        self.general_notes = [str(n) for n in data.get("generalNotes", [])]
        self.flexibility_tips = [str(t) for t in data.get("flexibilityTips", [])]
        generated = data.get("lastPoolGenerationDate")
        if generated:
            try:
                self.last_generation_date = date.fromisoformat(str(generated)[:10])
            except ValueError as e:
                raise MealPoolError(f"Invalid lastPoolGenerationDate: {generated!r}") from e

    def get_all_meals(self) -> List[Meal]:
        """Get all meals in pool order.

        Returns:
            List of all Meal objects
        """
        return self._meals.copy()

    def get_meal_by_id(self, meal_id: str) -> Optional[Meal]:
        """Get a meal by its ID.

        Args:
            meal_id: Unique meal identifier

        Returns:
            Meal object if found, None otherwise
        """
        for meal in self._meals:
            if meal.id == meal_id:
                return meal
        return None

    def get_meals_by_category(self, category: str) -> List[Meal]:
        """Get meals of one category in pool order."""
        return [m for m in self._meals if m.category == category]
