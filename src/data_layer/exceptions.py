"""Custom exceptions for the meal rotation scheduler."""


class ConfigurationError(ValueError):
    """Raised when scheduler settings are out of range."""

    def __init__(self, setting: str, value, reason: str):
        """Initialize exception with the offending setting.

        Args:
            setting: Name of the setting (e.g. "cycle_length")
            value: Value that was rejected
            reason: Human-readable constraint that was violated
        """
        self.setting = setting
        self.value = value
        super().__init__(f"Invalid {setting}={value!r}: {reason}")


class MealPoolError(ValueError):
    """Raised when a meal pool document is malformed."""


class MealNotFoundError(KeyError):
    """Raised when a meal id is not present in the meal pool."""

    def __init__(self, meal_id: str):
        self.meal_id = meal_id
        super().__init__(f"Meal '{meal_id}' not found in meal pool")

    def __str__(self) -> str:
        return self.args[0]


class ScheduleDayNotFoundError(KeyError):
    """Raised when a date is not part of the current schedule."""

    def __init__(self, day):
        self.day = day
        super().__init__(f"No schedule found for date: {day}")

    def __str__(self) -> str:
        return self.args[0]


class InvalidSlotError(ValueError):
    """Raised for a slot name outside the fixed day layout."""

    def __init__(self, slot: str):
        self.slot = slot
        super().__init__(f"Invalid meal slot: {slot}")
