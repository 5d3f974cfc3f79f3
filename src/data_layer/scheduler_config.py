"""Scheduler settings and their YAML loader."""
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from src.data_layer.exceptions import ConfigurationError


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

MAX_SNACK_SLOTS = 2


@dataclass(frozen=True)
class SchedulerConfig:
    """Tunables for one scheduler instance.

    anchor_weekday follows date.weekday() (0 = Monday). None starts each
    cycle on the reference date itself.
    """

    cycle_length: int = 3
    recency_window_days: int = 7
    anchor_weekday: Optional[int] = 0
    snack_slots: int = 1
    min_pool_size: int = 15
    max_pool_age_days: int = 7

    def validate(self) -> None:
        """Check every setting is in range.

        Raises:
            ConfigurationError: On the first out-of-range setting
        """
        _require_int("cycle_length", self.cycle_length)
        if self.cycle_length <= 0:
            raise ConfigurationError("cycle_length", self.cycle_length, "must be positive")
        _require_int("recency_window_days", self.recency_window_days)
        if self.recency_window_days < 0:
            raise ConfigurationError(
                "recency_window_days", self.recency_window_days, "must not be negative"
            )
        if self.anchor_weekday is not None:
            _require_int("anchor_weekday", self.anchor_weekday)
            if not 0 <= self.anchor_weekday <= 6:
                raise ConfigurationError(
                    "anchor_weekday", self.anchor_weekday, "must be in 0-6 (Monday-Sunday)"
                )
        _require_int("snack_slots", self.snack_slots)
        if not 0 <= self.snack_slots <= MAX_SNACK_SLOTS:
            raise ConfigurationError(
                "snack_slots", self.snack_slots, f"must be in 0-{MAX_SNACK_SLOTS}"
            )
        _require_int("min_pool_size", self.min_pool_size)
        if self.min_pool_size < 0:
            raise ConfigurationError("min_pool_size", self.min_pool_size, "must not be negative")
        _require_int("max_pool_age_days", self.max_pool_age_days)
        if self.max_pool_age_days < 0:
            raise ConfigurationError(
                "max_pool_age_days", self.max_pool_age_days, "must not be negative"
            )

    def with_overrides(self, overrides: Dict[str, Any]) -> "SchedulerConfig":
        """Return a validated copy with the given non-None settings replaced."""
        known = {f.name for f in fields(self)}
        changes = {k: v for k, v in overrides.items() if k in known and v is not None}
        if "anchor_weekday" in changes:
            changes["anchor_weekday"] = parse_weekday(changes["anchor_weekday"])
        updated = replace(self, **changes)
        updated.validate()
        return updated


def _require_int(setting: str, value: Any) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(setting, value, "must be an integer")


def parse_weekday(value: Any) -> Optional[int]:
    """Accept a weekday index, an English weekday name, or "today"/None."""
    if value is None:
        return None
    if isinstance(value, str):
        name = value.strip().lower()
        if name in ("today", "none", ""):
            return None
        if name in WEEKDAYS:
            return WEEKDAYS.index(name)
        raise ConfigurationError("anchor_weekday", value, "unknown weekday name")
    return value


class SchedulerConfigLoader:
    """Loader for scheduler settings from YAML."""

    def __init__(self, yaml_path: str):
        """Initialize loader.

        Args:
            yaml_path: Path to YAML file containing a `scheduler` section
        """
        self.yaml_path = Path(yaml_path)

    def load(self) -> SchedulerConfig:
        """Load settings, falling back to defaults for anything unset.

        A missing file yields the default configuration.

        Returns:
            Validated SchedulerConfig

        Raises:
            ConfigurationError: If the document is not a mapping or a value
                is out of range
        """
        if not self.yaml_path.exists():
            return SchedulerConfig()

        with open(self.yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError("config", str(self.yaml_path), "must be a YAML mapping")
        section = _section(data, "scheduler")
        pool_section = _section(data, "meal_pool")

        overrides: Dict[str, Any] = {
            "cycle_length": section.get("cycle_length"),
            "recency_window_days": section.get("recency_window_days"),
            "snack_slots": section.get("snack_slots"),
            "min_pool_size": pool_section.get("min_pool_size"),
            "max_pool_age_days": pool_section.get("max_pool_age_days"),
        }
        config = SchedulerConfig().with_overrides(overrides)

        # anchor_weekday may legitimately be null, so it bypasses the
        # None-filtering of with_overrides
        if "anchor_weekday" in section:
            config = replace(config, anchor_weekday=parse_weekday(section["anchor_weekday"]))
            config.validate()
        return config


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    # "scheduler:" with no body loads as None
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(name, section, "must be a mapping")
    return section
