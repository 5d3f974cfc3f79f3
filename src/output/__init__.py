"""Output formatting for meal schedules."""

from src.output.formatters import (
    format_schedule_json,
    format_schedule_json_string,
    format_schedule_markdown,
    hydrate_schedule
)

__all__ = [
    "format_schedule_json",
    "format_schedule_json_string",
    "format_schedule_markdown",
    "hydrate_schedule"
]
