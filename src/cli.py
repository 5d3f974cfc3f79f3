#!/usr/bin/env python3
"""Command-line interface for the meal rotation scheduler."""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from src.data_layer.exceptions import ConfigurationError, MealPoolError
from src.data_layer.ledger_store import UsageLedgerStore
from src.data_layer.meal_pool_db import MealPoolDB
from src.data_layer.scheduler_config import SchedulerConfigLoader
from src.planning.cycle import needs_new_pool
from src.planning.meal_scheduler import MealScheduler
from src.output.formatters import format_schedule_markdown, format_schedule_json_string


def parse_today(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a rotating meal schedule from a meal pool"
    )
    parser.add_argument(
        "--pool",
        type=str,
        default="data/meal_pool.json",
        help="Path to meal pool JSON file (default: data/meal_pool.json)"
    )
    parser.add_argument(
        "--ledger",
        type=str,
        default="data/recently_used.json",
        help="Path to recently-used ledger JSON (default: data/recently_used.json; missing file = empty)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/scheduler.yaml",
        help="Path to scheduler YAML config (default: config/scheduler.yaml; missing file = defaults)"
    )
    parser.add_argument(
        "--today",
        type=parse_today,
        default=None,
        help="Reference date YYYY-MM-DD (default: current date)"
    )
    parser.add_argument(
        "--output",
        type=str,
        choices=["markdown", "json", "both"],
        default="markdown",
        help="Output format: markdown (default), json, or both"
    )
    parser.add_argument(
        "--output-file",
        type=str,
        help="Optional file path to save output (default: print to stdout)"
    )
    parser.add_argument(
        "--save-ledger",
        action="store_true",
        help="Write the updated ledger back to --ledger"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    pool_path = Path(args.pool)
    if not pool_path.exists():
        print(f"Error: Meal pool file not found: {pool_path}", file=sys.stderr)
        sys.exit(1)

    try:
        config = SchedulerConfigLoader(args.config).load()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        print(f"Loading meal pool from {pool_path}...", file=sys.stderr)
        pool_db = MealPoolDB(str(pool_path))
        meal_pool = pool_db.get_all_meals()
        print(f"Found {len(meal_pool)} meals", file=sys.stderr)
    except (MealPoolError, json.JSONDecodeError) as e:
        print(f"Error: Invalid meal pool file {pool_path}: {e}", file=sys.stderr)
        sys.exit(1)

    ledger_store = UsageLedgerStore(args.ledger)
    try:
        recently_used = ledger_store.load()
    except (KeyError, TypeError, ValueError) as e:
        print(f"Error: Invalid ledger file {ledger_store.json_path}: {e}", file=sys.stderr)
        sys.exit(1)
    today = args.today or date.today()

    if needs_new_pool(
        meal_pool,
        pool_db.last_generation_date,
        today,
        min_pool_size=config.min_pool_size,
        max_pool_age_days=config.max_pool_age_days,
    ):
        print(
            f"⚠️  Meal pool is due for regeneration (needs {config.min_pool_size}+ meals, "
            f"at most {config.max_pool_age_days} days old)",
            file=sys.stderr,
        )

    print("Scheduling meals...", file=sys.stderr)
    result = MealScheduler(config).generate(meal_pool, recently_used, today)

    if args.output in ["markdown", "both"]:
        markdown_output = format_schedule_markdown(
            result, meal_pool, pool_db.general_notes, pool_db.flexibility_tips
        )
        if args.output_file:
            output_path = Path(args.output_file)
            if args.output == "both":
                output_path = output_path.with_suffix(".md")
            output_path.write_text(markdown_output)
            print(f"Markdown output saved to {output_path}", file=sys.stderr)
        else:
            print(markdown_output)

    if args.output in ["json", "both"]:
        json_output = format_schedule_json_string(result, meal_pool, indent=2)
        if args.output_file:
            output_path = Path(args.output_file)
            if args.output == "both":
                output_path = output_path.with_suffix(".json")
            output_path.write_text(json_output)
            print(f"JSON output saved to {output_path}", file=sys.stderr)
        else:
            if args.output == "both":
                print("\n" + "="*80 + "\n", file=sys.stdout)
            print(json_output)

    if args.save_ledger:
        ledger_store.save(result.updated_recently_used)
        print(f"Ledger saved to {ledger_store.json_path}", file=sys.stderr)

    if result.is_complete:
        print("\n✅ Schedule generated successfully!", file=sys.stderr)
    else:
        print("\n⚠️  Schedule generated with gaps:", file=sys.stderr)
        for warning in result.warnings:
            print(f"   - {warning.message}", file=sys.stderr)


if __name__ == "__main__":
    main()
