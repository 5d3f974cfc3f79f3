"""Recency window helpers for the usage ledger.

All functions are pure: input ledger in, new ledger out.
"""

from datetime import date
from typing import Dict, Iterable, List, Sequence

from src.data_layer.models import UsageRecord


def days_since(used_date: date, today: date) -> int:
    """Whole days from used_date to today (negative if used_date is later)."""
    return (today - used_date).days


def is_within_window(used_date: date, today: date, recency_window_days: int) -> bool:
    """True if a usage on used_date still blocks reuse on today.

    With a 7-day window, usages 0-6 days ago are within the window and a
    usage exactly 7 days ago is not. Future-dated usages count as recent.
    """
    return days_since(used_date, today) < recency_window_days


def latest_usage_by_meal(records: Iterable[UsageRecord]) -> Dict[str, date]:
    """Map meal_id -> latest used_date."""
    latest: Dict[str, date] = {}
    for record in records:
        current = latest.get(record.meal_id)
        if current is None or record.used_date > current:
            latest[record.meal_id] = record.used_date
    return latest


def prune_ledger(
    records: Sequence[UsageRecord],
    today: date,
    recency_window_days: int,
) -> List[UsageRecord]:
    """Drop records outside the window and collapse duplicates.

    Keeps the first-seen position of each meal_id with its latest date.
    """
    latest = latest_usage_by_meal(records)
    pruned: List[UsageRecord] = []
    seen = set()
    for record in records:
        if record.meal_id in seen:
            continue
        seen.add(record.meal_id)
        used = latest[record.meal_id]
        if is_within_window(used, today, recency_window_days):
            pruned.append(UsageRecord(meal_id=record.meal_id, used_date=used))
    return pruned


def merge_ledger(
    records: Sequence[UsageRecord],
    newly_used_ids: Sequence[str],
    today: date,
    recency_window_days: int,
) -> List[UsageRecord]:
    """Prune the ledger, then record newly scheduled meals as used today.

    A newly scheduled id supersedes any retained record for the same meal,
    so the result holds at most one record per meal_id.
    """
    new_ids: List[str] = []
    for meal_id in newly_used_ids:
        if meal_id not in new_ids:
            new_ids.append(meal_id)

    retained = [
        r for r in prune_ledger(records, today, recency_window_days)
        if r.meal_id not in new_ids
    ]
    return retained + [UsageRecord(meal_id=m, used_date=today) for m in new_ids]
