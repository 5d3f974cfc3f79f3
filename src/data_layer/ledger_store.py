"""JSON file store for the recently-used meal ledger."""
import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

from src.data_layer.models import UsageRecord


def ledger_to_json(records: List[UsageRecord]) -> List[Dict[str, str]]:
    """Serialize ledger records with ISO dates."""
    return [{"mealId": r.meal_id, "usedDate": r.used_date.isoformat()} for r in records]


def ledger_from_json(data: List[Dict[str, Any]]) -> List[UsageRecord]:
    """Parse ledger records.

    usedDate may be a date or a full ISO timestamp; only the calendar day is kept.
    """
    records = []
    for item in data:
        used = str(item["usedDate"])
        records.append(UsageRecord(meal_id=str(item["mealId"]), used_date=date.fromisoformat(used[:10])))
    return records


class UsageLedgerStore:
    """Reads and writes a ledger file. Last write wins; no locking."""

    def __init__(self, json_path: str):
        self.json_path = Path(json_path)

    def load(self) -> List[UsageRecord]:
        """Load the ledger; a missing file is an empty ledger.

        Raises:
            ValueError: If the file is not valid JSON or a date is malformed
            KeyError: If a record lacks mealId or usedDate
        """
        if not self.json_path.exists():
            return []
        with open(self.json_path, "r") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Ledger file {self.json_path} must contain a JSON object")
        return ledger_from_json(data.get("recentlyUsedMealIds", []))

    def save(self, records: List[UsageRecord]) -> None:
        self.json_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.json_path, "w") as f:
            json.dump({"recentlyUsedMealIds": ledger_to_json(records)}, f, indent=2)
