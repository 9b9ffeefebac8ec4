"""
store.py — JSONL persistence for subscriptions

One JSON object per line, appended on add. Deleting rewrites the file
without the removed record.
"""

import json
import logging
from pathlib import Path

from models import Subscription

log = logging.getLogger(__name__)


class SubscriptionStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> list[Subscription]:
        """Load all records in insertion order, skipping lines that don't parse."""
        records = []
        if not self.path.exists():
            return records
        with self.path.open() as f:
            for lineno, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(Subscription.from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, ValueError, ArithmeticError) as exc:
                    log.warning(f"Skipping unreadable line {lineno} in {self.path}: {exc}")
        return records

    def append(self, sub: Subscription):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a") as f:
            f.write(json.dumps(sub.to_dict()) + "\n")
        log.info(f"Stored subscription {sub.name} ({sub.id})")

    def delete(self, sub_id: str) -> bool:
        """Remove the record with `sub_id`. Returns False when no such record exists."""
        records = self.load()
        kept = [s for s in records if s.id != sub_id]
        if len(kept) == len(records):
            return False
        self.path.write_text("".join(json.dumps(s.to_dict()) + "\n" for s in kept))
        log.info(f"Removed subscription {sub_id}")
        return True
