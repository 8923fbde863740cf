"""Daily food log and remaining calorie/macro budget."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from dietplan.menu.models import FoodItem, MacroTotals
from dietplan.profiles.body_calc import Targets

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEntry:
    """A single logged item."""

    id: str
    item: FoodItem
    logged_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "item": self.item.to_dict(),
            "logged_at": self.logged_at.isoformat(),
        }


@dataclass(frozen=True)
class Budget:
    """What is left of the day's targets after logged intake.

    Remaining values can be negative when a target has been exceeded.
    """

    targets: Targets
    consumed: MacroTotals

    @property
    def remaining_calories(self) -> float:
        return self.targets.daily_calories - self.consumed.calories

    @property
    def remaining_protein(self) -> float:
        return self.targets.macros.protein - self.consumed.protein

    @property
    def remaining_carbs(self) -> float:
        return self.targets.macros.carbs - self.consumed.carbs

    @property
    def remaining_fats(self) -> float:
        return self.targets.macros.fats - self.consumed.fats

    @property
    def is_over(self) -> bool:
        return self.remaining_calories < 0

    def progress(self) -> dict[str, float]:
        """Percent of each target consumed, capped at 100."""
        targets = {
            "calories": self.targets.daily_calories,
            "protein": self.targets.macros.protein,
            "carbs": self.targets.macros.carbs,
            "fats": self.targets.macros.fats,
        }
        result = {}
        for name, target in targets.items():
            consumed = getattr(self.consumed, name)
            result[name] = min(consumed / target * 100, 100.0) if target > 0 else 0.0
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "consumed": self.consumed.to_dict(),
            "remaining": {
                "calories": self.remaining_calories,
                "protein": self.remaining_protein,
                "carbs": self.remaining_carbs,
                "fats": self.remaining_fats,
            },
            "progress": self.progress(),
        }


@dataclass
class DailyLog:
    """Items eaten today, in the order they were logged."""

    entries: list[LogEntry] = field(default_factory=list)
    # Ids are never reused, even after removals
    _next_id: int = field(default=0, repr=False, compare=False)

    def add(self, item: FoodItem, logged_at: Optional[datetime] = None) -> LogEntry:
        """Log an item and return the new entry."""
        logged_at = logged_at or datetime.now()
        stamp = int(logged_at.timestamp() * 1000)
        taken = {entry.id for entry in self.entries}
        entry_id = f"log-{self._next_id}-{stamp}"
        while entry_id in taken:
            self._next_id += 1
            entry_id = f"log-{self._next_id}-{stamp}"
        self._next_id += 1

        entry = LogEntry(id=entry_id, item=item, logged_at=logged_at)
        self.entries.append(entry)
        return entry

    def remove(self, entry_id: str) -> bool:
        """Remove an entry by id. Returns False if no entry matched."""
        for index, entry in enumerate(self.entries):
            if entry.id == entry_id:
                del self.entries[index]
                return True
        return False

    def totals(self) -> MacroTotals:
        return MacroTotals.of(entry.item for entry in self.entries)

    def remaining(self, targets: Targets) -> Budget:
        return Budget(targets=targets, consumed=self.totals())

    @classmethod
    def from_records(cls, records: Iterable[Any]) -> "DailyLog":
        """Rebuild a log from stored entry records.

        Each record holds an ``item`` mapping and optional ``id`` and
        ``logged_at`` (ISO 8601). Entries whose item cannot be coerced are
        skipped.
        """
        log = cls()
        for index, record in enumerate(records or []):
            log._next_id = index + 1
            if not isinstance(record, dict):
                continue
            item = FoodItem.from_record(record.get("item") or {})
            if item is None:
                logger.warning("Skipping log entry %d without an item id", index)
                continue
            logged_at = _parse_timestamp(record.get("logged_at") or record.get("timestamp"))
            log.entries.append(LogEntry(
                id=str(record.get("id") or f"log-{index}"),
                item=item,
                logged_at=logged_at,
            ))
        return log


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable log timestamp %r", value)
    return datetime.now()
