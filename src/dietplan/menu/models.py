"""Data models for menu items and item preferences."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

MACRO_NAMES = ("protein", "carbs", "fats")


class Preference(Enum):
    """How much the user wants an item in their plan."""

    MUST_HAVE = "must-have"
    OPTIONAL = "optional"
    NOT_NECESSARY = "not-necessary"


def coerce_number(value: Any) -> float:
    """Coerce a loosely typed nutrition value to a non-negative float.

    Missing, non-numeric, non-finite and negative values become 0.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


@dataclass(frozen=True)
class FoodItem:
    """A menu item with its nutrition per serving.

    Attributes:
        id: Unique identifier; item identity
        name: Display name
        calories: kcal per serving
        protein: Protein in grams
        carbs: Carbohydrates in grams
        fats: Fat in grams
        category: Menu category (e.g., "Main Course", "Breakfast")
        quantity: Optional serving label (e.g., "200g", "1 katori")
        description: Optional free-text description
    """

    id: str
    name: str
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
    category: str = "Other"
    quantity: Optional[str] = None
    description: Optional[str] = None

    def macro(self, name: str) -> float:
        """Grams of the named macro ("protein", "carbs" or "fats")."""
        if name not in MACRO_NAMES:
            raise KeyError(f"Unknown macro: {name}")
        return getattr(self, name)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Optional["FoodItem"]:
        """Build an item from a loosely shaped record.

        Missing or garbled numeric fields default to 0. Records without an
        id return None.
        """
        if not isinstance(record, Mapping):
            return None
        raw_id = record.get("id")
        if raw_id is None or raw_id == "":
            return None
        quantity = record.get("quantity")
        description = record.get("description")
        return cls(
            id=str(raw_id),
            name=str(record.get("name") or "Unnamed Item"),
            calories=coerce_number(record.get("calories")),
            protein=coerce_number(record.get("protein")),
            carbs=coerce_number(record.get("carbs")),
            fats=coerce_number(record.get("fats")),
            category=str(record.get("category") or "Other"),
            quantity=str(quantity) if quantity else None,
            description=str(description) if description else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
            "category": self.category,
        }
        if self.quantity:
            data["quantity"] = self.quantity
        if self.description:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class MacroTotals:
    """Summed calories and macros over a set of items."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0

    @classmethod
    def of(cls, items: Iterable[FoodItem]) -> "MacroTotals":
        calories = protein = carbs = fats = 0.0
        for item in items:
            calories += item.calories
            protein += item.protein
            carbs += item.carbs
            fats += item.fats
        return cls(calories=calories, protein=protein, carbs=carbs, fats=fats)

    def __add__(self, other: "MacroTotals") -> "MacroTotals":
        if not isinstance(other, MacroTotals):
            return NotImplemented
        return MacroTotals(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fats=self.fats + other.fats,
        )

    def macro(self, name: str) -> float:
        if name not in MACRO_NAMES:
            raise KeyError(f"Unknown macro: {name}")
        return getattr(self, name)

    def to_dict(self) -> dict[str, float]:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fats": self.fats,
        }


def coerce_items(records: Iterable[Any]) -> list[FoodItem]:
    """Convert raw records to FoodItems, dropping the ones without an id.

    Records that are already FoodItems pass through unchanged.
    """
    items: list[FoodItem] = []
    dropped = 0
    for record in records or []:
        if isinstance(record, FoodItem):
            item: Optional[FoodItem] = record
        else:
            item = FoodItem.from_record(record)
        if item is None:
            dropped += 1
            continue
        items.append(item)
    if dropped:
        logger.debug("Dropped %d menu records without an id", dropped)
    return items


def parse_preferences(data: Optional[Mapping[str, Any]]) -> dict[str, Preference]:
    """Parse an id -> preference mapping from config or CLI input.

    Raises:
        ValueError: If a preference value is not recognised.
    """
    preferences: dict[str, Preference] = {}
    for item_id, value in (data or {}).items():
        if isinstance(value, Preference):
            preferences[str(item_id)] = value
            continue
        try:
            preferences[str(item_id)] = Preference(str(value).strip().lower())
        except ValueError:
            valid = [p.value for p in Preference]
            raise ValueError(
                f"preference for '{item_id}' must be one of {valid}, got '{value}'"
            ) from None
    return preferences
