"""Data models for meal selection and day plans.

Day planning is a two-level process:

1. Selection: for each slot (breakfast, lunch, dinner) pick menu items that
   fit the slot's calorie and macro budget.
2. Assembly: combine one meal per slot into a day plan; a batch holds
   several plan options the user picks meals from.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from dietplan.menu.models import FoodItem, MacroTotals


class Slot(Enum):
    """Meals of the day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


SLOTS: tuple[Slot, ...] = (Slot.BREAKFAST, Slot.LUNCH, Slot.DINNER)

# Share of the day's remaining budget given to each slot
DEFAULT_MEAL_SPLIT: dict[Slot, float] = {
    Slot.BREAKFAST: 0.30,
    Slot.LUNCH: 0.35,
    Slot.DINNER: 0.35,
}


@dataclass(frozen=True)
class ScoreWeights:
    """Weights for blending macro fit and calorie fit.

    Attributes:
        macro_weight: Weight of the mean macro coverage term
        calorie_weight: Weight of the calorie-closeness term
        calorie_decay: kcal distance at which calorie fit halves
    """

    macro_weight: float = 0.7
    calorie_weight: float = 0.3
    calorie_decay: float = 100.0


@dataclass(frozen=True)
class SelectionThresholds:
    """Calorie bounds for greedy meal selection, as fractions of the target.

    Attributes:
        must_have_ratio: Must-have items are added while the running total
            stays at or under this fraction
        min_fill_ratio: Optional items stop once the running total reaches
            this fraction
        max_fill_ratio: An optional item is skipped if it would push the
            running total above this fraction
    """

    must_have_ratio: float = 1.1
    min_fill_ratio: float = 0.9
    max_fill_ratio: float = 1.15


@dataclass(frozen=True)
class SlotBudget:
    """Calorie and macro budget for one meal slot."""

    calories: float
    protein: float
    carbs: float
    fats: float


@dataclass(frozen=True)
class MealPlan:
    """Items chosen for one slot, with aggregated nutrition."""

    slot: Slot
    items: tuple[FoodItem, ...]
    calories: float
    protein: float
    carbs: float
    fats: float

    @classmethod
    def from_items(cls, slot: Slot, items: Iterable[FoodItem]) -> "MealPlan":
        items = tuple(items)
        totals = MacroTotals.of(items)
        return cls(
            slot=slot,
            items=items,
            calories=totals.calories,
            protein=totals.protein,
            carbs=totals.carbs,
            fats=totals.fats,
        )

    @property
    def totals(self) -> MacroTotals:
        return MacroTotals(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fats=self.fats,
        )

    @property
    def item_ids(self) -> list[str]:
        return [item.id for item in self.items]

    def to_dict(self) -> dict[str, Any]:
        return {
            "slot": self.slot.value,
            "items": [item.to_dict() for item in self.items],
            **self.totals.to_dict(),
        }


@dataclass(frozen=True)
class DayPlan:
    """One day plan option: a meal per slot plus day totals."""

    id: str
    name: str
    breakfast: MealPlan
    lunch: MealPlan
    dinner: MealPlan
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fats: float

    @classmethod
    def from_meals(
        cls,
        plan_id: str,
        name: str,
        breakfast: MealPlan,
        lunch: MealPlan,
        dinner: MealPlan,
    ) -> "DayPlan":
        totals = breakfast.totals + lunch.totals + dinner.totals
        return cls(
            id=plan_id,
            name=name,
            breakfast=breakfast,
            lunch=lunch,
            dinner=dinner,
            total_calories=totals.calories,
            total_protein=totals.protein,
            total_carbs=totals.carbs,
            total_fats=totals.fats,
        )

    def meal(self, slot: Slot) -> MealPlan:
        return getattr(self, slot.value)

    @property
    def meals(self) -> list[MealPlan]:
        return [self.meal(slot) for slot in SLOTS]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            **{slot.value: self.meal(slot).to_dict() for slot in SLOTS},
            "total_calories": self.total_calories,
            "total_protein": self.total_protein,
            "total_carbs": self.total_carbs,
            "total_fats": self.total_fats,
        }


def plan_id_for(index: int) -> str:
    """Batch-local plan id for the option at ``index``."""
    return f"plan-{index}"


def plan_name_for(index: int) -> str:
    """Display name for the option at ``index`` (Option A, Option B, ...).

    Past Option Z the name falls back to the 1-based number.
    """
    if 0 <= index < 26:
        return f"Option {chr(ord('A') + index)}"
    return f"Option {index + 1}"
