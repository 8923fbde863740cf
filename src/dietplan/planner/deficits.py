"""Macro deficit detection and fill suggestions.

After the user selects meals, compare what has been eaten plus what is
selected against the day's macro targets. For each macro still short by a
meaningful amount, suggest the items that deliver that macro most densely
per calorie.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from dietplan.menu.catalog import STAPLE_FOODS
from dietplan.menu.models import MACRO_NAMES, FoodItem, MacroTotals
from dietplan.profiles.body_calc import Targets


@dataclass(frozen=True)
class DeficitThresholds:
    """Limits for deficit reporting.

    Attributes:
        min_deficit_grams: Deficits below this are ignored
        top_n: Suggestions returned per macro
    """

    min_deficit_grams: float = 5.0
    top_n: int = 3


@dataclass
class DeficitReport:
    """Remaining macro deficits and suggested items to close them."""

    deficits: dict[str, float]
    suggestions: dict[str, list[FoodItem]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "deficits": dict(self.deficits),
            "suggestions": {
                macro: [item.to_dict() for item in items]
                for macro, items in self.suggestions.items()
            },
        }


def nutrient_density(item: FoodItem, macro: str) -> float:
    """Grams of ``macro`` per kcal, treating calories below 1 as 1."""
    return item.macro(macro) / max(item.calories, 1)


def rank_sources(
    candidates: Iterable[FoodItem],
    macro: str,
    top_n: int = 3,
) -> list[FoodItem]:
    """Top items by density of ``macro``; items without it are left out."""
    with_macro = [item for item in candidates if item.macro(macro) > 0]
    ranked = sorted(with_macro, key=lambda item: -nutrient_density(item, macro))
    return ranked[:top_n]


def macro_deficits(
    selected: MacroTotals,
    targets: Targets,
    consumed: Optional[MacroTotals] = None,
) -> dict[str, float]:
    """Grams still needed per macro, never negative."""
    consumed = consumed or MacroTotals()
    target_grams = {
        "protein": targets.macros.protein,
        "carbs": targets.macros.carbs,
        "fats": targets.macros.fats,
    }
    return {
        macro: max(0.0, target_grams[macro] - (consumed.macro(macro) + selected.macro(macro)))
        for macro in MACRO_NAMES
    }


def compute_deficits(
    selected: Optional[MacroTotals],
    targets: Targets,
    consumed: Optional[MacroTotals] = None,
    candidates: Optional[Iterable[FoodItem]] = None,
    thresholds: DeficitThresholds = DeficitThresholds(),
) -> Optional[DeficitReport]:
    """Compute macro deficits and ranked suggestions.

    Args:
        selected: Totals of the selected meals, or None if no slot is
            selected
        targets: Daily targets
        consumed: Totals already logged today
        candidates: Items to suggest from; the built-in staples when empty
        thresholds: Minimum deficit and suggestion count

    Returns:
        None if nothing is selected or every deficit is below the minimum,
        otherwise a DeficitReport. Macros under the minimum get no
        suggestions.
    """
    if selected is None:
        return None

    deficits = macro_deficits(selected, targets, consumed)
    if all(d < thresholds.min_deficit_grams for d in deficits.values()):
        return None

    pool = list(candidates or []) or list(STAPLE_FOODS)
    suggestions = {
        macro: (
            rank_sources(pool, macro, thresholds.top_n)
            if deficit >= thresholds.min_deficit_grams
            else []
        )
        for macro, deficit in deficits.items()
    }
    return DeficitReport(deficits=deficits, suggestions=suggestions)
