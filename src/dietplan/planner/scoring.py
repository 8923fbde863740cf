"""Suitability scoring for candidate menu items."""

from __future__ import annotations

from dietplan.menu.models import FoodItem
from dietplan.planner.models import ScoreWeights

DEFAULT_WEIGHTS = ScoreWeights()


def _coverage(amount: float, target: float) -> float:
    return amount / target if target > 0 else 0.0


def macro_score(
    item: FoodItem,
    protein_target: float,
    carbs_target: float,
    fats_target: float,
) -> float:
    """Mean share of each macro target covered by the item.

    A macro whose target is zero or negative contributes 0.
    """
    return (
        _coverage(item.protein, protein_target)
        + _coverage(item.carbs, carbs_target)
        + _coverage(item.fats, fats_target)
    ) / 3


def calorie_score(
    item: FoodItem,
    accumulated_calories: float,
    calorie_target: float,
    decay: float = DEFAULT_WEIGHTS.calorie_decay,
) -> float:
    """Closeness of the running total (with the item) to the calorie target.

    1.0 when the item lands exactly on target, decaying hyperbolically with
    the distance in kcal.
    """
    diff = abs((accumulated_calories + item.calories) - calorie_target)
    return 1 / (1 + diff / decay)


def score_item(
    item: FoodItem,
    accumulated_calories: float,
    calorie_target: float,
    protein_target: float,
    carbs_target: float,
    fats_target: float,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> float:
    """Score how well an item fits the remaining slot budget.

    Args:
        item: Candidate item
        accumulated_calories: Calories already selected for the slot
        calorie_target: Slot calorie target
        protein_target: Slot protein target (g)
        carbs_target: Slot carbs target (g)
        fats_target: Slot fats target (g)
        weights: Blend weights

    Returns:
        Weighted score; higher is better.
    """
    return (
        weights.macro_weight
        * macro_score(item, protein_target, carbs_target, fats_target)
        + weights.calorie_weight
        * calorie_score(item, accumulated_calories, calorie_target, weights.calorie_decay)
    )
