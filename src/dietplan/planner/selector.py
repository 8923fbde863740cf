"""Greedy item selection for a single meal slot.

Selection runs in two passes over the candidates:

1. Must-have items, in input order, while the slot stays within the
   must-have ceiling.
2. Remaining items ranked by score against the running total, added until
   the slot is filled to the lower bound, skipping anything that would
   overshoot the upper bound.

Ties in score keep the candidates' input order, so the same inputs always
produce the same selection.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from dietplan.menu.models import FoodItem, Preference
from dietplan.planner.models import ScoreWeights, SelectionThresholds, SlotBudget
from dietplan.planner.scoring import DEFAULT_WEIGHTS, score_item

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS = SelectionThresholds()


def available_candidates(
    candidates: Iterable[Optional[FoodItem]],
    exclude_ids: set[str],
) -> list[FoodItem]:
    """Candidates that have an id and are not excluded, in input order."""
    return [
        item for item in candidates
        if item is not None and item.id and item.id not in exclude_ids
    ]


def select_meal_items(
    candidates: Iterable[Optional[FoodItem]],
    cal_target: float,
    protein_target: float,
    carbs_target: float,
    fats_target: float,
    exclude_ids: set[str],
    preferences: Optional[Mapping[str, Preference]] = None,
    thresholds: SelectionThresholds = DEFAULT_THRESHOLDS,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> list[FoodItem]:
    """Select items for one meal slot.

    Args:
        candidates: Candidate items for the slot
        cal_target: Slot calorie target
        protein_target: Slot protein target (g)
        carbs_target: Slot carbs target (g)
        fats_target: Slot fats target (g)
        exclude_ids: Item ids that may not be selected (modified in place:
            every selected id is added)
        preferences: Item id -> Preference; missing ids are optional
        thresholds: Calorie bounds for the two passes
        weights: Score blend weights

    Returns:
        Selected items, must-haves first, then optional items in the order
        they were added. Empty if nothing fits.
    """
    preferences = preferences or {}
    available = available_candidates(candidates, exclude_ids)

    selected: list[FoodItem] = []
    total_cal = 0.0

    # Must-have pass
    must_have_ceiling = cal_target * thresholds.must_have_ratio
    for item in available:
        if preferences.get(item.id) != Preference.MUST_HAVE:
            continue
        if item.id in exclude_ids:
            continue
        if total_cal + item.calories <= must_have_ceiling:
            selected.append(item)
            total_cal += item.calories
            exclude_ids.add(item.id)
        else:
            logger.debug(
                "Must-have %s (%s kcal) does not fit %s kcal ceiling",
                item.id, item.calories, must_have_ceiling,
            )

    # Optional pass, scored against the total after must-haves
    optional = [
        item for item in available
        if preferences.get(item.id) != Preference.MUST_HAVE
        and item.id not in exclude_ids
    ]
    scored = [
        (
            score_item(
                item,
                total_cal,
                cal_target,
                protein_target,
                carbs_target,
                fats_target,
                weights,
            ),
            item,
        )
        for item in optional
    ]
    # sorted() is stable: equal scores keep input order
    ranked = sorted(scored, key=lambda pair: -pair[0])

    fill_floor = cal_target * thresholds.min_fill_ratio
    fill_ceiling = cal_target * thresholds.max_fill_ratio
    for score, item in ranked:
        if total_cal >= fill_floor:
            break
        if item.id in exclude_ids:
            continue
        if total_cal + item.calories <= fill_ceiling:
            selected.append(item)
            total_cal += item.calories
            exclude_ids.add(item.id)

    logger.debug(
        "Selected %d items (%.0f of %.0f kcal)",
        len(selected), total_cal, cal_target,
    )
    return selected


def select_for_budget(
    candidates: Iterable[Optional[FoodItem]],
    budget: SlotBudget,
    exclude_ids: set[str],
    preferences: Optional[Mapping[str, Preference]] = None,
    thresholds: SelectionThresholds = DEFAULT_THRESHOLDS,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> list[FoodItem]:
    """select_meal_items with the targets taken from a SlotBudget."""
    return select_meal_items(
        candidates,
        budget.calories,
        budget.protein,
        budget.carbs,
        budget.fats,
        exclude_ids,
        preferences=preferences,
        thresholds=thresholds,
        weights=weights,
    )
