"""Day plan assembly from per-slot candidate pools.

A batch of day plan options is built by running the meal selector once per
slot per option. Each option threads its own exclusion set through
breakfast, lunch and dinner, so an item appears at most once per option;
different options may reuse the same items.

Two sources of plans are supported:

- Local generation from a menu (``generate_day_plans``), which sorts items
  into slot pools with a keyword rule table and varies later options.
- Conversion of a batch returned by an external plan generator
  (``day_plans_from_records``).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional

from dietplan.menu.models import FoodItem, Preference, coerce_number
from dietplan.planner.models import (
    DEFAULT_MEAL_SPLIT,
    SLOTS,
    DayPlan,
    MealPlan,
    ScoreWeights,
    SelectionThresholds,
    Slot,
    SlotBudget,
    plan_id_for,
    plan_name_for,
)
from dietplan.planner.scoring import DEFAULT_WEIGHTS
from dietplan.planner.selector import DEFAULT_THRESHOLDS, select_for_budget

logger = logging.getLogger(__name__)

DEFAULT_PLAN_OPTIONS = 3

SlotPools = Mapping[Slot, list[FoodItem]]

ALL_SLOTS = frozenset(SLOTS)
LUNCH_DINNER = frozenset({Slot.LUNCH, Slot.DINNER})


def _category_is(*names: str) -> Callable[[FoodItem], bool]:
    wanted = {n.lower() for n in names}
    return lambda item: item.category.lower() in wanted


def _name_has(*keywords: str) -> Callable[[FoodItem], bool]:
    return lambda item: any(k in item.name.lower() for k in keywords)


# Slot affinity rules, first match wins
SLOT_AFFINITY_RULES: list[tuple[Callable[[FoodItem], bool], frozenset[Slot]]] = [
    (_category_is("breakfast"), frozenset({Slot.BREAKFAST})),
    (_category_is("main course", "main", "entree"), LUNCH_DINNER),
    (
        _name_has(
            "dosa", "idli", "poha", "upma", "uttapam", "paratha", "oats",
            "omelette", "egg", "cereal", "toast", "pancake",
        ),
        frozenset({Slot.BREAKFAST}),
    ),
    (
        _name_has(
            "biryani", "curry", "rice", "chawal", "dal", "rajma", "chole",
            "paneer", "chicken", "fish", "pulao", "thali",
        ),
        LUNCH_DINNER,
    ),
]


def slot_affinity(item: FoodItem) -> frozenset[Slot]:
    """Slots an item is suited for. Unmatched items fit any slot."""
    for predicate, slots in SLOT_AFFINITY_RULES:
        if predicate(item):
            return slots
    return ALL_SLOTS


def build_slot_pools(items: Iterable[FoodItem]) -> dict[Slot, list[FoodItem]]:
    """Sort menu items into per-slot candidate pools, keeping input order."""
    pools: dict[Slot, list[FoodItem]] = {slot: [] for slot in SLOTS}
    for item in items:
        for slot in SLOTS:
            if slot in slot_affinity(item):
                pools[slot].append(item)
    return pools


def slot_budgets(
    calories: float,
    protein: float,
    carbs: float,
    fats: float,
    split: Optional[Mapping[Slot, float]] = None,
) -> dict[Slot, SlotBudget]:
    """Divide a day's remaining budget across slots.

    Negative remaining values are treated as zero.
    """
    split = split or DEFAULT_MEAL_SPLIT
    return {
        slot: SlotBudget(
            calories=max(calories, 0) * split[slot],
            protein=max(protein, 0) * split[slot],
            carbs=max(carbs, 0) * split[slot],
            fats=max(fats, 0) * split[slot],
        )
        for slot in SLOTS
    }


def assemble_day_plan(
    index: int,
    pools: SlotPools,
    budgets: Mapping[Slot, SlotBudget],
    preferences: Optional[Mapping[str, Preference]] = None,
    thresholds: SelectionThresholds = DEFAULT_THRESHOLDS,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> DayPlan:
    """Build one day plan option from its slot pools.

    A fresh exclusion set is threaded through breakfast, lunch and dinner.
    """
    exclude_ids: set[str] = set()
    meals: dict[Slot, MealPlan] = {}
    for slot in SLOTS:
        items = select_for_budget(
            pools.get(slot, []),
            budgets[slot],
            exclude_ids,
            preferences=preferences,
            thresholds=thresholds,
            weights=weights,
        )
        meals[slot] = MealPlan.from_items(slot, items)

    return DayPlan.from_meals(
        plan_id_for(index),
        plan_name_for(index),
        meals[Slot.BREAKFAST],
        meals[Slot.LUNCH],
        meals[Slot.DINNER],
    )


def assemble_day_plans(
    option_pools: Iterable[SlotPools],
    budgets: Mapping[Slot, SlotBudget],
    preferences: Optional[Mapping[str, Preference]] = None,
    thresholds: SelectionThresholds = DEFAULT_THRESHOLDS,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> list[DayPlan]:
    """Build one day plan per option, each option selected independently.

    Args:
        option_pools: For each option, candidate items per slot
        budgets: Calorie and macro budget per slot, shared by all options
        preferences: Item id -> Preference
        thresholds: Selector calorie bounds
        weights: Score blend weights

    Returns:
        Day plans with ids ``plan-0``, ``plan-1``, ... in option order.
    """
    return [
        assemble_day_plan(index, pools, budgets, preferences, thresholds, weights)
        for index, pools in enumerate(option_pools)
    ]


def _vary_pools(
    base: SlotPools,
    used: Mapping[Slot, set[str]],
    preferences: Mapping[str, Preference],
) -> dict[Slot, list[FoodItem]]:
    """Drop items earlier options already picked for the same slot.

    Must-have items always stay. A slot whose pool would be left without
    anything new keeps its full pool.
    """
    varied: dict[Slot, list[FoodItem]] = {}
    for slot in SLOTS:
        pool = list(base.get(slot, []))
        fresh = [
            item for item in pool
            if item.id not in used[slot]
            or preferences.get(item.id) == Preference.MUST_HAVE
        ]
        has_new = any(
            preferences.get(item.id) != Preference.MUST_HAVE for item in fresh
        )
        varied[slot] = fresh if has_new else pool
    return varied


def generate_day_plans(
    items: Iterable[FoodItem],
    budgets: Mapping[Slot, SlotBudget],
    preferences: Optional[Mapping[str, Preference]] = None,
    n_options: int = DEFAULT_PLAN_OPTIONS,
    thresholds: SelectionThresholds = DEFAULT_THRESHOLDS,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> list[DayPlan]:
    """Generate a batch of day plan options from a menu.

    The first option gets the full slot pools. Each later option leaves out
    the optional items earlier options chose for that slot, so options
    differ while the result stays deterministic.
    """
    preferences = preferences or {}
    base = build_slot_pools(items)
    used: dict[Slot, set[str]] = {slot: set() for slot in SLOTS}

    plans: list[DayPlan] = []
    for index in range(n_options):
        pools = _vary_pools(base, used, preferences)
        plan = assemble_day_plan(index, pools, budgets, preferences, thresholds, weights)
        plans.append(plan)
        for slot in SLOTS:
            used[slot].update(plan.meal(slot).item_ids)

    logger.info("Generated %d day plan options from %d slot candidates",
                len(plans), sum(len(p) for p in base.values()))
    return plans


def _meal_from_record(
    record: Any,
    plan_index: int,
    slot: Slot,
) -> MealPlan:
    """Convert one slot sub-object of an external plan record."""
    record = record if isinstance(record, dict) else {}
    raw_items = record.get("items")
    if not isinstance(raw_items, list):
        raw_items = []

    items: list[FoodItem] = []
    for item_index, raw in enumerate(r for r in raw_items if isinstance(r, dict) and r.get("name")):
        item = FoodItem.from_record({
            **raw,
            "id": f"plan-{plan_index}-{slot.value}-{item_index}",
        })
        if item is not None:
            items.append(item)

    computed = MealPlan.from_items(slot, items)
    # Reported aggregates win unless missing or zero
    return MealPlan(
        slot=slot,
        items=computed.items,
        calories=coerce_number(record.get("calories")) or computed.calories,
        protein=coerce_number(record.get("protein")) or computed.protein,
        carbs=coerce_number(record.get("carbs")) or computed.carbs,
        fats=coerce_number(record.get("fats")) or computed.fats,
    )


def day_plans_from_records(records: Iterable[Any]) -> list[DayPlan]:
    """Convert a day plan batch from an external generator to DayPlans.

    Each record has ``breakfast``, ``lunch`` and ``dinner`` sub-objects with
    an ``items`` list and optional aggregate ``calories``/``protein``/
    ``carbs``/``fats``, plus optional ``totalCalories``, ``totalProtein``,
    ``totalCarbs`` and ``totalFats``. Missing or zero aggregates are
    recomputed from the items; nameless items are dropped; records that are
    not mappings are skipped.
    """
    plans: list[DayPlan] = []
    valid = [r for r in (records or []) if isinstance(r, dict)]
    for index, record in enumerate(valid):
        meals = {
            slot: _meal_from_record(record.get(slot.value), index, slot)
            for slot in SLOTS
        }
        computed = DayPlan.from_meals(
            plan_id_for(index),
            plan_name_for(index),
            meals[Slot.BREAKFAST],
            meals[Slot.LUNCH],
            meals[Slot.DINNER],
        )
        plans.append(DayPlan(
            id=computed.id,
            name=computed.name,
            breakfast=computed.breakfast,
            lunch=computed.lunch,
            dinner=computed.dinner,
            total_calories=coerce_number(record.get("totalCalories")) or computed.total_calories,
            total_protein=coerce_number(record.get("totalProtein")) or computed.total_protein,
            total_carbs=coerce_number(record.get("totalCarbs")) or computed.total_carbs,
            total_fats=coerce_number(record.get("totalFats")) or computed.total_fats,
        ))
    return plans
