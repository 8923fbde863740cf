"""Meal selection state across a batch of day plan options.

The user picks at most one meal per slot from any option in the batch.
Picking a slot's meal from one option replaces whatever was picked for that
slot before, in any option; picking the same meal again clears it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from dietplan.menu.models import FoodItem, MacroTotals
from dietplan.planner.models import SLOTS, DayPlan, MealPlan, Slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionChange:
    """Items that entered and left the selected-items collection."""

    added: tuple[FoodItem, ...] = ()
    removed: tuple[FoodItem, ...] = ()


class SelectionState:
    """Which option's meal is selected for each slot.

    Attributes:
        plans: The day plan batch selections refer to
        selected: Slot -> selected plan id, or None
    """

    def __init__(self, plans: Iterable[DayPlan] = ()):
        self.plans: list[DayPlan] = list(plans)
        self.selected: dict[Slot, Optional[str]] = {slot: None for slot in SLOTS}

    def _plan(self, plan_id: str) -> DayPlan:
        for plan in self.plans:
            if plan.id == plan_id:
                return plan
        raise KeyError(f"Unknown day plan: {plan_id}")

    def reset(self, plans: Iterable[DayPlan]) -> None:
        """Replace the batch and clear every selection."""
        self.plans = list(plans)
        self.selected = {slot: None for slot in SLOTS}

    def is_selected(self, slot: Slot, plan_id: str) -> bool:
        return self.selected[slot] == plan_id

    @property
    def has_selection(self) -> bool:
        return any(plan_id is not None for plan_id in self.selected.values())

    def selected_meals(self) -> list[MealPlan]:
        """Selected meals in slot order."""
        meals = []
        for slot in SLOTS:
            plan_id = self.selected[slot]
            if plan_id is not None:
                meals.append(self._plan(plan_id).meal(slot))
        return meals

    @property
    def selected_items(self) -> list[FoodItem]:
        """Union of the selected meals' items, deduplicated by id."""
        items: list[FoodItem] = []
        seen: set[str] = set()
        for meal in self.selected_meals():
            for item in meal.items:
                if item.id not in seen:
                    seen.add(item.id)
                    items.append(item)
        return items

    def selected_totals(self) -> Optional[MacroTotals]:
        """Summed nutrition of the selected meals, or None if none selected.

        Uses each meal's aggregate values, which may come from an external
        generator rather than the item sum.
        """
        if not self.has_selection:
            return None
        total = MacroTotals()
        for meal in self.selected_meals():
            total = total + meal.totals
        return total

    def select_meal(self, slot: Slot, plan_id: str) -> SelectionChange:
        """Toggle the selection of ``plan_id``'s meal for ``slot``.

        Args:
            slot: Meal slot
            plan_id: Id of a plan in the batch

        Returns:
            The items added to and removed from the selected items.

        Raises:
            KeyError: If plan_id is not in the batch
        """
        self._plan(plan_id)
        before = {item.id: item for item in self.selected_items}

        if self.selected[slot] == plan_id:
            self.selected[slot] = None
            logger.debug("Deselected %s from %s", slot.value, plan_id)
        else:
            self.selected[slot] = plan_id
            logger.debug("Selected %s from %s", slot.value, plan_id)

        after = {item.id: item for item in self.selected_items}
        return SelectionChange(
            added=tuple(item for item_id, item in after.items() if item_id not in before),
            removed=tuple(item for item_id, item in before.items() if item_id not in after),
        )

    def to_dict(self) -> dict[str, Optional[str]]:
        return {slot.value: self.selected[slot] for slot in SLOTS}
