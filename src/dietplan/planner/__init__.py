"""Meal selection and day planning.

Items are scored against a slot's remaining calorie and macro budget,
greedily selected per slot, and assembled into a batch of day plan options.
The user then picks one meal per slot from any option, and remaining macro
gaps are reported with the densest sources to close them.
"""

from __future__ import annotations

from dietplan.planner.day_plans import (
    assemble_day_plans,
    day_plans_from_records,
    generate_day_plans,
    slot_budgets,
)
from dietplan.planner.deficits import DeficitReport, compute_deficits
from dietplan.planner.models import DayPlan, MealPlan, Slot, SlotBudget
from dietplan.planner.scoring import score_item
from dietplan.planner.selection import SelectionChange, SelectionState
from dietplan.planner.selector import select_meal_items

__all__ = [
    "DayPlan",
    "DeficitReport",
    "MealPlan",
    "SelectionChange",
    "SelectionState",
    "Slot",
    "SlotBudget",
    "assemble_day_plans",
    "compute_deficits",
    "day_plans_from_records",
    "generate_day_plans",
    "score_item",
    "select_meal_items",
    "slot_budgets",
]
