"""Pytest fixtures for dietplan tests."""

from __future__ import annotations

import logging

import pytest

from dietplan.menu.models import FoodItem
from dietplan.planner.models import DayPlan, MealPlan, Slot
from dietplan.profiles.body_calc import (
    ActivityLevel,
    Gender,
    Goal,
    MacroTargets,
    Profile,
    Targets,
)


@pytest.fixture(autouse=True)
def propagate_dietplan_logs(monkeypatch):
    """Let caplog see dietplan records after the CLI has configured logging."""
    monkeypatch.setattr(logging.getLogger("dietplan"), "propagate", True)


@pytest.fixture
def male_profile():
    """25 year old moderately active male, 170cm / 70kg, maintaining."""
    return Profile(
        age=25,
        gender=Gender.MALE,
        height_cm=170,
        weight_kg=70,
        activity_level=ActivityLevel.MODERATE,
        goal=Goal.MAINTAIN,
    )


@pytest.fixture
def simple_targets():
    """Round-number targets for deficit and budget tests."""
    return Targets(
        bmi=22.0,
        bmr=1600.0,
        tdee=2000.0,
        daily_calories=2000.0,
        macros=MacroTargets(protein=100, carbs=200, fats=50),
    )


@pytest.fixture
def sample_items():
    """A small mixed menu."""
    return [
        FoodItem("egg", "Egg Omelette", 200, 14, 2, 15, "Breakfast"),
        FoodItem("oats", "Masala Oats", 250, 8, 40, 6, "Breakfast"),
        FoodItem("dal", "Dal Rice", 450, 16, 70, 10, "Main Course"),
        FoodItem("chicken", "Chicken Curry", 400, 35, 10, 22, "Main Course"),
        FoodItem("salad", "Green Salad", 80, 3, 12, 2, "Sides"),
        FoodItem("fruit", "Fruit Bowl", 150, 2, 36, 0, "Snacks"),
    ]


def make_meal(slot: Slot, *items: FoodItem) -> MealPlan:
    return MealPlan.from_items(slot, items)


def make_plan(plan_id: str, breakfast=(), lunch=(), dinner=()) -> DayPlan:
    """Build a DayPlan from item tuples per slot."""
    return DayPlan.from_meals(
        plan_id,
        plan_id.title(),
        make_meal(Slot.BREAKFAST, *breakfast),
        make_meal(Slot.LUNCH, *lunch),
        make_meal(Slot.DINNER, *dinner),
    )
