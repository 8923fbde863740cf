"""Tests for day plan assembly and conversion."""

from __future__ import annotations

import pytest

from dietplan.menu.catalog import CAFETERIA_MENU
from dietplan.menu.models import FoodItem, Preference
from dietplan.planner.day_plans import (
    ALL_SLOTS,
    LUNCH_DINNER,
    assemble_day_plans,
    build_slot_pools,
    day_plans_from_records,
    generate_day_plans,
    slot_affinity,
    slot_budgets,
)
from dietplan.planner.models import SLOTS, Slot, plan_name_for


def all_item_ids(plan):
    return [item_id for meal in plan.meals for item_id in meal.item_ids]


@pytest.fixture
def day_budgets():
    return slot_budgets(2000, 150, 250, 60)


class TestSlotBudgets:
    """Tests for slot_budgets."""

    def test_default_split(self):
        budgets = slot_budgets(2000, 100, 200, 50)

        assert budgets[Slot.BREAKFAST].calories == pytest.approx(600)
        assert budgets[Slot.LUNCH].calories == pytest.approx(700)
        assert budgets[Slot.DINNER].protein == pytest.approx(35)

    def test_negative_remaining_is_zero(self):
        budgets = slot_budgets(-150, -10, 20, 0)

        lunch = budgets[Slot.LUNCH]
        assert lunch.calories == 0
        assert lunch.protein == 0
        assert lunch.carbs == pytest.approx(7)

    def test_custom_split(self):
        split = {Slot.BREAKFAST: 0.2, Slot.LUNCH: 0.5, Slot.DINNER: 0.3}

        assert slot_budgets(1000, 0, 0, 0, split)[Slot.LUNCH].calories == pytest.approx(500)


class TestSlotAffinity:
    """Tests for sorting items into slot pools."""

    def test_categories(self):
        assert slot_affinity(FoodItem("a", "Anything", category="Breakfast")) == {Slot.BREAKFAST}
        assert slot_affinity(FoodItem("b", "Anything", category="Main Course")) == LUNCH_DINNER

    def test_name_keywords(self):
        assert slot_affinity(FoodItem("c", "Masala Omelette")) == {Slot.BREAKFAST}
        assert slot_affinity(FoodItem("d", "Paneer Tikka")) == LUNCH_DINNER

    def test_unmatched_fits_everywhere(self):
        assert slot_affinity(FoodItem("e", "Green Tea")) == ALL_SLOTS

    def test_cafeteria_pools(self):
        pools = build_slot_pools(CAFETERIA_MENU)

        assert [i.id for i in pools[Slot.BREAKFAST]] == ["6", "7", "8", "9", "10", "11", "12", "14", "15"]
        assert [i.id for i in pools[Slot.LUNCH]] == ["1", "2", "3", "4", "5", "10", "11", "12", "13", "15"]
        assert pools[Slot.LUNCH] == pools[Slot.DINNER]


class TestAssembleDayPlans:
    """Tests for assemble_day_plans."""

    def test_ids_and_names(self, sample_items, day_budgets):
        pools = {slot: sample_items for slot in SLOTS}

        plans = assemble_day_plans([pools, pools, pools], day_budgets)

        assert [p.id for p in plans] == ["plan-0", "plan-1", "plan-2"]
        assert [p.name for p in plans] == ["Option A", "Option B", "Option C"]

    def test_no_item_twice_within_an_option(self, sample_items, day_budgets):
        """The exclusion set carries across breakfast, lunch and dinner."""
        pools = {slot: sample_items for slot in SLOTS}

        for plan in assemble_day_plans([pools, pools], day_budgets):
            ids = all_item_ids(plan)
            assert len(ids) == len(set(ids))

    def test_options_are_independent(self, sample_items, day_budgets):
        """Identical pools give identical options; items may repeat across options."""
        pools = {slot: sample_items for slot in SLOTS}

        first, second = assemble_day_plans([pools, pools], day_budgets)

        assert all_item_ids(first) == all_item_ids(second)
        assert all_item_ids(first)

    def test_same_item_in_every_pool(self, day_budgets):
        """A single shared item lands in breakfast only."""
        shared = FoodItem("only", "Only Dish", calories=500, protein=30)
        pools = {slot: [shared] for slot in SLOTS}

        (plan,) = assemble_day_plans([pools], day_budgets)

        assert plan.breakfast.item_ids == ["only"]
        assert plan.lunch.items == ()
        assert plan.dinner.items == ()

    def test_totals_sum_meals(self, sample_items, day_budgets):
        pools = {slot: sample_items for slot in SLOTS}

        (plan,) = assemble_day_plans([pools], day_budgets)

        assert plan.total_calories == pytest.approx(sum(m.calories for m in plan.meals))
        assert plan.total_protein == pytest.approx(sum(m.protein for m in plan.meals))

    def test_empty_pools(self, day_budgets):
        (plan,) = assemble_day_plans([{}], day_budgets)

        assert plan.total_calories == 0
        assert all(meal.items == () for meal in plan.meals)

    def test_meals_within_ceiling(self, sample_items, day_budgets):
        pools = {slot: sample_items for slot in SLOTS}

        (plan,) = assemble_day_plans([pools], day_budgets)

        for meal in plan.meals:
            assert meal.calories <= day_budgets[meal.slot].calories * 1.15


class TestGenerateDayPlans:
    """Tests for local plan generation from a menu."""

    def test_three_options(self, day_budgets):
        plans = generate_day_plans(CAFETERIA_MENU, day_budgets)

        assert [p.id for p in plans] == ["plan-0", "plan-1", "plan-2"]
        for plan in plans:
            ids = all_item_ids(plan)
            assert len(ids) == len(set(ids))

    def test_later_options_vary(self, day_budgets):
        """Option B's breakfast avoids what option A chose."""
        plan_a, plan_b, _ = generate_day_plans(CAFETERIA_MENU, day_budgets)

        assert plan_a.breakfast.items
        assert plan_b.breakfast.items
        assert not set(plan_a.breakfast.item_ids) & set(plan_b.breakfast.item_ids)

    def test_must_have_kept_in_every_option(self, day_budgets):
        """Must-have items are not varied away."""
        prefs = {"8": Preference.MUST_HAVE}

        plans = generate_day_plans(CAFETERIA_MENU, day_budgets, prefs)

        assert all("8" in plan.breakfast.item_ids for plan in plans)

    def test_option_count(self, day_budgets):
        assert len(generate_day_plans(CAFETERIA_MENU, day_budgets, n_options=1)) == 1

    def test_deterministic(self, day_budgets):
        first = generate_day_plans(CAFETERIA_MENU, day_budgets)
        second = generate_day_plans(CAFETERIA_MENU, day_budgets)

        assert first == second


class TestDayPlansFromRecords:
    """Tests for converting an external plan batch."""

    @pytest.fixture
    def records(self):
        return [
            {
                "breakfast": {
                    "items": [
                        {"name": "Poha", "calories": 250, "protein": 6, "carbs": 42, "fats": 6},
                        {"calories": 100},
                    ],
                    "calories": 0,
                },
                "lunch": {
                    "items": [
                        {"name": "Thali", "calories": 700, "protein": 20, "carbs": 100, "fats": 20},
                    ],
                    "calories": 650,
                    "protein": 22,
                },
                "dinner": "garbage",
                "totalCalories": 1000,
            },
            "not a plan",
            {"breakfast": {"items": []}},
        ]

    def test_ids_and_names(self, records):
        plans = day_plans_from_records(records)

        assert [p.id for p in plans] == ["plan-0", "plan-1"]
        assert plans[1].name == "Option B"
        assert plans[0].breakfast.item_ids == ["plan-0-breakfast-0"]
        assert plans[0].lunch.item_ids == ["plan-0-lunch-0"]

    def test_nameless_items_dropped(self, records):
        plan = day_plans_from_records(records)[0]

        assert [item.name for item in plan.breakfast.items] == ["Poha"]

    def test_missing_aggregates_recomputed(self, records):
        plan = day_plans_from_records(records)[0]

        assert plan.breakfast.calories == 250
        assert plan.lunch.carbs == 100
        assert plan.dinner.calories == 0
        assert plan.total_protein == pytest.approx(28)

    def test_reported_aggregates_kept(self, records):
        plan = day_plans_from_records(records)[0]

        assert plan.lunch.calories == 650
        assert plan.lunch.protein == 22
        assert plan.total_calories == 1000

    def test_empty_batch(self):
        assert day_plans_from_records([]) == []
        assert day_plans_from_records(None) == []

    def test_names_after_option_z(self):
        """Large batches keep readable names once the letters run out."""
        records = [
            {"breakfast": {"items": [{"name": f"Item {i}", "calories": 100}]}}
            for i in range(28)
        ]

        plans = day_plans_from_records(records)

        assert plans[0].name == "Option A"
        assert plans[25].name == "Option Z"
        assert [p.name for p in plans[26:]] == ["Option 27", "Option 28"]
        assert len({p.name for p in plans}) == 28


class TestPlanNames:
    """Tests for option display names."""

    @pytest.mark.parametrize(
        ("index", "name"),
        [(0, "Option A"), (2, "Option C"), (25, "Option Z"), (26, "Option 27"), (99, "Option 100")],
    )
    def test_plan_name_for(self, index, name):
        assert plan_name_for(index) == name
