"""Tests for macro deficit detection and suggestions."""

from __future__ import annotations

import pytest

from dietplan.menu.models import FoodItem, MacroTotals
from dietplan.planner.deficits import (
    DeficitThresholds,
    compute_deficits,
    macro_deficits,
    nutrient_density,
    rank_sources,
)


class TestMacroDeficits:
    """Tests for macro_deficits."""

    def test_counts_consumed_and_selected(self, simple_targets):
        deficits = macro_deficits(
            MacroTotals(protein=30, carbs=100, fats=38),
            simple_targets,
            consumed=MacroTotals(protein=20, carbs=50, fats=10),
        )

        assert deficits == {"protein": 50, "carbs": 50, "fats": 2}

    def test_never_negative(self, simple_targets):
        deficits = macro_deficits(MacroTotals(protein=500, carbs=500, fats=500), simple_targets)

        assert deficits == {"protein": 0, "carbs": 0, "fats": 0}


class TestComputeDeficits:
    """Tests for compute_deficits."""

    def test_no_selection(self, simple_targets):
        assert compute_deficits(None, simple_targets) is None

    def test_targets_met(self, simple_targets):
        """Selected meals covering every target report nothing."""
        selected = MacroTotals(calories=2000, protein=100, carbs=200, fats=50)

        assert compute_deficits(selected, simple_targets) is None

    def test_small_deficits_ignored(self, simple_targets):
        selected = MacroTotals(protein=95.1, carbs=195.1, fats=45.1)

        assert compute_deficits(selected, simple_targets) is None

    def test_exactly_at_threshold_reported(self, simple_targets):
        selected = MacroTotals(protein=95, carbs=200, fats=50)

        report = compute_deficits(selected, simple_targets)

        assert report is not None
        assert report.deficits["protein"] == 5
        assert report.suggestions["carbs"] == []

    def test_staple_suggestions(self, simple_targets):
        """Without a menu the staple list is ranked by macro density."""
        report = compute_deficits(
            MacroTotals(protein=30, carbs=100, fats=38),
            simple_targets,
            consumed=MacroTotals(protein=20, carbs=50, fats=10),
        )

        assert report.deficits == {"protein": 50, "carbs": 50, "fats": 2}
        assert [item.name for item in report.suggestions["protein"]] == [
            "Chicken Breast (100g)",
            "Greek Yogurt (100g)",
            "Boiled Eggs (2)",
        ]
        assert [item.name for item in report.suggestions["carbs"]] == [
            "Banana (1 medium)",
            "Steamed Rice (1 bowl)",
            "Roti (2 pieces)",
        ]
        assert report.suggestions["fats"] == []

    def test_menu_candidates_used(self, simple_targets, sample_items):
        report = compute_deficits(MacroTotals(), simple_targets, candidates=sample_items)

        assert [item.id for item in report.suggestions["protein"]] == ["chicken", "egg", "salad"]

    def test_custom_thresholds(self, simple_targets):
        selected = MacroTotals(protein=92, carbs=200, fats=50)
        strict = DeficitThresholds(min_deficit_grams=10, top_n=1)

        assert compute_deficits(selected, simple_targets, thresholds=strict) is None

        loose = DeficitThresholds(min_deficit_grams=1, top_n=1)
        report = compute_deficits(selected, simple_targets, thresholds=loose)
        assert len(report.suggestions["protein"]) == 1

    def test_idempotent(self, simple_targets, sample_items):
        selected = MacroTotals(protein=40, carbs=80, fats=20)

        first = compute_deficits(selected, simple_targets, candidates=sample_items)
        second = compute_deficits(selected, simple_targets, candidates=sample_items)

        assert first == second

    def test_to_dict(self, simple_targets):
        report = compute_deficits(MacroTotals(protein=90, carbs=200, fats=50), simple_targets)
        data = report.to_dict()

        assert data["deficits"]["protein"] == 10
        assert len(data["suggestions"]["protein"]) == 3
        assert data["suggestions"]["protein"][0]["name"] == "Chicken Breast (100g)"


class TestRanking:
    """Tests for density ranking."""

    def test_items_without_macro_excluded(self):
        ghee = FoodItem("g", "Ghee", 45, 0, 0, 5)
        egg = FoodItem("e", "Egg", 70, 6, 0.5, 5)

        assert rank_sources([ghee, egg], "protein") == [egg]

    def test_zero_calorie_items(self):
        """Calories below one count as one."""
        water = FoodItem("w", "Protein Water", 0, 10)

        assert nutrient_density(water, "protein") == pytest.approx(10)

    def test_ties_keep_order(self):
        a = FoodItem("a", "A", 100, 10)
        b = FoodItem("b", "B", 200, 20)

        assert rank_sources([b, a], "protein") == [b, a]

    def test_top_n(self):
        items = [FoodItem(str(n), f"Item {n}", 100, n + 1) for n in range(6)]

        assert [item.id for item in rank_sources(items, "protein", top_n=2)] == ["5", "4"]
