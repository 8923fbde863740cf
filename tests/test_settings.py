"""Tests for settings loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from dietplan.config.settings import Settings
from dietplan.planner.models import DEFAULT_MEAL_SPLIT, Slot


class TestSettingsLoad:
    """Tests for Settings.load."""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = Settings.load(tmp_path / "config.yaml")

        assert settings.planner.plan_options == 3
        assert settings.planner.meal_split == DEFAULT_MEAL_SPLIT
        assert settings.deficits.min_deficit_grams == 5.0
        assert settings.defaults.output_format == "table"

    def test_partial_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "planner:\n"
            "  min_fill_ratio: 0.8\n"
            "  plan_options: 2\n"
            "  meal_split:\n"
            "    breakfast: 0.25\n"
            "    lunch: 0.40\n"
            "    dinner: 0.35\n"
            "deficits:\n"
            "  top_n: 5\n"
            "defaults:\n"
            "  output_format: markdown\n"
            "  menu_path: ~/menus/office.yaml\n"
        )

        settings = Settings.load(path)

        assert settings.planner.thresholds.min_fill_ratio == 0.8
        assert settings.planner.thresholds.max_fill_ratio == 1.15
        assert settings.planner.plan_options == 2
        assert settings.planner.meal_split[Slot.LUNCH] == 0.40
        assert settings.deficits.thresholds.top_n == 5
        assert settings.defaults.output_format == "markdown"
        assert settings.defaults.menu_path == Path("~/menus/office.yaml").expanduser()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert Settings.load(path).planner.calorie_decay == 100.0

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        settings = Settings()
        settings.planner.macro_weight = 0.6
        settings.planner.calorie_weight = 0.4

        settings.save(path)
        loaded = Settings.load(path)

        assert loaded.planner.weights.macro_weight == 0.6
        assert loaded.planner.weights.calorie_weight == 0.4
        assert loaded.to_dict() == settings.to_dict()


class TestSettingsValidation:
    """Tests for out-of-range values."""

    @pytest.mark.parametrize("yaml_text,message", [
        ("planner:\n  min_fill_ratio: 1.3\n", "min_fill_ratio"),
        ("planner:\n  calorie_decay: 0\n", "calorie_decay"),
        ("planner:\n  plan_options: 0\n", "plan_options"),
        ("deficits:\n  top_n: -1\n", "top_n"),
        ("defaults:\n  output_format: csv\n", "output_format"),
        ("planner:\n  meal_split:\n    breakfast: 0.5\n", "missing 'lunch'"),
        ("planner:\n  meal_split:\n    breakfast: -0.1\n    lunch: 0.6\n    dinner: 0.5\n",
         "must not be negative"),
    ])
    def test_invalid(self, tmp_path, yaml_text, message):
        path = tmp_path / "config.yaml"
        path.write_text(yaml_text)

        with pytest.raises(ValueError, match=message):
            Settings.load(path)

    @pytest.mark.parametrize("yaml_text,message", [
        ("planner:\n  min_fill_ratio: null\n", "Malformed config value"),
        ("planner:\n  plan_options: [1]\n", "Malformed config value"),
        ("deficits: 5\n", "Malformed config value"),
        ("planner: [unclosed\n", "Could not parse"),
        ("- just\n- a list\n", "must contain a mapping"),
    ])
    def test_malformed_values_raise_value_error(self, tmp_path, yaml_text, message):
        """Wrongly typed values are reported as ValueError, not TypeError."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml_text)

        with pytest.raises(ValueError, match=message):
            Settings.load(path)
