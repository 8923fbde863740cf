"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from dietplan.planner.deficits import DeficitThresholds
from dietplan.planner.models import (
    DEFAULT_MEAL_SPLIT,
    ScoreWeights,
    SelectionThresholds,
    Slot,
)

OUTPUT_FORMATS = ("table", "json", "markdown")


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".dietplan"


def default_config_path() -> Path:
    return _default_config_dir() / "config.yaml"


@dataclass
class PlannerConfig:
    """Meal selection and day plan configuration."""

    must_have_ratio: float = 1.1
    min_fill_ratio: float = 0.9
    max_fill_ratio: float = 1.15
    macro_weight: float = 0.7
    calorie_weight: float = 0.3
    calorie_decay: float = 100.0
    plan_options: int = 3
    meal_split: dict[Slot, float] = field(
        default_factory=lambda: dict(DEFAULT_MEAL_SPLIT)
    )

    @property
    def thresholds(self) -> SelectionThresholds:
        return SelectionThresholds(
            must_have_ratio=self.must_have_ratio,
            min_fill_ratio=self.min_fill_ratio,
            max_fill_ratio=self.max_fill_ratio,
        )

    @property
    def weights(self) -> ScoreWeights:
        return ScoreWeights(
            macro_weight=self.macro_weight,
            calorie_weight=self.calorie_weight,
            calorie_decay=self.calorie_decay,
        )


@dataclass
class DeficitConfig:
    """Macro deficit suggestion configuration."""

    min_deficit_grams: float = 5.0
    top_n: int = 3

    @property
    def thresholds(self) -> DeficitThresholds:
        return DeficitThresholds(
            min_deficit_grams=self.min_deficit_grams,
            top_n=self.top_n,
        )


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json", "markdown"
    menu_path: Optional[Path] = None


@dataclass
class Settings:
    """Main application settings."""

    planner: PlannerConfig = field(default_factory=PlannerConfig)
    deficits: DeficitConfig = field(default_factory=DeficitConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.dietplan/config.yaml

        Returns:
            Settings instance

        Raises:
            ValueError: If the file is not valid YAML or a value is malformed
                or out of range
        """
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ValueError(f"Could not parse {config_path}: {exc}") from exc

        try:
            settings = cls._from_data(data)
        except TypeError as exc:
            raise ValueError(f"Malformed config value in {config_path}: {exc}") from exc

        settings.validate()
        return settings

    @classmethod
    def _from_data(cls, data: dict) -> "Settings":
        if not isinstance(data, dict):
            raise ValueError("config file must contain a mapping")
        settings = cls()

        # Parse planner config
        if "planner" in data:
            plan_data = data["planner"] or {}
            for key in (
                "must_have_ratio",
                "min_fill_ratio",
                "max_fill_ratio",
                "macro_weight",
                "calorie_weight",
                "calorie_decay",
            ):
                if key in plan_data:
                    setattr(settings.planner, key, float(plan_data[key]))
            if "plan_options" in plan_data:
                settings.planner.plan_options = int(plan_data["plan_options"])
            if "meal_split" in plan_data:
                settings.planner.meal_split = _parse_meal_split(plan_data["meal_split"])

        # Parse deficit config
        if "deficits" in data:
            def_data = data["deficits"] or {}
            if "min_deficit_grams" in def_data:
                settings.deficits.min_deficit_grams = float(def_data["min_deficit_grams"])
            if "top_n" in def_data:
                settings.deficits.top_n = int(def_data["top_n"])

        # Parse defaults
        if "defaults" in data:
            defaults_data = data["defaults"] or {}
            if "output_format" in defaults_data:
                settings.defaults.output_format = defaults_data["output_format"]
            if defaults_data.get("menu_path"):
                settings.defaults.menu_path = Path(defaults_data["menu_path"]).expanduser()

        return settings

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ValueError: On the first invalid value
        """
        planner = self.planner
        if not 0 < planner.min_fill_ratio <= planner.max_fill_ratio:
            raise ValueError(
                "planner.min_fill_ratio must be positive and not above max_fill_ratio"
            )
        if planner.must_have_ratio <= 0:
            raise ValueError("planner.must_have_ratio must be positive")
        if planner.calorie_decay <= 0:
            raise ValueError("planner.calorie_decay must be positive")
        if planner.plan_options < 1:
            raise ValueError("planner.plan_options must be at least 1")
        if self.deficits.top_n < 0:
            raise ValueError("deficits.top_n must not be negative")
        if self.defaults.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"defaults.output_format must be one of {OUTPUT_FORMATS}, "
                f"got '{self.defaults.output_format}'"
            )

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.dietplan/config.yaml
        """
        if config_path is None:
            config_path = default_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> dict:
        return {
            "planner": {
                "must_have_ratio": self.planner.must_have_ratio,
                "min_fill_ratio": self.planner.min_fill_ratio,
                "max_fill_ratio": self.planner.max_fill_ratio,
                "macro_weight": self.planner.macro_weight,
                "calorie_weight": self.planner.calorie_weight,
                "calorie_decay": self.planner.calorie_decay,
                "plan_options": self.planner.plan_options,
                "meal_split": {
                    slot.value: share for slot, share in self.planner.meal_split.items()
                },
            },
            "deficits": {
                "min_deficit_grams": self.deficits.min_deficit_grams,
                "top_n": self.deficits.top_n,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
                "menu_path": str(self.defaults.menu_path) if self.defaults.menu_path else None,
            },
        }


def _parse_meal_split(data: dict) -> dict[Slot, float]:
    """Parse a slot -> share mapping; every slot must be present."""
    if not isinstance(data, dict):
        raise ValueError("planner.meal_split must be a mapping of slot to share")
    split: dict[Slot, float] = {}
    for slot in Slot:
        if slot.value not in data:
            raise ValueError(f"planner.meal_split is missing '{slot.value}'")
        share = float(data[slot.value])
        if share < 0:
            raise ValueError(f"planner.meal_split.{slot.value} must not be negative")
        split[slot] = share
    return split


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
