"""Body composition calculator for calorie and macro targets.

Converts a biometric profile into BMI, BMR, TDEE, a daily calorie target and
gram targets for protein, carbs and fats.

Uses the Mifflin-St Jeor equation for BMR and the standard activity factors
for TDEE. Weight loss targets are floored at BMR so the plan never asks for
less than resting expenditure.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Gender(Enum):
    """Biological sex for BMR calculation."""
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(Enum):
    """Activity level multipliers for TDEE calculation."""
    SEDENTARY = "sedentary"          # Little or no exercise
    LIGHT = "light"                  # Light exercise 1-3 days/week
    MODERATE = "moderate"            # Moderate exercise 3-5 days/week
    ACTIVE = "active"                # Hard exercise 6-7 days/week
    VERY_ACTIVE = "very_active"      # Very hard exercise, physical job


class Goal(Enum):
    """Body composition goal."""
    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


class ProfileValidationError(ValueError):
    """Raised when a profile's age, height or weight is unusable."""


# Activity level multipliers (Harris-Benedict activity factors)
ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

# Calorie adjustments by goal (applied to TDEE)
LOSE_DEFICIT = 500
GAIN_SURPLUS = 300

# (protein, fat, carb) share of daily calories
MACRO_RATIOS = {
    Goal.LOSE: (0.30, 0.25, 0.45),      # Higher protein for muscle preservation
    Goal.MAINTAIN: (0.25, 0.30, 0.45),
    Goal.GAIN: (0.25, 0.30, 0.45),
}

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FAT = 9

# Alternate spellings accepted from form and API payloads
_ACTIVITY_ALIASES = {
    "veryactive": ActivityLevel.VERY_ACTIVE,
    "very-active": ActivityLevel.VERY_ACTIVE,
    "lightly_active": ActivityLevel.LIGHT,
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class Profile:
    """A user's biometric profile.

    Numeric fields are stored as submitted; they are parsed and validated
    when targets are calculated.
    """

    age: Any
    gender: Gender
    height_cm: Any
    weight_kg: Any
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    goal: Goal = Goal.MAINTAIN

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Build a profile from a mapping such as a YAML or JSON document.

        Accepts both snake_case and the camelCase keys used by the web client
        (``heightCm``, ``weight``, ``activityLevel``, ...).

        Raises:
            ValueError: If gender, activity level or goal are not recognised.
        """
        def pick(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        return cls(
            age=pick("age"),
            gender=parse_gender(pick("gender", "sex", default="")),
            height_cm=pick("height_cm", "heightCm", "height"),
            weight_kg=pick("weight_kg", "weightKg", "weight"),
            activity_level=parse_activity_level(
                pick("activity_level", "activityLevel", default="moderate")
            ),
            goal=parse_goal(pick("goal", default="maintain")),
        )


@dataclass(frozen=True)
class MacroTargets:
    """Daily macronutrient targets in grams."""

    protein: int
    carbs: int
    fats: int


@dataclass(frozen=True)
class Targets:
    """Calculated nutrition targets for a profile."""

    bmi: float
    bmr: float                  # Basal Metabolic Rate
    tdee: float                 # Total Daily Energy Expenditure
    daily_calories: float
    macros: MacroTargets

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {
            "bmi": round(self.bmi, 1),
            "bmr": round(self.bmr, 1),
            "tdee": round(self.tdee, 1),
            "daily_calories": round(self.daily_calories, 1),
            "macros": {
                "protein": self.macros.protein,
                "carbs": self.macros.carbs,
                "fats": self.macros.fats,
            },
        }

    def summary(self) -> str:
        """Human-readable summary of targets."""
        return "\n".join([
            f"BMI: {self.bmi:.1f}",
            f"BMR: {self.bmr:.0f} kcal/day",
            f"TDEE: {self.tdee:.0f} kcal/day",
            f"Target: {self.daily_calories:.0f} kcal/day",
            f"Protein: {self.macros.protein}g  Carbs: {self.macros.carbs}g  "
            f"Fats: {self.macros.fats}g",
        ])


def parse_gender(value: Any) -> Gender:
    """Parse a gender string."""
    if isinstance(value, Gender):
        return value
    try:
        return Gender(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"gender must be 'male' or 'female', got '{value}'") from None


def parse_activity_level(value: Any) -> ActivityLevel:
    """Parse an activity level, accepting the web client's camelCase names."""
    if isinstance(value, ActivityLevel):
        return value
    key = str(value).strip().lower()
    if key in _ACTIVITY_ALIASES:
        return _ACTIVITY_ALIASES[key]
    try:
        return ActivityLevel(key)
    except ValueError:
        valid = [level.value for level in ActivityLevel]
        raise ValueError(
            f"activity_level must be one of {valid}, got '{value}'"
        ) from None


def parse_goal(value: Any) -> Goal:
    """Parse a goal string."""
    if isinstance(value, Goal):
        return value
    try:
        return Goal(str(value).strip().lower())
    except ValueError:
        valid = [goal.value for goal in Goal]
        raise ValueError(f"goal must be one of {valid}, got '{value}'") from None


def parse_positive_int(value: Any) -> Optional[int]:
    """Parse a form value into a positive integer, or None if unusable.

    Strings contribute their leading integer (``"70.5kg"`` -> 70), floats are
    truncated, booleans and everything else are rejected.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if not math.isfinite(value):
            return None
        parsed = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return None
        parsed = int(match.group(1))
    else:
        return None
    return parsed if parsed > 0 else None


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def calculate_bmi(height_cm: float, weight_kg: float) -> float:
    """Body Mass Index in kg/m^2."""
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def calculate_bmr(
    age: int,
    gender: Gender,
    height_cm: float,
    weight_kg: float,
) -> float:
    """Calculate Basal Metabolic Rate using Mifflin-St Jeor equation.

    Args:
        age: Age in years
        gender: Biological sex
        height_cm: Height in centimetres
        weight_kg: Weight in kilograms

    Returns:
        BMR in calories per day
    """
    if gender == Gender.MALE:
        return (10 * weight_kg) + (6.25 * height_cm) - (5 * age) + 5
    return (10 * weight_kg) + (6.25 * height_cm) - (5 * age) - 161


def calculate_tdee(
    bmr: float,
    activity_level: ActivityLevel,
) -> float:
    """Calculate Total Daily Energy Expenditure.

    Args:
        bmr: Basal Metabolic Rate
        activity_level: Activity level

    Returns:
        TDEE in calories per day
    """
    return bmr * ACTIVITY_MULTIPLIERS[activity_level]


def calculate_daily_calories(bmr: float, tdee: float, goal: Goal) -> float:
    """Apply the goal adjustment to TDEE, never going below BMR."""
    if goal == Goal.LOSE:
        return max(bmr, tdee - LOSE_DEFICIT)
    if goal == Goal.GAIN:
        return tdee + GAIN_SURPLUS
    return tdee


def calculate_macros(daily_calories: float, goal: Goal) -> MacroTargets:
    """Split daily calories into gram targets using the goal's ratios."""
    protein_ratio, fat_ratio, carb_ratio = MACRO_RATIOS[goal]
    return MacroTargets(
        protein=round_half_up(daily_calories * protein_ratio / KCAL_PER_GRAM_PROTEIN),
        carbs=round_half_up(daily_calories * carb_ratio / KCAL_PER_GRAM_CARBS),
        fats=round_half_up(daily_calories * fat_ratio / KCAL_PER_GRAM_FAT),
    )


def calculate_targets(profile: Profile) -> Optional[Targets]:
    """Calculate calorie and macro targets for a profile.

    Args:
        profile: Biometric profile

    Returns:
        Targets, or None if age, height or weight are non-numeric or not
        positive.
    """
    age = parse_positive_int(profile.age)
    height = parse_positive_int(profile.height_cm)
    weight = parse_positive_int(profile.weight_kg)
    if age is None or height is None or weight is None:
        return None

    bmi = calculate_bmi(height, weight)
    bmr = calculate_bmr(age, profile.gender, height, weight)
    tdee = calculate_tdee(bmr, profile.activity_level)
    daily_calories = calculate_daily_calories(bmr, tdee, profile.goal)

    return Targets(
        bmi=bmi,
        bmr=bmr,
        tdee=tdee,
        daily_calories=daily_calories,
        macros=calculate_macros(daily_calories, profile.goal),
    )


def require_targets(profile: Profile) -> Targets:
    """Like calculate_targets, but raise instead of returning None.

    Raises:
        ProfileValidationError: If age, height or weight are unusable.
    """
    targets = calculate_targets(profile)
    if targets is None:
        raise ProfileValidationError(
            "age, height and weight must be positive numbers "
            f"(got age={profile.age!r}, height={profile.height_cm!r}, "
            f"weight={profile.weight_kg!r})"
        )
    return targets
