"""Biometric profiles and nutrition target calculation."""

from __future__ import annotations

from dietplan.profiles.body_calc import (
    ActivityLevel,
    Gender,
    Goal,
    MacroTargets,
    Profile,
    ProfileValidationError,
    Targets,
    calculate_targets,
    require_targets,
)

__all__ = [
    "ActivityLevel",
    "Gender",
    "Goal",
    "MacroTargets",
    "Profile",
    "ProfileValidationError",
    "Targets",
    "calculate_targets",
    "require_targets",
]
