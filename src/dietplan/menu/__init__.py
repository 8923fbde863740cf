"""Menu items, preferences and the built-in cafeteria menu."""

from __future__ import annotations

from dietplan.menu.models import FoodItem, MacroTotals, Preference, coerce_items

__all__ = ["FoodItem", "MacroTotals", "Preference", "coerce_items"]
