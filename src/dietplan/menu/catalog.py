"""Built-in cafeteria menu, staple foods and menu file loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from dietplan.menu.models import FoodItem, coerce_items

logger = logging.getLogger(__name__)


def _item(
    item_id: str,
    name: str,
    calories: float,
    protein: float,
    carbs: float,
    fats: float,
    category: str,
) -> FoodItem:
    return FoodItem(
        id=item_id,
        name=name,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fats=fats,
        category=category,
    )


# Sample Indian cafeteria menu
CAFETERIA_MENU: tuple[FoodItem, ...] = (
    _item("1", "Vegetable Biryani", 450, 12, 75, 12, "Main Course"),
    _item("2", "Chicken Curry with Rice", 580, 35, 68, 18, "Main Course"),
    _item("3", "Dal Tadka with Roti (2)", 320, 15, 48, 8, "Main Course"),
    _item("4", "Paneer Butter Masala", 380, 18, 22, 25, "Main Course"),
    _item("5", "Chole Bhature", 550, 14, 72, 22, "Main Course"),
    _item("6", "Idli Sambar (3 pcs)", 280, 8, 52, 4, "Breakfast"),
    _item("7", "Masala Dosa", 420, 10, 65, 14, "Breakfast"),
    _item("8", "Poha", 250, 6, 42, 6, "Breakfast"),
    _item("9", "Upma", 220, 5, 38, 5, "Breakfast"),
    _item("10", "Mixed Veg Salad", 80, 3, 12, 2, "Sides"),
    _item("11", "Raita (Bowl)", 90, 4, 8, 5, "Sides"),
    _item("12", "Papad (2 pcs)", 80, 2, 10, 3, "Sides"),
    _item("13", "Rajma Chawal", 420, 16, 64, 10, "Main Course"),
    _item("14", "Aloo Paratha (2)", 480, 10, 68, 18, "Breakfast"),
    _item("15", "Fruit Bowl (Mixed)", 150, 2, 36, 0, "Snacks"),
)

# Single-macro staples offered when no menu is loaded
STAPLE_FOODS: tuple[FoodItem, ...] = (
    _item("staple-1", "Boiled Eggs (2)", 140, 12, 1, 10, "Protein"),
    _item("staple-2", "Chicken Breast (100g)", 165, 31, 0, 3.6, "Protein"),
    _item("staple-3", "Paneer (100g)", 265, 18, 4, 20, "Protein"),
    _item("staple-4", "Greek Yogurt (100g)", 59, 10, 3.6, 0.4, "Protein"),
    _item("staple-5", "Steamed Rice (1 bowl)", 200, 4, 45, 0.5, "Carbs"),
    _item("staple-6", "Roti (2 pieces)", 160, 5, 30, 3, "Carbs"),
    _item("staple-7", "Banana (1 medium)", 105, 1, 27, 0.4, "Carbs"),
    _item("staple-8", "Oats (50g)", 194, 6.9, 33, 3.6, "Carbs"),
    _item("staple-9", "Almonds (30g)", 172, 6.3, 6.1, 15, "Fats"),
    _item("staple-10", "Peanut Butter (1 tbsp)", 94, 4, 3, 8, "Fats"),
    _item("staple-11", "Avocado (100g)", 160, 2, 9, 15, "Fats"),
    _item("staple-12", "Ghee (1 tsp)", 45, 0, 0, 5, "Fats"),
)


def categories(items: Iterable[FoodItem]) -> list[str]:
    """Distinct categories in first-seen order."""
    seen: list[str] = []
    for item in items:
        if item.category not in seen:
            seen.append(item.category)
    return seen


def filter_menu(
    items: Iterable[FoodItem],
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> list[FoodItem]:
    """Filter items by category (exact, case-insensitive) and name substring.

    A category of None or "All" matches everything.
    """
    wanted = category.lower() if category and category.lower() != "all" else None
    query = search.lower() if search else None

    results = []
    for item in items:
        if wanted is not None and item.category.lower() != wanted:
            continue
        if query and query not in item.name.lower():
            continue
        results.append(item)
    return results


def load_menu_file(path: Path) -> list[FoodItem]:
    """Load menu items from a YAML or JSON file.

    The file holds either a list of item records or a mapping with an
    ``items`` list. Records are coerced; the ones without an id are dropped.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is not a list of records
    """
    text = Path(path).read_text()
    if Path(path).suffix.lower() == ".json":
        data: Any = json.loads(text)
    else:
        data = yaml.safe_load(text)

    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        raise ValueError(f"Menu file {path} must contain a list of items")

    items = coerce_items(data)
    logger.info("Loaded %d menu items from %s", len(items), path)
    return items


def suggestions_to_items(records: Iterable[Any]) -> list[FoodItem]:
    """Convert meal-suggestion records from a suggestion service to items.

    Suggestions without a name are dropped; the rest get positional ids
    ``ai-suggestion-{n}`` counted over the kept records.
    """
    named = [
        r for r in (records or [])
        if isinstance(r, dict) and r.get("name")
    ]
    items = []
    for index, record in enumerate(named):
        item = FoodItem.from_record({
            **record,
            "id": f"ai-suggestion-{index}",
            "category": record.get("category") or "Meal",
        })
        if item is not None:
            items.append(item)
    return items
