"""Per-user planning session.

Ties the pure planning functions to one user's state: profile and targets,
today's log, the loaded menu, item preferences, the current day plan batch
and meal selections. External collaborators (menu sources, plan
generators) are called only from here; their failures are logged and
replaced by local fallbacks so session state stays consistent.

A session is not thread-safe; use one per user.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from dietplan.collaborators import CollaboratorError, MenuSource, PlanGenerator
from dietplan.config.settings import Settings
from dietplan.menu.catalog import CAFETERIA_MENU
from dietplan.menu.models import FoodItem, Preference, coerce_items, parse_preferences
from dietplan.planner.day_plans import (
    day_plans_from_records,
    generate_day_plans,
    slot_budgets,
)
from dietplan.planner.deficits import DeficitReport, compute_deficits
from dietplan.planner.models import DayPlan, Slot, SlotBudget
from dietplan.planner.selection import SelectionChange, SelectionState
from dietplan.profiles.body_calc import Profile, Targets, require_targets
from dietplan.tracking.daily_log import Budget, DailyLog

logger = logging.getLogger(__name__)


class PlannerSession:
    """Planning state for a single user."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.profile: Optional[Profile] = None
        self.targets: Optional[Targets] = None
        self.log = DailyLog()
        self.menu: list[FoodItem] = list(CAFETERIA_MENU)
        self.preferences: dict[str, Preference] = {}
        self.selection = SelectionState()

    @property
    def plans(self) -> list[DayPlan]:
        return self.selection.plans

    def set_profile(self, profile: Profile) -> Targets:
        """Store a new profile and recompute targets.

        Raises:
            ProfileValidationError: If the profile's numbers are unusable;
                the previous profile and targets are kept.
        """
        targets = require_targets(profile)
        self.profile = profile
        self.targets = targets
        return targets

    def _require_targets(self) -> Targets:
        if self.targets is None:
            raise RuntimeError("No targets yet; set a profile first")
        return self.targets

    def budget(self) -> Budget:
        return self.log.remaining(self._require_targets())

    def slot_budgets(self) -> dict[Slot, SlotBudget]:
        budget = self.budget()
        return slot_budgets(
            budget.remaining_calories,
            budget.remaining_protein,
            budget.remaining_carbs,
            budget.remaining_fats,
            self.settings.planner.meal_split,
        )

    def load_menu(self, source: MenuSource) -> list[FoodItem]:
        """Replace the menu with items from ``source``.

        Preferences reset to optional for every item. If the source fails
        or yields nothing usable the current menu is kept.
        """
        try:
            items = self._items_from_source(source)
        except CollaboratorError as exc:
            logger.warning("%s; keeping current menu", exc)
            return self.menu

        if not items:
            logger.warning("Menu source returned no usable items, keeping current menu")
            return self.menu

        self.menu = items
        self.preferences = {item.id: Preference.OPTIONAL for item in items}
        self.selection.reset([])
        return self.menu

    def _items_from_source(self, source: MenuSource) -> list[FoodItem]:
        try:
            return coerce_items(source.fetch_items())
        except Exception as exc:
            raise CollaboratorError(f"Menu source failed: {exc}") from exc

    def set_preference(self, item_id: str, preference: Preference) -> None:
        self.preferences[item_id] = preference

    def update_preferences(self, data: Mapping[str, Any]) -> None:
        """Apply an id -> preference mapping (enum members or their values).

        Raises:
            ValueError: If a value is not a known preference; nothing is
                applied in that case.
        """
        self.preferences.update(parse_preferences(data))

    def preference(self, item_id: str) -> Preference:
        return self.preferences.get(item_id, Preference.OPTIONAL)

    def generate_plans(self, generator: Optional[PlanGenerator] = None) -> list[DayPlan]:
        """Build a new day plan batch and clear meal selections.

        With a generator, its batch is converted; if it fails or returns
        nothing, plans are generated locally from the menu.
        """
        plans: list[DayPlan] = []
        if generator is not None:
            try:
                plans = self._plans_from_generator(generator)
            except CollaboratorError as exc:
                logger.warning("%s; generating plans locally", exc)

        if not plans:
            planner = self.settings.planner
            plans = generate_day_plans(
                self.menu,
                self.slot_budgets(),
                self.preferences,
                n_options=planner.plan_options,
                thresholds=planner.thresholds,
                weights=planner.weights,
            )

        self.selection.reset(plans)
        return plans

    def _plans_from_generator(self, generator: PlanGenerator) -> list[DayPlan]:
        if self.profile is None:
            raise RuntimeError("No profile yet; set a profile first")
        budget = self.budget()
        try:
            records = generator.generate(
                list(self.menu),
                self.profile,
                budget.remaining_calories,
                {
                    "protein": budget.remaining_protein,
                    "carbs": budget.remaining_carbs,
                    "fats": budget.remaining_fats,
                },
            )
        except Exception as exc:
            raise CollaboratorError(f"Plan generator failed: {exc}") from exc

        if not isinstance(records, list):
            raise CollaboratorError("Plan generator returned a non-list response")
        return day_plans_from_records(records)

    def select_meal(self, slot: Slot, plan_id: str) -> SelectionChange:
        return self.selection.select_meal(slot, plan_id)

    def deficits(self) -> Optional[DeficitReport]:
        """Deficit report for the current selections, or None."""
        return compute_deficits(
            self.selection.selected_totals(),
            self._require_targets(),
            consumed=self.log.totals(),
            candidates=self.menu,
            thresholds=self.settings.deficits.thresholds,
        )
