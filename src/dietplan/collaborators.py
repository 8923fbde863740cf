"""Interfaces for the services the planner depends on but does not own.

Menus may come from a static list or from a parser; day plans may come from
an external generator; targets and log entries are stored somewhere keyed by
an opaque user id. Only the shapes are defined here.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol

from dietplan.menu.models import FoodItem
from dietplan.profiles.body_calc import Profile, Targets


class CollaboratorError(RuntimeError):
    """An external collaborator failed or returned unusable data."""


class MenuSource(Protocol):
    """Produces FoodItem-shaped records."""

    def fetch_items(self) -> Iterable[Mapping[str, Any]]: ...


class PlanGenerator(Protocol):
    """Produces a batch of day plan records (see day_plans_from_records)."""

    def generate(
        self,
        items: list[FoodItem],
        profile: Profile,
        remaining_calories: float,
        remaining_macros: Mapping[str, float],
    ) -> list[Mapping[str, Any]]: ...


class TargetStore(Protocol):
    def get_targets(self, user_id: str) -> Optional[Targets]: ...

    def set_targets(self, user_id: str, targets: Targets) -> None: ...


class LogStore(Protocol):
    def append(self, user_id: str, entry: Mapping[str, Any]) -> None: ...

    def delete(self, user_id: str, entry_id: str) -> None: ...

    def list(self, user_id: str) -> list[Mapping[str, Any]]: ...


class StaticMenuSource:
    """A MenuSource over an in-process list of items or records."""

    def __init__(self, items: Iterable[Any]):
        self._items = list(items)

    def fetch_items(self) -> list[Mapping[str, Any]]:
        return [
            item.to_dict() if isinstance(item, FoodItem) else item
            for item in self._items
        ]
