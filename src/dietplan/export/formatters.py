"""Output formatters for targets, menus, day plans and deficit reports."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dietplan.menu.models import FoodItem
from dietplan.planner.deficits import DeficitReport
from dietplan.planner.models import SLOTS, DayPlan
from dietplan.planner.selection import SelectionState
from dietplan.profiles.body_calc import Targets
from dietplan.tracking.daily_log import Budget


class TableFormatter:
    """Format results as Rich tables for terminal display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the formatter.

        Args:
            console: Rich console for output. If None, creates a new one.
        """
        self.console = console or Console()

    def targets(self, targets: Targets) -> None:
        self.console.print(Panel(targets.summary(), title="Daily Targets"))

    def budget(self, budget: Budget) -> None:
        title = "Today [red](over target)[/red]" if budget.is_over else "Today"
        table = Table(title=title)
        table.add_column("")
        table.add_column("Consumed", justify="right")
        table.add_column("Target", justify="right")
        table.add_column("Remaining", justify="right")

        rows = [
            ("Calories", budget.consumed.calories, budget.targets.daily_calories,
             budget.remaining_calories, "kcal"),
            ("Protein", budget.consumed.protein, budget.targets.macros.protein,
             budget.remaining_protein, "g"),
            ("Carbs", budget.consumed.carbs, budget.targets.macros.carbs,
             budget.remaining_carbs, "g"),
            ("Fats", budget.consumed.fats, budget.targets.macros.fats,
             budget.remaining_fats, "g"),
        ]
        for name, consumed, target, remaining, unit in rows:
            color = "green" if remaining >= 0 else "red"
            table.add_row(
                name,
                f"{consumed:.0f} {unit}",
                f"{target:.0f} {unit}",
                f"[{color}]{remaining:.0f} {unit}[/{color}]",
            )
        self.console.print(table)

    def menu(self, items: list[FoodItem], title: str = "Cafeteria Menu") -> None:
        table = Table(title=title)
        table.add_column("ID", style="dim")
        table.add_column("Item", style="cyan", max_width=40)
        table.add_column("Category")
        table.add_column("kcal", justify="right")
        table.add_column("P", justify="right")
        table.add_column("C", justify="right")
        table.add_column("F", justify="right")

        for item in items:
            table.add_row(
                item.id,
                item.name if not item.quantity else f"{item.name} ({item.quantity})",
                item.category,
                f"{item.calories:.0f}",
                f"{item.protein:.1f}",
                f"{item.carbs:.1f}",
                f"{item.fats:.1f}",
            )
        self.console.print(table)

    def plans(self, plans: list[DayPlan], selection: Optional[SelectionState] = None) -> None:
        if not plans:
            self.console.print("[yellow]No day plans could be built from this menu.[/yellow]")
            return

        for plan in plans:
            table = Table(title=f"{plan.name} ({plan.id})")
            table.add_column("Meal", style="bold")
            table.add_column("Items", style="cyan", max_width=50)
            table.add_column("kcal", justify="right")
            table.add_column("P / C / F", justify="right")

            for slot in SLOTS:
                meal = plan.meal(slot)
                picked = selection is not None and selection.is_selected(slot, plan.id)
                label = slot.value.title() + (" [green]✓[/green]" if picked else "")
                names = ", ".join(item.name for item in meal.items) or "[dim]-[/dim]"
                table.add_row(
                    label,
                    names,
                    f"{meal.calories:.0f}",
                    f"{meal.protein:.0f} / {meal.carbs:.0f} / {meal.fats:.0f}",
                )

            table.add_row(
                "[bold]TOTAL[/bold]",
                "",
                f"[bold]{plan.total_calories:.0f}[/bold]",
                f"{plan.total_protein:.0f} / {plan.total_carbs:.0f} / {plan.total_fats:.0f}",
            )
            self.console.print(table)

    def deficits(self, report: Optional[DeficitReport]) -> None:
        if report is None:
            self.console.print("[green]Selected meals cover your macro targets.[/green]")
            return

        table = Table(title="Macro Gaps")
        table.add_column("Macro")
        table.add_column("Short by", justify="right")
        table.add_column("Best sources", style="cyan")
        for macro, deficit in report.deficits.items():
            sources = report.suggestions.get(macro) or []
            table.add_row(
                macro.title(),
                f"{deficit:.0f} g",
                ", ".join(item.name for item in sources) or "[dim]-[/dim]",
            )
        self.console.print(table)


class JSONFormatter:
    """Format results as JSON for programmatic use."""

    def format(self, command: str, data: dict[str, Any]) -> str:
        return json.dumps(
            {
                "success": True,
                "command": command,
                "generated_at": datetime.now().isoformat(timespec="seconds"),
                "data": data,
            },
            indent=2,
        )


class MarkdownFormatter:
    """Format day plans as Markdown."""

    def format(
        self,
        plans: list[DayPlan],
        report: Optional[DeficitReport] = None,
    ) -> str:
        lines = [
            "# Day Plans",
            "",
            f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}",
            "",
        ]
        for plan in plans:
            lines.append(f"## {plan.name}")
            lines.append("")
            lines.append("| Meal | Items | kcal | Protein | Carbs | Fats |")
            lines.append("|------|-------|-----:|--------:|------:|-----:|")
            for slot in SLOTS:
                meal = plan.meal(slot)
                names = ", ".join(item.name for item in meal.items) or "-"
                lines.append(
                    f"| {slot.value.title()} | {names} | {meal.calories:.0f} | "
                    f"{meal.protein:.0f}g | {meal.carbs:.0f}g | {meal.fats:.0f}g |"
                )
            lines.append(
                f"| **Total** | | **{plan.total_calories:.0f}** | "
                f"{plan.total_protein:.0f}g | {plan.total_carbs:.0f}g | {plan.total_fats:.0f}g |"
            )
            lines.append("")

        if report is not None:
            lines.append("## Macro Gaps")
            lines.append("")
            for macro, deficit in report.deficits.items():
                sources = ", ".join(i.name for i in report.suggestions.get(macro) or [])
                lines.append(f"- **{macro.title()}**: {deficit:.0f}g short"
                             + (f" (try {sources})" if sources else ""))
            lines.append("")

        return "\n".join(lines)


def plans_payload(
    plans: list[DayPlan],
    selection: SelectionState,
    report: Optional[DeficitReport],
) -> dict[str, Any]:
    """JSON payload for a plan batch with selections and deficits."""
    return {
        "plans": [plan.to_dict() for plan in plans],
        "selected": selection.to_dict(),
        "selected_items": [item.to_dict() for item in selection.selected_items],
        "deficits": report.to_dict() if report is not None else None,
    }
