"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
import yaml
from rich.console import Console

from dietplan.app_logging import configure_logging
from dietplan.collaborators import StaticMenuSource
from dietplan.config import get_settings, reload_settings
from dietplan.config.settings import Settings, default_config_path
from dietplan.export.formatters import (
    JSONFormatter,
    MarkdownFormatter,
    TableFormatter,
    plans_payload,
)
from dietplan.menu.catalog import CAFETERIA_MENU, categories, filter_menu, load_menu_file
from dietplan.menu.models import FoodItem, Preference
from dietplan.planner.models import Slot
from dietplan.profiles.body_calc import (
    Profile,
    ProfileValidationError,
    calculate_targets,
)
from dietplan.session import PlannerSession
from dietplan.tracking.daily_log import DailyLog

app = typer.Typer(
    help="Diet planning: calorie targets and day plans from a cafeteria menu",
    no_args_is_help=True,
)
console = Console()

# Subcommand groups
config_app = typer.Typer(help="Manage configuration")
app.add_typer(config_app, name="config")


# ============================================================================
# Helpers
# ============================================================================


def output_json(command: str, data: dict) -> None:
    """Print a JSON response envelope to stdout."""
    print(JSONFormatter().format(command, data))


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def _read_document(path: Path) -> Any:
    """Parse a YAML or JSON file, exiting with an error if it is unreadable."""
    try:
        text = path.read_text()
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        fail(f"Could not read {path}: {exc}")


def resolve_profile(
    profile_path: Optional[Path],
    age: Optional[str],
    gender: Optional[str],
    height: Optional[str],
    weight: Optional[str],
    activity: Optional[str],
    goal: Optional[str],
) -> Profile:
    """Build a profile from a file, with command-line flags taking priority."""
    data: dict[str, Any] = {}
    if profile_path is not None:
        if not profile_path.exists():
            fail(f"Profile file not found: {profile_path}")
        loaded = _read_document(profile_path)
        if not isinstance(loaded, dict):
            fail(f"Profile file {profile_path} must contain a mapping")
        data.update(loaded)

    overrides = {
        "age": age,
        "gender": gender,
        "height_cm": height,
        "weight_kg": weight,
        "activity_level": activity,
        "goal": goal,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})

    if "gender" not in data and "sex" not in data:
        fail("Gender is required (--gender male|female or a profile file)")

    try:
        return Profile.from_dict(data)
    except ValueError as exc:
        fail(str(exc))


def resolve_menu(menu_path: Optional[Path]) -> list[FoodItem]:
    """Load the menu from a file, the configured default, or the built-in list."""
    path = menu_path or get_settings().defaults.menu_path
    if path is None:
        return list(CAFETERIA_MENU)
    try:
        return load_menu_file(path)
    except FileNotFoundError:
        fail(f"Menu file not found: {path}")
    except (ValueError, yaml.YAMLError) as exc:
        fail(f"Could not read menu file {path}: {exc}")


def parse_selection(value: str) -> tuple[Slot, str]:
    """Parse ``slot=plan-id``."""
    if "=" not in value:
        raise ValueError(f"Selection must look like 'lunch=plan-1', got '{value}'")
    slot_name, plan_id = value.split("=", 1)
    try:
        slot = Slot(slot_name.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown meal slot '{slot_name}'") from None
    return slot, plan_id.strip()


# ============================================================================
# Main Commands
# ============================================================================


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Path to config.yaml"
    ),
) -> None:
    """Diet planning from biometric targets and a cafeteria menu."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)
    # Load once up front so every command sees a validated config
    try:
        reload_settings(config_path)
    except (OSError, ValueError) as exc:
        fail(f"Invalid config: {exc}")


@app.command()
def targets(
    profile_path: Optional[Path] = typer.Option(None, "--profile", help="Profile YAML/JSON file"),
    age: Optional[str] = typer.Option(None, "--age", help="Age in years"),
    gender: Optional[str] = typer.Option(None, "--gender", help="male or female"),
    height: Optional[str] = typer.Option(None, "--height", help="Height in cm"),
    weight: Optional[str] = typer.Option(None, "--weight", help="Weight in kg"),
    activity: Optional[str] = typer.Option(
        None, "--activity", help="sedentary, light, moderate, active, very_active"
    ),
    goal: Optional[str] = typer.Option(None, "--goal", help="lose, maintain, gain"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Calculate BMI, BMR, TDEE and daily calorie and macro targets."""
    profile = resolve_profile(profile_path, age, gender, height, weight, activity, goal)
    result = calculate_targets(profile)
    if result is None:
        fail("Age, height and weight must be positive numbers.")

    if json_output:
        output_json("targets", result.to_dict())
    else:
        TableFormatter(console).targets(result)


@app.command()
def menu(
    menu_path: Optional[Path] = typer.Option(None, "--menu", help="Menu YAML/JSON file"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Filter by category"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Search item names"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Browse the menu."""
    items = resolve_menu(menu_path)
    shown = filter_menu(items, category=category, search=search)

    if json_output:
        output_json("menu", {
            "categories": categories(items),
            "items": [item.to_dict() for item in shown],
        })
        return

    if not shown:
        console.print("[yellow]No menu items match.[/yellow]")
        return
    TableFormatter(console).menu(shown)
    console.print(f"[dim]Categories: {', '.join(categories(items))}[/dim]")


@app.command()
def today(
    profile_path: Optional[Path] = typer.Option(None, "--profile", help="Profile YAML/JSON file"),
    log_path: Path = typer.Option(..., "--log", help="Food log YAML/JSON file"),
    age: Optional[str] = typer.Option(None, "--age"),
    gender: Optional[str] = typer.Option(None, "--gender"),
    height: Optional[str] = typer.Option(None, "--height"),
    weight: Optional[str] = typer.Option(None, "--weight"),
    activity: Optional[str] = typer.Option(None, "--activity"),
    goal: Optional[str] = typer.Option(None, "--goal"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show consumed and remaining calories and macros for a food log."""
    profile = resolve_profile(profile_path, age, gender, height, weight, activity, goal)
    session = PlannerSession(get_settings())
    try:
        session.set_profile(profile)
    except ProfileValidationError as exc:
        fail(str(exc))
    session.log = _load_log(log_path)
    budget = session.budget()

    if json_output:
        output_json("today", budget.to_dict())
    else:
        TableFormatter(console).budget(budget)


def _load_log(log_path: Path) -> DailyLog:
    if not log_path.exists():
        fail(f"Log file not found: {log_path}")
    records = _read_document(log_path)
    if not isinstance(records, list):
        fail(f"Log file {log_path} must contain a list of entries")
    return DailyLog.from_records(records)


@app.command()
def plan(
    profile_path: Optional[Path] = typer.Option(None, "--profile", help="Profile YAML/JSON file"),
    age: Optional[str] = typer.Option(None, "--age"),
    gender: Optional[str] = typer.Option(None, "--gender"),
    height: Optional[str] = typer.Option(None, "--height"),
    weight: Optional[str] = typer.Option(None, "--weight"),
    activity: Optional[str] = typer.Option(None, "--activity"),
    goal: Optional[str] = typer.Option(None, "--goal"),
    menu_path: Optional[Path] = typer.Option(None, "--menu", help="Menu YAML/JSON file"),
    log_path: Optional[Path] = typer.Option(None, "--log", help="Food log already eaten today"),
    must_have: Optional[list[str]] = typer.Option(
        None, "--must-have", "-m", help="Item id that must be included (repeatable)"
    ),
    skip: Optional[list[str]] = typer.Option(
        None, "--skip", help="Item id marked not necessary (repeatable)"
    ),
    preferences_path: Optional[Path] = typer.Option(
        None, "--preferences", help="YAML/JSON mapping of item id to preference"
    ),
    select: Optional[list[str]] = typer.Option(
        None, "--select", help="Pick a meal, e.g. lunch=plan-1 (repeatable)"
    ),
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="table, json or markdown"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Build day plan options from the menu and show macro gaps."""
    settings = get_settings()
    fmt = "json" if json_output else (output_format or settings.defaults.output_format)
    if fmt not in ("table", "json", "markdown"):
        fail(f"Unknown output format: {fmt}")

    profile = resolve_profile(profile_path, age, gender, height, weight, activity, goal)
    session = PlannerSession(settings)
    try:
        session.set_profile(profile)
    except ProfileValidationError as exc:
        fail(str(exc))

    session.load_menu(StaticMenuSource(resolve_menu(menu_path)))
    if log_path is not None:
        session.log = _load_log(log_path)

    requested: dict[str, Any] = {}
    if preferences_path is not None:
        if not preferences_path.exists():
            fail(f"Preferences file not found: {preferences_path}")
        loaded = _read_document(preferences_path)
        if not isinstance(loaded, dict):
            fail(f"Preferences file {preferences_path} must contain a mapping")
        requested.update({str(k): v for k, v in loaded.items()})
    requested.update({item_id: Preference.MUST_HAVE for item_id in must_have or []})
    requested.update({item_id: Preference.NOT_NECESSARY for item_id in skip or []})

    known_ids = {item.id for item in session.menu}
    for item_id in requested:
        if item_id not in known_ids:
            fail(f"Unknown menu item id: {item_id}")
    try:
        session.update_preferences(requested)
    except ValueError as exc:
        fail(str(exc))

    plans = session.generate_plans()

    for value in select or []:
        try:
            slot, plan_id = parse_selection(value)
            session.select_meal(slot, plan_id)
        except (ValueError, KeyError) as exc:
            fail(str(exc).strip("'\""))

    report = session.deficits()

    if fmt == "json":
        payload = plans_payload(plans, session.selection, report)
        payload["budget"] = session.budget().to_dict()
        output_json("plan", payload)
    elif fmt == "markdown":
        print(MarkdownFormatter().format(plans, report))
    else:
        formatter = TableFormatter(console)
        formatter.budget(session.budget())
        formatter.plans(plans, session.selection)
        if session.selection.has_selection:
            formatter.deficits(report)


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show() -> None:
    """Print the active configuration as YAML."""
    print(yaml.dump(get_settings().to_dict(), default_flow_style=False, sort_keys=False))


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(None, "--path", help="Where to write config.yaml"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write the default configuration file."""
    target = path or default_config_path()
    if target.exists() and not force:
        fail(f"{target} already exists (use --force to overwrite)")
    Settings().save(target)
    console.print(f"[green]Wrote {target}[/green]")


if __name__ == "__main__":
    app()
