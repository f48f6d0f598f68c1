"""Analysis commands: volume, strength, snapshot, suggest-weight."""

import json
from typing import Annotated

import typer

from ...core.capabilities import create_capabilities_snapshot, format_capabilities_for_ai, get_suggested_weight
from ...core.config import RECENT_LOGS_WINDOW
from ...core.strength import analyze_pain_patterns, analyze_strength, detect_imbalances, detect_plateaus
from ...core.volume import calculate_volume_history, calculate_weekly_volume
from ...io.data_store import DataStore
from ...io.serializers import (
    ValidationError,
    imbalance_to_dict,
    pain_pattern_to_dict,
    snapshot_to_dict,
    strength_analysis_to_dict,
    volume_report_to_dict,
)
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store


def _require_profile(store: DataStore) -> None:
    if not store.exists():
        views.print_error(f"Profile not found: {store.profile_path}")
        views.print_info("Put profile.json (and history.jsonl) into the data directory first.")
        raise typer.Exit(1)


@app.command()
def volume(
    data_dir: DataDirOption = None,
    weeks: Annotated[
        int,
        typer.Option("--weeks", "-w", help="Show calendar-week history instead of the recent window"),
    ] = 0,
    json_out: JsonOption = False,
) -> None:
    """
    Show per-muscle training volume against weekly targets.
    """
    store = get_store(data_dir)
    _require_profile(store)

    try:
        profile = store.load_profile()
        logs = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if weeks > 0:
        reports = calculate_volume_history(logs, weeks, profile.experience)
        if json_out:
            print(json.dumps([volume_report_to_dict(r) for r in reports], indent=2, ensure_ascii=False))
            return
        for report in reports:
            views.print_volume_report(report, title=f"Week of {report.week_start}")
            views.console.print()
        return

    report = calculate_weekly_volume(logs[-RECENT_LOGS_WINDOW:], profile.experience)
    if json_out:
        print(json.dumps(volume_report_to_dict(report), indent=2, ensure_ascii=False))
        return

    views.console.print()
    views.print_volume_report(report, title=f"Volume (last {RECENT_LOGS_WINDOW} workouts)")
    views.console.print()


@app.command()
def strength(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show strength levels, imbalances, plateaus and recurring pain.
    """
    store = get_store(data_dir)
    _require_profile(store)

    try:
        profile = store.load_profile()
        logs = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    analysis = analyze_strength(logs, profile.weight, profile.gender)
    imbalances = detect_imbalances(analysis)
    pain = analyze_pain_patterns(logs)
    plateaus = detect_plateaus(logs)

    if json_out:
        print(json.dumps({
            "strength_analysis": [strength_analysis_to_dict(s) for s in analysis],
            "imbalances": [imbalance_to_dict(i) for i in imbalances],
            "pain_patterns": [pain_pattern_to_dict(p) for p in pain],
            "plateaus": [
                {
                    "exercise_name": p.exercise_name,
                    "weeks_stuck": p.weeks_stuck,
                    "last_pr": p.last_pr,
                    "current_e1rm": p.current_e1rm,
                }
                for p in plateaus
            ],
        }, indent=2, ensure_ascii=False))
        return

    views.console.print()
    views.print_strength(analysis)
    views.print_imbalances(imbalances)
    views.print_pain_patterns(pain)
    for p in plateaus:
        views.print_warning(
            f"{p.exercise_name}: no new record for {p.weeks_stuck} weeks (last PR {p.last_pr})"
        )
    views.console.print()


@app.command()
def snapshot(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
    ai: Annotated[
        bool,
        typer.Option("--ai", help="Print the plain-text report used in coaching prompts"),
    ] = False,
) -> None:
    """
    Show the full capability snapshot.
    """
    store = get_store(data_dir)
    _require_profile(store)

    try:
        snap = create_capabilities_snapshot(
            store.load_profile(), store.load_program(), store.load_history()
        )
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(snapshot_to_dict(snap), indent=2, ensure_ascii=False))
        return
    if ai:
        print(format_capabilities_for_ai(snap))
        return

    views.console.print()
    views.print_snapshot(snap)
    views.console.print()


@app.command("suggest-weight")
def suggest_weight(
    exercise: Annotated[str, typer.Argument(help="Program exercise name")],
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Suggest a working weight (80% of best E1RM) for a program exercise.
    """
    store = get_store(data_dir)
    _require_profile(store)

    try:
        snap = create_capabilities_snapshot(
            store.load_profile(), store.load_program(), store.load_history()
        )
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    weight = get_suggested_weight(snap, exercise)

    if json_out:
        print(json.dumps({"exercise": exercise, "suggested_weight": weight}, ensure_ascii=False))
        return

    if weight is None:
        views.print_warning(f"No recorded sets for '{exercise}' in the program history.")
        return
    views.print_success(f"{exercise}: {weight:g} kg")
