"""Recovery commands: day-of readiness adaptation and feedback autoregulation."""

import json
from typing import Annotated, Optional

import typer

from ...core.autoregulation import analyze_recovery_signals, apply_autoregulation_to_program
from ...core.models import ReadinessData
from ...core.recovery import process_readiness
from ...io.serializers import (
    ValidationError,
    adaptation_to_dict,
    insight_to_dict,
    program_to_dict,
    recommendation_to_dict,
    recovery_analysis_to_dict,
    session_to_dict,
)
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store


@app.command()
def readiness(
    session_name: Annotated[str, typer.Argument(help="Program session to adapt")],
    sleep_hours: Annotated[
        float,
        typer.Option("--sleep-hours", help="Hours slept last night"),
    ],
    recovery: Annotated[
        int,
        typer.Option("--recovery", "-r", min=0, max=100, help="Recovery score 0-100"),
    ],
    sleep_score: Annotated[
        int,
        typer.Option("--sleep-score", min=1, max=5, help="Subjective sleep quality 1-5"),
    ] = 3,
    hrv: Annotated[
        Optional[float],
        typer.Option("--hrv", help="Heart-rate variability (ms)"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Adapt a program session to today's sleep and recovery.
    """
    if sleep_hours < 0:
        views.print_error("--sleep-hours must be non-negative")
        raise typer.Exit(1)

    store = get_store(data_dir)
    try:
        prog = store.load_program()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    session = prog.find_session(session_name)
    if session is None:
        views.print_error(f"Session not found in program: {session_name}")
        names = ", ".join(s.name for s in prog.sessions) or "none"
        views.print_info(f"Available sessions: {names}")
        raise typer.Exit(1)

    data = ReadinessData(
        sleep_hours=sleep_hours,
        sleep_score=sleep_score,
        recovery_score=recovery,
        hrv=hrv,
    )
    result = process_readiness(session, data)

    if json_out:
        print(json.dumps({
            "insight": insight_to_dict(result.insight),
            "adaptation": adaptation_to_dict(result.adaptation),
            "adapted_session": session_to_dict(result.adapted_session),
        }, indent=2, ensure_ascii=False))
        return

    views.console.print()
    views.print_adapted_workout(result)
    views.console.print()


@app.command()
def autoregulate(
    data_dir: DataDirOption = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Write the adjusted program back to program.json"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Adjust program volume from recent pump, soreness and performance feedback.
    """
    store = get_store(data_dir)
    try:
        prog = store.load_program()
        logs = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    analysis = analyze_recovery_signals(logs)
    adjusted, rec = apply_autoregulation_to_program(prog, logs)

    if save and adjusted is not prog:
        store.save_program(adjusted)

    if json_out:
        print(json.dumps({
            "analysis": recovery_analysis_to_dict(analysis),
            "recommendation": recommendation_to_dict(rec),
            "program": program_to_dict(adjusted),
        }, indent=2, ensure_ascii=False))
        return

    views.console.print()
    views.print_autoregulation(analysis, rec)
    if adjusted is not prog:
        views.print_program(adjusted, title="Adjusted")
        if save:
            views.print_success("Program updated.")
    views.console.print()
