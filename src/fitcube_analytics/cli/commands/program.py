"""Program commands: program display and mesocycle phase management."""

import json
from typing import Annotated, Optional

import typer

from ...core.mesocycle import (
    advance_phase,
    check_mesocycle_events,
    create_initial_mesocycle_state,
    event_message,
    get_program_for_current_phase,
)
from ...core.weight_sync import sync_weights_from_logs
from ...io.serializers import ValidationError, mesocycle_state_to_dict, program_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, get_store, phase_app


@app.command()
def program(
    data_dir: DataDirOption = None,
    phase: Annotated[
        bool,
        typer.Option("--phase", "-p", help="Scale set counts for the current mesocycle phase"),
    ] = False,
    sync: Annotated[
        bool,
        typer.Option("--sync", "-s", help="Update weights from the latest workout log"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    Show the training program.
    """
    store = get_store(data_dir)

    try:
        prog = store.load_program()
        state = store.load_mesocycle() if phase else None
        logs = store.load_history() if sync else []
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if phase and state is None:
        views.print_warning("No mesocycle started; showing the base program. Run 'phase init'.")

    if sync:
        prog = sync_weights_from_logs(prog, logs)
    if state is not None:
        prog = get_program_for_current_phase(prog, state)

    if json_out:
        print(json.dumps(program_to_dict(prog), indent=2, ensure_ascii=False))
        return

    views.console.print()
    if state is not None:
        views.print_mesocycle(state)
    views.print_program(prog)
    views.console.print()


@phase_app.command("show")
def phase_show(
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the current mesocycle phase.
    """
    store = get_store(data_dir)
    try:
        state = store.load_mesocycle()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if state is None:
        views.print_error("No mesocycle started.")
        views.print_info("Run 'phase init' to begin one.")
        raise typer.Exit(1)

    if json_out:
        print(json.dumps(mesocycle_state_to_dict(state), indent=2, ensure_ascii=False))
        return
    views.print_mesocycle(state)


@phase_app.command("init")
def phase_init(
    data_dir: DataDirOption = None,
    mesocycle_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Mesocycle identifier (default meso_YYYYMMDD)"),
    ] = None,
) -> None:
    """
    Start a new mesocycle in the intro phase.
    """
    store = get_store(data_dir)
    try:
        old = store.load_mesocycle()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    state = create_initial_mesocycle_state(mesocycle_id)
    store.save_mesocycle(state)

    for event in check_mesocycle_events(old, state):
        views.print_info(event_message(event))
    views.print_success(f"Mesocycle {state.mesocycle_id} started.")
    views.print_mesocycle(state)


@phase_app.command("advance")
def phase_advance(
    data_dir: DataDirOption = None,
) -> None:
    """
    Move the mesocycle to its next phase.
    """
    store = get_store(data_dir)
    try:
        old = store.load_mesocycle()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if old is None:
        views.print_error("No mesocycle started.")
        views.print_info("Run 'phase init' to begin one.")
        raise typer.Exit(1)

    state = advance_phase(old)
    store.save_mesocycle(state)

    for event in check_mesocycle_events(old, state):
        views.print_info(event_message(event))
    views.print_mesocycle(state)
