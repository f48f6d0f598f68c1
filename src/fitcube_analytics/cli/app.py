"""Shared Typer app object, shared option types, and store utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..io.data_store import DataStore, get_default_data_dir

# Shared --data-dir option type used across all commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-d", help="Directory with profile.json, program.json, history.jsonl"),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="fitcube",
    help="Training-capability analytics: volume, strength, mesocycle phases and recovery.",
    no_args_is_help=True,
)

phase_app = typer.Typer(help="Mesocycle phase state: show, advance, init.", no_args_is_help=True)
app.add_typer(phase_app, name="phase")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug diagnostics"),
    ] = False,
) -> None:
    """
    Training-capability analytics over your workout history.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
            handlers=[RichHandler(show_path=False)],
            force=True,
        )


def get_store(data_dir: Path | None) -> DataStore:
    """Get data store from path or default location."""
    if data_dir is None:
        data_dir = get_default_data_dir()
    return DataStore(data_dir)
