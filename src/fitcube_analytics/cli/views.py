"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of analytics read-models.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.autoregulation import status_message
from ..core.capabilities import needs_program_adjustment
from ..core.mesocycle import PHASE_DESCRIPTIONS
from ..core.models import (
    AdaptedWorkoutResult,
    AutoregulationRecommendation,
    BestLift,
    CapabilitySnapshot,
    ImbalanceReport,
    MesocycleState,
    PainPattern,
    RecoveryAnalysis,
    StrengthAnalysis,
    TrainingProgram,
    WeeklyVolumeReport,
)

console = Console()

_STATUS_STYLE = {"under": "yellow", "optimal": "green", "over": "red"}
_SEVERITY_STYLE = {"mild": "yellow", "moderate": "dark_orange", "severe": "red"}
_TREND_ARROW = {"improving": "↑", "stable": "→", "declining": "↓"}
_INSIGHT_STYLE = {"excellent": "green", "good": "green", "caution": "yellow", "warning": "red"}
_RECOVERY_STYLE = {"optimal": "green", "under_stimulated": "yellow", "under_recovered": "red"}


def _num(value: float) -> str:
    return f"{value:g}"


def print_volume_report(report: WeeklyVolumeReport, title: str = "Weekly Volume") -> None:
    """
    Print per-muscle volume table.

    Args:
        report: Volume report to display
        title: Table title
    """
    if not report.muscles:
        print_info("No working sets in the analysed window.")
        return

    table = Table(title=title)
    table.add_column("Muscle", style="cyan")
    table.add_column("Direct", justify="right")
    table.add_column("Indirect", justify="right")
    table.add_column("Total", justify="right", style="bold")
    table.add_column("Target", justify="right", style="dim")
    table.add_column("%", justify="right")
    table.add_column("Status")

    for m in report.muscles:
        style = _STATUS_STYLE.get(m.status, "")
        table.add_row(
            m.muscle_name_ru,
            str(m.direct_sets),
            _num(m.indirect_sets),
            _num(m.total_sets),
            str(m.target_optimal),
            f"{m.percent_of_optimal}%",
            f"[{style}]{m.status}[/{style}]",
        )

    console.print(table)
    console.print(f"Overall: [bold]{report.overall_status}[/bold]")
    for line in report.recommendations:
        console.print(f"  • {line}")


def print_strength(analysis: list[StrengthAnalysis] | tuple[StrengthAnalysis, ...]) -> None:
    """Print strength levels for the standard lifts."""
    if not analysis:
        print_info("No standard lifts (squat, bench, deadlift, OHP, row) found in history.")
        return

    table = Table(title="Strength")
    table.add_column("Lift", style="cyan")
    table.add_column("E1RM(kg)", justify="right", style="bold")
    table.add_column("×BW", justify="right")
    table.add_column("Level", style="magenta")
    table.add_column("Pctl", justify="right")
    table.add_column("Next(kg)", justify="right", style="dim")
    table.add_column("Trend", justify="center")

    for s in analysis:
        table.add_row(
            s.exercise_name_ru,
            _num(s.e1rm),
            f"{s.relative_strength:.2f}",
            s.level,
            str(s.percentile),
            _num(s.next_level_target),
            _TREND_ARROW.get(s.trend, s.trend),
        )

    console.print(table)


def print_imbalances(imbalances: list[ImbalanceReport] | tuple[ImbalanceReport, ...]) -> None:
    """Print detected strength imbalances."""
    if not imbalances:
        return
    console.print("[bold]Imbalances[/bold]")
    for imb in imbalances:
        style = _SEVERITY_STYLE.get(imb.severity, "")
        console.print(
            f"  [{style}]{imb.severity}[/{style}] {imb.description} "
            f"[dim](ratio {imb.ratio:.2f}, ideal {imb.ideal_ratio:.2f})[/dim]"
        )
        console.print(f"    {imb.recommendation}")


def print_pain_patterns(patterns: list[PainPattern] | tuple[PainPattern, ...]) -> None:
    """Print recurring pain locations."""
    if not patterns:
        return
    table = Table(title="Recurring Pain")
    table.add_column("Location", style="red")
    table.add_column("Times", justify="right")
    table.add_column("Last", style="cyan")
    table.add_column("Pattern")
    table.add_column("Exercises", style="dim")
    for p in patterns:
        table.add_row(
            p.location,
            str(p.frequency),
            p.last_occurrence,
            p.movement_pattern,
            ", ".join(p.associated_exercises),
        )
    console.print(table)


def print_best_lifts(best_lifts: dict[str, BestLift]) -> None:
    """Print best set per program exercise."""
    if not best_lifts:
        return
    table = Table(title="Best Lifts")
    table.add_column("Exercise", style="cyan")
    table.add_column("Set", justify="right")
    table.add_column("E1RM(kg)", justify="right", style="bold")
    table.add_column("Date", style="dim")
    for name, lift in best_lifts.items():
        table.add_row(name, f"{_num(lift.weight)}×{lift.reps}", _num(lift.e1rm), lift.date)
    console.print(table)


def print_snapshot(snapshot: CapabilitySnapshot) -> None:
    """Print the full capability snapshot."""
    if snapshot.has_insufficient_data:
        print_warning(
            f"Only {len(snapshot.recent_logs)} recent workouts; volume figures are preliminary."
        )
    print_volume_report(snapshot.volume_report, title="Volume (recent workouts)")
    console.print()
    print_strength(snapshot.strength_analysis)
    print_imbalances(snapshot.imbalances)
    console.print()
    print_best_lifts(dict(snapshot.best_lifts))
    print_pain_patterns(snapshot.pain_patterns)

    adjust, reasons = needs_program_adjustment(snapshot)
    if adjust:
        console.print()
        console.print("[bold yellow]Program adjustment suggested:[/bold yellow]")
        for reason in reasons:
            console.print(f"  • {reason}")


def print_program(program: TrainingProgram, title: str = "Program") -> None:
    """Print program sessions with sets, reps and weights."""
    if not program.sessions:
        print_info("Program is empty.")
        return
    for session in program.sessions:
        table = Table(title=f"{title}: {session.name}")
        table.add_column("Exercise", style="cyan")
        table.add_column("Sets", justify="right", style="bold")
        table.add_column("Reps", justify="right")
        table.add_column("Weight", justify="right")
        table.add_column("Rest(s)", justify="right", style="dim")
        for ex in session.exercises:
            name = f"[dim]{ex.name}[/dim]" if ex.is_warmup else ex.name
            table.add_row(
                name,
                str(ex.sets),
                ex.reps,
                _num(ex.weight) if ex.weight else "-",
                str(ex.rest),
            )
        console.print(table)


def print_mesocycle(state: MesocycleState) -> None:
    """Print the current mesocycle phase."""
    info = PHASE_DESCRIPTIONS[state.phase]
    console.print(
        Panel(
            f"[bold]{info['title']}[/bold] ({state.phase})\n"
            f"{info['description']}\n"
            f"Week {state.week_number} · volume ×{_num(state.volume_multiplier)}",
            title=state.mesocycle_id or "Mesocycle",
        )
    )


def print_adapted_workout(result: AdaptedWorkoutResult) -> None:
    """Print readiness insight and the adapted session."""
    style = _INSIGHT_STYLE.get(result.insight.type, "")
    body = result.insight.title
    if result.insight.subtitle:
        body += f"\n{result.insight.subtitle}"
    for line in result.insight.adaptations:
        body += f"\n  • {line}"
    console.print(Panel(body, border_style=style, title="Readiness"))
    print_program(TrainingProgram(sessions=(result.adapted_session,)), title="Today")


def print_autoregulation(analysis: RecoveryAnalysis, rec: AutoregulationRecommendation) -> None:
    """Print recovery status, the volume verdict and advice."""
    title, description = status_message(analysis)
    adj = rec.volume_adjustment
    body = (
        f"[bold]{title}[/bold]\n{description}\n"
        f"Pump {analysis.avg_pump_quality:.1f} · soreness {analysis.avg_soreness:.1f} · "
        f"trend {_TREND_ARROW[analysis.performance_trend]}\n\n"
        f"[bold]{adj.type}[/bold] (sets {adj.sets_change:+d}, weight {_num(adj.weight_change_pct)}%): {adj.reason}"
    )
    for line in rec.warnings:
        body += f"\n[yellow]  ! {line}[/yellow]"
    for line in rec.suggestions:
        body += f"\n  • {line}"
    console.print(Panel(body, border_style=_RECOVERY_STYLE[analysis.overall_status], title="Autoregulation"))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
