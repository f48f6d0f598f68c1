"""
Mesocycle phase engine.

A training block cycles through four phases, each scaling the program's
set counts:

    intro (0.7) → accumulation (1.0) → intensification (1.2) → deload (0.6)
                        ↑                                          │
                        └──────────────────────────────────────────┘

When to advance is decided by the caller (a scheduler, or the user via the
CLI); this module only knows the transition itself and how a phase
reshapes a program.
"""

import logging
import math
from dataclasses import replace
from datetime import date
from typing import Final

from .config import PHASE_SETS_FLOOR, VOLUME_MULTIPLIERS, round_half_up
from .models import MesocycleState, Phase, TrainingProgram, WorkoutSession

logger = logging.getLogger(__name__)

PHASE_TRANSITIONS: Final[dict[str, Phase]] = {
    "intro": "accumulation",
    "accumulation": "intensification",
    "intensification": "deload",
    "deload": "accumulation",
}

PHASE_DESCRIPTIONS: Final[dict[str, dict[str, str]]] = {
    "intro": {
        "title": "Вводная неделя",
        "description": "Адаптация к новым упражнениям. Фокус на технике, умеренные веса.",
    },
    "accumulation": {
        "title": "Накопление",
        "description": "Основная фаза роста. Постепенное увеличение нагрузки.",
    },
    "intensification": {
        "title": "Интенсификация",
        "description": "Пиковая нагрузка. Максимальный объём для стимула роста.",
    },
    "deload": {
        "title": "Разгрузка",
        "description": "Восстановление. Сниженный объём для суперкомпенсации.",
    },
}


def get_phase_multiplier(phase: str) -> float:
    """Volume multiplier for a phase."""
    if phase not in VOLUME_MULTIPLIERS:
        raise ValueError(f"Invalid phase: {phase}")
    return VOLUME_MULTIPLIERS[phase]


def create_initial_mesocycle_state(
    mesocycle_id: str | None = None,
    start: date | None = None,
) -> MesocycleState:
    """
    Start a new block.  Always begins in the intro phase.

    Args:
        mesocycle_id: Identifier for the block (default derived from start)
        start: Block start date (default today)
    """
    start = start or date.today()
    return MesocycleState(
        phase="intro",
        volume_multiplier=VOLUME_MULTIPLIERS["intro"],
        week_number=1,
        mesocycle_id=mesocycle_id or f"meso_{start:%Y%m%d}",
    )


def advance_phase(state: MesocycleState) -> MesocycleState:
    """
    Move to the next phase of the cycle.

    Returns a new state; the multiplier always follows the new phase.
    """
    new_phase = PHASE_TRANSITIONS[state.phase]
    logger.debug("mesocycle %s: %s -> %s", state.mesocycle_id, state.phase, new_phase)
    return replace(
        state,
        phase=new_phase,
        volume_multiplier=VOLUME_MULTIPLIERS[new_phase],
        week_number=state.week_number + 1,
    )


def scale_sets(sets: int, multiplier: float) -> int:
    """
    max(1, round(sets × multiplier)), rounding halves up.

    A non-finite or negative multiplier yields the floor.
    """
    if not math.isfinite(multiplier) or multiplier < 0:
        logger.warning("invalid volume multiplier %r, using %d set(s)", multiplier, PHASE_SETS_FLOOR)
        return PHASE_SETS_FLOOR
    return max(PHASE_SETS_FLOOR, round_half_up(sets * multiplier))


def apply_volume_multiplier(session: WorkoutSession, multiplier: float) -> WorkoutSession:
    """Copy of ``session`` with every exercise's set count scaled."""
    return replace(
        session,
        exercises=tuple(
            replace(ex, sets=scale_sets(ex.sets, multiplier)) for ex in session.exercises
        ),
    )


def get_program_for_current_phase(
    program: TrainingProgram,
    state: MesocycleState,
) -> TrainingProgram:
    """
    The program as displayed for the current phase.

    Every exercise's ``sets`` becomes max(1, round(sets × multiplier)); all
    other fields pass through.  Always a new object, even at 1.0.

    Args:
        program: Static program template (not modified)
        state: Current mesocycle state

    Returns:
        New TrainingProgram
    """
    return replace(
        program,
        sessions=tuple(
            apply_volume_multiplier(s, state.volume_multiplier) for s in program.sessions
        ),
    )


def check_mesocycle_events(
    old_state: MesocycleState | None,
    new_state: MesocycleState,
) -> list[dict]:
    """
    Events worth notifying the user about between two states.

    Returns:
        List of dicts with a "type" key: phase_change (old_phase, new_phase),
        deload_start (week_number), new_mesocycle (mesocycle_id)
    """
    events: list[dict] = []
    if old_state is None:
        return events

    if old_state.mesocycle_id != new_state.mesocycle_id:
        events.append({"type": "new_mesocycle", "mesocycle_id": new_state.mesocycle_id})
        return events

    if old_state.phase != new_state.phase:
        events.append({
            "type": "phase_change",
            "old_phase": old_state.phase,
            "new_phase": new_state.phase,
        })
        if new_state.phase == "deload":
            events.append({"type": "deload_start", "week_number": new_state.week_number})

    return events


def event_message(event: dict) -> str:
    """User-facing notification text for a mesocycle event."""
    if event["type"] == "phase_change":
        info = PHASE_DESCRIPTIONS[event["new_phase"]]
        return f"Новая фаза: {info['title']}. {info['description']}"
    if event["type"] == "deload_start":
        return "Неделя разгрузки! Снижаем объём для восстановления"
    if event["type"] == "new_mesocycle":
        return "Новый мезоцикл начался!"
    return ""
