"""
Weight sync: carry the weights actually lifted back into the program.

After a workout the user may have gone heavier than prescribed; the
program shown next time should reflect that.
"""

import logging
from dataclasses import replace

from .models import TrainingProgram, WorkoutLog
from .muscle_map import names_match, normalize_exercise_name

logger = logging.getLogger(__name__)


def extract_latest_weights(logs: list[WorkoutLog]) -> dict[str, float]:
    """
    Heaviest working-set weight of the most recent log entry per exercise.

    Returns:
        {normalized exercise name: weight}
    """
    latest: dict[str, float] = {}
    for log in sorted(logs, key=lambda log: log.date):
        for ex in log.completed_exercises:
            weights = [s.weight for s in ex.working_sets() if s.weight and s.weight > 0]
            if weights:
                latest[normalize_exercise_name(ex.name)] = max(weights)
    return latest


def sync_weights_from_logs(program: TrainingProgram, logs: list[WorkoutLog]) -> TrainingProgram:
    """
    Copy of ``program`` with weights overwritten from log history.

    An exercise takes the latest logged weight of the same exercise (exact
    normalized name first, then fuzzy match); unmatched exercises keep
    their weight.  The input program is never modified.

    Args:
        program: Program template
        logs: Workout history

    Returns:
        New TrainingProgram
    """
    latest = extract_latest_weights(logs)

    def _synced_weight(name: str, current: float | None) -> float | None:
        key = normalize_exercise_name(name)
        if key in latest:
            return latest[key]
        for logged_name, weight in latest.items():
            if names_match(name, logged_name):
                return weight
        return current

    sessions = []
    for session in program.sessions:
        exercises = []
        for ex in session.exercises:
            weight = _synced_weight(ex.name, ex.weight)
            if weight != ex.weight:
                logger.debug("weight sync %r: %s -> %s", ex.name, ex.weight, weight)
            exercises.append(replace(ex, weight=weight))
        sessions.append(replace(session, exercises=tuple(exercises)))
    return replace(program, sessions=tuple(sessions))
