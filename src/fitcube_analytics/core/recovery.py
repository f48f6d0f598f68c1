"""
Recovery-driven, day-of workout adaptation.

Maps a daily readiness snapshot (sleep, wearable recovery score) to a
message for the user and to a {weight multiplier, sets to remove}
adjustment for today's session.  The adjustment has three tiers while
the messaging has five.
"""

import logging
from dataclasses import replace

from .config import (
    ADAPTED_SETS_FLOOR,
    LOW_RECOVERY_SETS_TO_REMOVE,
    LOW_RECOVERY_WEIGHT_MULTIPLIER,
    MODERATE_RECOVERY_SETS_TO_REMOVE,
    MODERATE_RECOVERY_WEIGHT_MULTIPLIER,
    RECOVERY_EXCELLENT,
    RECOVERY_LOW,
    RECOVERY_MODERATE,
    SLEEP_CRITICAL_HOURS,
    SLEEP_GOOD_HOURS,
    SLEEP_SCORE_GOOD,
    round_to_step,
)
from .models import (
    AdaptedWorkoutResult,
    Exercise,
    Insight,
    ReadinessData,
    WorkoutAdaptation,
    WorkoutSession,
)

logger = logging.getLogger(__name__)

_LOW_RECOVERY_ADAPTATIONS = ("Убрал 2 тяжёлых сета", "Снизил веса на 15%")


def _percent_drop(multiplier: float) -> int:
    return round((1 - multiplier) * 100)


def generate_insight(readiness: ReadinessData) -> Insight:
    """
    Readiness message, first matching rule wins.

    1. sleep < 5 h                  → warning
    2. recovery < 40                → warning
    3. recovery > 80                → excellent
    4. 65 <= recovery <= 80         → good
    5. otherwise (40 <= rec < 65)   → caution; wording depends on whether
       sleep was long and good (>= 7 h and sleep score >= 4)
    """
    sleep = readiness.sleep_hours
    recovery = readiness.recovery_score

    if sleep < SLEEP_CRITICAL_HOURS:
        return Insight(
            type="warning",
            title=f"Вижу, ты спал всего {sleep:.1f} ч",
            subtitle=f"Восстановление {recovery}%",
            adaptations=_LOW_RECOVERY_ADAPTATIONS,
        )

    if recovery < RECOVERY_LOW:
        return Insight(
            type="warning",
            title=f"Восстановление {recovery}% — организму тяжело",
            subtitle=f"Сон: {sleep:.1f} ч",
            adaptations=_LOW_RECOVERY_ADAPTATIONS,
        )

    if recovery > RECOVERY_EXCELLENT:
        return Insight(
            type="excellent",
            title=f"Восстановление {recovery}% — отличный день!",
            subtitle="Организм готов к нагрузке",
        )

    if recovery >= RECOVERY_MODERATE:
        return Insight(
            type="good",
            title=f"Восстановление {recovery}% — хорошо",
            subtitle=f"Сон: {sleep:.1f} ч",
        )

    adaptations = (
        "Убрал 1 сет в основных упражнениях",
        f"Снизил веса на {_percent_drop(MODERATE_RECOVERY_WEIGHT_MULTIPLIER)}%",
    )
    if sleep >= SLEEP_GOOD_HOURS and readiness.sleep_score >= SLEEP_SCORE_GOOD:
        return Insight(
            type="caution",
            title=f"Восстановление {recovery}% — несмотря на хороший сон",
            subtitle="Возможно, накопилась усталость. Побережём тебя сегодня",
            adaptations=adaptations,
        )
    return Insight(
        type="caution",
        title=f"Восстановление {recovery}% — средненько",
        subtitle=f"Сон: {sleep:.1f} ч. Побережём тебя сегодня",
        adaptations=adaptations,
    )


def calculate_adaptation(readiness: ReadinessData) -> WorkoutAdaptation:
    """
    Session adjustment for a readiness snapshot.

    sleep < 5 h or recovery < 40  → -15% weight, -2 sets (low_recovery)
    recovery < 65                 → -5% weight, -1 set (moderate_recovery)
    otherwise                     → no change (good_recovery)
    """
    if readiness.sleep_hours < SLEEP_CRITICAL_HOURS or readiness.recovery_score < RECOVERY_LOW:
        return WorkoutAdaptation(
            weight_multiplier=LOW_RECOVERY_WEIGHT_MULTIPLIER,
            sets_to_remove=LOW_RECOVERY_SETS_TO_REMOVE,
            reason="low_recovery",
        )
    if readiness.recovery_score < RECOVERY_MODERATE:
        return WorkoutAdaptation(
            weight_multiplier=MODERATE_RECOVERY_WEIGHT_MULTIPLIER,
            sets_to_remove=MODERATE_RECOVERY_SETS_TO_REMOVE,
            reason="moderate_recovery",
        )
    return WorkoutAdaptation(weight_multiplier=1.0, sets_to_remove=0, reason="good_recovery")


def _adapt_exercise(ex: Exercise, adaptation: WorkoutAdaptation) -> Exercise:
    if ex.is_warmup:
        return ex
    weight = ex.weight
    if weight:
        weight = round_to_step(weight * adaptation.weight_multiplier)
    return replace(ex, weight=weight, sets=max(ex.sets - adaptation.sets_to_remove, ADAPTED_SETS_FLOOR))


def adapt_workout(session: WorkoutSession, readiness: ReadinessData) -> WorkoutSession:
    """
    Apply today's adaptation to a session.

    With no adjustment the original session object is returned.  Otherwise
    each non-warmup exercise gets its weight scaled (rounded to the nearest
    2.5) and loses ``sets_to_remove`` sets, never dropping below 2.

    Args:
        session: Planned session (not modified)
        readiness: Today's readiness

    Returns:
        Adapted session
    """
    adaptation = calculate_adaptation(readiness)
    if adaptation.is_identity:
        return session

    logger.debug(
        "adapting %r: weight x%.2f, -%d sets (%s)",
        session.name, adaptation.weight_multiplier, adaptation.sets_to_remove, adaptation.reason,
    )
    return replace(
        session,
        exercises=tuple(_adapt_exercise(ex, adaptation) for ex in session.exercises),
    )


def needs_adaptation(readiness: ReadinessData) -> bool:
    """True iff sleep < 5 h or recovery < 65."""
    return readiness.sleep_hours < SLEEP_CRITICAL_HOURS or readiness.recovery_score < RECOVERY_MODERATE


def process_readiness(session: WorkoutSession, readiness: ReadinessData) -> AdaptedWorkoutResult:
    """Insight, adaptation and adapted session in one call."""
    return AdaptedWorkoutResult(
        original_session=session,
        adapted_session=adapt_workout(session, readiness),
        insight=generate_insight(readiness),
        adaptation=calculate_adaptation(readiness),
    )
