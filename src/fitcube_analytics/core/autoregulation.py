"""
Feedback-driven autoregulation of the program template.

Reads post-workout feedback (pump, next-day soreness, performance trend,
pain) from the last few logs and decides whether the whole program should
gain a set, lose a set and some load, or stay as it is:

    low pump, performance not declining          → increase (+1 set)
    performance declining, or 2+ very sore days  → decrease (-1 set, -5%)
    otherwise                                    → maintain

A low pre-workout wellness average overrides a non-decrease verdict with a
10% load cut.  Set counts stay within 1-6.
"""

import logging
from dataclasses import replace

from .config import (
    AUTOREG_SETS_MAX,
    AUTOREG_SETS_MIN,
    AUTOREG_WINDOW,
    HIGH_SORENESS_MIN,
    HIGH_SORENESS_STREAK,
    HIGH_WELLNESS_AVG,
    LOW_PUMP_MAX,
    LOW_PUMP_STREAK_WARNING,
    LOW_WELLNESS_AVG,
    LOW_WELLNESS_WEIGHT_CHANGE_PCT,
    NEUTRAL_RATING,
    UNDER_RECOVERED_WEIGHT_CHANGE_PCT,
    VERY_LOW_WELLNESS,
    WELLNESS_WEIGHTS,
    round_half_up,
)
from .models import (
    AutoregulationRecommendation,
    Exercise,
    RecoveryAnalysis,
    RecoveryStatus,
    TrainingProgram,
    Trend,
    VolumeAdjustment,
    WellnessCheck,
    WorkoutLog,
    WorkoutSession,
)

logger = logging.getLogger(__name__)

STATUS_MESSAGES: dict[str, tuple[str, str]] = {
    "optimal": ("Оптимальное восстановление", "Ты хорошо восстанавливаешься. Продолжай в том же духе!"),
    "under_stimulated": ("Недостаточный стимул", "Можно увеличить нагрузку для лучшего прогресса."),
    "under_recovered": ("Недовосстановление", "Обрати внимание на отдых и питание."),
}


# =============================================================================
# ANALYSIS
# =============================================================================


def _mean(values: list[int], default: float = NEUTRAL_RATING) -> float:
    return sum(values) / len(values) if values else default


def overall_trend(trends: list[Trend]) -> Trend:
    """
    Collapse per-workout trends into one.

    Declining wins when it appears twice or on the latest workout; two
    improving workouts make the trend improving; anything else is stable.
    """
    if not trends:
        return "stable"
    declining = trends.count("declining")
    if declining >= 2 or (declining and trends[-1] == "declining"):
        return "declining"
    if trends.count("improving") >= 2:
        return "improving"
    return "stable"


def analyze_recovery_signals(logs: list[WorkoutLog], window: int = AUTOREG_WINDOW) -> RecoveryAnalysis:
    """
    Summarize recovery signals over the last ``window`` logs.

    Missing pump or soreness ratings count as neutral (3).  The low-pump
    streak stops at the first workout without a low rating; the high-soreness
    streak skips workouts with no soreness rating.

    Args:
        logs: Workout history, oldest first
        window: Number of most recent logs to analyse

    Returns:
        RecoveryAnalysis
    """
    recent = logs[-window:] if window > 0 else []

    pumps = [log.feedback.pump_quality for log in recent if log.feedback.pump_quality is not None]
    soreness = [log.feedback.soreness_24h for log in recent if log.feedback.soreness_24h is not None]
    trend = overall_trend([log.feedback.performance_trend for log in recent
                           if log.feedback.performance_trend is not None])
    avg_pump = _mean(pumps)

    low_pump = 0
    for log in reversed(recent):
        pump = log.feedback.pump_quality
        if pump is None or pump > LOW_PUMP_MAX:
            break
        low_pump += 1

    high_soreness = 0
    for log in reversed(recent):
        rating = log.feedback.soreness_24h
        if rating is None:
            continue
        if rating < HIGH_SORENESS_MIN:
            break
        high_soreness += 1

    locations: list[str] = []
    for log in recent:
        pain = log.feedback.pain
        if pain.has_pain and pain.location and pain.location not in locations:
            locations.append(pain.location)

    status: RecoveryStatus = "optimal"
    if avg_pump <= LOW_PUMP_MAX and trend != "declining":
        status = "under_stimulated"
    elif trend == "declining" or high_soreness >= HIGH_SORENESS_STREAK:
        status = "under_recovered"

    logger.debug(
        "recovery over %d logs: %s (pump %.1f, trend %s, sore streak %d)",
        len(recent), status, avg_pump, trend, high_soreness,
    )
    return RecoveryAnalysis(
        overall_status=status,
        avg_pump_quality=avg_pump,
        avg_soreness=_mean(soreness),
        performance_trend=trend,
        consecutive_low_pump=low_pump,
        consecutive_high_soreness=high_soreness,
        pain_reported=any(log.feedback.pain.has_pain for log in recent),
        pain_locations=tuple(locations),
    )


def wellness_score(check: WellnessCheck | None) -> float:
    """Weighted 1-5 wellness score; neutral 3 when no check was recorded."""
    if check is None:
        return NEUTRAL_RATING
    return sum(getattr(check, item) * weight for item, weight in WELLNESS_WEIGHTS.items())


def average_wellness(logs: list[WorkoutLog], window: int = AUTOREG_WINDOW) -> float:
    """
    Mean wellness score over the last ``window`` logs.

    Neutral (3) when none of them has a wellness check; otherwise logs
    without one count as neutral.
    """
    recent = logs[-window:] if window > 0 else []
    if not any(log.feedback.wellness for log in recent):
        return NEUTRAL_RATING
    return sum(wellness_score(log.feedback.wellness) for log in recent) / len(recent)


# =============================================================================
# RECOMMENDATIONS
# =============================================================================


def generate_recommendation(analysis: RecoveryAnalysis) -> AutoregulationRecommendation:
    """Turn a recovery analysis into a volume adjustment plus advice."""
    warnings: list[str] = []
    suggestions: list[str] = []

    if analysis.overall_status == "under_stimulated":
        adjustment = VolumeAdjustment(
            type="increase",
            sets_change=1,
            weight_change_pct=0,
            reason="Низкий пампинг указывает на недостаточный стимул. Добавляем объём.",
        )
        suggestions.append("Попробуй увеличить время под нагрузкой (медленнее опускай вес)")
        suggestions.append("Убедись, что достигаешь отказа или близко к нему")
    elif analysis.overall_status == "under_recovered":
        adjustment = VolumeAdjustment(
            type="decrease",
            sets_change=-1,
            weight_change_pct=UNDER_RECOVERED_WEIGHT_CHANGE_PCT,
            reason="Признаки недовосстановления. Снижаем нагрузку.",
        )
        warnings.append("Возможно, ты недовосстановился. Обрати внимание на сон и питание.")
        suggestions.append("Рассмотри дополнительный день отдыха")
    else:
        adjustment = VolumeAdjustment(
            type="maintain",
            sets_change=0,
            weight_change_pct=0,
            reason="Прогресс идёт хорошо. Продолжаем в том же духе.",
        )
        if analysis.performance_trend == "improving":
            suggestions.append("Отличный прогресс! Можно попробовать увеличить вес на 2.5-5%")

    if analysis.pain_reported:
        warnings.append(f"Зафиксирована боль: {', '.join(analysis.pain_locations)}. Будь осторожен.")
    if analysis.consecutive_low_pump >= LOW_PUMP_STREAK_WARNING:
        warnings.append("Пампинг был низким 3 тренировки подряд. Возможно, стоит пересмотреть технику.")

    return AutoregulationRecommendation(
        volume_adjustment=adjustment,
        warnings=tuple(warnings),
        suggestions=tuple(suggestions),
    )


def status_message(analysis: RecoveryAnalysis) -> tuple[str, str]:
    """(title, description) for the analysis status."""
    return STATUS_MESSAGES[analysis.overall_status]


# =============================================================================
# APPLICATION
# =============================================================================


def _adjust_exercise(ex: Exercise, adjustment: VolumeAdjustment) -> Exercise:
    sets = min(AUTOREG_SETS_MAX, max(AUTOREG_SETS_MIN, ex.sets + adjustment.sets_change))
    weight = ex.weight
    if weight and adjustment.weight_change_pct:
        weight = float(max(0, round_half_up(weight * (1 + adjustment.weight_change_pct / 100))))
    return replace(ex, sets=sets, weight=weight)


def apply_volume_adjustment(session: WorkoutSession, adjustment: VolumeAdjustment) -> WorkoutSession:
    """
    Apply an adjustment to every exercise of a session.

    Set counts are clamped to 1-6 and weights rounded to whole kg.  A
    maintain adjustment returns the original session object.
    """
    if adjustment.type == "maintain":
        return session
    return replace(
        session,
        exercises=tuple(_adjust_exercise(ex, adjustment) for ex in session.exercises),
    )


def apply_autoregulation_to_program(
    program: TrainingProgram,
    logs: list[WorkoutLog],
) -> tuple[TrainingProgram, AutoregulationRecommendation]:
    """
    Analyse recent feedback and adjust the whole program.

    Wellness checks refine the verdict: a low window average turns any
    non-decrease verdict into a 10% load cut, a very low latest score adds
    a light-day suggestion, and a high average with improving performance
    invites more load.

    Args:
        program: Program template (not modified)
        logs: Workout history, oldest first

    Returns:
        (adjusted program, recommendation); the program is returned as-is
        when the verdict is maintain
    """
    analysis = analyze_recovery_signals(logs)
    rec = generate_recommendation(analysis)

    latest = wellness_score(logs[-1].feedback.wellness) if logs else NEUTRAL_RATING
    avg = average_wellness(logs)

    if avg < LOW_WELLNESS_AVG and rec.volume_adjustment.type != "decrease":
        rec = replace(
            rec,
            volume_adjustment=VolumeAdjustment(
                type="decrease",
                sets_change=0,
                weight_change_pct=LOW_WELLNESS_WEIGHT_CHANGE_PCT,
                reason="Низкая готовность к нагрузке. Снижаем интенсивность.",
            ),
            warnings=rec.warnings + ("Твои показатели готовности низкие. Обрати внимание на сон и восстановление.",),
        )
    if latest < VERY_LOW_WELLNESS:
        rec = replace(rec, suggestions=rec.suggestions + ("Рассмотри лёгкую тренировку или активный отдых сегодня.",))
    if avg >= HIGH_WELLNESS_AVG and analysis.overall_status == "optimal" and analysis.performance_trend == "improving":
        rec = replace(rec, suggestions=rec.suggestions + ("Отличная готовность! Можешь добавить вес или подходы.",))

    if rec.volume_adjustment.type == "maintain":
        return program, rec

    logger.debug(
        "autoregulation: %s (%+d sets, %+.0f%% weight)",
        rec.volume_adjustment.type, rec.volume_adjustment.sets_change, rec.volume_adjustment.weight_change_pct,
    )
    adjusted = replace(
        program,
        sessions=tuple(apply_volume_adjustment(s, rec.volume_adjustment) for s in program.sessions),
    )
    return adjusted, rec
