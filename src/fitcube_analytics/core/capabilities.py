"""
Capability snapshot: one consistent read-model of what the user can do.

Composes the volume tracker (recent window), the strength analyzer (full
history: strength records never expire), best lifts for every program
exercise and a weight-synced program.  The snapshot feeds the terminal
views and format_capabilities_for_ai(), whose text is injected verbatim
into coaching prompts.
"""

import logging
from typing import Callable

from .config import (
    ADJUST_IMBALANCE_COUNT,
    ADJUST_UNDERTRAINED_COUNT,
    AI_MAX_BEST_LIFTS,
    AI_MAX_IMBALANCES,
    AI_MAX_MUSCLES,
    AI_MAX_PAIN,
    AI_MAX_PAIN_EXERCISES,
    AI_MAX_STRENGTH,
    DEFAULT_BODYWEIGHT_KG,
    MIN_RECENT_LOGS,
    RECENT_LOGS_WINDOW,
    SUGGESTED_WEIGHT_FRACTION,
    round_to_step,
)
from .models import BestLift, CapabilitySnapshot, OnboardingProfile, TrainingProgram, WorkoutLog
from .strength import analyze_pain_patterns, analyze_strength, detect_imbalances, get_best_lift_for_exercise
from .volume import calculate_weekly_volume
from .weight_sync import sync_weights_from_logs

logger = logging.getLogger(__name__)

WeightSync = Callable[[TrainingProgram, list[WorkoutLog]], TrainingProgram]

VOLUME_HEADER = "=== АНАЛИЗ ОБЪЁМА ==="
STRENGTH_HEADER = "=== СИЛОВЫЕ ПОКАЗАТЕЛИ ==="
BEST_LIFTS_HEADER = "=== ЛУЧШИЕ РЕЗУЛЬТАТЫ ==="
PAIN_HEADER = "=== ИСТОРИЯ БОЛИ ==="
IMBALANCE_HEADER = "=== ДИСБАЛАНСЫ ==="


def create_capabilities_snapshot(
    profile: OnboardingProfile,
    program: TrainingProgram,
    logs: list[WorkoutLog],
    weight_sync: WeightSync = sync_weights_from_logs,
) -> CapabilitySnapshot:
    """
    Build a capability snapshot.

    Args:
        profile: User profile (experience drives volume targets; weight and
            gender drive strength levels)
        program: Current program template
        logs: Full workout history (append order; sorted by date here)
        weight_sync: Collaborator producing the weight-synced program

    Returns:
        CapabilitySnapshot
    """
    ordered = sorted(logs, key=lambda log: log.date)
    recent = ordered[-RECENT_LOGS_WINDOW:]

    volume_report = calculate_weekly_volume(recent, profile.experience)

    bodyweight = profile.weight or DEFAULT_BODYWEIGHT_KG
    strength = analyze_strength(logs, bodyweight, profile.gender)
    imbalances = detect_imbalances(strength)
    pain = analyze_pain_patterns(logs)

    best_lifts: dict[str, BestLift] = {}
    for name in program.exercise_names():
        key = name.lower()
        if key in best_lifts:
            continue
        lift = get_best_lift_for_exercise(name, logs)
        if lift is not None:
            best_lifts[key] = lift

    synced = weight_sync(program, logs)

    logger.debug(
        "snapshot: %d logs (%d recent), %d lifts analysed, %d best lifts",
        len(logs), len(recent), len(strength), len(best_lifts),
    )

    return CapabilitySnapshot(
        profile=profile,
        program=program,
        recent_logs=tuple(recent),
        volume_report=volume_report,
        strength_analysis=tuple(strength),
        imbalances=tuple(imbalances),
        pain_patterns=tuple(pain),
        best_lifts=best_lifts,
        synced_program=synced,
        has_insufficient_data=len(recent) < MIN_RECENT_LOGS,
        needs_more_volume=volume_report.undertrained_muscles,
        has_overtraining=volume_report.overtrained_muscles,
        has_pain_concerns=len(pain) > 0,
    )


def get_suggested_weight(snapshot: CapabilitySnapshot, exercise_name: str) -> float | None:
    """
    Working weight for an exercise: 80% of its best E1RM, nearest 2.5.

    Returns:
        Suggested weight, or None when no best lift is known
    """
    lift = snapshot.best_lifts.get(exercise_name.lower())
    if lift is None or lift.e1rm <= 0:
        return None
    return round_to_step(lift.e1rm * SUGGESTED_WEIGHT_FRACTION)


def _fmt_num(value: float) -> str:
    return f"{value:g}"


def format_capabilities_for_ai(snapshot: CapabilitySnapshot) -> str:
    """
    Plain-text capability report for prompt injection.

    Sections in fixed order: volume, strength, best lifts, pain,
    imbalances.  The volume header is always present; empty sections
    after it are omitted; each section is capped in item count.
    """
    lines: list[str] = [VOLUME_HEADER]

    if snapshot.has_insufficient_data:
        lines.append(f"Мало данных: {len(snapshot.recent_logs)} тренировок в анализе")
    if snapshot.needs_more_volume:
        lines.append(f"Недостаточно нагрузки: {', '.join(snapshot.needs_more_volume)}")
    if snapshot.has_overtraining:
        lines.append(f"Возможная перетренировка: {', '.join(snapshot.has_overtraining)}")
    for m in snapshot.volume_report.muscles[:AI_MAX_MUSCLES]:
        marker = {"under": "[-]", "over": "[+]"}.get(m.status, "[ok]")
        lines.append(
            f"{marker} {m.muscle_name_ru}: {_fmt_num(m.total_sets)} сетов "
            f"({m.percent_of_optimal}% оптимума)"
        )

    if snapshot.strength_analysis:
        lines += ["", STRENGTH_HEADER]
        for s in snapshot.strength_analysis[:AI_MAX_STRENGTH]:
            lines.append(f"- {s.exercise_name}: E1RM {_fmt_num(s.e1rm)}кг ({s.level})")

    if snapshot.best_lifts:
        lines += ["", BEST_LIFTS_HEADER]
        for name, lift in list(snapshot.best_lifts.items())[:AI_MAX_BEST_LIFTS]:
            lines.append(
                f"- {name}: {_fmt_num(lift.weight)}кг x {lift.reps} (E1RM: {_fmt_num(lift.e1rm)}кг)"
            )

    if snapshot.has_pain_concerns:
        lines += ["", PAIN_HEADER]
        for pain in snapshot.pain_patterns[:AI_MAX_PAIN]:
            related = ", ".join(pain.associated_exercises[:AI_MAX_PAIN_EXERCISES])
            lines.append(f"- {pain.location}: {pain.frequency} случаев (связано с: {related})")

    if snapshot.imbalances:
        lines += ["", IMBALANCE_HEADER]
        for imb in snapshot.imbalances[:AI_MAX_IMBALANCES]:
            lines.append(f"- {imb.description} ({imb.severity})")

    return "\n".join(lines)


def needs_program_adjustment(snapshot: CapabilitySnapshot) -> tuple[bool, list[str]]:
    """
    Whether the program should be revisited, with reasons.

    Returns:
        (needs_adjustment, reasons)
    """
    reasons: list[str] = []
    if len(snapshot.needs_more_volume) > ADJUST_UNDERTRAINED_COUNT:
        reasons.append(f"Недостаточный объём для {len(snapshot.needs_more_volume)} групп мышц")
    if snapshot.has_overtraining:
        reasons.append(f"Возможная перетренировка: {', '.join(snapshot.has_overtraining)}")
    if snapshot.has_pain_concerns:
        reasons.append("Обнаружены повторяющиеся боли")
    if len(snapshot.imbalances) > ADJUST_IMBALANCE_COUNT:
        reasons.append("Выявлены значительные мышечные дисбалансы")
    return bool(reasons), reasons
