"""
Weekly training-volume tracking per muscle group.

Counts hard sets (completed, non-warmup) per muscle: each set gives the
exercise's primary muscle a full set of credit and each secondary muscle
half a set.  Totals are compared with an experience-scaled optimal target.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta

from .config import (
    DEFAULT_EXPERIENCE,
    DEFAULT_VOLUME_TARGET,
    EXPERIENCE_LEVELS,
    OVERALL_OVER_COUNT,
    OVERALL_UNDER_COUNT,
    VOLUME_RECOMMENDATION_MUSCLES,
    round_half_up,
)
from .engine.config_loader import Policy, load_policy
from .models import MuscleVolume, OverallVolumeStatus, VolumeStatus, WeeklyVolumeReport, WorkoutLog
from .muscle_map import MUSCLE_GROUPS, MUSCLE_IDS, get_muscle_group, resolve_muscles

logger = logging.getLogger(__name__)

_STATUS_ORDER: dict[str, int] = {"under": 0, "optimal": 1, "over": 2}

PRIMARY_GROUP_IDS: tuple[str, ...] = ("chest", "back", "shoulders", "quads", "hamstrings", "glutes")
SECONDARY_GROUP_IDS: tuple[str, ...] = ("biceps", "triceps", "rear_delts", "calves", "core", "forearms")


def optimal_target(muscle_id: str, experience_level: str, policy: Policy | None = None) -> int:
    """
    Optimal weekly hard sets for a muscle at an experience level.

    Unknown experience levels fall back to intermediate; unknown muscles to
    DEFAULT_VOLUME_TARGET.
    """
    policy = policy or load_policy()
    level = experience_level if experience_level in EXPERIENCE_LEVELS else DEFAULT_EXPERIENCE
    per_level = policy.volume_targets.get(muscle_id, {})
    return per_level.get(level, DEFAULT_VOLUME_TARGET)


def classify_volume(
    total_sets: float,
    target: int,
    policy: Policy | None = None,
) -> VolumeStatus:
    """under / optimal / over relative to the policy's ratio bands."""
    policy = policy or load_policy()
    if target <= 0:
        return "optimal" if total_sets == 0 else "over"
    ratio = total_sets / target
    if ratio < policy.under_ratio:
        return "under"
    if ratio > policy.over_ratio:
        return "over"
    return "optimal"


def _overall_status(under: int, over: int) -> OverallVolumeStatus:
    if under > OVERALL_UNDER_COUNT:
        return "needs_more"
    if over > OVERALL_OVER_COUNT:
        return "too_much"
    if under or over:
        return "mixed"
    return "optimal"


def _muscle_names(muscle_ids: list[str]) -> str:
    return ", ".join(get_muscle_group(m).name_ru for m in muscle_ids)  # type: ignore[union-attr]


def volume_recommendations(under: list[str], over: list[str], n_logs: int) -> tuple[str, ...]:
    """
    Short advice lines for a weekly report.

    At most three undertrained muscles are named; every overtrained one is.
    """
    lines: list[str] = []
    if under:
        lines.append(f"Добавь больше работы на: {_muscle_names(under[:VOLUME_RECOMMENDATION_MUSCLES])}")
    if over:
        lines.append(f"Возможно, слишком много работы на: {_muscle_names(over)}")
    if n_logs == 0:
        lines.append("Начни тренироваться, чтобы отслеживать объём!")
    return tuple(lines)


def calculate_weekly_volume(
    logs: list[WorkoutLog],
    experience_level: str = DEFAULT_EXPERIENCE,
    policy: Policy | None = None,
) -> WeeklyVolumeReport:
    """
    Aggregate completed working sets into per-muscle weekly volume.

    Every log passed in is counted; callers choose the window.

    Args:
        logs: Workout logs to aggregate
        experience_level: beginner / intermediate / advanced
        policy: Policy tables (defaults to load_policy())

    Returns:
        WeeklyVolumeReport, muscles ordered under → optimal → over
    """
    policy = policy or load_policy()
    direct: dict[str, int] = dict.fromkeys(MUSCLE_IDS, 0)
    indirect: dict[str, float] = dict.fromkeys(MUSCLE_IDS, 0.0)

    for log in logs:
        for exercise in log.completed_exercises:
            n_sets = len(exercise.working_sets())
            if n_sets == 0:
                continue
            credit = resolve_muscles(exercise.name)
            if credit is None:
                continue
            for muscle_id, weight in credit.credits():
                if muscle_id not in direct:
                    continue
                if muscle_id == credit.primary:
                    direct[muscle_id] += n_sets
                else:
                    indirect[muscle_id] += n_sets * weight

    muscles: list[MuscleVolume] = []
    under: list[str] = []
    over: list[str] = []

    for group in MUSCLE_GROUPS:
        direct_sets = direct[group.id]
        indirect_sets = round(indirect[group.id], 1)
        total = round(direct_sets + indirect_sets, 1)
        target = optimal_target(group.id, experience_level, policy)
        status = classify_volume(total, target, policy)
        percent = round_half_up(total / target * 100) if target > 0 else 0

        if status == "under":
            under.append(group.id)
        elif status == "over":
            over.append(group.id)

        muscles.append(
            MuscleVolume(
                muscle_id=group.id,
                muscle_name_ru=group.name_ru,
                total_sets=total,
                direct_sets=direct_sets,
                indirect_sets=indirect_sets,
                target_optimal=target,
                percent_of_optimal=percent,
                status=status,
            )
        )

    muscles.sort(key=lambda m: _STATUS_ORDER[m.status])
    logger.debug(
        "volume over %d logs (%s): %d under, %d over",
        len(logs), experience_level, len(under), len(over),
    )

    return WeeklyVolumeReport(
        muscles=tuple(muscles),
        undertrained_muscles=tuple(under),
        overtrained_muscles=tuple(over),
        overall_status=_overall_status(len(under), len(over)),
        recommendations=volume_recommendations(under, over, len(logs)),
    )


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def calculate_volume_history(
    logs: list[WorkoutLog],
    weeks: int = 4,
    experience_level: str = DEFAULT_EXPERIENCE,
    today: date | None = None,
    policy: Policy | None = None,
) -> list[WeeklyVolumeReport]:
    """
    Weekly reports for the last ``weeks`` Monday-based calendar weeks.

    Args:
        logs: Full workout history
        weeks: Number of weeks to report (current week included)
        experience_level: beginner / intermediate / advanced
        today: Reference date (defaults to date.today())
        policy: Policy tables

    Returns:
        Reports in chronological order, oldest first
    """
    today = today or date.today()
    current = week_start(today)
    buckets: dict[date, list[WorkoutLog]] = {}
    for log in logs:
        start = week_start(datetime.strptime(log.date, "%Y-%m-%d").date())
        buckets.setdefault(start, []).append(log)

    reports: list[WeeklyVolumeReport] = []
    for i in range(weeks - 1, -1, -1):
        start = current - timedelta(weeks=i)
        report = calculate_weekly_volume(buckets.get(start, []), experience_level, policy)
        reports.append(replace(report, week_start=start.isoformat()))
    return reports


def get_muscles_needing_work(
    logs: list[WorkoutLog],
    experience_level: str = DEFAULT_EXPERIENCE,
) -> list[MuscleVolume]:
    """Muscles currently below their volume band."""
    report = calculate_weekly_volume(logs, experience_level)
    return [m for m in report.muscles if m.status == "under"]


def get_volume_summary(
    logs: list[WorkoutLog],
    experience_level: str = DEFAULT_EXPERIENCE,
) -> dict:
    """
    Dashboard summary: primary / secondary groups plus a 0-100 score.

    The score averages percent-of-optimal (each capped at 150) and is
    clipped to 100.

    Returns:
        Dict with primary_muscles, secondary_muscles, overall_score, status
        (excellent / good / needs_work / no_data)
    """
    report = calculate_weekly_volume(logs, experience_level)
    percents = [min(m.percent_of_optimal, 150) for m in report.muscles]
    avg = sum(percents) / len(percents) if percents else 0.0
    score = min(100, round_half_up(avg))

    if not any(m.total_sets > 0 for m in report.muscles):
        status = "no_data"
    elif score >= 80:
        status = "excellent"
    elif score >= 50:
        status = "good"
    else:
        status = "needs_work"

    return {
        "primary_muscles": [m for m in report.muscles if m.muscle_id in PRIMARY_GROUP_IDS],
        "secondary_muscles": [m for m in report.muscles if m.muscle_id in SECONDARY_GROUP_IDS],
        "overall_score": score,
        "status": status,
    }
