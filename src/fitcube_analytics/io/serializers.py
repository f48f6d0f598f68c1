"""
JSON serialization for training data models.

Handles conversion between dataclasses and JSON-compatible dicts.  Input
records may use snake_case or the camelCase keys produced by the mobile
client (``completedExercises``, ``isWarmup``, ...); output is snake_case.
"""

import json
import re
from dataclasses import asdict
from datetime import datetime
from typing import Any

from ..core.models import (
    AutoregulationRecommendation,
    BestLift,
    CapabilitySnapshot,
    CompletedExercise,
    CompletedSet,
    Exercise,
    ImbalanceReport,
    Insight,
    MesocycleState,
    MuscleVolume,
    OnboardingProfile,
    PainPattern,
    PainReport,
    ReadinessData,
    RecoveryAnalysis,
    StrengthAnalysis,
    TrainingProgram,
    WeeklyVolumeReport,
    WellnessCheck,
    WorkoutAdaptation,
    WorkoutFeedback,
    WorkoutLog,
    WorkoutSession,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def _get(data: dict[str, Any], key: str, default: Any = None) -> Any:
    """Look up a snake_case key, falling back to its camelCase spelling."""
    if key in data:
        return data[key]
    head, *rest = key.split("_")
    camel = head + "".join(part.title() for part in rest)
    return data.get(camel, default)


def _require(data: dict[str, Any], key: str, record: str) -> Any:
    value = _get(data, key)
    if value is None:
        raise ValidationError(f"{record}: missing required field '{key}'")
    return value


def validate_date(date_str: str) -> str:
    """
    Validate and normalize a date string to YYYY-MM-DD.

    Full ISO timestamps ("2026-02-16T09:30:00.000Z") are cut to their date.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not isinstance(date_str, str):
        raise ValidationError(f"Invalid date: {date_str!r}")
    m = re.match(r"^(\d{4}-\d{2}-\d{2})(T.*)?$", date_str.strip())
    if not m:
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(m.group(1), "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return m.group(1)


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is non-negative.

    Raises:
        ValidationError: If value is negative
    """
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def _optional_number(value: Any, cast: type) -> Any:
    """Cast a possibly-missing numeric field; junk becomes None."""
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except (TypeError, ValueError):
        return None


def _number(value: Any, cast: type, name: str) -> Any:
    """Cast a numeric field, raising ValidationError on junk."""
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be a number, got {value!r}") from e


# =============================================================================
# WORKOUT LOGS
# =============================================================================


def dict_to_completed_set(data: dict[str, Any]) -> CompletedSet:
    """
    Convert dict to CompletedSet.

    Missing or non-numeric weight/reps are kept as None (the set is then
    skipped by strength analysis) instead of rejecting the whole log.
    """
    return CompletedSet(
        weight=_optional_number(_get(data, "weight"), float),
        reps=_optional_number(_get(data, "reps"), int),
        is_completed=bool(_get(data, "is_completed", True)),
        rir=_optional_number(_get(data, "rir"), int),
    )


def completed_set_to_dict(s: CompletedSet) -> dict[str, Any]:
    d: dict[str, Any] = {"weight": s.weight, "reps": s.reps, "is_completed": s.is_completed}
    if s.rir is not None:
        d["rir"] = s.rir
    return d


def dict_to_completed_exercise(data: dict[str, Any]) -> CompletedExercise:
    """Convert dict to CompletedExercise."""
    name = _require(data, "name", "exercise")
    sets = _number(_get(data, "sets", 0) or 0, int, "sets")
    validate_non_negative(sets, "sets")
    return CompletedExercise(
        name=str(name),
        exercise_type=str(_get(data, "exercise_type", "strength")),
        sets=sets,
        reps=str(_get(data, "reps", "")),
        completed_sets=[dict_to_completed_set(s) for s in _get(data, "completed_sets", []) or []],
        is_warmup=bool(_get(data, "is_warmup", False)),
    )


def completed_exercise_to_dict(ex: CompletedExercise) -> dict[str, Any]:
    return {
        "name": ex.name,
        "exercise_type": ex.exercise_type,
        "sets": ex.sets,
        "reps": ex.reps,
        "completed_sets": [completed_set_to_dict(s) for s in ex.completed_sets],
        "is_warmup": ex.is_warmup,
    }


def dict_to_wellness(data: dict[str, Any]) -> WellnessCheck:
    """Convert dict to WellnessCheck; extra keys (score, status) are ignored."""
    return WellnessCheck(**{
        item: _number(_require(data, item, "wellness"), int, item)
        for item in ("sleep", "food", "stress", "soreness")
    })


def dict_to_feedback(data: dict[str, Any] | None) -> WorkoutFeedback:
    """
    Convert dict to WorkoutFeedback (missing feedback → no pain).

    The pre-workout check is read from ``wellness`` or the client's
    ``readiness`` key.
    """
    if not data:
        return WorkoutFeedback()
    pain = _get(data, "pain") or {}
    wellness = _get(data, "wellness") or _get(data, "readiness")
    soreness = _get(data, "soreness_24h", data.get("soreness24h"))
    return WorkoutFeedback(
        completion=_get(data, "completion"),
        pain=PainReport(
            has_pain=bool(_get(pain, "has_pain", False)),
            location=_get(pain, "location"),
            details=_get(pain, "details"),
        ),
        pump_quality=_optional_number(_get(data, "pump_quality"), int),
        soreness_24h=_optional_number(soreness, int),
        performance_trend=_get(data, "performance_trend"),
        wellness=dict_to_wellness(wellness) if wellness else None,
    )


def feedback_to_dict(feedback: WorkoutFeedback) -> dict[str, Any]:
    pain = feedback.pain
    d: dict[str, Any] = {
        "completion": feedback.completion,
        "pain": {"has_pain": pain.has_pain, "location": pain.location, "details": pain.details},
    }
    for key in ("pump_quality", "soreness_24h", "performance_trend"):
        value = getattr(feedback, key)
        if value is not None:
            d[key] = value
    if feedback.wellness is not None:
        d["wellness"] = asdict(feedback.wellness)
    return d


def dict_to_workout_log(data: dict[str, Any]) -> WorkoutLog:
    """
    Convert dict to WorkoutLog.

    Raises:
        ValidationError: If data is invalid
    """
    day = validate_date(_require(data, "date", "workout log"))
    duration = _number(_get(data, "duration", 0) or 0, int, "duration")
    validate_non_negative(duration, "duration")
    try:
        return WorkoutLog(
            date=day,
            completed_exercises=[
                dict_to_completed_exercise(e) for e in _get(data, "completed_exercises", []) or []
            ],
            duration=duration,
            feedback=dict_to_feedback(_get(data, "feedback")),
            session_id=str(_get(data, "session_id", "") or ""),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


def workout_log_to_dict(log: WorkoutLog) -> dict[str, Any]:
    return {
        "date": log.date,
        "session_id": log.session_id,
        "duration": log.duration,
        "completed_exercises": [completed_exercise_to_dict(e) for e in log.completed_exercises],
        "feedback": feedback_to_dict(log.feedback),
    }


# =============================================================================
# PROGRAM
# =============================================================================


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """Convert dict to program Exercise."""
    sets = _number(_require(data, "sets", "program exercise"), int, "sets")
    rest = _number(_get(data, "rest", 0) or 0, int, "rest")
    validate_non_negative(sets, "sets")
    validate_non_negative(rest, "rest")
    weight = _optional_number(_get(data, "weight"), float)
    if weight is not None:
        validate_non_negative(weight, "weight")
    return Exercise(
        name=str(_require(data, "name", "program exercise")),
        sets=sets,
        reps=str(_get(data, "reps", "")),
        rest=rest,
        exercise_type=str(_get(data, "exercise_type", "strength")),
        weight=weight,
        is_warmup=bool(_get(data, "is_warmup", False)),
    )


def exercise_to_dict(ex: Exercise) -> dict[str, Any]:
    d: dict[str, Any] = {
        "name": ex.name,
        "exercise_type": ex.exercise_type,
        "sets": ex.sets,
        "reps": ex.reps,
        "rest": ex.rest,
    }
    if ex.weight is not None:
        d["weight"] = ex.weight
    if ex.is_warmup:
        d["is_warmup"] = True
    return d


def dict_to_program(data: dict[str, Any]) -> TrainingProgram:
    """Convert dict to TrainingProgram."""
    sessions = []
    for raw in _get(data, "sessions", []) or []:
        sessions.append(
            WorkoutSession(
                name=str(_require(raw, "name", "session")),
                exercises=tuple(dict_to_exercise(e) for e in _get(raw, "exercises", []) or []),
            )
        )
    return TrainingProgram(sessions=tuple(sessions))


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    return {"name": session.name, "exercises": [exercise_to_dict(e) for e in session.exercises]}


def program_to_dict(program: TrainingProgram) -> dict[str, Any]:
    return {"sessions": [session_to_dict(s) for s in program.sessions]}


# =============================================================================
# PROFILE / READINESS / MESOCYCLE
# =============================================================================

_GENDER_ALIASES = {"male": "male", "m": "male", "мужчина": "male",
                   "female": "female", "f": "female", "женщина": "female"}
_EXPERIENCE_ALIASES = {
    "beginner": "beginner", "новичок (0-6 месяцев)": "beginner",
    "intermediate": "intermediate", "любитель (6-24 месяцев)": "intermediate",
    "advanced": "advanced", "атлет (2+ года)": "advanced",
}


def dict_to_profile(data: dict[str, Any]) -> OnboardingProfile:
    """
    Convert dict to OnboardingProfile.

    Gender and experience accept the client's Russian labels as well as
    the canonical English values.

    Raises:
        ValidationError: If data is invalid
    """
    gender = _GENDER_ALIASES.get(str(_require(data, "gender", "profile")).strip().lower())
    if gender is None:
        raise ValidationError(f"Invalid gender: {_get(data, 'gender')!r}")
    raw_exp = str(_get(data, "experience", "intermediate")).strip().lower()
    experience = _EXPERIENCE_ALIASES.get(raw_exp)
    if experience is None:
        raise ValidationError(f"Invalid experience: {raw_exp!r}")

    goals = _get(data, "goals", []) or []
    if isinstance(goals, dict):
        goals = [g for g in (goals.get("primary"), goals.get("secondary")) if g]

    try:
        return OnboardingProfile(
            gender=gender,  # type: ignore[arg-type]
            age=int(_require(data, "age", "profile")),
            weight=float(_get(data, "weight", 0) or 0),
            experience=experience,  # type: ignore[arg-type]
            height=_optional_number(_get(data, "height"), float),
            goals=[str(g) for g in goals],
            days_per_week=int(_get(data, "days_per_week", 3)),
            has_injuries=bool(_get(data, "has_injuries", False)),
            injuries=str(_get(data, "injuries", "") or ""),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


def profile_to_dict(profile: OnboardingProfile) -> dict[str, Any]:
    return {
        "gender": profile.gender,
        "age": profile.age,
        "weight": profile.weight,
        "height": profile.height,
        "experience": profile.experience,
        "goals": list(profile.goals),
        "days_per_week": profile.days_per_week,
        "has_injuries": profile.has_injuries,
        "injuries": profile.injuries,
    }


def dict_to_readiness(data: dict[str, Any]) -> ReadinessData:
    """Convert dict to ReadinessData."""
    sleep_hours = _number(_require(data, "sleep_hours", "readiness"), float, "sleep_hours")
    validate_non_negative(sleep_hours, "sleep_hours")
    return ReadinessData(
        sleep_hours=sleep_hours,
        sleep_score=_number(_get(data, "sleep_score", 3), int, "sleep_score"),
        recovery_score=_number(_require(data, "recovery_score", "readiness"), int, "recovery_score"),
        hrv=_optional_number(_get(data, "hrv"), float),
        resting_hr=_optional_number(_get(data, "resting_hr"), int),
    )


def dict_to_mesocycle_state(data: dict[str, Any]) -> MesocycleState:
    """Convert dict to MesocycleState."""
    try:
        return MesocycleState(
            phase=_require(data, "phase", "mesocycle"),
            volume_multiplier=float(_require(data, "volume_multiplier", "mesocycle")),
            week_number=int(_get(data, "week_number", 1)),
            mesocycle_id=str(_get(data, "mesocycle_id", "") or ""),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


def mesocycle_state_to_dict(state: MesocycleState) -> dict[str, Any]:
    return {
        "phase": state.phase,
        "volume_multiplier": state.volume_multiplier,
        "week_number": state.week_number,
        "mesocycle_id": state.mesocycle_id,
    }


# =============================================================================
# READ-MODELS (output only)
# =============================================================================


def muscle_volume_to_dict(m: MuscleVolume) -> dict[str, Any]:
    return {
        "muscle_id": m.muscle_id,
        "muscle_name_ru": m.muscle_name_ru,
        "total_sets": m.total_sets,
        "direct_sets": m.direct_sets,
        "indirect_sets": m.indirect_sets,
        "target_optimal": m.target_optimal,
        "percent_of_optimal": m.percent_of_optimal,
        "status": m.status,
    }


def volume_report_to_dict(report: WeeklyVolumeReport) -> dict[str, Any]:
    return {
        "week_start": report.week_start,
        "overall_status": report.overall_status,
        "muscles": [muscle_volume_to_dict(m) for m in report.muscles],
        "undertrained_muscles": list(report.undertrained_muscles),
        "overtrained_muscles": list(report.overtrained_muscles),
        "recommendations": list(report.recommendations),
    }


def strength_analysis_to_dict(s: StrengthAnalysis) -> dict[str, Any]:
    return {
        "exercise_name": s.exercise_name,
        "exercise_name_ru": s.exercise_name_ru,
        "e1rm": s.e1rm,
        "relative_strength": s.relative_strength,
        "level": s.level,
        "percentile": s.percentile,
        "next_level_target": s.next_level_target,
        "trend": s.trend,
    }


def imbalance_to_dict(imb: ImbalanceReport) -> dict[str, Any]:
    return {
        "type": imb.type,
        "description": imb.description,
        "severity": imb.severity,
        "ratio": imb.ratio,
        "ideal_ratio": imb.ideal_ratio,
        "recommendation": imb.recommendation,
        "related_exercises": list(imb.related_exercises),
    }


def pain_pattern_to_dict(p: PainPattern) -> dict[str, Any]:
    return {
        "location": p.location,
        "frequency": p.frequency,
        "last_occurrence": p.last_occurrence,
        "associated_exercises": list(p.associated_exercises),
        "movement_pattern": p.movement_pattern,
    }


def best_lift_to_dict(lift: BestLift) -> dict[str, Any]:
    return {"weight": lift.weight, "reps": lift.reps, "e1rm": lift.e1rm, "date": lift.date}


def insight_to_dict(insight: Insight) -> dict[str, Any]:
    return {
        "type": insight.type,
        "title": insight.title,
        "subtitle": insight.subtitle,
        "adaptations": list(insight.adaptations),
    }


def adaptation_to_dict(a: WorkoutAdaptation) -> dict[str, Any]:
    return {
        "weight_multiplier": a.weight_multiplier,
        "sets_to_remove": a.sets_to_remove,
        "reason": a.reason,
    }


def recovery_analysis_to_dict(a: RecoveryAnalysis) -> dict[str, Any]:
    d = asdict(a)
    d["pain_locations"] = list(a.pain_locations)
    return d


def recommendation_to_dict(rec: AutoregulationRecommendation) -> dict[str, Any]:
    return {
        "volume_adjustment": asdict(rec.volume_adjustment),
        "warnings": list(rec.warnings),
        "suggestions": list(rec.suggestions),
    }


def snapshot_to_dict(snapshot: CapabilitySnapshot) -> dict[str, Any]:
    """Convert a CapabilitySnapshot to a JSON-compatible dict."""
    return {
        "profile": profile_to_dict(snapshot.profile),
        "recent_logs": [workout_log_to_dict(log) for log in snapshot.recent_logs],
        "volume_report": volume_report_to_dict(snapshot.volume_report),
        "strength_analysis": [strength_analysis_to_dict(s) for s in snapshot.strength_analysis],
        "imbalances": [imbalance_to_dict(i) for i in snapshot.imbalances],
        "pain_patterns": [pain_pattern_to_dict(p) for p in snapshot.pain_patterns],
        "best_lifts": {k: best_lift_to_dict(v) for k, v in snapshot.best_lifts.items()},
        "synced_program": program_to_dict(snapshot.synced_program),
        "has_insufficient_data": snapshot.has_insufficient_data,
        "needs_more_volume": list(snapshot.needs_more_volume),
        "has_overtraining": list(snapshot.has_overtraining),
        "has_pain_concerns": snapshot.has_pain_concerns,
    }


def workout_log_to_json_line(log: WorkoutLog) -> str:
    """Serialize a workout log as one JSONL line (no trailing newline)."""
    return json.dumps(workout_log_to_dict(log), ensure_ascii=False, separators=(",", ":"))
