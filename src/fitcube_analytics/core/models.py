"""
Data models for fitcube-analytics.

Input contracts (profile, workout logs, program, readiness) and the
read-models the engines produce.  Program and report types are frozen:
engines always return derived copies and never mutate what they were given.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Literal, Mapping

Gender = Literal["male", "female"]
ExperienceLevel = Literal["beginner", "intermediate", "advanced"]
Phase = Literal["intro", "accumulation", "intensification", "deload"]
VolumeStatus = Literal["under", "optimal", "over"]
OverallVolumeStatus = Literal["needs_more", "optimal", "too_much", "mixed"]
StrengthLevel = Literal["untrained", "beginner", "intermediate", "advanced", "elite"]
Trend = Literal["improving", "stable", "declining"]
Severity = Literal["mild", "moderate", "severe"]
InsightType = Literal["warning", "caution", "good", "excellent"]
AdaptationReason = Literal["low_recovery", "moderate_recovery", "good_recovery"]
RecoveryStatus = Literal["under_recovered", "optimal", "under_stimulated"]
AdjustmentType = Literal["increase", "decrease", "maintain"]


def _validate_date(date_str: str) -> None:
    """Validate date string is ISO format YYYY-MM-DD."""
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError(f"Invalid date: {date_str}") from e


# =============================================================================
# PROFILE
# =============================================================================


@dataclass
class OnboardingProfile:
    """
    User profile captured during onboarding.

    ``weight`` is bodyweight in kg; 0 means unknown (analysis then assumes
    DEFAULT_BODYWEIGHT_KG).
    """

    gender: Gender
    age: int
    weight: float
    experience: ExperienceLevel = "intermediate"
    height: float | None = None
    goals: list[str] = field(default_factory=list)
    days_per_week: int = 3
    has_injuries: bool = False
    injuries: str = ""

    def __post_init__(self) -> None:
        """Validate profile data."""
        if self.gender not in ("male", "female"):
            raise ValueError(f"Invalid gender: {self.gender}")
        if self.experience not in ("beginner", "intermediate", "advanced"):
            raise ValueError(f"Invalid experience: {self.experience}")
        if self.age <= 0:
            raise ValueError("age must be positive")
        if self.weight < 0:
            raise ValueError("weight must be non-negative")
        if not 1 <= self.days_per_week <= 7:
            raise ValueError("days_per_week must be between 1 and 7")


# =============================================================================
# WORKOUT LOGS
# =============================================================================


@dataclass
class CompletedSet:
    """
    One performed set.

    weight/reps may be missing in imported data; such sets are skipped by
    strength analysis but still count as a hard set when completed.
    """

    weight: float | None
    reps: int | None
    is_completed: bool = True
    rir: int | None = None

    @property
    def is_measurable(self) -> bool:
        """True if the set has a positive weight and rep count."""
        return bool(self.weight and self.reps and self.weight > 0 and self.reps > 0)


@dataclass
class CompletedExercise:
    """An exercise as performed in a logged workout."""

    name: str
    exercise_type: str = "strength"
    sets: int = 0  # planned count
    reps: str = ""  # planned range, e.g. "8-12"
    completed_sets: list[CompletedSet] = field(default_factory=list)
    is_warmup: bool = False

    def working_sets(self) -> list[CompletedSet]:
        """Completed sets that count toward volume and strength."""
        if self.is_warmup:
            return []
        return [s for s in self.completed_sets if s.is_completed]


@dataclass
class PainReport:
    """Pain reported after a workout."""

    has_pain: bool = False
    location: str | None = None
    details: str | None = None


@dataclass(frozen=True)
class WellnessCheck:
    """
    Pre-workout self-assessment, each item 1-5 with higher meaning better.

    stress 5 is low stress; soreness 5 is fresh.
    """

    sleep: int
    food: int
    stress: int
    soreness: int

    def __post_init__(self) -> None:
        """Validate scale."""
        for name in ("sleep", "food", "stress", "soreness"):
            value = getattr(self, name)
            if not 1 <= value <= 5:
                raise ValueError(f"{name} must be 1-5, got {value}")


@dataclass
class WorkoutFeedback:
    """
    Post-workout feedback.

    pump_quality is 1 (no pump) to 5 (excellent); soreness_24h is 1 (none)
    to 5 (very sore), reported the day after.
    """

    completion: str | None = None
    pain: PainReport = field(default_factory=PainReport)
    pump_quality: int | None = None
    soreness_24h: int | None = None
    performance_trend: Trend | None = None
    wellness: WellnessCheck | None = None

    def __post_init__(self) -> None:
        """Validate ratings."""
        for name in ("pump_quality", "soreness_24h"):
            value = getattr(self, name)
            if value is not None and not 1 <= value <= 5:
                raise ValueError(f"{name} must be 1-5, got {value}")
        if self.performance_trend not in (None, "improving", "stable", "declining"):
            raise ValueError(f"Invalid performance_trend: {self.performance_trend}")


@dataclass
class WorkoutLog:
    """A completed workout."""

    date: str  # ISO format: YYYY-MM-DD
    completed_exercises: list[CompletedExercise] = field(default_factory=list)
    duration: int = 0  # minutes
    feedback: WorkoutFeedback = field(default_factory=WorkoutFeedback)
    session_id: str = ""

    def __post_init__(self) -> None:
        """Validate log data."""
        _validate_date(self.date)
        if self.duration < 0:
            raise ValueError("duration must be non-negative")


# =============================================================================
# PROGRAM
# =============================================================================


@dataclass(frozen=True)
class Exercise:
    """A prescribed exercise in a program session."""

    name: str
    sets: int
    reps: str
    rest: int  # seconds
    exercise_type: str = "strength"
    weight: float | None = None
    is_warmup: bool = False

    def __post_init__(self) -> None:
        """Validate prescription."""
        if self.sets < 0:
            raise ValueError("sets must be non-negative")
        if self.rest < 0:
            raise ValueError("rest must be non-negative")
        if self.weight is not None and self.weight < 0:
            raise ValueError("weight must be non-negative")


@dataclass(frozen=True)
class WorkoutSession:
    """A named training day, e.g. "Day 1 - Full Body A"."""

    name: str
    exercises: tuple[Exercise, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "exercises", tuple(self.exercises))


@dataclass(frozen=True)
class TrainingProgram:
    """Static program template."""

    sessions: tuple[WorkoutSession, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "sessions", tuple(self.sessions))

    def exercise_names(self) -> list[str]:
        """All exercise names in session order (duplicates kept)."""
        return [ex.name for s in self.sessions for ex in s.exercises]

    def find_session(self, name: str) -> WorkoutSession | None:
        """Return the session with this name (case-insensitive), or None."""
        wanted = name.strip().lower()
        for s in self.sessions:
            if s.name.lower() == wanted:
                return s
        return None


# =============================================================================
# MESOCYCLE
# =============================================================================


@dataclass(frozen=True)
class MesocycleState:
    """Current position in the training block."""

    phase: Phase
    volume_multiplier: float
    week_number: int = 1
    mesocycle_id: str = ""

    def __post_init__(self) -> None:
        """Validate state."""
        if self.phase not in ("intro", "accumulation", "intensification", "deload"):
            raise ValueError(f"Invalid phase: {self.phase}")
        if not math.isfinite(self.volume_multiplier) or self.volume_multiplier < 0:
            raise ValueError(f"volume_multiplier must be a finite non-negative number, got {self.volume_multiplier}")
        if self.week_number < 1:
            raise ValueError("week_number must be >= 1")


# =============================================================================
# READINESS
# =============================================================================


@dataclass(frozen=True)
class ReadinessData:
    """
    Daily readiness snapshot from a wearable or survey.

    sleep_score is subjective sleep quality 1-5; recovery_score is 0-100.
    """

    sleep_hours: float
    sleep_score: int
    recovery_score: int
    hrv: float | None = None
    resting_hr: int | None = None


# =============================================================================
# READ-MODELS
# =============================================================================


@dataclass(frozen=True)
class MuscleVolume:
    """Weekly volume for one muscle group."""

    muscle_id: str
    muscle_name_ru: str
    total_sets: float  # direct + weighted indirect
    direct_sets: int
    indirect_sets: float
    target_optimal: int
    percent_of_optimal: int
    status: VolumeStatus


@dataclass(frozen=True)
class WeeklyVolumeReport:
    """Per-muscle volume vs experience-scaled targets."""

    muscles: tuple[MuscleVolume, ...]
    undertrained_muscles: tuple[str, ...]
    overtrained_muscles: tuple[str, ...]
    overall_status: OverallVolumeStatus
    week_start: str | None = None
    recommendations: tuple[str, ...] = ()

    def get(self, muscle_id: str) -> MuscleVolume | None:
        """Return the entry for a muscle id, or None."""
        for m in self.muscles:
            if m.muscle_id == muscle_id:
                return m
        return None


@dataclass(frozen=True)
class BestLift:
    """Best recorded set for an exercise (by E1RM)."""

    weight: float
    reps: int
    e1rm: float
    date: str = ""


@dataclass(frozen=True)
class StrengthAnalysis:
    """Strength classification of one standard lift."""

    exercise_name: str
    exercise_name_ru: str
    e1rm: float
    relative_strength: float
    level: StrengthLevel
    percentile: int
    next_level_target: float
    trend: Trend


@dataclass(frozen=True)
class ImbalanceReport:
    """A lift pair whose E1RM ratio is outside its healthy band."""

    type: str
    description: str
    severity: Severity
    ratio: float
    ideal_ratio: float
    recommendation: str
    related_exercises: tuple[str, ...] = ()


@dataclass(frozen=True)
class PainPattern:
    """Recurring pain at one body location."""

    location: str
    frequency: int
    last_occurrence: str
    associated_exercises: tuple[str, ...]
    movement_pattern: str


@dataclass(frozen=True)
class Plateau:
    """An exercise without a new E1RM record for several weeks."""

    exercise_name: str
    weeks_stuck: int
    last_pr: str
    current_e1rm: float


@dataclass(frozen=True)
class Insight:
    """Human-readable readiness message."""

    type: InsightType
    title: str
    subtitle: str | None = None
    adaptations: tuple[str, ...] = ()


@dataclass(frozen=True)
class WorkoutAdaptation:
    """Day-of adjustment derived from readiness."""

    weight_multiplier: float
    sets_to_remove: int
    reason: AdaptationReason

    @property
    def is_identity(self) -> bool:
        return self.weight_multiplier == 1.0 and self.sets_to_remove == 0


@dataclass(frozen=True)
class AdaptedWorkoutResult:
    """Insight, adaptation and adapted session for one readiness snapshot."""

    original_session: WorkoutSession
    adapted_session: WorkoutSession
    insight: Insight
    adaptation: WorkoutAdaptation


@dataclass(frozen=True)
class RecoveryAnalysis:
    """Recovery signals from the last few workouts' feedback."""

    overall_status: RecoveryStatus
    avg_pump_quality: float
    avg_soreness: float
    performance_trend: Trend
    consecutive_low_pump: int
    consecutive_high_soreness: int
    pain_reported: bool
    pain_locations: tuple[str, ...] = ()


@dataclass(frozen=True)
class VolumeAdjustment:
    """Program-wide change: sets added per exercise and weight change in percent."""

    type: AdjustmentType
    sets_change: int
    weight_change_pct: float
    reason: str


@dataclass(frozen=True)
class AutoregulationRecommendation:
    volume_adjustment: VolumeAdjustment
    warnings: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class CapabilitySnapshot:
    """
    Consistent read-model of the user's training capabilities.

    Built per request by create_capabilities_snapshot(); never cached or
    shared.  ``recent_logs`` is the bounded window the volume report was
    computed from; strength fields reflect the full history.
    """

    profile: OnboardingProfile
    program: TrainingProgram
    recent_logs: tuple[WorkoutLog, ...]
    volume_report: WeeklyVolumeReport
    strength_analysis: tuple[StrengthAnalysis, ...]
    imbalances: tuple[ImbalanceReport, ...]
    pain_patterns: tuple[PainPattern, ...]
    best_lifts: Mapping[str, BestLift]
    synced_program: TrainingProgram
    has_insufficient_data: bool
    needs_more_volume: tuple[str, ...]
    has_overtraining: tuple[str, ...]
    has_pain_concerns: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "best_lifts", MappingProxyType(dict(self.best_lifts)))
