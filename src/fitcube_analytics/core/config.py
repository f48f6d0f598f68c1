"""
Configuration constants for the capability engine.

All adjustable parameters are centralized here for easy tuning.
Per-muscle volume targets and imbalance bands are policy tables: their
Python defaults live here and can be overridden from policy.yaml
(see core/engine/config_loader.py).
"""

import math
from typing import Final

# =============================================================================
# STRENGTH ESTIMATION (Epley)
# =============================================================================

EPLEY_REPS_DIVISOR: Final[float] = 30.0  # e1rm = w * (1 + reps / 30)
DEFAULT_BODYWEIGHT_KG: Final[float] = 70.0  # Used when the profile has no weight

# Relative-strength standards (E1RM / bodyweight) per lift and gender.
# Tiers are ordered; a lift reaches a tier when its ratio >= the threshold.
STRENGTH_LEVELS: Final[tuple[str, ...]] = (
    "untrained",
    "beginner",
    "intermediate",
    "advanced",
    "elite",
)

TREND_MIN_POINTS: Final[int] = 6  # Sessions needed before a trend is reported
TREND_CHANGE_THRESHOLD: Final[float] = 0.05  # 5% avg change = improving/declining

PLATEAU_WEEKS_THRESHOLD: Final[int] = 3  # Weeks since last PR
PLATEAU_MIN_SESSIONS: Final[int] = 4

# =============================================================================
# PAIN PATTERNS
# =============================================================================

PAIN_MIN_FREQUENCY: Final[int] = 2  # Location reported only if seen this often
PAIN_MAX_EXERCISES: Final[int] = 5  # Associated exercises listed per location

# =============================================================================
# VOLUME TRACKING
# =============================================================================

PRIMARY_MUSCLE_CREDIT: Final[float] = 1.0
SECONDARY_MUSCLE_CREDIT: Final[float] = 0.5

VOLUME_UNDER_RATIO: Final[float] = 0.70  # < 70% of optimal -> under
VOLUME_OVER_RATIO: Final[float] = 1.30  # > 130% of optimal -> over

DEFAULT_EXPERIENCE: Final[str] = "intermediate"
EXPERIENCE_LEVELS: Final[tuple[str, ...]] = ("beginner", "intermediate", "advanced")

# Optimal weekly hard sets per muscle and experience level
VOLUME_TARGETS: Final[dict[str, dict[str, int]]] = {
    "chest":      {"beginner": 10, "intermediate": 14, "advanced": 18},
    "back":       {"beginner": 12, "intermediate": 16, "advanced": 20},
    "shoulders":  {"beginner": 10, "intermediate": 14, "advanced": 16},
    "rear_delts": {"beginner": 6,  "intermediate": 10, "advanced": 12},
    "biceps":     {"beginner": 8,  "intermediate": 12, "advanced": 16},
    "triceps":    {"beginner": 8,  "intermediate": 12, "advanced": 16},
    "quads":      {"beginner": 10, "intermediate": 14, "advanced": 18},
    "hamstrings": {"beginner": 8,  "intermediate": 12, "advanced": 14},
    "glutes":     {"beginner": 8,  "intermediate": 12, "advanced": 14},
    "calves":     {"beginner": 8,  "intermediate": 12, "advanced": 16},
    "core":       {"beginner": 6,  "intermediate": 10, "advanced": 12},
    "forearms":   {"beginner": 4,  "intermediate": 8,  "advanced": 10},
}
DEFAULT_VOLUME_TARGET: Final[int] = 12

# Overall status thresholds
OVERALL_UNDER_COUNT: Final[int] = 3  # more than this many under -> needs_more
OVERALL_OVER_COUNT: Final[int] = 2  # more than this many over -> too_much
VOLUME_RECOMMENDATION_MUSCLES: Final[int] = 3  # undertrained muscles named in advice

# =============================================================================
# IMBALANCE DETECTION
# =============================================================================

# (numerator lift, denominator lift) -> ideal ratio and relative-deviation bands.
# A pair is reported once deviation exceeds "mild"; "moderate"/"severe" escalate.
IMBALANCE_RULES: Final[dict[str, dict[str, float | str]]] = {
    "upper_lower": {
        "numerator": "squat",
        "denominator": "bench",
        "ideal": 1.33,
        "mild": 0.15,
        "moderate": 0.25,
        "severe": 0.35,
    },
    "quad_hip": {
        "numerator": "deadlift",
        "denominator": "squat",
        "ideal": 1.2,
        "mild": 0.15,
        "moderate": 0.25,
        "severe": 0.35,
    },
    "push_pull": {
        "numerator": "row",
        "denominator": "bench",
        "ideal": 1.0,
        "mild": 0.10,
        "moderate": 0.20,
        "severe": 0.30,
    },
    "vertical_horizontal_press": {
        "numerator": "ohp",
        "denominator": "bench",
        "ideal": 0.67,
        "mild": 0.15,
        "moderate": 0.25,
        "severe": 0.35,
    },
}

# =============================================================================
# MESOCYCLE PHASES
# =============================================================================

VOLUME_MULTIPLIERS: Final[dict[str, float]] = {
    "intro": 0.7,
    "accumulation": 1.0,
    "intensification": 1.2,
    "deload": 0.6,
}

PHASE_SETS_FLOOR: Final[int] = 1  # Phase scaling never produces zero sets

# =============================================================================
# RECOVERY ADAPTATION
# =============================================================================

SLEEP_CRITICAL_HOURS: Final[float] = 5.0  # Below: low recovery regardless of score
SLEEP_GOOD_HOURS: Final[float] = 7.0
SLEEP_SCORE_GOOD: Final[int] = 4  # Subjective sleep quality 1-5

RECOVERY_LOW: Final[int] = 40  # Below: warning
RECOVERY_MODERATE: Final[int] = 65  # Below: caution / moderate adaptation
RECOVERY_EXCELLENT: Final[int] = 80  # Above: excellent

LOW_RECOVERY_WEIGHT_MULTIPLIER: Final[float] = 0.85  # -15%
LOW_RECOVERY_SETS_TO_REMOVE: Final[int] = 2
MODERATE_RECOVERY_WEIGHT_MULTIPLIER: Final[float] = 0.95  # -5%
MODERATE_RECOVERY_SETS_TO_REMOVE: Final[int] = 1

ADAPTED_SETS_FLOOR: Final[int] = 2  # Adapted sessions keep at least 2 sets
WEIGHT_ROUNDING_STEP_KG: Final[float] = 2.5  # Plate increment

# =============================================================================
# AUTOREGULATION (feedback-driven program adjustment)
# =============================================================================

AUTOREG_WINDOW: Final[int] = 3  # Most recent logs analysed
NEUTRAL_RATING: Final[float] = 3.0  # Stand-in for missing 1-5 ratings
LOW_PUMP_MAX: Final[int] = 2  # Pump at or below: under-stimulated
HIGH_SORENESS_MIN: Final[int] = 4  # Soreness at or above: under-recovered
HIGH_SORENESS_STREAK: Final[int] = 2
LOW_PUMP_STREAK_WARNING: Final[int] = 3

AUTOREG_SETS_MIN: Final[int] = 1
AUTOREG_SETS_MAX: Final[int] = 6
UNDER_RECOVERED_WEIGHT_CHANGE_PCT: Final[float] = -5.0
LOW_WELLNESS_WEIGHT_CHANGE_PCT: Final[float] = -10.0

# Wellness score weights (sum to 1.0)
WELLNESS_WEIGHTS: Final[dict[str, float]] = {
    "sleep": 0.35,
    "food": 0.20,
    "stress": 0.20,
    "soreness": 0.25,
}
LOW_WELLNESS_AVG: Final[float] = 2.5  # Window average below: cut intensity
VERY_LOW_WELLNESS: Final[float] = 2.0  # Latest score below: suggest light day
HIGH_WELLNESS_AVG: Final[float] = 4.0

# =============================================================================
# CAPABILITY SNAPSHOT
# =============================================================================

RECENT_LOGS_WINDOW: Final[int] = 6  # ~2 weeks of training
MIN_RECENT_LOGS: Final[int] = 3  # Fewer -> has_insufficient_data
SUGGESTED_WEIGHT_FRACTION: Final[float] = 0.80  # Working weight as fraction of E1RM

# AI prompt section caps (items per section)
AI_MAX_MUSCLES: Final[int] = 8
AI_MAX_STRENGTH: Final[int] = 5
AI_MAX_BEST_LIFTS: Final[int] = 8
AI_MAX_PAIN: Final[int] = 5
AI_MAX_PAIN_EXERCISES: Final[int] = 3
AI_MAX_IMBALANCES: Final[int] = 5

# Program adjustment triggers
ADJUST_UNDERTRAINED_COUNT: Final[int] = 2
ADJUST_IMBALANCE_COUNT: Final[int] = 2


def round_to_step(value: float, step: float = WEIGHT_ROUNDING_STEP_KG) -> float:
    """
    Round a weight to the nearest multiple of ``step``.

    Midpoints round up (e.g. 81.25 -> 82.5), unlike the built-in round().

    Args:
        value: Weight in kg
        step: Plate increment

    Returns:
        Nearest multiple of step
    """
    return round_half_up(value / step) * step


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))
