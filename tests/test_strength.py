"""
Tests for E1RM, best lifts, strength levels, imbalances, pain and plateaus.

Values are hand-computed from the Epley formula and the standards table.
"""

from datetime import date

import pytest

from fitcube_analytics.core.models import (
    CompletedExercise,
    CompletedSet,
    PainReport,
    StrengthAnalysis,
    WorkoutFeedback,
    WorkoutLog,
)
from fitcube_analytics.core.strength import (
    STRENGTH_STANDARDS,
    analyze_pain_patterns,
    analyze_strength,
    calculate_e1rm,
    calculate_overall_level,
    calculate_percentile,
    detect_imbalances,
    detect_plateaus,
    find_standard_for_exercise,
    get_best_lift_for_exercise,
    get_best_lifts,
    get_strength_level,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _sets(*pairs: tuple[float, int]) -> list[CompletedSet]:
    return [CompletedSet(weight=w, reps=r) for w, r in pairs]


def _exercise(name: str, *pairs: tuple[float, int], warmup: bool = False) -> CompletedExercise:
    return CompletedExercise(name=name, sets=len(pairs), completed_sets=_sets(*pairs), is_warmup=warmup)


def _log(day: str, *exercises: CompletedExercise, pain: str | None = None) -> WorkoutLog:
    feedback = WorkoutFeedback(pain=PainReport(has_pain=pain is not None, location=pain))
    return WorkoutLog(date=day, completed_exercises=list(exercises), feedback=feedback)


def _analysis(name: str, e1rm: float) -> StrengthAnalysis:
    return StrengthAnalysis(
        exercise_name=name,
        exercise_name_ru=name,
        e1rm=e1rm,
        relative_strength=round(e1rm / 80, 2),
        level="intermediate",
        percentile=50,
        next_level_target=e1rm + 10,
        trend="stable",
    )


def _standard(name: str):
    return next(s for s in STRENGTH_STANDARDS if s.exercise == name)


# ---------------------------------------------------------------------------
# E1RM
# ---------------------------------------------------------------------------


class TestE1RM:
    def test_epley_multi_rep(self):
        # 80 × (1 + 8/30) = 101.33 → 101
        assert calculate_e1rm(80, 8) == 101

    def test_single_is_its_own_max(self):
        assert calculate_e1rm(100, 1) == 100
        assert calculate_e1rm(102.5, 1) == 102.5

    @pytest.mark.parametrize("weight,reps", [(0, 5), (-10, 5), (100, 0), (100, -1)])
    def test_non_positive_inputs(self, weight, reps):
        assert calculate_e1rm(weight, reps) == 0


# ---------------------------------------------------------------------------
# Best lift lookup
# ---------------------------------------------------------------------------


class TestBestLift:
    def test_highest_e1rm_wins(self):
        logs = [
            _log("2026-02-10", _exercise("Bench Press", (65, 8))),  # 82
            _log("2026-02-12", _exercise("Bench Press", (70, 6))),  # 84
        ]
        best = get_best_lift_for_exercise("Bench Press", logs)
        assert best is not None
        assert (best.weight, best.reps, best.e1rm, best.date) == (70, 6, 84, "2026-02-12")

    def test_case_insensitive_substring_match(self):
        logs = [_log("2026-02-10", _exercise("Incline Bench Press", (60, 10)))]
        best = get_best_lift_for_exercise("bench press", logs)
        assert best is not None
        assert best.e1rm == 80

    def test_warmup_excluded(self):
        logs = [
            _log("2026-02-10", _exercise("Bench Press", (120, 5), warmup=True), _exercise("Bench Press", (60, 5))),
        ]
        best = get_best_lift_for_exercise("Bench Press", logs)
        assert best is not None
        assert best.weight == 60

    def test_malformed_sets_skipped(self):
        ex = CompletedExercise(
            name="Squat",
            completed_sets=[CompletedSet(weight=None, reps=5), CompletedSet(weight=100, reps=None),
                            CompletedSet(weight=90, reps=3)],
        )
        best = get_best_lift_for_exercise("Squat", [_log("2026-02-10", ex)])
        assert best is not None
        assert best.weight == 90

    def test_no_match_returns_none(self):
        logs = [_log("2026-02-10", _exercise("Squat", (100, 5)))]
        assert get_best_lift_for_exercise("Deadlift", logs) is None
        assert get_best_lift_for_exercise("Squat", []) is None

    def test_tie_prefers_heavier_weight(self):
        # 100×1 = 100, 75×10 = 100
        logs = [_log("2026-02-10", _exercise("Squat", (75, 10), (100, 1)))]
        best = get_best_lift_for_exercise("Squat", logs)
        assert best is not None
        assert best.weight == 100

    def test_identical_set_prefers_later_date(self):
        logs = [
            _log("2026-02-14", _exercise("Squat", (100, 5))),
            _log("2026-02-10", _exercise("Squat", (100, 5))),
        ]
        best = get_best_lift_for_exercise("Squat", logs)
        assert best is not None
        assert best.date == "2026-02-14"

    def test_incomplete_sets_ignored(self):
        ex = CompletedExercise(
            name="Squat",
            completed_sets=[CompletedSet(weight=140, reps=5, is_completed=False), CompletedSet(weight=100, reps=5)],
        )
        best = get_best_lift_for_exercise("Squat", [_log("2026-02-10", ex)])
        assert best is not None
        assert best.weight == 100

    def test_dumbbell_and_barbell_are_different_lifts(self):
        logs = [_log("2026-02-10", _exercise("Жим штанги лежа", (100, 5)))]
        assert get_best_lift_for_exercise("Жим гантелей лежа", logs) is None
        assert get_best_lift_for_exercise("Жим штанги лежа", logs) is not None

    def test_setup_phrase_ignored(self):
        logs = [_log("2026-02-10", _exercise("Жим лежа со штангой", (100, 5)))]
        best = get_best_lift_for_exercise("Жим лежа", logs)
        assert best is not None
        assert best.weight == 100
        assert get_best_lift_for_exercise("Разминка: Жим лежа", logs) is not None


# ---------------------------------------------------------------------------
# Strength levels
# ---------------------------------------------------------------------------


class TestStrengthLevels:
    def test_standard_lookup(self):
        assert find_standard_for_exercise("Back Squat").exercise == "squat"
        assert find_standard_for_exercise("Жим лёжа").exercise == "bench"
        assert find_standard_for_exercise("Barbell Row").exercise == "row"
        assert find_standard_for_exercise("Lateral Raise") is None

    def test_level_boundaries(self):
        squat = _standard("squat")
        assert get_strength_level(0.5, squat, "male") == "untrained"
        assert get_strength_level(1.25, squat, "male") == "beginner"
        assert get_strength_level(1.75, squat, "male") == "intermediate"
        assert get_strength_level(2.6, squat, "male") == "elite"
        assert get_strength_level(1.0, squat, "female") == "intermediate"

    def test_percentile_clamped(self):
        squat = _standard("squat")
        assert calculate_percentile(0.1, squat, "male") == 0
        assert calculate_percentile(1.75, squat, "male") == 50
        assert calculate_percentile(3.0, squat, "male") == 100

    def test_analyze_strength(self):
        # 120 × (1 + 5/30) = 140; 140 / 80 = 1.75
        logs = [_log("2026-02-10", _exercise("Squat", (120, 5)))]
        (squat,) = analyze_strength(logs, 80, "male")
        assert squat.exercise_name == "squat"
        assert squat.e1rm == 140
        assert squat.relative_strength == 1.75
        assert squat.level == "intermediate"
        assert squat.percentile == 50
        assert squat.next_level_target == 160

    def test_unknown_bodyweight_uses_default(self):
        logs = [_log("2026-02-10", _exercise("Squat", (140, 1)))]
        (squat,) = analyze_strength(logs, 0, "male")
        assert squat.relative_strength == 2.0

    def test_trend_improving(self):
        logs = [
            _log(f"2026-02-{day:02d}", _exercise("Bench Press", (w, 5)))
            for day, w in zip(range(1, 13, 2), (60, 60, 62.5, 70, 72.5, 75))
        ]
        assert get_best_lifts(logs)["bench"]["trend"] == "improving"

    def test_trend_needs_enough_points(self):
        logs = [_log("2026-02-01", _exercise("Bench Press", (60, 5))),
                _log("2026-02-03", _exercise("Bench Press", (80, 5)))]
        assert get_best_lifts(logs)["bench"]["trend"] == "stable"

    def test_overall_level(self):
        assert calculate_overall_level([]) == "untrained"


# ---------------------------------------------------------------------------
# Imbalances
# ---------------------------------------------------------------------------


class TestImbalances:
    def test_balanced_pair_not_reported(self):
        assert detect_imbalances([_analysis("squat", 133), _analysis("bench", 100)]) == []

    def test_severe_upper_lower(self):
        (imb,) = detect_imbalances([_analysis("squat", 100), _analysis("bench", 50)])
        assert imb.type == "upper_lower"
        assert imb.severity == "severe"
        assert imb.ratio == 2.0
        assert imb.ideal_ratio == 1.33

    def test_moderate_push_pull(self):
        # 75 / 100 = 0.75 → deviation 0.25 from 1.0
        reports = detect_imbalances([_analysis("row", 75), _analysis("bench", 100)])
        push_pull = [r for r in reports if r.type == "push_pull"]
        assert len(push_pull) == 1
        assert push_pull[0].severity == "moderate"
        assert push_pull[0].related_exercises

    def test_missing_lift_skips_rule(self):
        assert detect_imbalances([_analysis("squat", 100)]) == []


# ---------------------------------------------------------------------------
# Pain patterns and plateaus
# ---------------------------------------------------------------------------


class TestPainPatterns:
    def test_recurring_location_reported(self):
        logs = [
            _log("2026-02-01", _exercise("Bench Press", (60, 5)), pain="Плечо"),
            _log("2026-02-03", _exercise("Overhead Press", (40, 5)), _exercise("Bench Press", (60, 5)), pain="плечо "),
            _log("2026-02-05", _exercise("Squat", (80, 5)), pain="колено"),
        ]
        (pattern,) = analyze_pain_patterns(logs)
        assert pattern.location == "плечо"
        assert pattern.frequency == 2
        assert pattern.last_occurrence == "2026-02-03"
        assert pattern.associated_exercises[0] == "Bench Press"
        assert pattern.movement_pattern == "жимовые"

    def test_no_pain(self):
        assert analyze_pain_patterns([_log("2026-02-01", _exercise("Squat", (80, 5)))]) == []

    def test_sorted_by_frequency(self):
        logs = [_log(f"2026-02-{d:02d}", pain="knee") for d in range(1, 4)]
        logs += [_log(f"2026-02-{d:02d}", pain="back") for d in range(10, 12)]
        assert [p.location for p in analyze_pain_patterns(logs)] == ["knee", "back"]


class TestPlateaus:
    def test_old_record_is_plateau(self):
        logs = [
            _log("2026-01-05", _exercise("Squat", (100, 5))),
            _log("2026-01-12", _exercise("Squat", (95, 5))),
            _log("2026-01-19", _exercise("Squat", (95, 5))),
            _log("2026-01-26", _exercise("Squat", (90, 5))),
        ]
        (plateau,) = detect_plateaus(logs, today=date(2026, 2, 2))
        assert plateau.exercise_name == "Squat"
        assert plateau.last_pr == "2026-01-05"
        assert plateau.weeks_stuck == 4

    def test_recent_record_not_plateau(self):
        logs = [_log(f"2026-01-{d:02d}", _exercise("Squat", (100 + d, 5))) for d in (5, 12, 19, 26)]
        assert detect_plateaus(logs, today=date(2026, 2, 2)) == []
