"""Tests for the capability snapshot aggregator and its consumers."""

import pytest

from fitcube_analytics.core.capabilities import (
    VOLUME_HEADER,
    create_capabilities_snapshot,
    format_capabilities_for_ai,
    get_suggested_weight,
    needs_program_adjustment,
)
from fitcube_analytics.core.models import (
    CompletedExercise,
    CompletedSet,
    Exercise,
    OnboardingProfile,
    PainReport,
    TrainingProgram,
    WorkoutFeedback,
    WorkoutLog,
    WorkoutSession,
)
from fitcube_analytics.core.weight_sync import extract_latest_weights, sync_weights_from_logs

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _profile(**kwargs) -> OnboardingProfile:
    defaults = dict(gender="male", age=30, weight=80.0, experience="intermediate")
    defaults.update(kwargs)
    return OnboardingProfile(**defaults)


def _program(*names: str, weight: float | None = 60.0) -> TrainingProgram:
    exercises = tuple(Exercise(name=n, sets=3, reps="8", rest=120, weight=weight) for n in names)
    return TrainingProgram(sessions=(WorkoutSession(name="A", exercises=exercises),))


def _log(day: str, name: str, weight: float, reps: int, n_sets: int = 3, pain: str | None = None) -> WorkoutLog:
    ex = CompletedExercise(
        name=name,
        sets=n_sets,
        completed_sets=[CompletedSet(weight=weight, reps=reps) for _ in range(n_sets)],
    )
    feedback = WorkoutFeedback(pain=PainReport(has_pain=pain is not None, location=pain))
    return WorkoutLog(date=day, completed_exercises=[ex], feedback=feedback)


class TestSnapshot:
    def test_recent_window_bounded_but_strength_uses_full_history(self):
        # Heaviest squat is the oldest log, outside the 6-log window
        logs = [_log("2026-01-01", "Squat", 140, 5)]
        logs += [_log(f"2026-02-{d:02d}", "Bench Press", 60, 8) for d in range(1, 9)]
        snap = create_capabilities_snapshot(_profile(), _program("Squat", "Bench Press"), logs)

        assert len(snap.recent_logs) == 6
        assert all(log.date.startswith("2026-02") for log in snap.recent_logs)
        assert snap.volume_report.get("quads").total_sets == 0
        assert snap.volume_report.get("chest").direct_sets == 18
        assert "squat" in {s.exercise_name for s in snap.strength_analysis}
        assert snap.best_lifts["squat"].weight == 140
        assert not snap.has_insufficient_data

    def test_window_uses_latest_dates_regardless_of_input_order(self):
        logs = [_log(f"2026-02-{d:02d}", "Bench Press", 60, 8) for d in range(8, 0, -1)]
        snap = create_capabilities_snapshot(_profile(), _program("Bench Press"), logs)
        assert [log.date for log in snap.recent_logs][0] == "2026-02-03"

    def test_insufficient_data(self):
        logs = [_log("2026-02-01", "Bench Press", 60, 8), _log("2026-02-03", "Bench Press", 60, 8)]
        snap = create_capabilities_snapshot(_profile(), _program("Bench Press"), logs)
        assert snap.has_insufficient_data

    def test_best_lifts_keyed_by_lowercase_program_name(self):
        logs = [_log("2026-02-01", "Bench Press", 80, 8)]
        snap = create_capabilities_snapshot(_profile(), _program("Bench Press", "Face Pull"), logs)
        assert set(snap.best_lifts) == {"bench press"}
        assert snap.best_lifts["bench press"].e1rm == 101

    def test_best_lifts_read_only(self):
        snap = create_capabilities_snapshot(_profile(), _program("Bench Press"), [])
        with pytest.raises(TypeError):
            snap.best_lifts["x"] = None  # type: ignore[index]

    def test_flags_mirror_volume_report(self):
        logs = [_log("2026-02-01", "Bench Press", 60, 8, n_sets=20)]
        snap = create_capabilities_snapshot(_profile(), _program("Bench Press"), logs)
        assert snap.needs_more_volume == snap.volume_report.undertrained_muscles
        assert "chest" in snap.has_overtraining

    def test_pain_concerns(self):
        logs = [_log(f"2026-02-0{d}", "Bench Press", 60, 8, pain="плечо") for d in (1, 3)]
        snap = create_capabilities_snapshot(_profile(), _program("Bench Press"), logs)
        assert snap.has_pain_concerns
        assert snap.pain_patterns[0].location == "плечо"

    def test_custom_weight_sync_collaborator(self):
        calls = []

        def fake_sync(program, logs):
            calls.append(len(logs))
            return program

        program = _program("Bench Press")
        snap = create_capabilities_snapshot(_profile(), program, [], weight_sync=fake_sync)
        assert calls == [0]
        assert snap.synced_program is program


class TestSuggestedWeight:
    def test_eighty_percent_of_e1rm(self):
        # e1rm 101 × 0.8 = 80.8 → 80
        snap = create_capabilities_snapshot(_profile(), _program("Bench Press"), [_log("2026-02-01", "Bench Press", 80, 8)])
        assert get_suggested_weight(snap, "Bench Press") == 80
        assert get_suggested_weight(snap, "bench press") == 80

    def test_unknown_exercise(self):
        snap = create_capabilities_snapshot(_profile(), _program("Bench Press"), [])
        assert get_suggested_weight(snap, "Bench Press") is None
        assert get_suggested_weight(snap, "Squat") is None

    def test_barbell_history_does_not_price_dumbbell_exercise(self):
        program = _program("Жим гантелей лежа")
        snap = create_capabilities_snapshot(_profile(), program, [_log("2026-02-01", "Жим штанги лежа", 100, 5)])
        assert get_suggested_weight(snap, "Жим гантелей лежа") is None


class TestAIFormat:
    def test_empty_snapshot_has_volume_header(self):
        snap = create_capabilities_snapshot(_profile(), TrainingProgram(), [])
        text = format_capabilities_for_ai(snap)
        assert text.splitlines()[0] == VOLUME_HEADER
        assert "СИЛОВЫЕ" not in text

    def test_section_order(self):
        logs = [_log(f"2026-02-0{d}", "Squat", 100, 5, pain="колено") for d in range(1, 5)]
        snap = create_capabilities_snapshot(_profile(), _program("Squat"), logs)
        text = format_capabilities_for_ai(snap)
        positions = [text.index(h) for h in ("АНАЛИЗ ОБЪЁМА", "СИЛОВЫЕ", "ЛУЧШИЕ", "ИСТОРИЯ БОЛИ")]
        assert positions == sorted(positions)
        assert "squat: 100кг x 5 (E1RM: 117кг)" in text

    def test_muscle_lines_capped(self):
        snap = create_capabilities_snapshot(_profile(), TrainingProgram(), [])
        text = format_capabilities_for_ai(snap)
        assert sum(1 for line in text.splitlines() if line.startswith("[")) == 8


class TestProgramAdjustment:
    def test_empty_history_needs_adjustment(self):
        snap = create_capabilities_snapshot(_profile(), TrainingProgram(), [])
        needs, reasons = needs_program_adjustment(snap)
        assert needs
        assert reasons


class TestWeightSync:
    def test_latest_log_wins(self):
        logs = [_log("2026-02-05", "Bench Press", 70, 8), _log("2026-02-01", "Bench Press", 90, 3)]
        assert extract_latest_weights(logs) == {"bench press": 70}

    def test_program_weights_updated(self):
        program = _program("Bench Press", "Squat", weight=50.0)
        synced = sync_weights_from_logs(program, [_log("2026-02-01", "Bench Press", 72.5, 8)])
        assert [e.weight for e in synced.sessions[0].exercises] == [72.5, 50.0]
        assert [e.weight for e in program.sessions[0].exercises] == [50.0, 50.0]
        assert synced is not program

    def test_fuzzy_match(self):
        program = _program("Жим штанги лежа", weight=None)
        synced = sync_weights_from_logs(program, [_log("2026-02-01", "Жим лежа", 60, 8)])
        assert synced.sessions[0].exercises[0].weight == 60
