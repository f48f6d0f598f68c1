"""Tests for the mesocycle phase state machine and set scaling."""

from datetime import date

import pytest

from fitcube_analytics.core.mesocycle import (
    advance_phase,
    check_mesocycle_events,
    create_initial_mesocycle_state,
    event_message,
    get_phase_multiplier,
    get_program_for_current_phase,
    scale_sets,
)
from fitcube_analytics.core.models import Exercise, MesocycleState, TrainingProgram, WorkoutSession


def _program(*set_counts: int) -> TrainingProgram:
    exercises = tuple(
        Exercise(name=f"Exercise {i}", sets=n, reps="8-10", rest=90, weight=50.0)
        for i, n in enumerate(set_counts)
    )
    return TrainingProgram(sessions=(WorkoutSession(name="A", exercises=exercises),))


def _state(phase: str) -> MesocycleState:
    return MesocycleState(phase=phase, volume_multiplier=get_phase_multiplier(phase), mesocycle_id="m1")


class TestStateMachine:
    def test_initial_state(self):
        state = create_initial_mesocycle_state(start=date(2026, 10, 18))
        assert state.phase == "intro"
        assert state.volume_multiplier == 0.7
        assert state.week_number == 1
        assert state.mesocycle_id == "meso_20261018"

    def test_explicit_id(self):
        assert create_initial_mesocycle_state("block-3").mesocycle_id == "block-3"

    def test_full_cycle(self):
        state = create_initial_mesocycle_state("m1")
        seen = []
        for _ in range(5):
            state = advance_phase(state)
            seen.append((state.phase, state.volume_multiplier))
        assert seen == [
            ("accumulation", 1.0),
            ("intensification", 1.2),
            ("deload", 0.6),
            ("accumulation", 1.0),
            ("intensification", 1.2),
        ]
        assert state.week_number == 6
        assert state.mesocycle_id == "m1"

    def test_advance_returns_new_state(self):
        old = _state("intro")
        new = advance_phase(old)
        assert old.phase == "intro"
        assert new is not old

    def test_invalid_phase_rejected(self):
        with pytest.raises(ValueError):
            get_phase_multiplier("bulking")
        with pytest.raises(ValueError):
            MesocycleState(phase="bulking", volume_multiplier=1.0)  # type: ignore[arg-type]


class TestSetScaling:
    @pytest.mark.parametrize(
        "phase,expected",
        [("intro", 2), ("accumulation", 3), ("intensification", 4), ("deload", 2)],
    )
    def test_three_sets_per_phase(self, phase, expected):
        prog = get_program_for_current_phase(_program(3), _state(phase))
        assert prog.sessions[0].exercises[0].sets == expected

    def test_floor_of_one(self):
        assert scale_sets(1, 0.3) == 1
        assert scale_sets(0, 0.6) == 1

    @pytest.mark.parametrize("multiplier", [-1.0, 0.0, float("inf"), float("-inf"), float("nan")])
    def test_degenerate_multiplier_yields_floor(self, multiplier):
        assert scale_sets(4, multiplier) == 1

    def test_large_multiplier_scales(self):
        assert scale_sets(3, 1e6) == 3_000_000

    @pytest.mark.parametrize("multiplier", [float("inf"), float("nan"), -0.5])
    def test_state_rejects_invalid_multiplier(self, multiplier):
        with pytest.raises(ValueError):
            MesocycleState(phase="intro", volume_multiplier=multiplier)

    def test_other_fields_pass_through(self):
        base = _program(4)
        ex = get_program_for_current_phase(base, _state("deload")).sessions[0].exercises[0]
        orig = base.sessions[0].exercises[0]
        assert (ex.name, ex.reps, ex.rest, ex.weight) == (orig.name, orig.reps, orig.rest, orig.weight)

    def test_template_untouched_and_copy_returned(self):
        base = _program(3, 5)
        scaled = get_program_for_current_phase(base, _state("accumulation"))
        assert scaled is not base
        assert scaled == base
        get_program_for_current_phase(base, _state("intensification"))
        assert [e.sets for e in base.sessions[0].exercises] == [3, 5]


class TestEvents:
    def test_no_previous_state(self):
        assert check_mesocycle_events(None, _state("intro")) == []

    def test_phase_change_to_deload(self):
        events = check_mesocycle_events(_state("intensification"), advance_phase(_state("intensification")))
        assert [e["type"] for e in events] == ["phase_change", "deload_start"]
        assert events[0]["new_phase"] == "deload"

    def test_new_mesocycle(self):
        old = _state("deload")
        new = create_initial_mesocycle_state("m2")
        (event,) = check_mesocycle_events(old, new)
        assert event["type"] == "new_mesocycle"
        assert event_message(event)

    def test_same_state_no_events(self):
        assert check_mesocycle_events(_state("accumulation"), _state("accumulation")) == []
