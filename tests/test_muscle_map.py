"""Tests for exercise-name normalization and muscle resolution."""

import pytest

from fitcube_analytics.core.muscle_map import (
    MUSCLE_IDS,
    get_muscle_group,
    lift_name,
    names_match,
    normalize_exercise_name,
    resolve_muscles,
)


class TestNormalization:
    def test_warmup_prefix_and_equipment_stripped(self):
        assert normalize_exercise_name("Разминка: Жим штанги лежа") == "жим лежа"
        assert normalize_exercise_name("Warm-up: Squat with barbell") == "squat"

    def test_whitespace_collapsed(self):
        assert normalize_exercise_name("  Bench    Press ") == "bench press"

    def test_lift_name_keeps_equipment_words(self):
        assert lift_name("Разминка: Жим гантелей лежа") == "жим гантелей лежа"
        assert lift_name("Жим лежа со штангой") == "жим лежа"
        assert lift_name("Тяга верхнего блока в кроссовере") == "тяга верхнего блока"
        assert lift_name("  Bench   Press ") == "bench press"

    def test_names_match(self):
        assert names_match("Bench Press", "bench press")
        assert names_match("Incline Bench Press", "Bench Press")
        assert names_match("Жим штанги лежа", "Жим лежа")
        assert not names_match("Squat", "Bench Press")
        assert not names_match("", "Squat")


class TestResolution:
    @pytest.mark.parametrize(
        "name,primary",
        [
            ("Bench Press", "chest"),
            ("Жим лёжа", "chest"),
            ("Back Squat", "quads"),
            ("Приседания", "quads"),
            ("Leg Press", "quads"),
            ("Жим ногами", "quads"),
            ("Romanian Deadlift", "hamstrings"),
            ("Overhead Press", "shoulders"),
            ("Армейский жим", "shoulders"),
            ("Lat Pulldown", "back"),
            ("Подтягивания", "back"),
            ("Barbell Row", "back"),
            ("Face Pull", "rear_delts"),
            ("Hammer Curl", "biceps"),
            ("Triceps Pushdown", "triceps"),
            ("Calf Raise", "calves"),
            ("Plank", "core"),
        ],
    )
    def test_primary_muscle(self, name, primary):
        credit = resolve_muscles(name)
        assert credit is not None
        assert credit.primary == primary

    def test_leg_press_not_chest(self):
        credit = resolve_muscles("Leg Press")
        assert credit is not None
        assert "chest" not in credit.secondary

    def test_credits(self):
        credit = resolve_muscles("Bench Press")
        assert credit is not None
        assert credit.credits() == [("chest", 1.0), ("triceps", 0.5), ("shoulders", 0.5)]

    def test_unknown_returns_none(self):
        assert resolve_muscles("Zumba") is None

    def test_all_credited_muscles_are_known(self):
        for name in ("Deadlift", "Hip Thrust", "Dips", "Pullover", "Hyperextension"):
            credit = resolve_muscles(name)
            assert credit is not None
            assert all(m in MUSCLE_IDS for m, _ in credit.credits())

    def test_muscle_group_lookup(self):
        assert get_muscle_group("chest").name_ru == "Грудные мышцы"
        assert get_muscle_group("wings") is None
