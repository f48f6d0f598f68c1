"""
Smoke tests for the fitcube CLI.

Each test builds a throwaway data directory with profile.json,
program.json and history.jsonl, then drives the Typer app.
"""

import json

import pytest
from typer.testing import CliRunner

from fitcube_analytics.cli.main import app
from fitcube_analytics.core.capabilities import VOLUME_HEADER

runner = CliRunner()

PROFILE = {"gender": "male", "age": 30, "weight": 80, "experience": "intermediate"}

PROGRAM = {
    "sessions": [
        {
            "name": "Push",
            "exercises": [
                {"name": "Bench Press", "sets": 3, "reps": "6-8", "rest": 180, "weight": 70},
                {"name": "Overhead Press", "sets": 3, "reps": "8", "rest": 120, "weight": 40},
            ],
        },
        {
            "name": "Legs",
            "exercises": [{"name": "Squat", "sets": 4, "reps": "5", "rest": 180, "weight": 100}],
        },
    ]
}


def _log(day: str, name: str, weight: float, reps: int, n_sets: int = 3) -> dict:
    return {
        "date": day,
        "completedExercises": [
            {
                "name": name,
                "sets": n_sets,
                "completedSets": [{"weight": weight, "reps": reps, "isCompleted": True}] * n_sets,
            }
        ],
    }


@pytest.fixture
def data_dir(tmp_path):
    """Data directory with a profile, a program and a short history."""
    (tmp_path / "profile.json").write_text(json.dumps(PROFILE), encoding="utf-8")
    (tmp_path / "program.json").write_text(json.dumps(PROGRAM), encoding="utf-8")
    logs = [
        _log("2026-02-02", "Bench Press", 80, 8),
        _log("2026-02-04", "Squat", 100, 5),
        _log("2026-02-06", "Bench Press", 70, 6),
    ]
    (tmp_path / "history.jsonl").write_text(
        "".join(json.dumps(log) + "\n" for log in logs), encoding="utf-8"
    )
    return tmp_path


def _run(*args: str):
    return runner.invoke(app, list(args))


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        result = _run("--help")
        assert result.exit_code == 0
        assert "volume" in result.output

    def test_volume_json(self, data_dir):
        result = _run("volume", "--data-dir", str(data_dir), "--json")
        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        chest = next(m for m in report["muscles"] if m["muscle_id"] == "chest")
        assert chest["direct_sets"] == 6
        assert report["recommendations"][0].startswith("Добавь больше работы на:")

    def test_volume_table(self, data_dir):
        result = _run("volume", "--data-dir", str(data_dir))
        assert result.exit_code == 0, result.output
        assert "Overall" in result.output
        assert "Добавь больше работы" in result.output

    def test_volume_history_weeks(self, data_dir):
        result = _run("volume", "--data-dir", str(data_dir), "--weeks", "2", "--json")
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)) == 2

    def test_missing_profile_fails(self, tmp_path):
        result = _run("volume", "--data-dir", str(tmp_path))
        assert result.exit_code == 1
        assert "Profile not found" in result.output

    def test_strength_json(self, data_dir):
        result = _run("strength", "--data-dir", str(data_dir), "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        lifts = {s["exercise_name"]: s for s in data["strength_analysis"]}
        assert lifts["bench"]["e1rm"] == 101
        assert "squat" in lifts

    def test_snapshot_ai(self, data_dir):
        result = _run("snapshot", "--data-dir", str(data_dir), "--ai")
        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[0] == VOLUME_HEADER

    def test_snapshot_json(self, data_dir):
        result = _run("snapshot", "--data-dir", str(data_dir), "--json")
        assert result.exit_code == 0, result.output
        snap = json.loads(result.output)
        assert snap["best_lifts"]["bench press"]["weight"] == 80
        assert snap["has_insufficient_data"] is False
        assert snap["synced_program"]["sessions"][0]["exercises"][0]["weight"] == 70

    def test_snapshot_table(self, data_dir):
        result = _run("snapshot", "--data-dir", str(data_dir))
        assert result.exit_code == 0, result.output

    def test_suggest_weight(self, data_dir):
        result = _run("suggest-weight", "Bench Press", "--data-dir", str(data_dir), "--json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["suggested_weight"] == 80

    def test_suggest_weight_unknown(self, data_dir):
        result = _run("suggest-weight", "Deadlift", "--data-dir", str(data_dir))
        assert result.exit_code == 0
        assert "No recorded sets" in result.output

    def test_bad_history_line(self, data_dir):
        with open(data_dir / "history.jsonl", "a", encoding="utf-8") as f:
            f.write("{broken\n")
        result = _run("snapshot", "--data-dir", str(data_dir))
        assert result.exit_code == 1
        assert "line 4" in result.output

    def test_non_numeric_duration(self, data_dir):
        with open(data_dir / "history.jsonl", "a", encoding="utf-8") as f:
            f.write(json.dumps({"date": "2026-02-08", "duration": "an hour"}) + "\n")
        result = _run("volume", "--data-dir", str(data_dir))
        assert result.exit_code == 1
        assert "Error" in result.output
        assert "line 4" in result.output


class TestPhaseCommands:
    def test_show_without_mesocycle(self, data_dir):
        result = _run("phase", "show", "--data-dir", str(data_dir))
        assert result.exit_code == 1

    def test_init_and_scaled_program(self, data_dir):
        result = _run("phase", "init", "--data-dir", str(data_dir), "--id", "m1")
        assert result.exit_code == 0, result.output
        assert (data_dir / "mesocycle.json").exists()

        result = _run("program", "--data-dir", str(data_dir), "--phase", "--json")
        assert result.exit_code == 0, result.output
        program = json.loads(result.output)
        # intro: 3 × 0.7 → 2, 4 × 0.7 → 3
        assert program["sessions"][0]["exercises"][0]["sets"] == 2
        assert program["sessions"][1]["exercises"][0]["sets"] == 3

    def test_advance_cycle(self, data_dir):
        _run("phase", "init", "--data-dir", str(data_dir), "--id", "m1")
        for _ in range(4):
            result = _run("phase", "advance", "--data-dir", str(data_dir))
            assert result.exit_code == 0, result.output

        result = _run("phase", "show", "--data-dir", str(data_dir), "--json")
        state = json.loads(result.output)
        assert state["phase"] == "accumulation"
        assert state["week_number"] == 5

    def test_advance_without_mesocycle(self, data_dir):
        assert _run("phase", "advance", "--data-dir", str(data_dir)).exit_code == 1

    def test_program_sync(self, data_dir):
        result = _run("program", "--data-dir", str(data_dir), "--sync", "--json")
        assert result.exit_code == 0, result.output
        program = json.loads(result.output)
        assert program["sessions"][0]["exercises"][0]["weight"] == 70


class TestReadinessCommand:
    def test_low_recovery(self, data_dir):
        result = _run(
            "readiness", "Push", "--data-dir", str(data_dir),
            "--sleep-hours", "4.5", "--recovery", "70", "--json",
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["adaptation"]["reason"] == "low_recovery"
        bench = data["adapted_session"]["exercises"][0]
        # 70 × 0.85 = 59.5 → 60
        assert (bench["sets"], bench["weight"]) == (2, 60.0)

    def test_table_output(self, data_dir):
        result = _run(
            "readiness", "push", "--data-dir", str(data_dir),
            "--sleep-hours", "8", "--sleep-score", "5", "--recovery", "90",
        )
        assert result.exit_code == 0, result.output
        assert "Readiness" in result.output

    def test_unknown_session(self, data_dir):
        result = _run(
            "readiness", "Pull", "--data-dir", str(data_dir),
            "--sleep-hours", "8", "--recovery", "90",
        )
        assert result.exit_code == 1
        assert "Session not found" in result.output


def _feedback_log(day: str, **feedback) -> dict:
    log = _log(day, "Bench Press", 70, 8)
    log["feedback"] = {"completion": "completed", "pain": {"hasPain": False}, **feedback}
    return log


class TestAutoregulateCommand:
    def _write_history(self, data_dir, *logs: dict) -> None:
        (data_dir / "history.jsonl").write_text(
            "".join(json.dumps(log) + "\n" for log in logs), encoding="utf-8"
        )

    def test_low_pump_adds_sets(self, data_dir):
        self._write_history(data_dir, *(_feedback_log(f"2026-02-0{d}", pumpQuality=1) for d in (2, 4, 6)))
        result = _run("autoregulate", "--data-dir", str(data_dir), "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["analysis"]["overall_status"] == "under_stimulated"
        assert data["recommendation"]["volume_adjustment"]["type"] == "increase"
        assert data["program"]["sessions"][1]["exercises"][0]["sets"] == 5
        assert json.loads((data_dir / "program.json").read_text(encoding="utf-8")) == PROGRAM

    def test_save_writes_program(self, data_dir):
        self._write_history(
            data_dir, *(_feedback_log(f"2026-02-0{d}", performanceTrend="declining") for d in (2, 4, 6))
        )
        result = _run("autoregulate", "--data-dir", str(data_dir), "--save")
        assert result.exit_code == 0, result.output
        assert "Autoregulation" in result.output
        saved = json.loads((data_dir / "program.json").read_text(encoding="utf-8"))
        squat = saved["sessions"][1]["exercises"][0]
        assert (squat["sets"], squat["weight"]) == (3, 95)

    def test_no_feedback_keeps_program(self, data_dir):
        result = _run("autoregulate", "--data-dir", str(data_dir))
        assert result.exit_code == 0, result.output
        assert "maintain" in result.output
        assert json.loads((data_dir / "program.json").read_text(encoding="utf-8")) == PROGRAM
