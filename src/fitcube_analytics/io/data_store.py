"""
File-based storage for profile, program, workout history and mesocycle state.

Layout of a data directory:
- profile.json    onboarding profile
- program.json    training program ({"sessions": [...]})
- history.jsonl   one workout log per line
- mesocycle.json  current mesocycle phase state
"""

import json
import logging
from pathlib import Path

from ..core.models import MesocycleState, OnboardingProfile, TrainingProgram, WorkoutLog
from .serializers import (
    ValidationError,
    dict_to_mesocycle_state,
    dict_to_profile,
    dict_to_program,
    dict_to_workout_log,
    mesocycle_state_to_dict,
    profile_to_dict,
    program_to_dict,
    workout_log_to_json_line,
)

logger = logging.getLogger(__name__)


class DataStore:
    """
    Reads and writes the training data files of one athlete.

    Load methods raise FileNotFoundError for a missing required file and
    ValidationError for malformed content; the mesocycle file is optional.
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir)
        self.profile_path = self.data_dir / "profile.json"
        self.program_path = self.data_dir / "program.json"
        self.history_path = self.data_dir / "history.jsonl"
        self.mesocycle_path = self.data_dir / "mesocycle.json"

    def exists(self) -> bool:
        """Check if the data directory holds a profile."""
        return self.profile_path.exists()

    def init(self) -> None:
        """Create the data directory and an empty history file."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self.history_path.exists():
            self.history_path.touch()

    def _read_json(self, path: Path, what: str) -> dict:
        if not path.exists():
            raise FileNotFoundError(f"{what} not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"Error parsing {path}: expected a JSON object")
        return data

    def _write_json(self, path: Path, data: dict) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    # -------------------------------------------------------------------------
    # Profile / program
    # -------------------------------------------------------------------------

    def load_profile(self) -> OnboardingProfile:
        """
        Load the onboarding profile.

        Raises:
            FileNotFoundError: If profile.json doesn't exist
            ValidationError: If the profile is invalid
        """
        return dict_to_profile(self._read_json(self.profile_path, "Profile"))

    def save_profile(self, profile: OnboardingProfile) -> None:
        self._write_json(self.profile_path, profile_to_dict(profile))

    def load_program(self) -> TrainingProgram:
        """
        Load the training program.

        A missing program file yields an empty program.
        """
        if not self.program_path.exists():
            logger.debug("No program file at %s", self.program_path)
            return TrainingProgram()
        return dict_to_program(self._read_json(self.program_path, "Program"))

    def save_program(self, program: TrainingProgram) -> None:
        self._write_json(self.program_path, program_to_dict(program))

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def load_history(self) -> list[WorkoutLog]:
        """
        Load all workout logs, sorted by date.

        A missing history file is treated as an empty history.

        Raises:
            ValidationError: If any line is malformed (the line number is reported)
        """
        if not self.history_path.exists():
            return []

        logs: list[WorkoutLog] = []
        with open(self.history_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    logs.append(dict_to_workout_log(json.loads(line)))
                except (json.JSONDecodeError, ValidationError, AttributeError, TypeError) as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.history_path}: {e}"
                    ) from e

        logs.sort(key=lambda log: log.date)
        logger.debug("Loaded %d workout logs from %s", len(logs), self.history_path)
        return logs

    def append_log(self, log: WorkoutLog) -> None:
        """Append one workout log to the history file."""
        self.init()
        with open(self.history_path, "a", encoding="utf-8") as f:
            f.write(workout_log_to_json_line(log) + "\n")

    # -------------------------------------------------------------------------
    # Mesocycle
    # -------------------------------------------------------------------------

    def load_mesocycle(self) -> MesocycleState | None:
        """
        Load the mesocycle state.

        Returns:
            MesocycleState, or None if no mesocycle has been started
        """
        if not self.mesocycle_path.exists():
            return None
        return dict_to_mesocycle_state(self._read_json(self.mesocycle_path, "Mesocycle state"))

    def save_mesocycle(self, state: MesocycleState) -> None:
        self._write_json(self.mesocycle_path, mesocycle_state_to_dict(state))


def get_default_data_dir() -> Path:
    """Get the default data directory (~/.fitcube)."""
    return Path.home() / ".fitcube"
