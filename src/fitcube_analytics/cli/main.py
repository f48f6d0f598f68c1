"""
CLI entry point using Typer.

Provides commands for training analytics:
- volume: Per-muscle weekly volume against targets
- strength: Strength levels, imbalances, plateaus, pain patterns
- snapshot: Full capability snapshot (table, JSON or AI text)
- suggest-weight: Working weight from best E1RM
- program: Program display, phase-scaled and weight-synced
- phase show|init|advance: Mesocycle phase state
- readiness: Day-of session adaptation
"""

from .app import app
from .commands import analysis, program, recovery  # noqa: F401  (registers commands)

__all__ = ["app"]


if __name__ == "__main__":
    app()
