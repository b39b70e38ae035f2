"""Balancing diagnostics."""

from .checklist import ChecklistIssue, run_checklist
from .roll_simulator import RollSimulator, SimulationResult

__all__ = ["ChecklistIssue", "run_checklist", "RollSimulator", "SimulationResult"]
