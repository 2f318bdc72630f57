"""Breathing exercise package."""

from .engine import BreathingEngine
from .patterns import (
    ExerciseKind,
    Phase,
    PHASE_SEQUENCES,
    DEFAULT_DURATIONS,
    MIN_DURATION,
    MAX_DURATION,
)
from .state import CommandResult, EngineState, PhaseChanged, Rejection

__all__ = [
    "BreathingEngine",
    "ExerciseKind",
    "Phase",
    "PHASE_SEQUENCES",
    "DEFAULT_DURATIONS",
    "MIN_DURATION",
    "MAX_DURATION",
    "CommandResult",
    "EngineState",
    "PhaseChanged",
    "Rejection",
]
