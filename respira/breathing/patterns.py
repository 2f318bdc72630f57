"""Breathing patterns: exercise kinds, phase sequences, and the lookup
tables the player renders from.

Exercises
---------
coherence   inspire → expire
square      inspire → hold → expire → hold
triangle    inspire → hold → expire

Square repeats ``hold``, so anything positional (the ball offset, the
next phase) is keyed by the *index* in the sequence, never by the phase
name alone.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping


# ── enums ─────────────────────────────────────────────────────────────────


class ExerciseKind(Enum):
    COHERENCE = "coherence"
    SQUARE = "square"
    TRIANGLE = "triangle"


class Phase(Enum):
    INSPIRE = "inspire"
    HOLD = "hold"
    EXPIRE = "expire"


# ── constants ─────────────────────────────────────────────────────────────

PHASE_SEQUENCES: dict[ExerciseKind, tuple[Phase, ...]] = {
    ExerciseKind.COHERENCE: (Phase.INSPIRE, Phase.EXPIRE),
    ExerciseKind.SQUARE: (Phase.INSPIRE, Phase.HOLD, Phase.EXPIRE, Phase.HOLD),
    ExerciseKind.TRIANGLE: (Phase.INSPIRE, Phase.HOLD, Phase.EXPIRE),
}

DEFAULT_EXERCISE = ExerciseKind.COHERENCE

DEFAULT_DURATIONS: dict[Phase, int] = {
    Phase.INSPIRE: 4,
    Phase.HOLD: 4,
    Phase.EXPIRE: 4,
}

MIN_DURATION = 1   # seconds, inclusive
MAX_DURATION = 10  # seconds, inclusive

DEFAULT_SESSION_MINUTES = 5
MIN_SESSION_MINUTES = 1
MAX_SESSION_MINUTES = 60

EXERCISE_LABELS: dict[ExerciseKind, str] = {
    ExerciseKind.COHERENCE: "Cohérence cardiaque",
    ExerciseKind.SQUARE: "Respiration carrée",
    ExerciseKind.TRIANGLE: "Respiration triangulaire",
}

PHASE_LABELS: dict[Phase, str] = {
    Phase.INSPIRE: "Inspirez",
    Phase.HOLD: "Retenez",
    Phase.EXPIRE: "Expirez",
}

PHASE_STYLE_CLASSES: dict[Phase, str] = {
    Phase.INSPIRE: "expand",
    Phase.HOLD: "hold",
    Phase.EXPIRE: "contract",
}

# One (x, y) offset per sequence index, in canvas pixels from the centre.
# Negative y is up.
BALL_OFFSETS: dict[ExerciseKind, tuple[tuple[int, int], ...]] = {
    ExerciseKind.COHERENCE: ((0, -80), (0, 80)),
    ExerciseKind.SQUARE: ((80, -80), (80, 80), (-80, 80), (-80, -80)),
    ExerciseKind.TRIANGLE: ((0, -100), (87, 50), (-87, 50)),
}


# ── look-ups ──────────────────────────────────────────────────────────────


def phase_sequence(kind: ExerciseKind | str) -> tuple[Phase, ...]:
    return PHASE_SEQUENCES[ExerciseKind(kind)]


def first_phase(kind: ExerciseKind | str) -> Phase:
    return phase_sequence(kind)[0]


def is_valid_duration(seconds: object) -> bool:
    """True for an ``int`` (not ``bool``) within the inclusive bounds."""
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        return False
    return MIN_DURATION <= seconds <= MAX_DURATION


def is_valid_session_minutes(minutes: object) -> bool:
    """None (open-ended) or an ``int`` number of minutes within bounds."""
    if minutes is None:
        return True
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        return False
    return MIN_SESSION_MINUTES <= minutes <= MAX_SESSION_MINUTES


def ball_offset(kind: ExerciseKind | str, index: int) -> tuple[int, int]:
    """Offset of the ball while the *index*-th phase of *kind* runs."""
    offsets = BALL_OFFSETS[ExerciseKind(kind)]
    if not 0 <= index < len(offsets):
        raise IndexError(f"{ExerciseKind(kind).value} has no phase {index}")
    return offsets[index]


def cycle_seconds(kind: ExerciseKind | str, durations: Mapping[Phase, int]) -> int:
    """Length of one full traversal of *kind* with *durations*."""
    return sum(durations[phase] for phase in phase_sequence(kind))
