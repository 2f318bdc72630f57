"""Pure breathing-cycle state machine.

Everything here is a function of ``(EngineState, event)``: no timers, no
Qt, no I/O.  :class:`~respira.breathing.engine.BreathingEngine` owns one
:class:`EngineState` and feeds it through :func:`transition` once per
command or elapsed second.

Commands
--------
SelectExercise(kind)      switch pattern, then reset
SetDuration(phase, s)     only while not running, 1 <= s <= 10
Start                     run from the first phase (restarts if running)
Pause                     stop counting, keep phase + remaining
Resume                    continue exactly where Pause left off
Reset                     stop, first phase, cycle count back to 0
ToggleSound               flip the cue flag
SetSessionLength(m)       only while not running; None = open-ended
Tick                      one elapsed second (ignored while not running);
                          stops the run once the session length is reached

Every command yields a :class:`Transition`: the new state, the outbound
signals to emit (in order), and a :class:`CommandResult`.  Rejected
commands return the state unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple, Union

from .patterns import (
    DEFAULT_DURATIONS,
    DEFAULT_EXERCISE,
    MAX_DURATION,
    MAX_SESSION_MINUTES,
    MIN_DURATION,
    MIN_SESSION_MINUTES,
    PHASE_LABELS,
    PHASE_SEQUENCES,
    PHASE_STYLE_CLASSES,
    ExerciseKind,
    Phase,
    ball_offset,
    cycle_seconds,
    is_valid_duration,
    is_valid_session_minutes,
)


# ── results ───────────────────────────────────────────────────────────────


class Rejection(Enum):
    INVALID_DURATION = "invalid_duration"
    INVALID_STATE_TRANSITION = "invalid_state_transition"


@dataclass(frozen=True)
class CommandResult:
    """``Ok`` when ``rejection`` is None, ``Rejected(reason)`` otherwise."""

    rejection: Rejection | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.rejection is None

    def __bool__(self) -> bool:
        return self.ok


OK = CommandResult()


def rejected(reason: Rejection, detail: str) -> CommandResult:
    return CommandResult(rejection=reason, detail=detail)


# ── state ─────────────────────────────────────────────────────────────────


def _frozen(durations: Mapping[Phase, int]) -> Mapping[Phase, int]:
    return MappingProxyType(dict(durations))


def _default_durations() -> Mapping[Phase, int]:
    return _frozen(DEFAULT_DURATIONS)


@dataclass(frozen=True)
class EngineState:
    kind: ExerciseKind = DEFAULT_EXERCISE
    durations: Mapping[Phase, int] = field(default_factory=_default_durations)
    phase_index: int = 0
    remaining: int = DEFAULT_DURATIONS[Phase.INSPIRE]
    running: bool = False
    cycle_count: int = 0
    sound_enabled: bool = True
    elapsed: int = 0  # seconds counted down since last start/reset
    session_seconds: int | None = None  # None: runs until stopped

    @property
    def sequence(self) -> tuple[Phase, ...]:
        return PHASE_SEQUENCES[self.kind]

    @property
    def phase(self) -> Phase:
        return self.sequence[self.phase_index]

    @property
    def is_fresh(self) -> bool:
        """Not running and not a single second counted since start/reset."""
        return not self.running and self.elapsed == 0

    @property
    def is_complete(self) -> bool:
        """The session length has been used up."""
        return self.session_seconds is not None and self.elapsed >= self.session_seconds


def initial_state(
    kind: ExerciseKind = DEFAULT_EXERCISE,
    durations: Mapping[Phase | str, int] | None = None,
    *,
    sound_enabled: bool = True,
    session_minutes: int | None = None,
) -> EngineState:
    """Fresh state for *kind*.

    *durations* may name only some phases; the others keep their
    defaults.  Out-of-range values raise :class:`ValueError`, as do
    unknown exercises and phases.
    """
    kind = ExerciseKind(kind)
    merged = dict(DEFAULT_DURATIONS)
    for phase, seconds in (durations or {}).items():
        phase = Phase(phase)
        if not is_valid_duration(seconds):
            raise ValueError(
                f"{phase.value} duration must be an integer in "
                f"[{MIN_DURATION}, {MAX_DURATION}], got {seconds!r}"
            )
        merged[phase] = seconds
    if not is_valid_session_minutes(session_minutes):
        raise ValueError(
            f"session length must be None or an integer in "
            f"[{MIN_SESSION_MINUTES}, {MAX_SESSION_MINUTES}] minutes, "
            f"got {session_minutes!r}"
        )

    first = PHASE_SEQUENCES[kind][0]
    return EngineState(
        kind=kind,
        durations=_frozen(merged),
        remaining=merged[first],
        sound_enabled=sound_enabled,
        session_seconds=_to_seconds(session_minutes),
    )


def _to_seconds(minutes: int | None) -> int | None:
    return None if minutes is None else minutes * 60


# ── events ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SelectExercise:
    kind: ExerciseKind


@dataclass(frozen=True)
class SetDuration:
    phase: Phase
    seconds: int


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Resume:
    pass


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class ToggleSound:
    pass


@dataclass(frozen=True)
class SetSessionLength:
    minutes: int | None


@dataclass(frozen=True)
class Tick:
    pass


Event = Union[
    SelectExercise, SetDuration, Start, Pause, Resume, Reset, ToggleSound,
    SetSessionLength, Tick,
]


# ── outbound signals ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class TickSignal:
    remaining: int


@dataclass(frozen=True)
class PhaseChanged:
    phase: Phase
    index: int
    remaining: int
    cycle_count: int


@dataclass(frozen=True)
class PlayCue:
    pass


@dataclass(frozen=True)
class SessionComplete:
    cycle_count: int
    elapsed: int


Signal = Union[TickSignal, PhaseChanged, PlayCue, SessionComplete]


class Transition(NamedTuple):
    state: EngineState
    signals: tuple[Signal, ...] = ()
    result: CommandResult = OK


# ══════════════════════════════════════════════════════════════════════════
#  COMMANDS
# ══════════════════════════════════════════════════════════════════════════


def select_exercise(state: EngineState, kind: ExerciseKind | str) -> Transition:
    kind = ExerciseKind(kind)
    return reset(replace(state, kind=kind, phase_index=0))


def set_duration(
    state: EngineState, phase: Phase | str, seconds: int,
) -> Transition:
    phase = Phase(phase)
    if state.running:
        return Transition(state, (), rejected(
            Rejection.INVALID_STATE_TRANSITION,
            f"cannot change {phase.value} duration while running",
        ))
    if not is_valid_duration(seconds):
        return Transition(state, (), rejected(
            Rejection.INVALID_DURATION,
            f"{phase.value} duration must be an integer in "
            f"[{MIN_DURATION}, {MAX_DURATION}], got {seconds!r}",
        ))

    durations = dict(state.durations)
    durations[phase] = seconds
    new_state = replace(state, durations=_frozen(durations))
    if state.is_fresh and state.phase == phase:
        new_state = replace(new_state, remaining=seconds)
    return Transition(new_state)


def start(state: EngineState) -> Transition:
    first = state.sequence[0]
    return Transition(replace(
        state,
        running=True,
        phase_index=0,
        remaining=state.durations[first],
        elapsed=0,
    ))


def pause(state: EngineState) -> Transition:
    if not state.running:
        return Transition(state)
    return Transition(replace(state, running=False))


def resume(state: EngineState) -> Transition:
    if state.running:
        return Transition(state)
    if state.is_complete:
        return Transition(state, (), rejected(
            Rejection.INVALID_STATE_TRANSITION,
            "session already complete, start a new one",
        ))
    return Transition(replace(state, running=True))


def reset(state: EngineState) -> Transition:
    first = state.sequence[0]
    return Transition(replace(
        state,
        running=False,
        phase_index=0,
        remaining=state.durations[first],
        cycle_count=0,
        elapsed=0,
    ))


def toggle_sound(state: EngineState) -> Transition:
    return Transition(replace(state, sound_enabled=not state.sound_enabled))


def set_session_length(state: EngineState, minutes: int | None) -> Transition:
    """Change the session length, or drop it with ``None``."""
    if state.running:
        return Transition(state, (), rejected(
            Rejection.INVALID_STATE_TRANSITION,
            "cannot change the session length while running",
        ))
    if not is_valid_session_minutes(minutes):
        return Transition(state, (), rejected(
            Rejection.INVALID_DURATION,
            f"session length must be None or an integer in "
            f"[{MIN_SESSION_MINUTES}, {MAX_SESSION_MINUTES}] minutes, "
            f"got {minutes!r}",
        ))
    return Transition(replace(state, session_seconds=_to_seconds(minutes)))


def tick(state: EngineState) -> Transition:
    """One elapsed second.

    Counts down; hitting 0 moves to the next phase within the same tick,
    so a phase of *n* seconds lasts exactly *n* ticks.
    """
    if not state.running:
        return Transition(state, (), rejected(
            Rejection.INVALID_STATE_TRANSITION, "tick while not running",
        ))

    signals: list[Signal] = []
    if state.remaining > 0:
        state = replace(
            state, remaining=state.remaining - 1, elapsed=state.elapsed + 1,
        )
        signals.append(TickSignal(state.remaining))

    if state.remaining == 0:
        advanced = next_phase(state)
        state = advanced.state
        signals.extend(advanced.signals)

    if state.is_complete:
        state = replace(state, running=False)
        signals.append(SessionComplete(state.cycle_count, state.elapsed))

    return Transition(state, tuple(signals))


def next_phase(state: EngineState) -> Transition:
    sequence = state.sequence
    cycle_count = state.cycle_count
    if state.phase_index == len(sequence) - 1:
        cycle_count += 1
    index = (state.phase_index + 1) % len(sequence)
    phase = sequence[index]

    state = replace(
        state,
        phase_index=index,
        remaining=state.durations[phase],
        cycle_count=cycle_count,
    )
    signals: list[Signal] = [
        PhaseChanged(phase, index, state.remaining, state.cycle_count),
    ]
    if state.sound_enabled:
        signals.append(PlayCue())
    return Transition(state, tuple(signals))


def transition(state: EngineState, event: Event) -> Transition:
    """Dispatch *event* to the matching command."""
    if isinstance(event, Tick):
        return tick(state)
    if isinstance(event, SelectExercise):
        return select_exercise(state, event.kind)
    if isinstance(event, SetDuration):
        return set_duration(state, event.phase, event.seconds)
    if isinstance(event, Start):
        return start(state)
    if isinstance(event, Pause):
        return pause(state)
    if isinstance(event, Resume):
        return resume(state)
    if isinstance(event, Reset):
        return reset(state)
    if isinstance(event, ToggleSound):
        return toggle_sound(state)
    if isinstance(event, SetSessionLength):
        return set_session_length(state, event.minutes)
    raise TypeError(f"unknown event {event!r}")


# ══════════════════════════════════════════════════════════════════════════
#  QUERIES
# ══════════════════════════════════════════════════════════════════════════


def phase_label(state: EngineState) -> str:
    return PHASE_LABELS[state.phase]


def phase_style_class(state: EngineState) -> str:
    return PHASE_STYLE_CLASSES[state.phase]


def ball_position(state: EngineState) -> tuple[int, int]:
    return ball_offset(state.kind, state.phase_index)


def phase_progress(state: EngineState) -> float:
    """0.0 → 1.0 through the current phase."""
    total = state.durations[state.phase]
    if total <= 0:
        return 0.0
    elapsed = total - state.remaining
    return max(0.0, min(1.0, elapsed / total))


def session_remaining(state: EngineState) -> int | None:
    """Seconds left in the session, or None when it is open-ended."""
    if state.session_seconds is None:
        return None
    return max(0, state.session_seconds - state.elapsed)


def goal_cycles(state: EngineState) -> int | None:
    """Full cycles that fit in the session length.

    Coherence at 5 s + 5 s gives 6 per minute.
    """
    if state.session_seconds is None:
        return None
    return state.session_seconds // cycle_seconds(state.kind, state.durations)
