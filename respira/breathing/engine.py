"""Qt driver for the breathing-cycle state machine.

:class:`BreathingEngine` owns a single :class:`~.state.EngineState`,
pushes every command through the pure functions in :mod:`.state`, and
turns the resulting outbound signals into Qt signals.  A 1-second
``QTimer`` runs exactly while the state says ``running``.

Sessions
--------
With ``db_enabled`` each run is logged as a ``BreathingSession`` row:
opened by :meth:`start`, closed by :meth:`reset`,
:meth:`select_exercise`, a restarting :meth:`start`, the end of the
session length, or :meth:`close_session`.  Only history is stored; a new
engine never picks up a previous countdown.  A failed history write is
logged and the run continues without a row.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal
from sqlalchemy.exc import SQLAlchemyError

from . import state as sm
from .patterns import (
    EXERCISE_LABELS,
    ExerciseKind,
    Phase,
)
from .state import (
    CommandResult, EngineState, PhaseChanged, PlayCue, SessionComplete, TickSignal,
)

logger = logging.getLogger(__name__)


class BreathingEngine(QObject):
    """Breathing exercise player state machine.

    Signals
    -------
    tick(remaining_seconds: int)
        Emitted every second while running.
    phase_changed(change: PhaseChanged)
        Emitted on every phase transition.
    cue_requested()
        Fire-and-forget audio cue, only while sound is enabled.
    state_changed(state: EngineState)
        Emitted after any command that changed the state record.
    running_changed(running: bool)
    exercise_changed(kind: ExerciseKind)
    durations_changed(durations: dict[Phase, int])
    sound_changed(enabled: bool)
    rejected(result: CommandResult)
        Emitted for every command that was refused.
    session_length_changed(minutes: int | None)
    session_finished(complete: SessionComplete)
        Emitted when the session length runs out and the engine stops.
    session_completed(data: dict)
        Emitted after a logged session is closed.  Keys:
        ``exercise``, ``start_time``, ``end_time``, ``duration_seconds``,
        ``cycles_completed``, ``completed``, ``db_session_id``.
    """

    tick = pyqtSignal(int)
    phase_changed = pyqtSignal(object)
    cue_requested = pyqtSignal()
    state_changed = pyqtSignal(object)
    running_changed = pyqtSignal(bool)
    exercise_changed = pyqtSignal(object)
    durations_changed = pyqtSignal(object)
    sound_changed = pyqtSignal(bool)
    rejected = pyqtSignal(object)
    session_length_changed = pyqtSignal(object)
    session_finished = pyqtSignal(object)
    session_completed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        kind: ExerciseKind = ExerciseKind.COHERENCE,
        durations: dict[Phase, int] | None = None,
        sound_enabled: bool = True,
        session_minutes: int | None = None,
        db_enabled: bool = True,
        cue_player: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(parent)

        self._state: EngineState = sm.initial_state(
            kind, durations,
            sound_enabled=sound_enabled, session_minutes=session_minutes,
        )
        self._db_enabled = db_enabled
        self._cue_player = cue_player

        # ── session tracking ──────────────────────────────────────────
        self._db_session_id: int | None = None
        self._session_start: datetime | None = None
        self._cycles_at_start: int = 0

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(1000)
        self._qt_timer.timeout.connect(self.step)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> EngineState:
        """The current state record.  Frozen, durations included."""
        return self._state

    @property
    def kind(self) -> ExerciseKind:
        return self._state.kind

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def phase_index(self) -> int:
        """Position of the current phase in the exercise's sequence."""
        return self._state.phase_index

    @property
    def remaining(self) -> int:
        """Seconds left in the current phase."""
        return self._state.remaining

    @property
    def is_running(self) -> bool:
        return self._state.running

    @property
    def cycle_count(self) -> int:
        return self._state.cycle_count

    @property
    def sound_enabled(self) -> bool:
        return self._state.sound_enabled

    @property
    def durations(self) -> dict[Phase, int]:
        return dict(self._state.durations)

    def duration_for(self, phase: Phase) -> int:
        return self._state.durations[Phase(phase)]

    @property
    def session_minutes(self) -> int | None:
        seconds = self._state.session_seconds
        return None if seconds is None else seconds // 60

    @property
    def is_complete(self) -> bool:
        return self._state.is_complete

    @property
    def cue_player(self) -> Callable[[], None] | None:
        return self._cue_player

    @cue_player.setter
    def cue_player(self, player: Callable[[], None] | None) -> None:
        self._cue_player = player

    # ── queries ───────────────────────────────────────────────────────

    def current_phase_label(self) -> str:
        return sm.phase_label(self._state)

    def current_phase_style_class(self) -> str:
        return sm.phase_style_class(self._state)

    def ball_position(self) -> tuple[int, int]:
        return sm.ball_position(self._state)

    def phase_progress(self) -> float:
        return sm.phase_progress(self._state)

    def exercise_label(self) -> str:
        return EXERCISE_LABELS[self._state.kind]

    def session_remaining(self) -> int | None:
        """Seconds left in the session, None when open-ended."""
        return sm.session_remaining(self._state)

    def goal_cycles(self) -> int | None:
        return sm.goal_cycles(self._state)

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def select_exercise(self, kind: ExerciseKind | str) -> CommandResult:
        """Switch pattern.  Always resets the run."""
        kind = ExerciseKind(kind)
        self._close_session()
        result = self._apply(sm.select_exercise(self._state, kind))
        logger.info("exercise selected: %s", kind.value)
        self.exercise_changed.emit(kind)
        return result

    def set_duration(self, phase: Phase | str, seconds: int) -> CommandResult:
        """Change one phase duration.  Refused while running or out of range."""
        result = self._apply(sm.set_duration(self._state, phase, seconds))
        if result:
            self.durations_changed.emit(self.durations)
        return result

    def start(self) -> CommandResult:
        """Run from the first phase.  Restarts if already running."""
        self._close_session()
        result = self._apply(sm.start(self._state))
        self._qt_timer.start()  # restart so the first second is a full one
        logger.info(
            "started %s (%s)", self._state.kind.value,
            ", ".join(f"{p.value}={s}s" for p, s in self._state.durations.items()),
        )
        if self._db_enabled:
            self._persist_start()
        return result

    def pause(self) -> CommandResult:
        """Stop counting.  Phase and remaining seconds are kept."""
        was_running = self._state.running
        result = self._apply(sm.pause(self._state))
        if was_running:
            logger.info("paused at %s with %ds left", self.phase.value, self.remaining)
        return result

    def resume(self) -> CommandResult:
        """Continue exactly where :meth:`pause` stopped."""
        was_running = self._state.running
        result = self._apply(sm.resume(self._state))
        if result and not was_running and self._db_enabled and self._db_session_id is None:
            self._persist_start()
        return result

    def reset(self) -> CommandResult:
        """Stop, go back to the first phase and clear the cycle count."""
        self._close_session()
        result = self._apply(sm.reset(self._state))
        logger.info("reset %s", self._state.kind.value)
        return result

    def toggle_sound(self) -> CommandResult:
        result = self._apply(sm.toggle_sound(self._state))
        self.sound_changed.emit(self._state.sound_enabled)
        return result

    def set_session_length(self, minutes: int | None) -> CommandResult:
        """Stop automatically after *minutes*, or never with ``None``."""
        result = self._apply(sm.set_session_length(self._state, minutes))
        if result:
            self.session_length_changed.emit(self.session_minutes)
        return result

    def step(self) -> CommandResult:
        """Account for one elapsed second.  Ignored while not running."""
        return self._apply(sm.tick(self._state))

    def close_session(self) -> None:
        """Close the open history row, if any (e.g. on window close)."""
        self._close_session()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — state application
    # ══════════════════════════════════════════════════════════════════

    def _apply(self, transition: sm.Transition) -> CommandResult:
        previous = self._state
        self._state = transition.state

        if previous.running != self._state.running:
            if self._state.running:
                self._qt_timer.start()
            else:
                self._qt_timer.stop()
            self.running_changed.emit(self._state.running)

        for signal in transition.signals:
            self._dispatch(signal)

        if previous != self._state:
            self.state_changed.emit(self._state)

        result = transition.result
        if not result:
            logger.info("rejected: %s (%s)", result.rejection.value, result.detail)
            self.rejected.emit(result)
        return result

    def _dispatch(self, signal: sm.Signal) -> None:
        if isinstance(signal, TickSignal):
            self.tick.emit(signal.remaining)
        elif isinstance(signal, PhaseChanged):
            logger.debug(
                "phase -> %s[%d] %ds, cycles=%d",
                signal.phase.value, signal.index,
                signal.remaining, signal.cycle_count,
            )
            self.phase_changed.emit(signal)
        elif isinstance(signal, SessionComplete):
            logger.info(
                "session length reached after %ds, %d cycles",
                signal.elapsed, signal.cycle_count,
            )
            self._close_session(completed=True)
            self.session_finished.emit(signal)
        elif isinstance(signal, PlayCue):
            self._play_cue()

    def _play_cue(self) -> None:
        self.cue_requested.emit()
        if self._cue_player is None:
            return
        try:
            self._cue_player()
        except Exception:
            # Cues are best-effort; a failed one never stops the exercise.
            logger.debug("cue playback failed", exc_info=True)

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL — database persistence
    # ══════════════════════════════════════════════════════════════════

    def _persist_start(self) -> None:
        from ..database.db import get_session
        from ..database.models import BreathingSession

        self._session_start = datetime.now()
        self._cycles_at_start = self._state.cycle_count
        durations = self._state.durations
        try:
            with get_session() as db:
                record = BreathingSession(
                    exercise_kind=self._state.kind.value,
                    start_time=self._session_start,
                    completed=False,
                    inspire_seconds=durations[Phase.INSPIRE],
                    hold_seconds=durations[Phase.HOLD],
                    expire_seconds=durations[Phase.EXPIRE],
                )
                db.add(record)
                db.flush()
                self._db_session_id = record.id
        except (SQLAlchemyError, OSError):
            logger.warning("could not open a history row", exc_info=True)
            self._db_session_id = None
            self._session_start = None

    def _close_session(self, *, completed: bool | None = None) -> None:
        if self._db_session_id is None:
            return
        from ..database.db import get_session
        from ..database.models import BreathingSession

        end_time = datetime.now()
        cycles = self._state.cycle_count - self._cycles_at_start
        if completed is None:
            completed = cycles >= 1
        session_id = self._db_session_id
        self._db_session_id = None

        try:
            with get_session() as db:
                record = db.get(BreathingSession, session_id)
                if record:
                    record.end_time = end_time
                    record.duration_seconds = self._state.elapsed
                    record.cycles_completed = cycles
                    record.completed = completed
        except (SQLAlchemyError, OSError):
            logger.warning("could not close history row %d", session_id, exc_info=True)

        self.session_completed.emit({
            "exercise": self._state.kind.value,
            "start_time": self._session_start,
            "end_time": end_time,
            "duration_seconds": self._state.elapsed,
            "cycles_completed": cycles,
            "completed": completed,
            "db_session_id": session_id,
        })
        self._session_start = None
