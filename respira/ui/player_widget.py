"""Breathing player widget — the main view.

Layout (top → bottom):
    - Exercise selector
    - BallCanvas (shape guide + moving ball)
    - Phase label with countdown, cycle counter
    - Session time left and cycle goal, completion message
    - Start / Pause / Stop / sound buttons
    - Per-phase duration editors (locked while running)
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QPushButton, QComboBox, QSpinBox,
)

from ..breathing.engine import BreathingEngine
from ..breathing.patterns import (
    EXERCISE_LABELS, ExerciseKind, Phase, MIN_DURATION, MAX_DURATION,
    MAX_SESSION_MINUTES,
)
from ..breathing.state import EngineState, PhaseChanged, SessionComplete
from .ball_canvas import BallCanvas


DURATION_LABELS: dict[Phase, str] = {
    Phase.INSPIRE: "Inspiration",
    Phase.HOLD: "Rétention",
    Phase.EXPIRE: "Expiration",
}


def format_clock(seconds: int) -> str:
    """``m:ss``, e.g. 272 -> "4:32"."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes}:{secs:02d}"


class PlayerWidget(QWidget):
    """Controls and visuals for one BreathingEngine."""

    def __init__(self, engine: BreathingEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._build_ui()
        self._connect_signals()
        self._sync_all()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(14)

        # ── exercise selector ────────────────────────────────────────
        self._exercise_combo = QComboBox(self)
        for kind in ExerciseKind:
            self._exercise_combo.addItem(EXERCISE_LABELS[kind], kind.value)
        root.addWidget(self._exercise_combo)

        # ── canvas ───────────────────────────────────────────────────
        canvas_row = QHBoxLayout()
        canvas_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._canvas = BallCanvas(self)
        canvas_row.addWidget(self._canvas)
        root.addLayout(canvas_row)

        # ── phase + cycles ───────────────────────────────────────────
        self._phase_label = QLabel(self)
        self._phase_label.setObjectName("phaseLabel")
        self._phase_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self._phase_label)

        self._cycle_label = QLabel(self)
        self._cycle_label.setObjectName("cycleLabel")
        self._cycle_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self._cycle_label)

        # ── session target ───────────────────────────────────────────
        self._session_label = QLabel(self)
        self._session_label.setObjectName("sessionLabel")
        self._session_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self._session_label)

        self._done_label = QLabel(self)
        self._done_label.setObjectName("doneLabel")
        self._done_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._done_label.setWordWrap(True)
        self._done_label.hide()
        root.addWidget(self._done_label)

        # ── controls ─────────────────────────────────────────────────
        btn_row = QHBoxLayout()
        btn_row.setSpacing(8)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._start_btn = QPushButton("Démarrer", self)
        self._start_btn.setObjectName("primaryButton")
        self._pause_btn = QPushButton("Pause", self)
        self._stop_btn = QPushButton("Arrêter", self)
        self._stop_btn.setObjectName("dangerButton")
        self._sound_btn = QPushButton(self)
        self._sound_btn.setObjectName("soundButton")

        for btn in (self._start_btn, self._pause_btn, self._stop_btn, self._sound_btn):
            btn_row.addWidget(btn)
        root.addLayout(btn_row)

        # ── durations ────────────────────────────────────────────────
        form = QFormLayout()
        form.setHorizontalSpacing(16)
        self._duration_spins: dict[Phase, QSpinBox] = {}
        for phase in Phase:
            spin = QSpinBox(self)
            spin.setRange(MIN_DURATION, MAX_DURATION)
            spin.setSuffix(" s")
            self._duration_spins[phase] = spin
            form.addRow(f"{DURATION_LABELS[phase]} :", spin)

        # 0 stands for an open-ended session
        self._session_spin = QSpinBox(self)
        self._session_spin.setRange(0, MAX_SESSION_MINUTES)
        self._session_spin.setSuffix(" min")
        self._session_spin.setSpecialValueText("Libre")
        form.addRow("Durée de séance :", self._session_spin)
        root.addLayout(form)
        root.addStretch()

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._exercise_combo.currentIndexChanged.connect(self._on_exercise_chosen)
        self._start_btn.clicked.connect(self.start)
        self._pause_btn.clicked.connect(self._on_pause_resume)
        self._stop_btn.clicked.connect(self._engine.reset)
        self._sound_btn.clicked.connect(self._engine.toggle_sound)
        for phase, spin in self._duration_spins.items():
            spin.valueChanged.connect(
                lambda value, ph=phase: self._engine.set_duration(ph, value)
            )
        self._session_spin.valueChanged.connect(
            lambda value: self._engine.set_session_length(value or None)
        )

        self._engine.tick.connect(self._refresh_phase_label)
        self._engine.tick.connect(self._refresh_session)
        self._engine.session_length_changed.connect(self._sync_session_length)
        self._engine.session_finished.connect(self._on_session_finished)
        self._engine.phase_changed.connect(self._on_phase_changed)
        self._engine.state_changed.connect(self._on_state_changed)
        self._engine.running_changed.connect(self._on_running_changed)
        self._engine.exercise_changed.connect(self._on_exercise_changed)
        self._engine.durations_changed.connect(self._sync_durations)
        self._engine.sound_changed.connect(self._sync_sound)

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_exercise_chosen(self, index: int) -> None:
        value = self._exercise_combo.itemData(index)
        if value is not None and value != self._engine.kind.value:
            self._engine.select_exercise(ExerciseKind(value))

    def start(self) -> None:
        """Start the engine and send the ball towards the first corner."""
        self._engine.start()
        self._glide_to_current()

    def _on_pause_resume(self) -> None:
        if self._engine.is_running:
            self._engine.pause()
        else:
            self._engine.resume()

    def _on_phase_changed(self, change: PhaseChanged) -> None:
        self._glide_to_current()

    def _on_state_changed(self, state: EngineState) -> None:
        if state.is_fresh:
            self._canvas.park()
        if not state.is_complete:
            self._done_label.hide()
        self._sync_controls()
        self._refresh_phase_label()
        self._refresh_cycles()
        self._refresh_session()

    def _on_session_finished(self, done: SessionComplete) -> None:
        self._canvas.park()
        n = done.cycle_count
        self._done_label.setText(
            f"Séance terminée ! Vous avez complété {n} cycle{'s' if n > 1 else ''} "
            "de respiration."
        )
        self._done_label.show()

    def _on_running_changed(self, running: bool) -> None:
        if running:
            self._canvas.unfreeze()
        else:
            self._canvas.freeze()

    def _on_exercise_changed(self, kind: ExerciseKind) -> None:
        self._canvas.set_exercise(kind)
        self._sync_exercise()

    # ── display ───────────────────────────────────────────────────────────

    def _glide_to_current(self) -> None:
        """Send the ball to this phase's corner, arriving as it ends."""
        self._canvas.glide_to(
            self._engine.ball_position(),
            self._engine.remaining,
            self._engine.current_phase_style_class(),
        )

    def _refresh_phase_label(self, *_args: object) -> None:
        self._phase_label.setText(
            f"{self._engine.current_phase_label()} ({self._engine.remaining}s)"
        )

    def _refresh_cycles(self) -> None:
        n = self._engine.cycle_count
        self._cycle_label.setText(f"Cycles complétés : {n}")

    def _refresh_session(self, *_args: object) -> None:
        left = self._engine.session_remaining()
        if left is None:
            self._session_label.setText("Séance libre")
            return
        self._session_label.setText(
            f"Temps restant : {format_clock(left)} · "
            f"Objectif : {self._engine.goal_cycles()} cycles"
        )

    def _sync_all(self) -> None:
        self._canvas.set_exercise(self._engine.kind)
        self._sync_exercise()
        self._sync_durations()
        self._sync_session_length()
        self._sync_sound(self._engine.sound_enabled)
        self._sync_controls()
        self._refresh_phase_label()
        self._refresh_cycles()

    def _sync_exercise(self) -> None:
        index = self._exercise_combo.findData(self._engine.kind.value)
        if index != self._exercise_combo.currentIndex():
            self._exercise_combo.blockSignals(True)
            self._exercise_combo.setCurrentIndex(index)
            self._exercise_combo.blockSignals(False)

    def _sync_durations(self, *_args: object) -> None:
        for phase, spin in self._duration_spins.items():
            value = self._engine.duration_for(phase)
            if spin.value() != value:
                spin.blockSignals(True)
                spin.setValue(value)
                spin.blockSignals(False)
        self._refresh_phase_label()
        self._refresh_session()

    def _sync_session_length(self, *_args: object) -> None:
        value = self._engine.session_minutes or 0
        if self._session_spin.value() != value:
            self._session_spin.blockSignals(True)
            self._session_spin.setValue(value)
            self._session_spin.blockSignals(False)
        self._refresh_session()

    def _sync_sound(self, enabled: bool) -> None:
        self._sound_btn.setText("Son activé" if enabled else "Son coupé")
        self._sound_btn.setProperty("muted", not enabled)
        self._sound_btn.style().unpolish(self._sound_btn)
        self._sound_btn.style().polish(self._sound_btn)

    def _sync_controls(self) -> None:
        running = self._engine.is_running
        idle = self._engine.state.is_fresh or self._engine.is_complete
        self._pause_btn.setText("Pause" if running or idle else "Reprendre")
        self._pause_btn.setEnabled(running or not idle)
        # Durations are only editable while stopped
        for spin in (*self._duration_spins.values(), self._session_spin):
            spin.setEnabled(not running)
