"""Main application window for Respira."""

from __future__ import annotations

import logging
from datetime import date

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import QMainWindow, QMessageBox, QStatusBar

from .audio.sounds import SoundManager
from .breathing.engine import BreathingEngine
from .breathing.patterns import DEFAULT_SESSION_MINUTES, ExerciseKind, Phase
from .database.history import cycles_on
from .settings import Settings, load_settings, save_settings
from .ui.player_widget import PlayerWidget
from .ui.settings_dialog import SettingsDialog
from .ui.styles import build_stylesheet

logger = logging.getLogger(__name__)

ABOUT_HTML = (
    "<h3>Respira</h3>"
    "<p>Exercices de respiration guidée : cohérence cardiaque, "
    "respiration carrée et triangulaire.</p>"
)


def engine_from_settings(
    settings: Settings, parent=None, *, db_enabled: bool = True,
) -> BreathingEngine:
    """Build an engine from saved preferences.

    Unusable saved values (unknown exercise, out-of-range durations or
    session length) fall back to the defaults.
    """
    try:
        kind = ExerciseKind(settings.exercise_kind)
    except ValueError:
        logger.warning("unknown saved exercise %r", settings.exercise_kind)
        kind = ExerciseKind.COHERENCE

    engine = BreathingEngine(
        parent, kind=kind, sound_enabled=settings.sound_enabled,
        db_enabled=db_enabled,
    )
    for phase, seconds in settings.durations().items():
        engine.set_duration(phase, seconds)
    if not engine.set_session_length(settings.session_minutes):
        engine.set_session_length(DEFAULT_SESSION_MINUTES)
    return engine


class RespiraApp(QMainWindow):
    """Player window: one engine, one sound manager, saved preferences."""

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Respira")
        self.setMinimumSize(380, 600)

        # Moves and resizes arrive in bursts; write geometry once they settle
        self._geometry_timer = QTimer(self)
        self._geometry_timer.setSingleShot(True)
        self._geometry_timer.setInterval(500)
        self._geometry_timer.timeout.connect(self._save_geometry)

        self._settings: Settings = load_settings()

        self._engine = engine_from_settings(self._settings, self)
        self._sound_manager = SoundManager(parent=self, cue=self._settings.cue_sound)
        self._sound_manager.set_volume(self._settings.sound_volume)
        self._engine.cue_player = self._sound_manager.play_cue

        self._player = PlayerWidget(self._engine, self)
        self.setCentralWidget(self._player)
        self.setStatusBar(QStatusBar(self))
        self.setStyleSheet(build_stylesheet())

        self._build_menus()
        self._engine.session_completed.connect(self._on_session_completed)
        self._engine.exercise_changed.connect(self._on_exercise_changed)
        self._engine.durations_changed.connect(self._on_durations_changed)
        self._engine.sound_changed.connect(self._on_sound_changed)
        self._engine.session_length_changed.connect(self._on_session_length_changed)

        self._place_window()
        self._refresh_status()

    # ══════════════════════════════════════════════════════════════════
    #  MENUS
    # ══════════════════════════════════════════════════════════════════

    def _build_menus(self) -> None:
        menu = self.menuBar().addMenu("Respira")
        entries = (
            ("À propos de Respira", QAction.MenuRole.AboutRole, None, self._show_about),
            ("Réglages…", QAction.MenuRole.PreferencesRole, "Ctrl+,", self._open_settings),
            ("Quitter Respira", QAction.MenuRole.QuitRole, "Ctrl+Q", self.close),
        )
        for text, role, shortcut, slot in entries:
            action = QAction(text, self)
            action.setMenuRole(role)
            if shortcut:
                action.setShortcut(QKeySequence(shortcut))
            action.triggered.connect(slot)
            menu.addAction(action)

    def _show_about(self) -> None:
        QMessageBox.about(self, "À propos de Respira", ABOUT_HTML)

    # ══════════════════════════════════════════════════════════════════
    #  ENGINE EVENTS
    # ══════════════════════════════════════════════════════════════════

    def _on_session_completed(self, data: dict) -> None:
        logger.info(
            "session closed: %s, %d cycles in %ds",
            data["exercise"], data["cycles_completed"], data["duration_seconds"],
        )
        self._refresh_status()

    def _on_exercise_changed(self, kind: ExerciseKind) -> None:
        self._remember(exercise_kind=kind.value)

    def _on_durations_changed(self, durations: dict[Phase, int]) -> None:
        self._settings.set_durations(durations)
        save_settings(self._settings)

    def _on_sound_changed(self, enabled: bool) -> None:
        self._remember(sound_enabled=enabled)

    def _on_session_length_changed(self, minutes: int | None) -> None:
        self._remember(session_minutes=minutes)

    def _remember(self, **changes: object) -> None:
        for name, value in changes.items():
            setattr(self._settings, name, value)
        save_settings(self._settings)

    def _refresh_status(self) -> None:
        n = cycles_on(date.today())
        self.statusBar().showMessage(f"Aujourd'hui : {n} cycle{'s' if n > 1 else ''}")

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _open_settings(self) -> None:
        SettingsDialog(
            self._settings, parent=self, sound_preview_callback=self._preview,
        ).exec()
        self._apply_settings()

    def _preview(self, name: str) -> None:
        self._sound_manager.set_volume(self._settings.sound_volume)
        self._sound_manager.play(name)

    def _apply_settings(self) -> None:
        """Bring the engine, sounds and window in line with ``_settings``."""
        s = self._settings
        self._sound_manager.set_volume(s.sound_volume)
        self._sound_manager.set_cue(s.cue_sound)
        if s.sound_enabled != self._engine.sound_enabled:
            self._engine.toggle_sound()
        if s.always_on_top != self._is_on_top():
            self._set_on_top(s.always_on_top)

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW STATE
    # ══════════════════════════════════════════════════════════════════

    def _place_window(self) -> None:
        s = self._settings
        self.resize(s.window_width, s.window_height)
        if None not in (s.window_x, s.window_y):
            self.move(s.window_x, s.window_y)
        if s.always_on_top:
            self._set_on_top(True)

    def _save_geometry(self) -> None:
        if not self.isVisible():
            return
        geo = self.geometry()
        self._remember(
            window_x=geo.x(), window_y=geo.y(),
            window_width=geo.width(), window_height=geo.height(),
        )

    def _is_on_top(self) -> bool:
        return bool(self.windowFlags() & Qt.WindowType.WindowStaysOnTopHint)

    def _set_on_top(self, on_top: bool) -> None:
        self.setWindowFlag(Qt.WindowType.WindowStaysOnTopHint, on_top)
        self.show()  # changing window flags hides the window

    # ══════════════════════════════════════════════════════════════════
    #  QT EVENTS
    # ══════════════════════════════════════════════════════════════════

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._save_geometry()
        self._engine.close_session()
        event.accept()

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._geometry_timer.start()

    def moveEvent(self, event) -> None:  # type: ignore[override]
        super().moveEvent(event)
        self._geometry_timer.start()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        """Space: start, pause or resume.  Escape: stop."""
        key = event.key()
        if key == Qt.Key.Key_Space and not event.modifiers():
            if self._engine.is_running:
                self._engine.pause()
            elif self._engine.state.is_fresh or self._engine.is_complete:
                self._player.start()
            else:
                self._engine.resume()
        elif key == Qt.Key.Key_Escape:
            self._engine.reset()
        else:
            super().keyPressEvent(event)
            return
        event.accept()
