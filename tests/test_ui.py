"""Tests for the player widget, ball canvas, settings dialog and window.

Covers:
- PlayerWidget labels, buttons and duration editors tracking the engine
- Session length: time left, cycle goal, completion message
- BallCanvas glide / freeze / park
- SettingsDialog population and immediate saving
- RespiraApp wiring: saved preferences, keyboard shortcuts, close
"""

from __future__ import annotations

import pytest
from PyQt6.QtCore import QEvent, Qt, QVariantAnimation
from PyQt6.QtGui import QKeyEvent

from respira.breathing.patterns import ExerciseKind, Phase
from respira.settings import Settings, load_settings, save_settings
from respira.ui.ball_canvas import BallCanvas
from respira.ui.player_widget import PlayerWidget, format_clock
from respira.ui.settings_dialog import SettingsDialog

from helpers import step_engine


@pytest.fixture
def player(engine_no_db):
    return PlayerWidget(engine_no_db)


@pytest.fixture
def settings_path(tmp_path, monkeypatch):
    path = tmp_path / "settings.json"
    monkeypatch.setattr("respira.settings.SETTINGS_PATH", path)
    return path


def press(window, key) -> None:
    window.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, key, Qt.KeyboardModifier.NoModifier))


# ═══════════════════════════════════════════════════════════════════════
#  PLAYER WIDGET
# ═══════════════════════════════════════════════════════════════════════


class TestPlayerWidget:
    def test_initial_labels(self, player):
        assert player._phase_label.text() == "Inspirez (4s)"
        assert player._cycle_label.text() == "Cycles complétés : 0"
        assert player._sound_btn.text() == "Son activé"

    def test_exercise_combo_lists_all(self, player):
        assert player._exercise_combo.count() == len(ExerciseKind)
        assert player._exercise_combo.currentData() == "coherence"

    def test_pause_disabled_when_fresh(self, player):
        assert not player._pause_btn.isEnabled()

    def test_label_follows_ticks(self, player, engine_no_db):
        player.start()
        step_engine(engine_no_db, 5)
        assert player._phase_label.text() == "Expirez (3s)"

    def test_cycle_label(self, player, engine_no_db):
        player.start()
        step_engine(engine_no_db, 8)
        assert player._cycle_label.text() == "Cycles complétés : 1"

    def test_spins_locked_while_running(self, player):
        player.start()
        assert all(not spin.isEnabled() for spin in player._duration_spins.values())
        player._pause_btn.click()
        assert all(spin.isEnabled() for spin in player._duration_spins.values())

    def test_pause_button_toggles(self, player, engine_no_db):
        player.start()
        step_engine(engine_no_db, 1)
        player._pause_btn.click()
        assert not engine_no_db.is_running
        assert player._pause_btn.text() == "Reprendre"
        player._pause_btn.click()
        assert engine_no_db.is_running
        assert player._pause_btn.text() == "Pause"

    def test_stop_button_resets(self, player, engine_no_db):
        player.start()
        step_engine(engine_no_db, 6)
        player._stop_btn.click()
        assert not engine_no_db.is_running
        assert player._phase_label.text() == "Inspirez (4s)"
        assert player._canvas.offset == (0.0, 0.0)

    def test_reset_while_paused_refreshes(self, player, engine_no_db):
        player.start()
        step_engine(engine_no_db, 2)
        player._pause_btn.click()
        engine_no_db.reset()
        assert player._phase_label.text() == "Inspirez (4s)"
        assert not player._pause_btn.isEnabled()

    def test_sound_button(self, player, engine_no_db):
        player._sound_btn.click()
        assert engine_no_db.sound_enabled is False
        assert player._sound_btn.text() == "Son coupé"
        assert player._sound_btn.property("muted") is True

    def test_spin_sets_duration(self, player, engine_no_db):
        player._duration_spins[Phase.INSPIRE].setValue(7)
        assert engine_no_db.duration_for(Phase.INSPIRE) == 7
        assert player._phase_label.text() == "Inspirez (7s)"

    def test_spin_range(self, player):
        spin = player._duration_spins[Phase.HOLD]
        assert (spin.minimum(), spin.maximum()) == (1, 10)

    def test_combo_selects_exercise(self, player, engine_no_db):
        index = player._exercise_combo.findData("triangle")
        player._exercise_combo.setCurrentIndex(index)
        assert engine_no_db.kind == ExerciseKind.TRIANGLE

    def test_engine_selection_updates_combo(self, player, engine_no_db):
        engine_no_db.select_exercise(ExerciseKind.SQUARE)
        assert player._exercise_combo.currentData() == "square"

    def test_engine_duration_updates_spin(self, player, engine_no_db):
        engine_no_db.set_duration(Phase.EXPIRE, 9)
        assert player._duration_spins[Phase.EXPIRE].value() == 9


class TestSessionDisplay:
    def test_open_ended_label(self, player):
        assert player._session_label.text() == "Séance libre"
        assert player._session_spin.value() == 0
        assert player._session_spin.specialValueText() == "Libre"
        assert player._done_label.isHidden()

    def test_spin_sets_length(self, player, engine_no_db):
        player._session_spin.setValue(5)
        assert engine_no_db.session_minutes == 5
        assert player._session_label.text() == "Temps restant : 5:00 · Objectif : 37 cycles"

    def test_spin_zero_means_open_ended(self, player, engine_no_db):
        player._session_spin.setValue(5)
        player._session_spin.setValue(0)
        assert engine_no_db.session_minutes is None
        assert player._session_label.text() == "Séance libre"

    def test_goal_follows_durations(self, player, engine_no_db):
        engine_no_db.set_session_length(1)
        engine_no_db.set_duration(Phase.INSPIRE, 5)
        engine_no_db.set_duration(Phase.EXPIRE, 5)
        assert player._session_label.text() == "Temps restant : 1:00 · Objectif : 6 cycles"

    def test_engine_length_updates_spin(self, player, engine_no_db):
        engine_no_db.set_session_length(12)
        assert player._session_spin.value() == 12

    def test_time_left_counts_down(self, player, engine_no_db):
        engine_no_db.set_session_length(1)
        player.start()
        step_engine(engine_no_db, 5)
        assert player._session_label.text().startswith("Temps restant : 0:55")

    def test_length_locked_while_running(self, player):
        player.start()
        assert not player._session_spin.isEnabled()
        player._stop_btn.click()
        assert player._session_spin.isEnabled()

    def test_completion_message(self, player, engine_no_db):
        engine_no_db.set_session_length(1)
        player.start()
        step_engine(engine_no_db, 60)
        assert not engine_no_db.is_running
        assert not player._done_label.isHidden()
        assert player._done_label.text() == (
            "Séance terminée ! Vous avez complété 7 cycles de respiration."
        )
        assert player._session_label.text().startswith("Temps restant : 0:00")
        assert not player._pause_btn.isEnabled()
        assert player._canvas.offset == (0.0, 0.0)

    def test_new_run_hides_message(self, player, engine_no_db):
        engine_no_db.set_session_length(1)
        player.start()
        step_engine(engine_no_db, 60)
        player.start()
        assert player._done_label.isHidden()
        assert engine_no_db.is_running

    def test_format_clock(self):
        assert format_clock(0) == "0:00"
        assert format_clock(59) == "0:59"
        assert format_clock(272) == "4:32"
        assert format_clock(3600) == "60:00"


# ═══════════════════════════════════════════════════════════════════════
#  BALL CANVAS
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestBallCanvas:
    def test_starts_centred(self):
        assert BallCanvas().offset == (0.0, 0.0)

    def test_glide_runs_for_phase_duration(self):
        canvas = BallCanvas()
        canvas.glide_to((80, -80), 4, "expand")
        assert canvas._move_anim.state() == QVariantAnimation.State.Running
        assert canvas._move_anim.duration() == 4000

    def test_freeze_and_unfreeze(self):
        canvas = BallCanvas()
        canvas.glide_to((0, -80), 4, "expand")
        canvas.freeze()
        assert canvas._move_anim.state() == QVariantAnimation.State.Paused
        canvas.unfreeze()
        assert canvas._move_anim.state() == QVariantAnimation.State.Running

    def test_freeze_when_idle_is_noop(self):
        canvas = BallCanvas()
        canvas.freeze()
        assert canvas._move_anim.state() == QVariantAnimation.State.Stopped

    def test_park_stops_and_centres(self):
        canvas = BallCanvas()
        canvas.glide_to((0, -80), 4, "expand")
        canvas.park()
        assert canvas._move_anim.state() == QVariantAnimation.State.Stopped
        assert canvas.offset == (0.0, 0.0)

    @pytest.mark.parametrize("kind", list(ExerciseKind))
    def test_paints_every_shape(self, kind):
        canvas = BallCanvas()
        canvas.set_exercise(kind)
        canvas.grab()

    def test_player_glides_on_phase_change(self, engine_no_db):
        player = PlayerWidget(engine_no_db)
        player.start()
        anim = player._canvas._move_anim
        assert anim.endValue().x() == 0 and anim.endValue().y() == -80
        step_engine(engine_no_db, 4)
        assert anim.endValue().y() == 80


# ═══════════════════════════════════════════════════════════════════════
#  SETTINGS DIALOG
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestSettingsDialog:
    def test_create(self, settings_path):
        dlg = SettingsDialog(Settings())
        assert dlg.windowTitle() == "Réglages"

    def test_reflects_settings(self, settings_path):
        s = Settings(sound_enabled=False, sound_volume=50, cue_sound="chime", always_on_top=True)
        dlg = SettingsDialog(s)
        assert dlg._sound_cb.isChecked() is False
        assert dlg._vol_slider.value() == 50
        assert dlg._vol_label.text() == "50%"
        assert dlg._cue_combo.currentData() == "chime"
        assert dlg._on_top_cb.isChecked() is True

    def test_populate_does_not_save(self, settings_path):
        SettingsDialog(Settings())
        assert not settings_path.exists()

    def test_changes_saved_immediately(self, settings_path):
        s = Settings()
        dlg = SettingsDialog(s)
        dlg._vol_slider.setValue(25)
        dlg._on_top_cb.setChecked(True)
        assert s.sound_volume == 25
        loaded = load_settings()
        assert loaded.sound_volume == 25
        assert loaded.always_on_top is True

    def test_cue_change_previews(self, settings_path):
        previewed = []
        s = Settings()
        dlg = SettingsDialog(s, sound_preview_callback=previewed.append)
        dlg._cue_combo.setCurrentIndex(dlg._cue_combo.findData("chime"))
        assert s.cue_sound == "chime"
        assert previewed == ["chime"]

    def test_volume_release_previews_click(self, settings_path):
        previewed = []
        dlg = SettingsDialog(Settings(), sound_preview_callback=previewed.append)
        dlg._on_volume_released()
        assert previewed == ["click"]


# ═══════════════════════════════════════════════════════════════════════
#  MAIN WINDOW
# ═══════════════════════════════════════════════════════════════════════


@pytest.mark.usefixtures("qapp")
class TestEngineFromSettings:
    def test_applies_saved_values(self):
        from respira.app import engine_from_settings

        s = Settings(exercise_kind="square", hold_seconds=6, sound_enabled=False)
        eng = engine_from_settings(s, db_enabled=False)
        assert eng.kind == ExerciseKind.SQUARE
        assert eng.duration_for(Phase.HOLD) == 6
        assert eng.sound_enabled is False

    def test_bad_values_fall_back(self):
        from respira.app import engine_from_settings

        s = Settings(exercise_kind="pentagon", inspire_seconds=99)
        eng = engine_from_settings(s, db_enabled=False)
        assert eng.kind == ExerciseKind.COHERENCE
        assert eng.duration_for(Phase.INSPIRE) == 4

    def test_session_length_applied(self):
        from respira.app import engine_from_settings

        assert engine_from_settings(Settings(), db_enabled=False).session_minutes == 5
        eng = engine_from_settings(Settings(session_minutes=None), db_enabled=False)
        assert eng.session_minutes is None

    def test_bad_session_length_falls_back(self):
        from respira.app import engine_from_settings

        eng = engine_from_settings(Settings(session_minutes=0), db_enabled=False)
        assert eng.session_minutes == 5


@pytest.mark.usefixtures("qapp")
class TestRespiraApp:
    @pytest.fixture
    def window(self, settings_path):
        from respira.app import RespiraApp

        win = RespiraApp()
        yield win
        win._engine.reset()

    def test_title(self, window):
        assert window.windowTitle() == "Respira"

    def test_loads_saved_exercise(self, settings_path):
        from respira.app import RespiraApp

        save_settings(Settings(exercise_kind="triangle", expire_seconds=8))
        win = RespiraApp()
        assert win._engine.kind == ExerciseKind.TRIANGLE
        assert win._engine.duration_for(Phase.EXPIRE) == 8

    def test_cue_player_wired(self, window):
        assert window._engine.cue_player == window._sound_manager.play_cue

    def test_exercise_change_saved(self, window):
        window._engine.select_exercise(ExerciseKind.SQUARE)
        assert load_settings().exercise_kind == "square"

    def test_duration_change_saved(self, window):
        window._engine.set_duration(Phase.HOLD, 3)
        assert load_settings().hold_seconds == 3

    def test_sound_toggle_saved(self, window):
        window._engine.toggle_sound()
        assert load_settings().sound_enabled is False

    def test_session_length_saved(self, window):
        window._engine.set_session_length(None)
        assert load_settings().session_minutes is None
        window._engine.set_session_length(15)
        assert load_settings().session_minutes == 15

    def test_space_starts_again_after_completion(self, window):
        window._engine.set_session_length(1)
        press(window, Qt.Key.Key_Space)
        step_engine(window._engine, 60)
        assert window._engine.is_complete
        press(window, Qt.Key.Key_Space)
        assert window._engine.is_running
        assert window._engine.session_remaining() == 60

    def test_space_starts_pauses_resumes(self, window):
        press(window, Qt.Key.Key_Space)
        assert window._engine.is_running
        step_engine(window._engine, 1)
        press(window, Qt.Key.Key_Space)
        assert not window._engine.is_running
        assert not window._engine.state.is_fresh
        press(window, Qt.Key.Key_Space)
        assert window._engine.is_running

    def test_escape_resets(self, window):
        press(window, Qt.Key.Key_Space)
        step_engine(window._engine, 3)
        press(window, Qt.Key.Key_Escape)
        assert not window._engine.is_running
        assert window._engine.remaining == 4

    def test_status_shows_todays_cycles(self, window):
        window._engine.start()
        step_engine(window._engine, 8)
        window._engine.reset()
        assert window.statusBar().currentMessage() == "Aujourd'hui : 1 cycle"

    def test_apply_settings_toggles_sound(self, window):
        window._settings.sound_enabled = False
        window._settings.cue_sound = "chime"
        window._apply_settings()
        assert window._engine.sound_enabled is False
        assert window._sound_manager.cue == "chime"

    def test_close_closes_session(self, window):
        from respira.database.history import recent_sessions

        window._engine.start()
        window.show()
        window.close()
        assert len(recent_sessions()) == 1
