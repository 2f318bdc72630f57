"""Settings dialog for Respira.

Audio and window preferences only; phase durations are edited inline in
the player.  Every change is written to disk as soon as it is made and
the caller applies the result once the dialog closes.
"""

from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog, QDialogButtonBox, QFormLayout, QVBoxLayout, QHBoxLayout,
    QLabel, QSlider, QCheckBox, QComboBox, QFrame, QWidget,
)

from ..audio.sounds import CUE_NAMES
from ..settings import Settings, save_settings


CUE_LABELS: dict[str, str] = {
    "bell": "Cloche",
    "chime": "Carillon",
}

PREVIEW_SOUND = "click"


class SettingsDialog(QDialog):
    """Modal preferences dialog bound to one :class:`Settings` object."""

    def __init__(
        self,
        settings: Settings,
        parent: QWidget | None = None,
        *,
        sound_preview_callback: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Réglages")
        self.setMinimumWidth(360)
        self.setModal(True)

        self._settings = settings
        self._preview = sound_preview_callback

        self._build_ui()
        self._load_values()
        self._wire()

    @property
    def settings(self) -> Settings:
        return self._settings

    # ══════════════════════════════════════════════════════════════════
    #  LAYOUT
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        outer = QVBoxLayout(self)
        outer.setContentsMargins(22, 18, 22, 18)
        outer.setSpacing(14)

        # ── sound ────────────────────────────────────────────────────
        sound = self._add_section(outer, "Son")
        self._sound_cb = QCheckBox("Signal sonore à chaque phase")
        sound.addRow(self._sound_cb)

        self._cue_combo = QComboBox()
        for name in CUE_NAMES:
            self._cue_combo.addItem(CUE_LABELS.get(name, name), name)
        sound.addRow("Signal :", self._cue_combo)

        self._vol_slider = QSlider(Qt.Orientation.Horizontal)
        self._vol_slider.setRange(0, 100)
        self._vol_slider.setPageStep(10)
        self._vol_label = QLabel()
        self._vol_label.setFixedWidth(40)
        self._vol_label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
        volume = QHBoxLayout()
        volume.addWidget(self._vol_slider, 1)
        volume.addWidget(self._vol_label)
        sound.addRow("Volume :", volume)

        outer.addWidget(self._rule())

        # ── window ───────────────────────────────────────────────────
        window = self._add_section(outer, "Fenêtre")
        self._on_top_cb = QCheckBox("Toujours au premier plan")
        window.addRow(self._on_top_cb)

        outer.addStretch(1)
        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        buttons.button(QDialogButtonBox.StandardButton.Close).setText("Fermer")
        buttons.rejected.connect(self.accept)
        outer.addWidget(buttons)

    @staticmethod
    def _add_section(outer: QVBoxLayout, title: str) -> QFormLayout:
        heading = QLabel(title)
        heading.setStyleSheet("font-size: 15px; font-weight: 700;")
        outer.addWidget(heading)
        form = QFormLayout()
        form.setHorizontalSpacing(18)
        form.setVerticalSpacing(8)
        outer.addLayout(form)
        return form

    @staticmethod
    def _rule() -> QFrame:
        rule = QFrame()
        rule.setFrameShape(QFrame.Shape.HLine)
        rule.setStyleSheet("color: rgba(255,255,255,0.08);")
        return rule

    # ══════════════════════════════════════════════════════════════════
    #  VALUES
    # ══════════════════════════════════════════════════════════════════

    def _load_values(self) -> None:
        # Runs before _wire(), so nothing here is saved back
        s = self._settings
        self._sound_cb.setChecked(s.sound_enabled)
        self._cue_combo.setCurrentIndex(max(0, self._cue_combo.findData(s.cue_sound)))
        self._vol_slider.setValue(s.sound_volume)
        self._vol_label.setText(f"{s.sound_volume}%")
        self._on_top_cb.setChecked(s.always_on_top)

    def _wire(self) -> None:
        self._sound_cb.toggled.connect(self._on_sound_toggled)
        self._cue_combo.currentIndexChanged.connect(self._on_cue_changed)
        self._vol_slider.valueChanged.connect(self._on_volume_changed)
        self._vol_slider.sliderReleased.connect(self._on_volume_released)
        self._on_top_cb.toggled.connect(self._on_top_toggled)

    def _update(self, **changes: object) -> None:
        for name, value in changes.items():
            setattr(self._settings, name, value)
        save_settings(self._settings)

    # ── handlers ─────────────────────────────────────────────────────

    def _on_sound_toggled(self, checked: bool) -> None:
        self._update(sound_enabled=checked)

    def _on_cue_changed(self, index: int) -> None:
        name = self._cue_combo.itemData(index)
        self._update(cue_sound=name)
        if self._preview:
            self._preview(name)

    def _on_volume_changed(self, value: int) -> None:
        self._vol_label.setText(f"{value}%")
        self._update(sound_volume=value)

    def _on_volume_released(self) -> None:
        if self._preview:
            self._preview(PREVIEW_SOUND)

    def _on_top_toggled(self, checked: bool) -> None:
        self._update(always_on_top=checked)
