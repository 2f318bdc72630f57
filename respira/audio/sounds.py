"""Cue synthesis and playback using numpy + QSoundEffect.

Cues are synthesised as sums of sine partials shaped by an ADSR
envelope, written once as 16-bit mono WAV files into the app-support
``sounds/`` directory, and loaded from there on later launches.

Sound names
-----------
- ``bell``   — soft meditation bell, the default phase cue
- ``chime``  — two gentle ascending notes, the alternative phase cue
- ``click``  — subtle tick for the volume preview

Playback is best-effort: a missing effect or a backend error is logged
and dropped, never raised to the caller.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path
from typing import Callable, Sequence

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR

logger = logging.getLogger(__name__)


SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = ("bell", "chime", "click")
CUE_NAMES = ("bell", "chime")
DEFAULT_CUE = "bell"

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════════


def _adsr(
    n: int,
    attack: float,
    decay: float,
    sustain: float,
    release: float,
) -> np.ndarray:
    """Piecewise-linear ADSR envelope of *n* samples.

    *attack*, *decay* and *release* are in seconds; segments that do not
    fit in *n* samples are truncated.
    """
    a = min(int(attack * SAMPLE_RATE), n)
    d = min(int(decay * SAMPLE_RATE), n - a)
    r = min(int(release * SAMPLE_RATE), n - a - d)
    s = n - a - d - r
    return np.concatenate([
        np.linspace(0.0, 1.0, a, endpoint=False),
        np.linspace(1.0, sustain, d, endpoint=False),
        np.full(s, sustain),
        np.linspace(sustain, 0.0, r),
    ])


def _partials(seconds: float, partials: Sequence[tuple[float, float]]) -> np.ndarray:
    """Sum of ``(frequency, amplitude)`` sine partials lasting *seconds*."""
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    out = np.zeros_like(t)
    for freq, amp in partials:
        out += amp * np.sin(2 * np.pi * freq * t)
    return out


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def _wav(samples: np.ndarray) -> bytes:
    """Encode float samples in -1..1 as a 16-bit mono PCM WAV."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype("<i2")
    buf = io.BytesIO()
    with wave.open(buf, "wb") as out:
        out.setnchannels(1)
        out.setsampwidth(2)
        out.setframerate(SAMPLE_RATE)
        out.writeframes(pcm.tobytes())
    return buf.getvalue()


def _generate_bell() -> bytes:
    """A4 with two faint overtones, slow swell and long ring-out."""
    tone = _partials(1.2, [(440.0, 0.35), (880.0, 0.08), (1320.0, 0.03)])
    return _wav(tone * _adsr(len(tone), 0.06, 0.3, 0.25, 0.7))


def _generate_chime() -> bytes:
    """E5 then A5, the second held longer."""
    first = _partials(0.18, [(659.25, 0.4)])
    second = _partials(0.45, [(880.0, 0.4)])
    return _wav(np.concatenate([
        first * _adsr(len(first), 0.003, 0.014, 0.35, 0.09),
        _silence(0.04),
        second * _adsr(len(second), 0.003, 0.014, 0.35, 0.22),
        _silence(0.04),
    ]))


def _generate_click() -> bytes:
    """15 ms high tick, padded so the backend does not cut it short."""
    tick = _partials(0.015, [(1200.0, 0.2)])
    return _wav(np.concatenate([
        tick * _adsr(len(tick), 0.0005, 0.001, 0.0, 0.0135),
        _silence(0.03),
    ]))


_GENERATORS: dict[str, Callable[[], bytes]] = {
    "bell": _generate_bell,
    "chime": _generate_chime,
    "click": _generate_click,
}


# ═══════════════════════════════════════════════════════════════════════════
#  PLAYBACK
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Owns one ``QSoundEffect`` per sound and plays them on request.

    Usage::

        mgr = SoundManager(parent=self, cue="chime")
        mgr.set_volume(70)
        engine.cue_player = mgr.play_cue
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
        cue: str = DEFAULT_CUE,
    ) -> None:
        super().__init__(parent)
        self._level = 70
        self._cue = cue if cue in CUE_NAMES else DEFAULT_CUE
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}
        for name in SOUND_NAMES:
            self._effects[name] = self._load(name)

    @property
    def volume(self) -> int:
        return self._level

    @property
    def cue(self) -> str:
        return self._cue

    def set_volume(self, level: int) -> None:
        """Apply *level* (clamped to 0-100) to every effect."""
        self._level = max(0, min(int(level), 100))
        for effect in self._effects.values():
            effect.setVolume(self._level / 100)

    def set_cue(self, name: str) -> None:
        """Choose the sound :meth:`play_cue` plays; unknown names are ignored."""
        if name not in CUE_NAMES:
            logger.warning("unknown cue sound %r, keeping %r", name, self._cue)
            return
        self._cue = name

    def play(self, name: str) -> None:
        effect = self._effects.get(name)
        if effect is None:
            logger.debug("no effect loaded for %r", name)
            return
        try:
            effect.play()
        except Exception:
            logger.debug("playback of %r failed", name, exc_info=True)

    def play_cue(self) -> None:
        self.play(self._cue)

    # ── internal ──────────────────────────────────────────────────────

    def _wav_path(self, name: str) -> Path:
        """Cached file for *name*, synthesised on first use."""
        path = self._sounds_dir / f"{name}.wav"
        if not path.exists():
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(_GENERATORS[name]())
            logger.debug("generated %s", path)
        return path

    def _load(self, name: str) -> QSoundEffect:
        effect = QSoundEffect(self)
        effect.setSource(QUrl.fromLocalFile(str(self._wav_path(name))))
        effect.setVolume(self._level / 100)
        return effect
