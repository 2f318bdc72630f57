"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/Respira/settings.json

Set ``RESPIRA_HOME`` to use another directory (cached sounds and the
history database live there too).

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .breathing.patterns import (
    DEFAULT_DURATIONS, DEFAULT_EXERCISE, DEFAULT_SESSION_MINUTES, Phase,
)

logger = logging.getLogger(__name__)


def _app_support_dir() -> Path:
    override = os.environ.get("RESPIRA_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / "Library" / "Application Support" / "Respira"


APP_SUPPORT_DIR = _app_support_dir()
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── exercise ──────────────────────────────────────────────────────
    exercise_kind: str = DEFAULT_EXERCISE.value
    inspire_seconds: int = DEFAULT_DURATIONS[Phase.INSPIRE]
    hold_seconds: int = DEFAULT_DURATIONS[Phase.HOLD]
    expire_seconds: int = DEFAULT_DURATIONS[Phase.EXPIRE]
    session_minutes: int | None = DEFAULT_SESSION_MINUTES  # None: open-ended

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100
    cue_sound: str = "bell"                # bell | chime

    # ── window ────────────────────────────────────────────────────────
    window_x: int | None = None
    window_y: int | None = None
    window_width: int = 420
    window_height: int = 640
    always_on_top: bool = False

    def durations(self) -> dict[Phase, int]:
        return {
            Phase.INSPIRE: self.inspire_seconds,
            Phase.HOLD: self.hold_seconds,
            Phase.EXPIRE: self.expire_seconds,
        }

    def set_durations(self, durations: dict[Phase, int]) -> None:
        self.inspire_seconds = durations[Phase.INSPIRE]
        self.hold_seconds = durations[Phase.HOLD]
        self.expire_seconds = durations[Phase.EXPIRE]


def load_settings() -> Settings:
    """Read settings.json; a missing or unreadable file gives the defaults.

    Keys this version does not know about are dropped.
    """
    if not SETTINGS_PATH.exists():
        return Settings()
    try:
        raw = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
        known = {f.name for f in fields(Settings)}
        return Settings(**{key: raw[key] for key in raw.keys() & known})
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("could not read %s (%s), using defaults", SETTINGS_PATH, exc)
        return Settings()


def save_settings(settings: Settings) -> None:
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(asdict(settings), indent=2, ensure_ascii=False)
    SETTINGS_PATH.write_text(payload + "\n", encoding="utf-8")
