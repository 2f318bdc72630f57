"""UI widgets package."""

from .ball_canvas import BallCanvas
from .player_widget import PlayerWidget
from .settings_dialog import SettingsDialog

__all__ = ["BallCanvas", "PlayerWidget", "SettingsDialog"]
