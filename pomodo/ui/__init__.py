"""UI package."""

from .timer_widget import TimerWidget
from .settings_dialog import SettingsDialog

__all__ = ["TimerWidget", "SettingsDialog"]
