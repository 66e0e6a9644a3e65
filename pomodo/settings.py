"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/Pomodo/settings.json

Usage::

    settings = load_settings()
    settings.work_duration = 50 * 60
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .timer.engine import EngineConfig, MIN_SESSIONS_UNTIL_LONG_BREAK


log = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "Pomodo"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    work_duration: int = 25 * 60           # seconds
    short_break_duration: int = 5 * 60
    long_break_duration: int = 15 * 60
    sessions_until_long_break: int = 4
    auto_start: bool = False

    # ── alerts ────────────────────────────────────────────────────────
    notifications_enabled: bool = True
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── appearance ────────────────────────────────────────────────────
    theme: str = "cozy"

    # ── music (Spotify) ───────────────────────────────────────────────
    spotify_client_id: str = ""
    spotify_redirect_uri: str = "http://127.0.0.1:8888/callback"
    auto_pause_on_break: bool = True
    auto_resume_on_work: bool = True
    fade_duration_ms: int = 3000
    music_volume: int = 50                 # 0-100

    # ── window ────────────────────────────────────────────────────────
    window_width: int = 420
    window_height: int = 560

    def to_engine_config(self) -> EngineConfig:
        """Clamp the stored values into something the engine accepts."""
        return EngineConfig(
            work_duration=max(1, int(self.work_duration)),
            short_break_duration=max(1, int(self.short_break_duration)),
            long_break_duration=max(1, int(self.long_break_duration)),
            sessions_until_long_break=max(
                MIN_SESSIONS_UNTIL_LONG_BREAK, int(self.sessions_until_long_break),
            ),
            auto_start=bool(self.auto_start),
        )


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not SETTINGS_PATH.exists():
        return Settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("Ignoring unreadable settings file %s: %s", SETTINGS_PATH, exc)
        return Settings()
    if not isinstance(data, dict):
        log.warning("Ignoring settings file %s: not a JSON object", SETTINGS_PATH)
        return Settings()

    # Only use keys that exist in the dataclass, with the type of their default
    defaults = Settings()
    filtered = {}
    for f in fields(Settings):
        if f.name not in data:
            continue
        value = data[f.name]
        if _matches_type(value, getattr(defaults, f.name)):
            filtered[f.name] = value
        else:
            log.warning("Ignoring setting %s=%r: expected %s", f.name, value,
                        type(getattr(defaults, f.name)).__name__)
    return Settings(**filtered)


def _matches_type(value: object, default: object) -> bool:
    # bool is an int subclass; keep the two apart in both directions
    if isinstance(default, bool) or isinstance(value, bool):
        return isinstance(value, bool) and isinstance(default, bool)
    return isinstance(value, type(default))


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
