"""Timer package."""

from .engine import (
    SessionEngine,
    EngineConfig,
    ConfigurationError,
    Phase,
    DEFAULT_DURATIONS,
    SESSIONS_UNTIL_LONG_BREAK,
)
from .clock import TickDriver

__all__ = [
    "SessionEngine",
    "EngineConfig",
    "ConfigurationError",
    "Phase",
    "DEFAULT_DURATIONS",
    "SESSIONS_UNTIL_LONG_BREAK",
    "TickDriver",
]
