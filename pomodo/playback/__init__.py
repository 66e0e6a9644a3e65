"""Background-music ducking and the Spotify playback stack."""

from .controller import (
    PlaybackController,
    PlaybackError,
    NoActiveDeviceError,
    PlaybackState,
)
from .ducking import PlaybackDucking, FADE_STEPS

__all__ = [
    "PlaybackController",
    "PlaybackError",
    "NoActiveDeviceError",
    "PlaybackState",
    "PlaybackDucking",
    "FADE_STEPS",
]
