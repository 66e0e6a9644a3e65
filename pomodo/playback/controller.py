"""Playback control capability used by the ducking helper.

Any object with the four async methods of ``PlaybackController`` will do;
``pomodo.playback.spotify.SpotifyController`` is the real one and the
tests use an in-memory fake.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


class PlaybackError(Exception):
    """A playback capability call failed."""


class NoActiveDeviceError(PlaybackError):
    """The remote player has no active device to control."""


@dataclass
class PlaybackState:
    is_playing: bool
    volume_percent: Optional[int]
    device_name: Optional[str] = None
    track_name: Optional[str] = None
    artist_name: Optional[str] = None


class PlaybackController(Protocol):
    async def get_state(self) -> Optional[PlaybackState]:
        """Current state, or ``None`` when nothing can be controlled."""
        ...

    async def set_volume(self, percent: int) -> None: ...

    async def play(self) -> None: ...

    async def pause(self) -> None: ...
