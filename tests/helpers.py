"""Shared test helpers for Pomodo."""

from __future__ import annotations

import time

from pomodo.playback.controller import PlaybackError, PlaybackState
from pomodo.timer.engine import SessionEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


def complete_phase(engine: SessionEngine) -> None:
    """Fast-complete the current phase: start it and jump to the last tick."""
    engine.start()
    engine._remaining = 1
    engine.tick()


def tick_n(engine: SessionEngine, n: int) -> None:
    for _ in range(n):
        engine.tick()


class FakeController:
    """In-memory playback controller that records every call."""

    def __init__(self, *, playing: bool = True, volume: int | None = 60,
                 track: str | None = None, artist: str | None = None):
        self.playing = playing
        self.volume = volume
        self.track = track
        self.artist = artist
        self.calls: list[tuple] = []
        self.fail_set_volume_at: set[int] = set()   # 0-based set_volume call indexes
        self.fail_pause = False
        self.fail_play = False
        self.no_device = False
        self.fail_get_state = False
        self._set_volume_count = 0

    async def get_state(self):
        self.calls.append(("get_state",))
        if self.fail_get_state:
            raise PlaybackError("state unavailable")
        if self.no_device:
            return None
        return PlaybackState(
            is_playing=self.playing, volume_percent=self.volume,
            track_name=self.track, artist_name=self.artist,
        )

    async def set_volume(self, percent: int) -> None:
        idx = self._set_volume_count
        self._set_volume_count += 1
        self.calls.append(("set_volume", percent))
        if idx in self.fail_set_volume_at:
            raise PlaybackError("volume rejected")
        self.volume = percent

    async def play(self) -> None:
        self.calls.append(("play",))
        if self.fail_play:
            raise PlaybackError("play rejected")
        self.playing = True

    async def pause(self) -> None:
        self.calls.append(("pause",))
        if self.fail_pause:
            raise PlaybackError("pause rejected")
        self.playing = False

    def count(self, name: str) -> int:
        return sum(1 for c in self.calls if c[0] == name)

    def volumes(self) -> list[int]:
        return [c[1] for c in self.calls if c[0] == "set_volume"]


async def no_sleep(seconds: float) -> None:
    """Stand-in for asyncio.sleep that records nothing and waits for nothing."""
    return None


def wait_until(predicate, app, timeout: float = 3.0) -> bool:
    """Pump the Qt event loop until *predicate* holds or *timeout* passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        app.processEvents()
        if predicate():
            return True
        time.sleep(0.01)
    app.processEvents()
    return predicate()
