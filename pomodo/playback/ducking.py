"""Linear volume fades around pause/resume on a playback controller.

``fade_out_and_pause`` ramps the volume to 0 in ``steps`` equal steps,
pauses, then puts the original volume back so the next resume is not
silent.  ``resume_and_fade_in`` is its mirror image.

Failure handling
----------------
- A failed intermediate ``set_volume`` is logged and the ramp carries on.
- A failed ``pause()`` at the end of a fade-out, or ``play()`` at the start
  of a fade-in, raises ``PlaybackError`` to the caller.

Only one fade should run against a controller at a time.  Nothing here
cancels a fade; a host that wants to abandon one cancels the task running
it (see ``pomodo.playback.runner.FadeRunner``).
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable

from .controller import PlaybackController, PlaybackError


log = logging.getLogger(__name__)

FADE_STEPS = 20
PLAY_SETTLE_MS = 100
FALLBACK_VOLUME = 50

Sleep = Callable[[float], Awaitable[None]]


def _round_percent(value: float) -> int:
    """Round half-up and clamp to 0-100."""
    return max(0, min(100, math.floor(value + 0.5)))


def ramp(start: int, end: int, steps: int = FADE_STEPS) -> list[int]:
    """Volumes for each step of a linear fade from *start* to *end*.

    *start* itself is not included; the last value is always *end*.
    """
    if steps <= 0:
        return [end]
    values = [
        _round_percent(start + (end - start) * i / steps)
        for i in range(1, steps)
    ]
    values.append(end)
    return values


class PlaybackDucking:
    """Fade helper bound to no particular controller.

    Holds only its step count and sleep function; every fade is given the
    controller it should act on.
    """

    def __init__(
        self,
        *,
        steps: int = FADE_STEPS,
        sleep: Sleep = asyncio.sleep,
        play_settle_ms: int = PLAY_SETTLE_MS,
    ) -> None:
        if steps <= 0:
            raise ValueError("steps must be positive")
        self.steps = steps
        self._sleep = sleep
        self._play_settle_ms = play_settle_ms

    async def fade_out_and_pause(
        self, controller: PlaybackController, fade_duration_ms: int
    ) -> None:
        state = await controller.get_state()
        if state is None:
            raise PlaybackError("No playback state available")
        if not state.is_playing:
            log.debug("fade-out skipped: already paused")
            return

        if fade_duration_ms <= 0:
            await controller.pause()
            return

        original = state.volume_percent
        if original is None:
            original = FALLBACK_VOLUME
        step_seconds = fade_duration_ms / self.steps / 1000

        log.debug("fading out from %d%% over %d ms", original, fade_duration_ms)
        for volume in ramp(original, 0, self.steps):
            await self._set_volume_best_effort(controller, volume)
            await self._sleep(step_seconds)

        await controller.pause()
        await self._set_volume_best_effort(controller, original)

    async def resume_and_fade_in(
        self,
        controller: PlaybackController,
        target_volume_percent: int,
        fade_duration_ms: int,
    ) -> None:
        target = _round_percent(target_volume_percent)

        if fade_duration_ms <= 0:
            await self._set_volume_best_effort(controller, target)
            await controller.play()
            return

        await self._set_volume_best_effort(controller, 0)
        await controller.play()
        await self._sleep(self._play_settle_ms / 1000)

        step_seconds = fade_duration_ms / self.steps / 1000
        log.debug("fading in to %d%% over %d ms", target, fade_duration_ms)
        for volume in ramp(0, target, self.steps):
            await self._set_volume_best_effort(controller, volume)
            await self._sleep(step_seconds)

    async def _set_volume_best_effort(
        self, controller: PlaybackController, volume: int
    ) -> None:
        try:
            await controller.set_volume(volume)
        except PlaybackError as exc:
            log.warning("set_volume(%d) failed during fade: %s", volume, exc)
