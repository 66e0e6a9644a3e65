"""Session engine for Pomodo.

Phases
------
WORK          Focus countdown.
SHORT_BREAK   Break after every work session but the last of a cycle.
LONG_BREAK    Break after the last work session of a cycle.

Transitions (on phase completion: countdown reaches 0, or skip() in a break)
----------------------------------------------------------------------------
WORK        → LONG_BREAK    when cycle_index >= sessions_until_long_break
WORK        → SHORT_BREAK   otherwise; cycle_index += 1
SHORT_BREAK → WORK
LONG_BREAK  → WORK          cycle_index = 1

The engine does no scheduling of its own.  The host calls ``tick()`` once a
second (see ``pomodo.timer.clock.TickDriver``) and ``tick()`` is a no-op
while the engine is not running.  All calls must come from one thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal


log = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class Phase(Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_break(self) -> bool:
        return self is not Phase.WORK

    @property
    def label(self) -> str:
        return _PHASE_LABELS[self]


_PHASE_LABELS: dict[Phase, str] = {
    Phase.WORK: "Focus Time",
    Phase.SHORT_BREAK: "Short Break",
    Phase.LONG_BREAK: "Long Break",
}


# ── constants ─────────────────────────────────────────────────────────────

DEFAULT_DURATIONS: dict[Phase, int] = {
    Phase.WORK: 25 * 60,
    Phase.SHORT_BREAK: 5 * 60,
    Phase.LONG_BREAK: 15 * 60,
}

SESSIONS_UNTIL_LONG_BREAK = 4
MIN_SESSIONS_UNTIL_LONG_BREAK = 2


# ── configuration ─────────────────────────────────────────────────────────


class ConfigurationError(ValueError):
    """Raised by ``SessionEngine.configure`` for out-of-range values."""


@dataclass(frozen=True)
class EngineConfig:
    """Durations (seconds) and cycling rules.  Replaced wholesale."""

    work_duration: int = DEFAULT_DURATIONS[Phase.WORK]
    short_break_duration: int = DEFAULT_DURATIONS[Phase.SHORT_BREAK]
    long_break_duration: int = DEFAULT_DURATIONS[Phase.LONG_BREAK]
    sessions_until_long_break: int = SESSIONS_UNTIL_LONG_BREAK
    auto_start: bool = False

    def duration_for(self, phase: Phase) -> int:
        if phase is Phase.WORK:
            return self.work_duration
        if phase is Phase.SHORT_BREAK:
            return self.short_break_duration
        return self.long_break_duration

    def validate(self) -> None:
        for name in ("work_duration", "short_break_duration", "long_break_duration"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if self.sessions_until_long_break < MIN_SESSIONS_UNTIL_LONG_BREAK:
            raise ConfigurationError(
                "sessions_until_long_break must be at least "
                f"{MIN_SESSIONS_UNTIL_LONG_BREAK}, got {self.sessions_until_long_break}"
            )

    def with_changes(self, **changes) -> EngineConfig:
        return replace(self, **changes)


# ── engine ────────────────────────────────────────────────────────────────


class SessionEngine(QObject):
    """Countdown plus work/break sequencing, with Qt signals for the host.

    Signals
    -------
    ticked(remaining_seconds: int, phase: Phase)
        Emitted after every tick that advanced time, including the one
        that reaches 0 (before ``phase_completed``).
    phase_started(phase: Phase)
        Emitted when ``start()`` begins counting, and when auto-start
        carries the engine straight into the next phase.
    phase_completed(previous: Phase, new: Phase)
        Emitted after a transition.  Engine state is already updated.
    running_changed(is_running: bool)
        Emitted whenever ``is_running`` flips.  The tick driver follows it.
    state_changed()
        Emitted after any public operation that changed state, for views.
    """

    ticked = pyqtSignal(int, object)
    phase_started = pyqtSignal(object)
    phase_completed = pyqtSignal(object, object)
    running_changed = pyqtSignal(bool)
    state_changed = pyqtSignal()

    def __init__(
        self,
        config: EngineConfig | None = None,
        parent: QObject | None = None,
        *,
        completed_work_sessions: int = 0,
    ) -> None:
        super().__init__(parent)

        config = config or EngineConfig()
        config.validate()
        self._config: EngineConfig = config

        # ── cycle state ───────────────────────────────────────────────
        self._phase: Phase = Phase.WORK
        self._cycle_index: int = 1  # 1-indexed; which work session in cycle
        self._completed_work_sessions: int = completed_work_sessions

        # ── countdown state ───────────────────────────────────────────
        self._remaining: int = config.duration_for(Phase.WORK)
        self._running: bool = False

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def remaining(self) -> int:
        """Seconds left on the clock."""
        return self._remaining

    @property
    def total_duration(self) -> int:
        """Full length of the current phase under the current config."""
        return self._config.duration_for(self._phase)

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current phase."""
        total = self.total_duration
        return max(0.0, min(1.0, (total - self._remaining) / total))

    @property
    def cycle_index(self) -> int:
        """Which work session in the cycle (1-based)."""
        return self._cycle_index

    @property
    def sessions_until_long_break(self) -> int:
        return self._config.sessions_until_long_break

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def completed_work_sessions(self) -> int:
        """Work sessions completed today.  Seeded by the host from stats."""
        return self._completed_work_sessions

    @completed_work_sessions.setter
    def completed_work_sessions(self, value: int) -> None:
        self._completed_work_sessions = value

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def configure(self, config: EngineConfig) -> None:
        """Replace the configuration.

        Raises ``ConfigurationError`` without touching any state if
        *config* is invalid.  When idle the clock is reloaded with the
        current phase's new duration; when running it is only clamped so
        it never exceeds that duration.  The phase is untouched; the cycle
        index is clamped to the new ``sessions_until_long_break``.
        """
        config.validate()
        self._config = config
        self._cycle_index = min(self._cycle_index, config.sessions_until_long_break)
        duration = config.duration_for(self._phase)
        if self._running:
            self._remaining = min(self._remaining, duration)
        else:
            self._remaining = duration
        self.state_changed.emit()

    def start(self) -> None:
        """Start counting down the current phase.  No-op when running."""
        if self._running:
            return
        self._set_running(True)
        self.phase_started.emit(self._phase)
        self.state_changed.emit()

    def pause(self) -> None:
        """Stop counting.  No-op when not running."""
        if not self._running:
            return
        self._set_running(False)
        self.state_changed.emit()

    def tick(self) -> None:
        """Advance the clock by one second.  No-op when not running."""
        if not self._running:
            return
        self._remaining = max(0, self._remaining - 1)
        self.ticked.emit(self._remaining, self._phase)
        if self._remaining == 0:
            self._complete_phase()

    def reset(self) -> None:
        """Pause and reload the current phase's full duration.

        Phase and cycle position are kept.
        """
        self._set_running(False)
        self._remaining = self._config.duration_for(self._phase)
        self.state_changed.emit()

    def skip(self) -> None:
        """End the current break now.  No-op during work."""
        if not self._phase.is_break:
            return
        self._complete_phase()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _complete_phase(self) -> None:
        finished = self._phase
        was_running = self._running

        self._advance()
        self._remaining = self._config.duration_for(self._phase)
        self._running = self._config.auto_start
        log.debug(
            "phase %s -> %s (cycle %d/%d, %d work sessions today)",
            finished.value, self._phase.value, self._cycle_index,
            self._config.sessions_until_long_break,
            self._completed_work_sessions,
        )

        self.phase_completed.emit(finished, self._phase)
        if self._running != was_running:
            self.running_changed.emit(self._running)
        if self._running:
            self.phase_started.emit(self._phase)
        self.state_changed.emit()

    def _advance(self) -> None:
        """Move ``phase`` and ``cycle_index`` to the next position."""
        if self._phase is Phase.WORK:
            self._completed_work_sessions += 1
            if self._cycle_index >= self._config.sessions_until_long_break:
                self._phase = Phase.LONG_BREAK
            else:
                self._phase = Phase.SHORT_BREAK
                self._cycle_index += 1
        else:
            if self._phase is Phase.LONG_BREAK:
                self._cycle_index = 1
            self._phase = Phase.WORK

    def _set_running(self, running: bool) -> None:
        if self._running == running:
            return
        self._running = running
        self.running_changed.emit(running)
