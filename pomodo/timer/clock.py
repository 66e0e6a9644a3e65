"""One-second tick source that drives a ``SessionEngine``."""

from __future__ import annotations

from PyQt6.QtCore import QObject, QTimer

from .engine import SessionEngine

TICK_INTERVAL_MS = 1000


class TickDriver(QObject):
    """Calls ``engine.tick()`` every second while the engine is running.

    The driver follows ``engine.running_changed`` rather than the other
    way round, so pausing, resetting or finishing a phase without
    auto-start all stop the Qt timer.
    """

    def __init__(
        self,
        engine: SessionEngine,
        parent: QObject | None = None,
        *,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._engine = engine

        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(interval_ms)
        self._qt_timer.timeout.connect(engine.tick)

        engine.running_changed.connect(self._on_running_changed)
        if engine.is_running:
            self._qt_timer.start()

    @property
    def active(self) -> bool:
        return self._qt_timer.isActive()

    def stop(self) -> None:
        self._qt_timer.stop()

    def _on_running_changed(self, running: bool) -> None:
        if running:
            self._qt_timer.start()
        else:
            self._qt_timer.stop()
