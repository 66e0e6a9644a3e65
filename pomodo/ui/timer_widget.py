"""Main timer card: phase, countdown, cycle dots and controls.

Layout (top → bottom):
    - Phase label ("FOCUS TIME", "SHORT BREAK", ...)
    - Progress ring with the countdown (MM:SS) in the middle
    - Cycle dots, one per work session until the long break
    - Reset / Start-Pause / Skip buttons
    - Today's completed session count
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QFrame,
)

from ..timer.engine import SessionEngine, Phase
from .progress_ring import ProgressRing


def format_time(seconds: int) -> str:
    m, s = divmod(max(0, seconds), 60)
    return f"{m:02d}:{s:02d}"


def completed_in_cycle(engine: SessionEngine) -> int:
    """How many dots to fill for the engine's position in the cycle."""
    if engine.phase is Phase.LONG_BREAK:
        return engine.sessions_until_long_break
    return min(engine.cycle_index - 1, engine.sessions_until_long_break)


class TimerWidget(QWidget):
    """Shows the engine state and drives it from the three buttons."""

    def __init__(self, engine: SessionEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self._daily_count = engine.completed_work_sessions
        self._build_ui()
        self._connect_signals()
        self.refresh()

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)

        card = QFrame(self)
        card.setObjectName("card")
        root.addWidget(card)

        layout = QVBoxLayout(card)
        layout.setContentsMargins(32, 28, 32, 28)
        layout.setSpacing(8)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._phase_label = QLabel(card)
        self._phase_label.setObjectName("phaseLabel")
        self._phase_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._phase_label)

        self._ring = ProgressRing(card)
        layout.addWidget(self._ring, alignment=Qt.AlignmentFlag.AlignCenter)

        self._dots_label = QLabel(card)
        self._dots_label.setObjectName("dotsLabel")
        self._dots_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._dots_label)

        layout.addSpacing(16)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        btn_row.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._reset_btn = QPushButton("Reset", card)
        self._reset_btn.setObjectName("secondaryButton")

        self._start_pause_btn = QPushButton("Start", card)
        self._start_pause_btn.setObjectName("primaryButton")

        self._skip_btn = QPushButton("Skip", card)
        self._skip_btn.setObjectName("secondaryButton")

        btn_row.addWidget(self._reset_btn)
        btn_row.addWidget(self._start_pause_btn)
        btn_row.addWidget(self._skip_btn)
        layout.addLayout(btn_row)

        layout.addSpacing(12)

        self._daily_label = QLabel(card)
        self._daily_label.setObjectName("dailyLabel")
        self._daily_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._daily_label)

    def _connect_signals(self) -> None:
        self._start_pause_btn.clicked.connect(self.toggle)
        self._reset_btn.clicked.connect(self._engine.reset)
        self._skip_btn.clicked.connect(self._engine.skip)
        self._engine.ticked.connect(self._on_tick)
        self._engine.state_changed.connect(self.refresh)

    # ── actions ───────────────────────────────────────────────────────────

    def toggle(self) -> None:
        if self._engine.is_running:
            self._engine.pause()
        else:
            self._engine.start()

    def apply_palette(self, palette: dict[str, str]) -> None:
        self._ring.apply_palette(palette)

    def set_daily_count(self, count: int) -> None:
        self._daily_count = count
        self._daily_label.setText(self._daily_text())

    # ── display ───────────────────────────────────────────────────────────

    def refresh(self) -> None:
        engine = self._engine
        self._phase_label.setText(engine.phase.label.upper())
        self._ring.set_time_text(format_time(engine.remaining))
        self._ring.set_percent(engine.percent_complete)
        filled = completed_in_cycle(engine)
        total = engine.sessions_until_long_break
        self._dots_label.setText("●" * filled + "○" * max(0, total - filled))
        self._start_pause_btn.setText("Pause" if engine.is_running else "Start")
        self._skip_btn.setEnabled(engine.phase.is_break)
        self._daily_label.setText(self._daily_text())

    def _on_tick(self, remaining: int, phase: Phase) -> None:
        self._ring.set_time_text(format_time(remaining))
        self._ring.set_percent(self._engine.percent_complete)

    def _daily_text(self) -> str:
        n = self._daily_count
        return f"{n} session{'s' if n != 1 else ''} completed today"

    # ── read-only views for the window / tests ───────────────────────────

    @property
    def time_text(self) -> str:
        return self._ring.time_text

    @property
    def ring(self) -> ProgressRing:
        return self._ring

    @property
    def phase_text(self) -> str:
        return self._phase_label.text()

    @property
    def dots_text(self) -> str:
        return self._dots_label.text()

    @property
    def daily_text(self) -> str:
        return self._daily_label.text()

    @property
    def start_pause_text(self) -> str:
        return self._start_pause_btn.text()

    @property
    def skip_enabled(self) -> bool:
        return self._skip_btn.isEnabled()
