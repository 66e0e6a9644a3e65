"""Circular progress ring rendered with QPainter.

The ring sits at the centre of the timer card:
- Fills clockwise from 12 o'clock as the phase progresses.
- Drawn in the theme's accent colour over a faint track.
- Shows MM:SS in the middle.
- Animates smoothly between fill levels.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt, QRectF, QVariantAnimation, QEasingCurve
from PyQt6.QtGui import QPainter, QPen, QColor, QFont
from PyQt6.QtWidgets import QWidget


class ProgressRing(QWidget):
    """Custom-painted circular timer ring."""

    RING_DIAMETER = 240
    RING_THICKNESS = 10

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setMinimumSize(self.RING_DIAMETER + 20, self.RING_DIAMETER + 20)

        self._percent: float = 0.0           # 0..1 target fill
        self._display_percent: float = 0.0   # animated fill
        self._time_text: str = "25:00"

        self._accent_color = QColor("#D4956A")
        self._text_color = QColor("#E8D5C4")

        self._arc_anim = QVariantAnimation(self)
        self._arc_anim.setDuration(400)
        self._arc_anim.setEasingCurve(QEasingCurve.Type.OutCubic)
        self._arc_anim.valueChanged.connect(self._on_arc_anim)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC API
    # ══════════════════════════════════════════════════════════════════

    def set_percent(self, pct: float) -> None:
        """Update the arc fill (0..1).  Smoothly animates."""
        pct = max(0.0, min(1.0, pct))
        if pct == self._percent:
            return
        self._percent = pct
        self._arc_anim.stop()
        # A reset or new phase snaps back rather than unwinding the ring
        if pct < self._display_percent:
            self._display_percent = pct
            self.update()
            return
        self._arc_anim.setStartValue(self._display_percent)
        self._arc_anim.setEndValue(pct)
        self._arc_anim.start()

    def set_time_text(self, text: str) -> None:
        self._time_text = text
        self.update()

    def apply_palette(self, palette: dict[str, str]) -> None:
        """Take the accent and text colours from a theme palette."""
        self._accent_color = QColor(palette.get("accent", "#D4956A"))
        self._text_color = QColor(palette.get("text", "#E8D5C4"))
        self.update()

    @property
    def percent(self) -> float:
        return self._percent

    @property
    def time_text(self) -> str:
        return self._time_text

    @property
    def accent_color(self) -> str:
        return self._accent_color.name().upper()

    # ══════════════════════════════════════════════════════════════════
    #  PAINTING
    # ══════════════════════════════════════════════════════════════════

    def _on_arc_anim(self, value: object) -> None:
        self._display_percent = float(value)  # type: ignore[arg-type]
        self.update()

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        cx, cy = self.width() / 2, self.height() / 2
        diameter = max(100, min(self.width(), self.height()) - 20)
        radius = diameter / 2
        ring_rect = QRectF(cx - radius, cy - radius, diameter, diameter)

        # ── background track ─────────────────────────────────────────
        track_color = QColor(self._text_color)
        track_color.setAlpha(30)
        track_pen = QPen(track_color, self.RING_THICKNESS, Qt.PenStyle.SolidLine)
        painter.setPen(track_pen)
        painter.drawEllipse(ring_rect)

        # ── progress arc ─────────────────────────────────────────────
        pct = self._display_percent
        if pct > 0.001:
            arc_pen = QPen(self._accent_color, self.RING_THICKNESS, Qt.PenStyle.SolidLine)
            arc_pen.setCapStyle(Qt.PenCapStyle.RoundCap)
            painter.setPen(arc_pen)
            # Qt arcs: start at 12 o'clock (90*16), go clockwise (negative)
            painter.drawArc(ring_rect, 90 * 16, -int(pct * 360 * 16))

        # ── centre text ──────────────────────────────────────────────
        time_font = QFont()
        time_font.setPixelSize(56)
        time_font.setWeight(QFont.Weight.Light)
        painter.setFont(time_font)
        painter.setPen(self._text_color)
        painter.drawText(ring_rect, Qt.AlignmentFlag.AlignCenter, self._time_text)

        painter.end()
