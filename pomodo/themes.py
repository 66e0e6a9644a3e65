"""Colour themes and the QSS stylesheet built from them.

Each theme has a work palette and a break palette; the window switches
between the two as the session engine moves between phases.
"""

from __future__ import annotations

from dataclasses import dataclass

from .timer.engine import Phase


@dataclass(frozen=True)
class ThemeDef:
    id: str
    name: str
    work: dict[str, str]
    rest: dict[str, str]   # break palette

    def palette(self, phase: Phase) -> dict[str, str]:
        return dict(self.rest if phase.is_break else self.work)


def _palette(bg: str, bg_secondary: str, accent: str, text: str) -> dict[str, str]:
    return {"bg": bg, "bg_secondary": bg_secondary, "accent": accent, "text": text}


THEMES: tuple[ThemeDef, ...] = (
    ThemeDef(
        "cozy", "Cozy Study",
        work=_palette("#2C1810", "#1A0F0A", "#D4956A", "#E8D5C4"),
        rest=_palette("#1A2F1A", "#0F1F0F", "#7CB87C", "#D4E8D4"),
    ),
    ThemeDef(
        "night", "Night City",
        work=_palette("#0D0D1A", "#050510", "#FF6B9D", "#E0E0FF"),
        rest=_palette("#0A1A2A", "#051015", "#00D4FF", "#E0F0FF"),
    ),
    ThemeDef(
        "winter", "Winter",
        work=_palette("#1A2A3A", "#0F1A25", "#87CEEB", "#E8F4F8"),
        rest=_palette("#2A3A4A", "#1A2530", "#B0E0E6", "#F0F8FF"),
    ),
    ThemeDef(
        "spring", "Spring",
        work=_palette("#2D1F2D", "#1A121A", "#FFB7C5", "#F8E8F0"),
        rest=_palette("#1F2D1F", "#121A12", "#98D998", "#E8F8E8"),
    ),
    ThemeDef(
        "summer", "Summer",
        work=_palette("#1A2A3A", "#0F1A25", "#FFD700", "#FFF8E7"),
        rest=_palette("#2A3A2A", "#1A251A", "#90EE90", "#F0FFF0"),
    ),
    ThemeDef(
        "fall", "Fall",
        work=_palette("#2A1A0A", "#1A0F05", "#D2691E", "#F5DEB3"),
        rest=_palette("#1A2A1A", "#0F1A0F", "#8FBC8F", "#E8F5E8"),
    ),
)

DEFAULT_THEME_ID = "cozy"
THEME_IDS: tuple[str, ...] = tuple(t.id for t in THEMES)
_BY_ID: dict[str, ThemeDef] = {t.id: t for t in THEMES}


def get_theme(theme_id: str) -> ThemeDef:
    """Theme for *theme_id*, or Cozy Study for anything unknown."""
    return _BY_ID.get(theme_id, _BY_ID[DEFAULT_THEME_ID])


def next_theme_id(theme_id: str) -> str:
    try:
        idx = THEME_IDS.index(theme_id)
    except ValueError:
        idx = -1
    return THEME_IDS[(idx + 1) % len(THEME_IDS)]


def _with_alpha(hex_colour: str, alpha: float) -> str:
    h = hex_colour.lstrip("#")
    r, g, b = (int(h[i:i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r}, {g}, {b}, {alpha})"


# ── QSS builder ───────────────────────────────────────────────────────


def build_stylesheet(theme_id: str, phase: Phase) -> str:
    p = get_theme(theme_id).palette(phase)
    muted = _with_alpha(p["text"], 0.6)
    border = _with_alpha(p["text"], 0.15)
    return f"""
    /* ── global ─────────────────────────────────── */
    QWidget {{
        background-color: {p['bg']};
        color: {p['text']};
        font-family: "Helvetica Neue", Arial;
        font-size: 14px;
    }}

    QMainWindow {{
        background-color: {p['bg']};
    }}

    /* ── buttons ─────────────────────────────────── */
    QPushButton {{
        background-color: {p['bg_secondary']};
        color: {p['text']};
        border: 1px solid {border};
        border-radius: 10px;
        padding: 10px 24px;
        font-size: 14px;
        font-weight: 600;
    }}

    QPushButton:hover {{
        border-color: {p['accent']};
    }}

    QPushButton:disabled {{
        color: {muted};
    }}

    QPushButton#primaryButton {{
        background-color: {p['accent']};
        color: {p['bg']};
        border: none;
        font-size: 17px;
        padding: 14px 40px;
        border-radius: 12px;
        font-weight: 700;
    }}

    QPushButton#secondaryButton {{
        background-color: transparent;
        color: {muted};
        border: 1px solid {border};
        font-size: 13px;
        padding: 8px 16px;
        border-radius: 8px;
    }}

    QPushButton#secondaryButton:hover {{
        color: {p['text']};
    }}

    /* ── card ────────────────────────────────────── */
    QFrame#card {{
        background-color: {p['bg_secondary']};
        border: 1px solid {border};
        border-radius: 12px;
    }}

    /* ── labels ──────────────────────────────────── */
    QLabel#phaseLabel {{
        font-size: 15px;
        font-weight: 700;
        letter-spacing: 2px;
        color: {p['accent']};
        background-color: transparent;
    }}

    QLabel#dotsLabel, QLabel#dailyLabel, QLabel#nowPlayingLabel {{
        font-size: 13px;
        color: {muted};
        background-color: transparent;
    }}

    /* ── status bar ──────────────────────────────── */
    QStatusBar {{
        background-color: {p['bg']};
        color: {muted};
        font-size: 12px;
        border-top: 1px solid {border};
    }}
    """
