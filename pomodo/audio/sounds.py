"""Alert sounds synthesised with numpy and played with QSoundEffect.

Sounds are rendered once to WAV files in the app-support directory and
reused on later launches.

Sound names
-----------
- ``session_start``    two rising notes when a phase starts counting
- ``session_complete`` bright arpeggio when a work session ends
- ``break_start``      soft bell when a break ends and focus is next
- ``click``            short tick for the settings volume preview
"""

from __future__ import annotations

import io
import wave
from pathlib import Path
from typing import Callable

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..settings import APP_SUPPORT_DIR


SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SOUND_NAMES = (
    "session_start",
    "session_complete",
    "break_start",
    "click",
)

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _envelope(length: int, attack: int, release: int, sustain: float = 0.6) -> np.ndarray:
    """Attack / sustain / release envelope, durations in samples."""
    env = np.full(length, sustain, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, sustain, a)
    r = min(release, length - a)
    if r > 0:
        env[length - r:] = np.linspace(sustain, 0.0, r)
    return env


def _tone(freq: float, duration_s: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return amplitude * np.sin(2 * np.pi * freq * t)


def _silence(duration_s: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * duration_s))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Float samples in -1..1 as 16-bit mono PCM WAV."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


def _notes(freqs: list[float], note_s: float, gap_s: float, tail_s: float) -> np.ndarray:
    parts: list[np.ndarray] = []
    for i, freq in enumerate(freqs):
        last = i == len(freqs) - 1
        tone = _tone(freq, tail_s if last else note_s)
        parts.append(tone * _envelope(len(tone), attack=80, release=len(tone) // 2))
        if not last:
            parts.append(_silence(gap_s))
    return np.concatenate(parts)


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def generate_session_start() -> bytes:
    return _to_wav_bytes(_notes([587.33, 880.0], 0.10, 0.03, 0.18))  # D5, A5


def generate_session_complete() -> bytes:
    return _to_wav_bytes(_notes([523.25, 659.25, 783.99, 1046.50], 0.10, 0.02, 0.40))


def generate_break_start() -> bytes:
    duration = 1.0
    bell = _tone(440.0, duration, 0.35) + _tone(880.0, duration, 0.08)
    env = _envelope(len(bell), attack=int(SAMPLE_RATE * 0.05), release=int(SAMPLE_RATE * 0.8))
    return _to_wav_bytes(bell * env)


def generate_click() -> bytes:
    tick = _tone(1200.0, 0.015, 0.2)
    tick = tick * _envelope(len(tick), attack=20, release=len(tick) - 40)
    return _to_wav_bytes(np.concatenate([tick, _silence(0.03)]))


GENERATORS: dict[str, Callable[[], bytes]] = {
    "session_start": generate_session_start,
    "session_complete": generate_session_complete,
    "break_start": generate_break_start,
    "click": generate_click,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Caches the WAV files and plays them by name.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play("session_complete")
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play(self, name: str) -> None:
        """Play a sound by name.  No-op if disabled or name unknown."""
        if not self._enabled:
            return
        effect = self._effects.get(name)
        if effect is not None:
            effect.play()

    @property
    def volume(self) -> int:
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for name, generate in GENERATORS.items():
            path = self._sounds_dir / f"{name}.wav"
            if not path.exists():
                path.write_bytes(generate())

    def _load_effects(self) -> None:
        for name in SOUND_NAMES:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
