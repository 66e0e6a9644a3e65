"""Settings dialog for Pomodo.

A modal dialog for timer durations, alerts, theme and background music.
Every change is saved to disk immediately; the caller re-applies the
settings once the dialog closes.
"""

from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout,
    QLabel, QSpinBox, QSlider, QCheckBox, QPushButton,
    QFrame, QWidget, QComboBox, QLineEdit,
)

from ..settings import Settings, save_settings
from ..themes import THEMES


class SettingsDialog(QDialog):
    """Modal dialog for all user preferences."""

    def __init__(
        self,
        settings: Settings,
        parent: QWidget | None = None,
        *,
        sound_preview_callback: Callable[[], None] | None = None,
        persist: bool = True,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.setMinimumWidth(420)
        self.setModal(True)

        self._settings = settings
        self._sound_preview = sound_preview_callback
        self._persist = persist
        self._populating = True  # until _populate() finishes

        self._build_ui()
        self._populate()

    # ══════════════════════════════════════════════════════════════════
    #  BUILD UI
    # ══════════════════════════════════════════════════════════════════

    def _build_ui(self) -> None:
        root = QVBoxLayout(self)
        root.setContentsMargins(24, 20, 24, 20)
        root.setSpacing(16)

        # ── Timer section ────────────────────────────────────────────
        root.addWidget(self._section_label("Timer"))
        timer_form = self._form()

        self._work_spin = self._minutes_spin(1, 120)
        timer_form.addRow("Work duration:", self._work_spin)

        self._short_spin = self._minutes_spin(1, 30)
        timer_form.addRow("Short break:", self._short_spin)

        self._long_spin = self._minutes_spin(1, 60)
        timer_form.addRow("Long break:", self._long_spin)

        self._sessions_spin = QSpinBox()
        self._sessions_spin.setRange(2, 12)
        self._sessions_spin.valueChanged.connect(self._on_changed)
        timer_form.addRow("Sessions until long break:", self._sessions_spin)

        self._auto_start_cb = QCheckBox("Start the next session automatically")
        self._auto_start_cb.toggled.connect(self._on_changed)
        timer_form.addRow("", self._auto_start_cb)

        root.addLayout(timer_form)
        root.addWidget(self._separator())

        # ── Sound & Notifications section ────────────────────────────
        root.addWidget(self._section_label("Sound & Notifications"))
        snd_form = self._form()

        self._sound_cb = QCheckBox("Sound effects")
        self._sound_cb.toggled.connect(self._on_changed)
        snd_form.addRow("", self._sound_cb)

        self._vol_slider, self._vol_label, vol_wrapper = self._percent_slider()
        self._vol_slider.sliderReleased.connect(self._on_volume_released)
        snd_form.addRow("Volume:", vol_wrapper)

        self._notif_cb = QCheckBox("Desktop notifications")
        self._notif_cb.toggled.connect(self._on_changed)
        snd_form.addRow("", self._notif_cb)

        root.addLayout(snd_form)
        root.addWidget(self._separator())

        # ── Appearance section ───────────────────────────────────────
        root.addWidget(self._section_label("Appearance"))
        look_form = self._form()

        self._theme_combo = QComboBox()
        for theme in THEMES:
            self._theme_combo.addItem(theme.name, theme.id)
        self._theme_combo.currentIndexChanged.connect(self._on_changed)
        look_form.addRow("Theme:", self._theme_combo)

        root.addLayout(look_form)
        root.addWidget(self._separator())

        # ── Music section ────────────────────────────────────────────
        root.addWidget(self._section_label("Music (Spotify)"))
        music_form = self._form()

        self._client_id_edit = QLineEdit()
        self._client_id_edit.setPlaceholderText("Spotify app client ID")
        self._client_id_edit.editingFinished.connect(self._on_changed)
        music_form.addRow("Client ID:", self._client_id_edit)

        self._auto_pause_cb = QCheckBox("Fade out and pause on breaks")
        self._auto_pause_cb.toggled.connect(self._on_changed)
        music_form.addRow("", self._auto_pause_cb)

        self._auto_resume_cb = QCheckBox("Resume and fade in for focus")
        self._auto_resume_cb.toggled.connect(self._on_changed)
        music_form.addRow("", self._auto_resume_cb)

        self._fade_spin = QSpinBox()
        self._fade_spin.setRange(0, 10000)
        self._fade_spin.setSingleStep(500)
        self._fade_spin.setSuffix(" ms")
        self._fade_spin.valueChanged.connect(self._on_changed)
        music_form.addRow("Fade duration:", self._fade_spin)

        self._music_slider, self._music_label, music_wrapper = self._percent_slider()
        music_form.addRow("Music volume:", music_wrapper)

        root.addLayout(music_form)

        # ── close button ─────────────────────────────────────────────
        root.addStretch()
        btn_row = QHBoxLayout()
        btn_row.addStretch()
        close_btn = QPushButton("Close")
        close_btn.setObjectName("secondaryButton")
        close_btn.clicked.connect(self.accept)
        btn_row.addWidget(close_btn)
        root.addLayout(btn_row)

    # ── helpers ──────────────────────────────────────────────────────

    @staticmethod
    def _section_label(text: str) -> QLabel:
        lbl = QLabel(text)
        lbl.setStyleSheet("font-size: 15px; font-weight: 700; margin-top: 4px;")
        return lbl

    @staticmethod
    def _separator() -> QFrame:
        line = QFrame()
        line.setFrameShape(QFrame.Shape.HLine)
        line.setFixedHeight(1)
        line.setStyleSheet("background-color: rgba(255,255,255,0.08);")
        return line

    @staticmethod
    def _form() -> QFormLayout:
        form = QFormLayout()
        form.setContentsMargins(0, 0, 0, 0)
        form.setHorizontalSpacing(20)
        form.setVerticalSpacing(10)
        return form

    def _minutes_spin(self, low: int, high: int) -> QSpinBox:
        spin = QSpinBox()
        spin.setRange(low, high)
        spin.setSuffix(" min")
        spin.valueChanged.connect(self._on_changed)
        return spin

    def _percent_slider(self) -> tuple[QSlider, QLabel, QWidget]:
        row = QHBoxLayout()
        row.setSpacing(10)
        slider = QSlider(Qt.Orientation.Horizontal)
        slider.setRange(0, 100)
        slider.setTickInterval(10)
        label = QLabel("0%")
        label.setMinimumWidth(36)
        slider.valueChanged.connect(lambda v: label.setText(f"{v}%"))
        slider.valueChanged.connect(self._on_changed)
        row.addWidget(slider)
        row.addWidget(label)
        wrapper = QWidget()
        wrapper.setLayout(row)
        return slider, label, wrapper

    # ══════════════════════════════════════════════════════════════════
    #  POPULATE FROM SETTINGS
    # ══════════════════════════════════════════════════════════════════

    def _populate(self) -> None:
        s = self._settings
        self._populating = True
        self._work_spin.setValue(s.work_duration // 60)
        self._short_spin.setValue(s.short_break_duration // 60)
        self._long_spin.setValue(s.long_break_duration // 60)
        self._sessions_spin.setValue(s.sessions_until_long_break)
        self._auto_start_cb.setChecked(s.auto_start)
        self._sound_cb.setChecked(s.sound_enabled)
        self._vol_slider.setValue(s.sound_volume)
        self._vol_label.setText(f"{s.sound_volume}%")
        self._notif_cb.setChecked(s.notifications_enabled)
        idx = self._theme_combo.findData(s.theme)
        self._theme_combo.setCurrentIndex(max(0, idx))
        self._client_id_edit.setText(s.spotify_client_id)
        self._auto_pause_cb.setChecked(s.auto_pause_on_break)
        self._auto_resume_cb.setChecked(s.auto_resume_on_work)
        self._fade_spin.setValue(s.fade_duration_ms)
        self._music_slider.setValue(s.music_volume)
        self._music_label.setText(f"{s.music_volume}%")
        self._populating = False

    # ══════════════════════════════════════════════════════════════════
    #  CHANGE HANDLER, saves immediately
    # ══════════════════════════════════════════════════════════════════

    def _on_changed(self) -> None:
        if self._populating:
            return
        s = self._settings
        s.work_duration = self._work_spin.value() * 60
        s.short_break_duration = self._short_spin.value() * 60
        s.long_break_duration = self._long_spin.value() * 60
        s.sessions_until_long_break = self._sessions_spin.value()
        s.auto_start = self._auto_start_cb.isChecked()
        s.sound_enabled = self._sound_cb.isChecked()
        s.sound_volume = self._vol_slider.value()
        s.notifications_enabled = self._notif_cb.isChecked()
        s.theme = self._theme_combo.currentData()
        s.spotify_client_id = self._client_id_edit.text().strip()
        s.auto_pause_on_break = self._auto_pause_cb.isChecked()
        s.auto_resume_on_work = self._auto_resume_cb.isChecked()
        s.fade_duration_ms = self._fade_spin.value()
        s.music_volume = self._music_slider.value()
        if self._persist:
            save_settings(s)

    def _on_volume_released(self) -> None:
        """Play a click when the user lets go of the volume slider."""
        if self._sound_preview:
            self._sound_preview()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC
    # ══════════════════════════════════════════════════════════════════

    @property
    def settings(self) -> Settings:
        return self._settings
