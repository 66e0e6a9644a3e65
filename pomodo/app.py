"""Main application window for Pomodo.

The window is the host for the session engine: it owns the one-second tick
driver and reacts to the engine's signals with sounds, notifications,
stats, theme changes and, when Spotify is connected, music ducking.
"""

from __future__ import annotations

import concurrent.futures
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import Qt, QTimer, QUrl, pyqtSignal
from PyQt6.QtGui import QAction, QColor, QDesktopServices, QIcon, QKeySequence, QPainter, QPixmap
from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLabel,
    QStatusBar, QSystemTrayIcon, QInputDialog,
)

from .timer.engine import SessionEngine, Phase
from .timer.clock import TickDriver
from .settings import Settings, load_settings, save_settings
from .stats import load_today, record_work_session
from .themes import build_stylesheet, get_theme, next_theme_id
from .audio.sounds import SoundManager
from .playback.controller import PlaybackController, PlaybackError, PlaybackState
from .playback.ducking import PlaybackDucking
from .playback.runner import FadeRunner
from .ui.timer_widget import TimerWidget, format_time


log = logging.getLogger(__name__)

NOW_PLAYING_INTERVAL_MS = 5000


def make_icon(colour: str = "#D4956A") -> QIcon:
    """A plain filled circle, used for the window and tray icons."""
    size = 64
    pixmap = QPixmap(size, size)
    pixmap.fill(QColor(0, 0, 0, 0))
    p = QPainter(pixmap)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    p.setBrush(QColor(colour))
    p.setPen(QColor(colour).darker(120))
    p.drawEllipse(4, 4, size - 8, size - 8)
    p.end()
    return QIcon(pixmap)


def completion_message(previous: Phase, new: Phase) -> tuple[str, str]:
    """Notification title and body for a phase transition."""
    if new is Phase.LONG_BREAK:
        return "Great work!", "Time for a long break. You earned it!"
    if new is Phase.SHORT_BREAK:
        return "Well done!", "Time for a short break!"
    if previous is Phase.LONG_BREAK:
        return "Long break over", "Feeling refreshed? Let's continue!"
    return "Break over!", "Ready to focus again?"


def now_playing_text(state: Optional[PlaybackState]) -> str:
    if state is None:
        return "Not playing"
    if not state.track_name:
        return "No track playing"
    if state.artist_name:
        return f"{state.track_name} \u00b7 {state.artist_name}"
    return state.track_name


class PomodoApp(QMainWindow):
    """Main application window."""

    # Emitted from the fade thread; delivered on the GUI thread.
    music_error = pyqtSignal(str)
    now_playing_changed = pyqtSignal(str)

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        controller: PlaybackController | None = None,
        sounds_dir: Path | None = None,
        persist_settings: bool = True,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Pomodo")
        self.setWindowIcon(make_icon())

        # ── settings ──────────────────────────────────────────────────
        self._settings: Settings = settings or load_settings()
        self._persist_settings = persist_settings
        self.resize(self._settings.window_width, self._settings.window_height)

        # ── engine + driver ───────────────────────────────────────────
        today = load_today()
        self._stats_day = today.date
        self._engine = SessionEngine(
            self._settings.to_engine_config(),
            parent=self,
            completed_work_sessions=today.completed_work_sessions,
        )
        self._driver = TickDriver(self._engine, parent=self)

        # ── audio ─────────────────────────────────────────────────────
        self._sound_manager = SoundManager(parent=self, sounds_dir=sounds_dir)

        # ── music ─────────────────────────────────────────────────────
        self._auth = None
        self._controller: Optional[PlaybackController] = controller
        self._ducking = PlaybackDucking()
        self._runner: Optional[FadeRunner] = None
        if controller is None:
            self._build_spotify()

        # ── layout ────────────────────────────────────────────────────
        central = QWidget(self)
        self.setCentralWidget(central)
        root = QVBoxLayout(central)
        root.setContentsMargins(20, 16, 20, 16)
        root.setSpacing(16)

        top_row = QHBoxLayout()
        top_row.addStretch()
        self._music_btn = QPushButton(central)
        self._music_btn.setObjectName("secondaryButton")
        self._music_btn.clicked.connect(self._toggle_spotify)
        top_row.addWidget(self._music_btn)
        self._gear_btn = QPushButton("Settings", central)
        self._gear_btn.setObjectName("secondaryButton")
        self._gear_btn.clicked.connect(self._open_settings)
        top_row.addWidget(self._gear_btn)
        root.addLayout(top_row)

        self._timer_widget = TimerWidget(self._engine, central)
        self._timer_widget.set_daily_count(today.completed_work_sessions)
        root.addWidget(self._timer_widget)

        self._now_playing_label = QLabel("Not playing", central)
        self._now_playing_label.setObjectName("nowPlayingLabel")
        self._now_playing_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        root.addWidget(self._now_playing_label)
        root.addStretch()

        self._status_bar = QStatusBar(self)
        self.setStatusBar(self._status_bar)
        self._status_bar.showMessage("Ready to focus!")

        # ── now playing poll ──────────────────────────────────────────
        self._now_playing_timer = QTimer(self)
        self._now_playing_timer.setInterval(NOW_PLAYING_INTERVAL_MS)
        self._now_playing_timer.timeout.connect(self._poll_now_playing)

        # ── tray icon (notifications) ─────────────────────────────────
        self._tray_icon = QSystemTrayIcon(make_icon(), self)
        self._tray_icon.setToolTip("Pomodo")
        if QSystemTrayIcon.isSystemTrayAvailable():
            self._tray_icon.show()

        # ── wire signals ──────────────────────────────────────────────
        self._engine.ticked.connect(self._on_tick)
        self._engine.phase_started.connect(self._on_phase_started)
        self._engine.phase_completed.connect(self._on_phase_completed)
        self.music_error.connect(self._on_music_error)
        self.now_playing_changed.connect(self._now_playing_label.setText)

        self._setup_shortcuts()
        self._apply_settings()
        self._update_title()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC VIEWS
    # ══════════════════════════════════════════════════════════════════

    @property
    def engine(self) -> SessionEngine:
        return self._engine

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def timer_widget(self) -> TimerWidget:
        return self._timer_widget

    @property
    def status_text(self) -> str:
        return self._status_bar.currentMessage()

    @property
    def music_enabled(self) -> bool:
        return self._controller is not None

    @property
    def now_playing_text(self) -> str:
        return self._now_playing_label.text()

    # ══════════════════════════════════════════════════════════════════
    #  HELPERS
    # ══════════════════════════════════════════════════════════════════

    def _play_sound(self, name: str) -> None:
        self._sound_manager.play(name)

    def _send_notification(self, title: str, body: str) -> None:
        """Show a desktop notification via the tray icon."""
        if not self._settings.notifications_enabled:
            return
        if self._tray_icon.isVisible():
            self._tray_icon.showMessage(title, body)

    def _update_title(self) -> None:
        self.setWindowTitle(
            f"{format_time(self._engine.remaining)} - "
            f"{self._engine.phase.label} - Pomodo"
        )

    # ══════════════════════════════════════════════════════════════════
    #  ENGINE SIGNALS
    # ══════════════════════════════════════════════════════════════════

    def _refresh_daily_count(self) -> None:
        """Reload today's count once the date has rolled over."""
        today = date.today()
        if today == self._stats_day:
            return
        snapshot = load_today(today)
        self._stats_day = snapshot.date
        self._engine.completed_work_sessions = snapshot.completed_work_sessions
        self._timer_widget.set_daily_count(snapshot.completed_work_sessions)

    def _on_tick(self, remaining: int, phase: Phase) -> None:
        self._update_title()
        self._tray_icon.setToolTip(f"Pomodo - {phase.label} {format_time(remaining)}")

    def _on_phase_started(self, phase: Phase) -> None:
        self._refresh_daily_count()
        self._play_sound("session_start")
        self._status_bar.showMessage("Focusing..." if phase is Phase.WORK else f"{phase.label}")
        if phase is Phase.WORK and self._settings.auto_resume_on_work:
            self._duck(fade_in=True)

    def _on_phase_completed(self, previous: Phase, new: Phase) -> None:
        self._play_sound("break_start" if new is Phase.WORK else "session_complete")
        title, body = completion_message(previous, new)
        self._send_notification(title, body)
        self._status_bar.showMessage(body)

        if previous is Phase.WORK:
            snapshot = record_work_session(self._settings.work_duration // 60)
            self._stats_day = snapshot.date
            self._engine.completed_work_sessions = snapshot.completed_work_sessions
            self._timer_widget.set_daily_count(snapshot.completed_work_sessions)
            if self._settings.auto_pause_on_break:
                self._duck(fade_in=False)

        self._apply_theme()
        self._update_title()

    # ══════════════════════════════════════════════════════════════════
    #  MUSIC
    # ══════════════════════════════════════════════════════════════════

    def _build_spotify(self) -> None:
        """Create the Spotify stack when a client id is configured."""
        if not self._settings.spotify_client_id:
            return
        from .playback.auth import SpotifyAuth
        from .playback.spotify import SpotifyController

        self._auth = SpotifyAuth(
            self._settings.spotify_client_id,
            self._settings.spotify_redirect_uri,
        )
        if self._auth.is_logged_in():
            self._controller = SpotifyController(self._auth)

    def _fade_runner(self) -> FadeRunner:
        if self._runner is None:
            self._runner = FadeRunner()
        return self._runner

    def _duck(self, *, fade_in: bool) -> Optional[concurrent.futures.Future]:
        controller = self._controller
        if controller is None:
            return None
        duration = self._settings.fade_duration_ms
        if fade_in:
            volume = self._settings.music_volume
            future = self._fade_runner().submit(
                lambda: self._ducking.resume_and_fade_in(controller, volume, duration)
            )
        else:
            future = self._fade_runner().submit(
                lambda: self._ducking.fade_out_and_pause(controller, duration)
            )
        future.add_done_callback(self._on_fade_done)
        return future

    def _on_fade_done(self, future: concurrent.futures.Future) -> None:
        # Runs on the fade thread.
        if future.cancelled():
            return
        exc = future.exception()
        if isinstance(exc, PlaybackError):
            self.music_error.emit(str(exc))
        elif exc is not None:
            log.error("fade failed", exc_info=exc)
            self.music_error.emit("Music control failed")

    def _on_music_error(self, message: str) -> None:
        log.warning("music: %s", message)
        self._status_bar.showMessage(f"Music: {message}")

    def _poll_now_playing(self) -> Optional[concurrent.futures.Future]:
        controller = self._controller
        if controller is None:
            return None
        future = self._fade_runner().schedule(controller.get_state)
        future.add_done_callback(self._on_now_playing_done)
        return future

    def _on_now_playing_done(self, future: concurrent.futures.Future) -> None:
        # Runs on the fade thread.
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            self.now_playing_changed.emit(now_playing_text(future.result()))
            return
        if isinstance(exc, PlaybackError):
            log.debug("now playing unavailable: %s", exc)
        else:
            log.error("now playing poll failed", exc_info=exc)
        self.now_playing_changed.emit(now_playing_text(None))

    def _toggle_spotify(self) -> None:
        if self._auth is None:
            self._status_bar.showMessage("Add a Spotify client ID in Settings first")
            return
        if self._auth.is_logged_in():
            self._auth.logout()
            self._controller = None
            self._status_bar.showMessage("Spotify disconnected")
        else:
            self._connect_spotify()
        self._refresh_music_button()

    def _connect_spotify(self) -> None:
        from .playback.auth import AuthError
        from .playback.spotify import SpotifyController

        QDesktopServices.openUrl(QUrl(self._auth.begin_login()))
        callback, ok = QInputDialog.getText(
            self, "Connect Spotify",
            "After approving, paste the address your browser was sent to:",
        )
        if not ok or not callback.strip():
            return
        auth = self._auth
        try:
            self._fade_runner().call(lambda: auth.complete_login(callback.strip()), timeout=30)
        except AuthError as exc:
            self._status_bar.showMessage(f"Spotify login failed: {exc}")
            return
        except concurrent.futures.TimeoutError:
            log.warning("Spotify token exchange timed out")
            self._status_bar.showMessage("Spotify login timed out")
            return
        self._controller = SpotifyController(auth)
        self._status_bar.showMessage("Spotify connected")

    def _refresh_music_button(self) -> None:
        if self._controller is not None:
            self._music_btn.setText("Disconnect Spotify")
        else:
            self._music_btn.setText("Connect Spotify")
        self._music_btn.setVisible(self._auth is not None or self._controller is not None)
        self._now_playing_label.setVisible(self._controller is not None)
        if self._controller is None:
            self._now_playing_timer.stop()
            self._now_playing_label.setText(now_playing_text(None))
        elif not self._now_playing_timer.isActive():
            self._now_playing_timer.start()

    # ══════════════════════════════════════════════════════════════════
    #  SETTINGS / THEME
    # ══════════════════════════════════════════════════════════════════

    def _open_settings(self) -> None:
        from .ui.settings_dialog import SettingsDialog

        def _preview_click():
            self._sound_manager.set_volume(self._settings.sound_volume)
            self._sound_manager.set_enabled(self._settings.sound_enabled)
            self._sound_manager.play("click")

        client_id = self._settings.spotify_client_id
        dlg = SettingsDialog(
            self._settings,
            parent=self,
            sound_preview_callback=_preview_click,
            persist=self._persist_settings,
        )
        dlg.exec()

        if self._settings.spotify_client_id != client_id:
            self._controller = None
            self._auth = None
            self._build_spotify()
        self._apply_settings()

    def _apply_settings(self) -> None:
        """Push current Settings into all subsystems."""
        s = self._settings
        self._engine.configure(s.to_engine_config())
        self._sound_manager.set_volume(s.sound_volume)
        self._sound_manager.set_enabled(s.sound_enabled)
        self._apply_theme()
        self._refresh_music_button()

    def _apply_theme(self) -> None:
        self.setStyleSheet(build_stylesheet(self._settings.theme, self._engine.phase))
        self._timer_widget.apply_palette(
            get_theme(self._settings.theme).palette(self._engine.phase)
        )

    def _cycle_theme(self) -> None:
        self._settings.theme = next_theme_id(self._settings.theme)
        self._save_settings()
        self._apply_theme()
        self._status_bar.showMessage(f"Theme: {get_theme(self._settings.theme).name}")

    def _save_settings(self) -> None:
        if self._persist_settings:
            save_settings(self._settings)

    # ══════════════════════════════════════════════════════════════════
    #  KEYBOARD SHORTCUTS
    # ══════════════════════════════════════════════════════════════════

    def _setup_shortcuts(self) -> None:
        """Ctrl+T cycles the theme; Space / R / S go through keyPressEvent."""
        cycle_theme = QAction("Cycle Theme", self)
        cycle_theme.setShortcut(QKeySequence("Ctrl+T"))
        cycle_theme.triggered.connect(self._cycle_theme)
        self.addAction(cycle_theme)

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        key = event.key()
        if event.modifiers() == Qt.KeyboardModifier.NoModifier:
            if key == Qt.Key.Key_Space:
                self._timer_widget.toggle()
                event.accept()
                return
            if key == Qt.Key.Key_R:
                self._engine.reset()
                event.accept()
                return
            if key == Qt.Key.Key_S:
                self._open_settings()
                event.accept()
                return
        super().keyPressEvent(event)

    # ══════════════════════════════════════════════════════════════════
    #  WINDOW EVENTS
    # ══════════════════════════════════════════════════════════════════

    def shutdown(self) -> None:
        """Stop the timers, close the Spotify client and the fade thread."""
        self._driver.stop()
        self._now_playing_timer.stop()
        if self._runner is not None:
            close = getattr(self._controller, "aclose", None)
            if close is not None:
                self._runner.call(close, timeout=5)
            self._runner.close()
            self._runner = None
        self._tray_icon.hide()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._settings.window_width = self.width()
        self._settings.window_height = self.height()
        self._save_settings()
        self.shutdown()
        event.accept()
