"""Pomodo: a Pomodoro study timer with optional Spotify ducking."""

__version__ = "0.1.0"
