"""Daily work-session statistics.

Counts live in the ``daily_stats`` table, one row per day.  Asking for
today when only an older row exists yields zeros, which is how the count
resets at midnight.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from .database.db import get_session
from .database.models import DailyStats


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatsSnapshot:
    date: date
    completed_work_sessions: int = 0
    focus_minutes: int = 0


def _snapshot(row: DailyStats | None, day: date) -> StatsSnapshot:
    if row is None:
        return StatsSnapshot(date=day)
    return StatsSnapshot(
        date=row.date,
        completed_work_sessions=row.completed_work_sessions,
        focus_minutes=row.focus_minutes,
    )


def load_today(today: date | None = None) -> StatsSnapshot:
    """Stats for *today* (default: the current date)."""
    day = today or date.today()
    with get_session() as db:
        row = db.query(DailyStats).filter(DailyStats.date == day).first()
        return _snapshot(row, day)


def record_work_session(focus_minutes: int, today: date | None = None) -> StatsSnapshot:
    """Count one completed work session of *focus_minutes* for today."""
    day = today or date.today()
    with get_session() as db:
        row = db.query(DailyStats).filter(DailyStats.date == day).first()
        if row is None:
            row = DailyStats(date=day, completed_work_sessions=0, focus_minutes=0)
            db.add(row)
        row.completed_work_sessions += 1
        row.focus_minutes += focus_minutes
        db.flush()
        snapshot = _snapshot(row, day)
    log.debug("recorded work session: %s", snapshot)
    return snapshot


def recent_days(days: int = 7, today: date | None = None) -> list[StatsSnapshot]:
    """One snapshot per day for the last *days* days, oldest first."""
    end = today or date.today()
    start = end - timedelta(days=days - 1)
    with get_session() as db:
        rows = (
            db.query(DailyStats)
            .filter(DailyStats.date >= start, DailyStats.date <= end)
            .all()
        )
        by_day = {r.date: r for r in rows}
        return [
            _snapshot(by_day.get(start + timedelta(days=i)), start + timedelta(days=i))
            for i in range(days)
        ]
