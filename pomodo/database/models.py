"""SQLAlchemy ORM models for Pomodo."""

from sqlalchemy import Column, Integer, Date
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class DailyStats(Base):
    """One row per calendar day with completed work sessions."""

    __tablename__ = "daily_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, unique=True)
    completed_work_sessions = Column(Integer, nullable=False, default=0)
    focus_minutes = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<DailyStats date={self.date} "
            f"sessions={self.completed_work_sessions} focus={self.focus_minutes}m>"
        )
