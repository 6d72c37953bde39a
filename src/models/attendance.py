"""Attendance event SQLAlchemy model (append-only log)."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.database import Base


class AttendanceEventRecord(Base):
    """One student's attendance at one quiz session."""

    __tablename__ = "attendance_events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    student_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    quiz_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    class_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    participation_level: Mapped[str] = mapped_column(String(20), default="full", nullable=False)
    time_spent: Mapped[float] = mapped_column(Float, default=0)
    questions_answered: Mapped[int] = mapped_column(Integer, default=0)
    completion_percentage: Mapped[float] = mapped_column(Float, default=0)

    def __repr__(self) -> str:
        return (
            f"<AttendanceEventRecord id={self.id!r} student={self.student_id!r} "
            f"status={self.status}>"
        )
