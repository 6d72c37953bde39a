"""Quiz attempt SQLAlchemy model backing the SQL data source."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.database import Base


class QuizAttempt(Base):
    """One completed quiz attempt, flattened to reporting fields.

    Column attributes are named after field-registry keys, except ``class``
    which is a Python keyword and lives on ``class_name``.
    """

    __tablename__ = "quiz_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    student_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    student_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    class_name: Mapped[Optional[str]] = mapped_column("class", String(100), nullable=True, index=True)
    grade: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quiz_title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    quiz_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    subject: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    difficulty: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    total_questions: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    correct_answers: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    percentage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    time_taken: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    average_time_per_question: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    time_spent_on_subject: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quiz_attempts: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    completion_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    streak_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    badges_earned: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    improvement_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    strong_topics: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    weak_topics: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    recommendations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<QuizAttempt id={self.id} student={self.student_id!r} subject={self.subject!r}>"
