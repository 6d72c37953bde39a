"""SQLAlchemy ORM models. Import every model so Base.metadata is populated."""

from src.models.attendance import AttendanceEventRecord
from src.models.quiz_attempt import QuizAttempt
from src.models.report import ReportDefinitionRecord

__all__ = [
    "AttendanceEventRecord",
    "QuizAttempt",
    "ReportDefinitionRecord",
]
