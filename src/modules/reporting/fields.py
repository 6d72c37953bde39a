"""Field registry: the closed set of recognised record keys and their labels."""

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from src.modules.reporting.errors import ValidationError

DEFAULT_FIELDS: dict[str, str] = {
    # Student information
    "student_id": "Student ID",
    "student_name": "Student Name",
    "class": "Class",
    "grade": "Grade",
    # Quiz data
    "quiz_title": "Quiz Title",
    "quiz_type": "Quiz Type",
    "subject": "Subject",
    "difficulty": "Difficulty",
    "total_questions": "Total Questions",
    "correct_answers": "Correct Answers",
    "score": "Score",
    "percentage": "Percentage",
    # Time analytics
    "time_taken": "Time Taken",
    "average_time_per_question": "Avg Time/Question",
    "time_spent_on_subject": "Time on Subject",
    # Engagement
    "quiz_attempts": "Quiz Attempts",
    "completion_rate": "Completion Rate",
    "streak_days": "Streak Days",
    "badges_earned": "Badges Earned",
    # Performance
    "improvement_rate": "Improvement Rate",
    "strong_topics": "Strong Topics",
    "weak_topics": "Weak Topics",
    "recommendations": "Recommendations",
    "date": "Date",
}


@dataclass(frozen=True)
class FieldRegistry:
    """Ordered mapping of field key -> display label."""

    fields: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_FIELDS))

    def keys(self) -> list[str]:
        return list(self.fields.keys())

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def label(self, key: str) -> str:
        """Display label for *key*; unknown keys fall back to the key itself."""
        return self.fields.get(key, key)

    def labels(self, keys: Iterable[str]) -> list[str]:
        return [self.label(k) for k in keys]

    def require(self, key: str, what: str = "field") -> str:
        """Return *key* if registered, else raise ValidationError."""
        if key not in self.fields:
            raise ValidationError(f"Unknown {what}: {key!r}")
        return key

    def require_all(self, keys: Iterable[str], what: str = "field") -> list[str]:
        return [self.require(k, what) for k in keys]
