"""Synthetic quiz-attempt records for demos, seeding and tests."""

import random
from datetime import datetime, timedelta
from typing import Optional

from src.modules.reporting.schemas import Record
from src.utils.helpers import to_iso, utcnow

STUDENTS = ["Alice Johnson", "Bob Smith", "Carol Davis", "David Wilson", "Emma Brown"]
SUBJECTS = ["Mathematics", "Science", "English", "History", "Geography"]
CLASSES = ["Class 8A", "Class 8B", "Class 9A", "Class 9B"]
DIFFICULTIES = ["Easy", "Medium", "Hard"]
QUIZ_TYPES = ["practice", "assessment", "homework"]


def generate_records(
    count: int = 100,
    days: int = 30,
    now: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> list[Record]:
    """Generate *count* records dated within the *days* before *now*.

    Pass *seed* for a reproducible set.
    """
    rng = random.Random(seed)
    now = now or utcnow()
    records = []
    for i in range(count):
        subject = rng.choice(SUBJECTS)
        class_room = rng.choice(CLASSES)
        total_questions = 20
        correct = rng.randint(1, total_questions)
        records.append({
            "student_id": f"STD{1000 + i}",
            "student_name": rng.choice(STUDENTS),
            "class": class_room,
            "grade": 8 if "8" in class_room else 9,
            "quiz_title": f"{subject} Quiz {rng.randint(1, 10)}",
            "quiz_type": rng.choice(QUIZ_TYPES),
            "subject": subject,
            "difficulty": rng.choice(DIFFICULTIES),
            "total_questions": total_questions,
            "correct_answers": correct,
            "score": rng.randint(1, 100),
            "percentage": round(correct / total_questions * 100, 1),
            "time_taken": rng.randint(300, 2100),
            "average_time_per_question": rng.randint(30, 90),
            "time_spent_on_subject": rng.randint(1800, 9000),
            "quiz_attempts": rng.randint(1, 10),
            "completion_rate": rng.randint(1, 100),
            "streak_days": rng.randint(1, 30),
            "badges_earned": rng.randint(0, 4),
            "improvement_rate": round(rng.uniform(-10, 40), 1),
            "strong_topics": rng.choice(["Algebra", "Geometry"]),
            "weak_topics": rng.choice(["Trigonometry", "Statistics"]),
            "date": to_iso(now - timedelta(seconds=rng.uniform(0, days * 86400))),
        })
    return records
