"""Attendance tracking and attendance reports.

Events are appended to the ``attendance_events`` table and never updated
or deleted.
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import select

from src.database import get_session
from src.models.attendance import AttendanceEventRecord
from src.modules.reporting.errors import ValidationError
from src.modules.reporting.schemas import DateRange, as_tuple
from src.utils.helpers import iso_week_label, parse_iso_datetime, safe_div, to_iso, to_naive_utc, utcnow

logger = logging.getLogger(__name__)

ATTENDANCE_STATUSES = ("present", "absent", "late")
PARTICIPATION_LEVELS = ("full", "partial", "minimal")


@dataclass(frozen=True)
class AttendanceEvent:
    id: str
    student_id: str
    quiz_id: str
    class_id: str
    date: datetime
    status: str
    participation_level: str = "full"
    time_spent: float = 0
    questions_answered: int = 0
    completion_percentage: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "quizId": self.quiz_id,
            "classId": self.class_id,
            "date": to_iso(self.date),
            "status": self.status,
            "participationLevel": self.participation_level,
            "timeSpent": self.time_spent,
            "questionsAnswered": self.questions_answered,
            "completionPercentage": self.completion_percentage,
        }


@dataclass(frozen=True)
class AttendanceFilters:
    students: tuple = ()
    classes: tuple = ()
    quiz_ids: tuple = ()
    date_range: Optional[DateRange] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AttendanceFilters":
        data = data or {}
        raw_range = data.get("dateRange") or data.get("date_range")
        if isinstance(raw_range, Mapping):
            raw_range = DateRange.from_dict(raw_range)
        return cls(
            students=as_tuple(data.get("students") or data.get("studentIds"), "students"),
            classes=as_tuple(data.get("classes") or data.get("classIds"), "classes"),
            quiz_ids=as_tuple(data.get("quizIds") or data.get("quiz_ids"), "quizIds"),
            date_range=raw_range,
        )


def _row_to_event(row: AttendanceEventRecord) -> AttendanceEvent:
    return AttendanceEvent(
        id=row.id,
        student_id=row.student_id,
        quiz_id=row.quiz_id,
        class_id=row.class_id,
        date=parse_iso_datetime(row.date),
        status=row.status,
        participation_level=row.participation_level,
        time_spent=row.time_spent,
        questions_answered=row.questions_answered,
        completion_percentage=row.completion_percentage,
    )


class AttendanceLog:
    """Append-only store of attendance events."""

    def append(self, event: AttendanceEvent) -> None:
        values = asdict(event)
        values["date"] = to_naive_utc(event.date)
        with get_session() as session:
            session.add(AttendanceEventRecord(**values))
        logger.debug("Appended attendance event %s", event.id)

    def fetch(self, filters: AttendanceFilters) -> list[AttendanceEvent]:
        stmt = select(AttendanceEventRecord)
        if filters.students:
            stmt = stmt.where(AttendanceEventRecord.student_id.in_(filters.students))
        if filters.classes:
            stmt = stmt.where(AttendanceEventRecord.class_id.in_(filters.classes))
        if filters.quiz_ids:
            stmt = stmt.where(AttendanceEventRecord.quiz_id.in_(filters.quiz_ids))
        if filters.date_range is not None:
            stmt = stmt.where(
                AttendanceEventRecord.date >= to_naive_utc(filters.date_range.start),
                AttendanceEventRecord.date <= to_naive_utc(filters.date_range.end),
            )
        stmt = stmt.order_by(AttendanceEventRecord.date, AttendanceEventRecord.id)
        with get_session() as session:
            return [_row_to_event(row) for row in session.execute(stmt).scalars().all()]


def _require_text(data: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return str(value)
    raise ValidationError(f"Attendance input is missing {keys[0]!r}")


def weekly_presence_rates(events: list[AttendanceEvent]) -> list[dict[str, Any]]:
    """Percentage of ``present`` events per ISO week, oldest week first."""
    weeks: dict[str, list[AttendanceEvent]] = OrderedDict()
    for event in sorted(events, key=lambda e: e.date):
        weeks.setdefault(iso_week_label(event.date), []).append(event)
    return [
        {
            "week": week,
            "rate": round(
                safe_div(sum(1 for e in items if e.status == "present") * 100, len(items)), 2
            ),
        }
        for week, items in weeks.items()
    ]


class AttendanceTracker:
    """Records attendance events and summarises them."""

    def __init__(self, log: Optional[AttendanceLog] = None) -> None:
        self._log = log or AttendanceLog()

    async def track_attendance(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Validate *data*, append an :class:`AttendanceEvent` and return it.

        ``date`` defaults to now; pass it explicitly to backfill history.
        """
        status = data.get("status")
        if status not in ATTENDANCE_STATUSES:
            raise ValidationError(
                f"status must be one of {', '.join(ATTENDANCE_STATUSES)}, got {status!r}"
            )
        participation = data.get("participationLevel") or data.get("participation_level") or "full"
        if participation not in PARTICIPATION_LEVELS:
            raise ValidationError(f"Unknown participation level: {participation!r}")

        raw_date = data.get("date")
        try:
            moment = parse_iso_datetime(raw_date) if raw_date is not None else utcnow()
        except ValueError as exc:
            raise ValidationError(f"Attendance date is not ISO-8601: {raw_date!r}") from exc

        event = AttendanceEvent(
            id="attendance_" + uuid.uuid4().hex,
            student_id=_require_text(data, "studentId", "student_id"),
            quiz_id=_require_text(data, "quizId", "quiz_id"),
            class_id=_require_text(data, "classId", "class_id"),
            date=moment,
            status=status,
            participation_level=participation,
            time_spent=data.get("timeSpent") or data.get("time_spent") or 0,
            questions_answered=data.get("questionsAnswered") or data.get("questions_answered") or 0,
            completion_percentage=(
                data.get("completionPercentage") or data.get("completion_percentage") or 0
            ),
        )
        await asyncio.to_thread(self._log.append, event)
        logger.info("Tracked attendance %s (%s) for %s", event.id, status, event.student_id)
        return {
            "success": True,
            "attendance": event,
            "message": "Attendance tracked successfully",
        }

    async def generate_attendance_report(
        self, filters: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        """Counts per status, mean completion and weekly presence trend."""
        parsed = filters if isinstance(filters, AttendanceFilters) else AttendanceFilters.from_dict(filters)
        events = await asyncio.to_thread(self._log.fetch, parsed)
        total = len(events)
        summary = {
            "totalSessions": total,
            "presentCount": sum(1 for e in events if e.status == "present"),
            "absentCount": sum(1 for e in events if e.status == "absent"),
            "lateCount": sum(1 for e in events if e.status == "late"),
            "averageParticipation": round(
                safe_div(sum(e.completion_percentage for e in events), total), 2
            ),
        }
        logger.info("Attendance report over %d sessions", total)
        return {
            "summary": summary,
            "details": [e.to_dict() for e in events],
            "trends": {"weeklyRates": weekly_presence_rates(events)},
        }
