"""Time-on-task analytics over quiz attempt records."""

import logging
from collections import Counter
from typing import Any, Mapping, Optional

from src.modules.reporting.aggregator import mean
from src.modules.reporting.config import ReportingConfig
from src.modules.reporting.data_source import DataSource
from src.modules.reporting.schemas import DateRange, Record, ReportFilters
from src.modules.reporting.transformer import project_fields, sort_records
from src.utils.helpers import is_number, iso_week_label, safe_div, try_parse_datetime

logger = logging.getLogger(__name__)

TIME_FIELDS = ("subject", "difficulty", "score", "time_taken", "date")
LONG_SESSION_FACTOR = 1.5
LONG_SESSION_SHARE = 0.3


def most_active_hour(records: list[Record]) -> Optional[int]:
    """Most frequent hour of day; ties go to the earliest hour."""
    hours = Counter()
    for record in records:
        moment = try_parse_datetime(record.get("date"))
        if moment is not None:
            hours[moment.hour] += 1
    if not hours:
        return None
    return min(hours, key=lambda hour: (-hours[hour], hour))


def _session_time(record: Record) -> float:
    value = record.get("time_taken")
    return value if is_number(value) else 0


def breakdown_by(records: list[Record], key: str, count_label: str) -> dict[Any, dict[str, Any]]:
    """Total, count and mean session time per value of *key*."""
    result: dict[Any, dict[str, Any]] = {}
    for record in records:
        entry = result.setdefault(record.get(key), {"totalTime": 0, count_label: 0, "averageTime": 0})
        entry["totalTime"] += _session_time(record)
        entry[count_label] += 1
    for entry in result.values():
        entry["averageTime"] = round(safe_div(entry["totalTime"], entry[count_label]), 2)
    return result


def daily_patterns(records: list[Record]) -> dict[str, dict[str, Any]]:
    days: dict[str, dict[str, Any]] = {}
    for record in records:
        moment = try_parse_datetime(record.get("date"))
        if moment is None:
            continue
        entry = days.setdefault(moment.date().isoformat(), {"totalTime": 0, "sessionCount": 0})
        entry["totalTime"] += _session_time(record)
        entry["sessionCount"] += 1
    return days


def weekly_trends(records: list[Record]) -> dict[str, dict[str, Any]]:
    weeks: dict[str, dict[str, Any]] = {}
    scores: dict[str, list] = {}
    for record in records:
        moment = try_parse_datetime(record.get("date"))
        if moment is None:
            continue
        week = iso_week_label(moment)
        entry = weeks.setdefault(week, {"totalTime": 0, "averageScore": 0, "sessionCount": 0})
        entry["totalTime"] += _session_time(record)
        entry["sessionCount"] += 1
        if is_number(record.get("score")):
            scores.setdefault(week, []).append(record["score"])
    for week, entry in weeks.items():
        entry["averageScore"] = round(mean(scores.get(week, [])), 2)
    return weeks


def time_recommendations(times: list[float]) -> list[dict[str, str]]:
    """Suggest shorter sessions when long sessions are common."""
    if not times:
        return []
    threshold = mean(times) * LONG_SESSION_FACTOR
    long_sessions = [t for t in times if t > threshold]
    if len(long_sessions) > len(times) * LONG_SESSION_SHARE:
        return [{
            "type": "time_management",
            "message": "Consider shorter, more frequent study sessions for better retention",
            "priority": "medium",
        }]
    return []


class TimeAnalytics:
    """Builds time analytics from the same data source as custom reports."""

    def __init__(self, data_source: DataSource, config: ReportingConfig) -> None:
        self._data_source = data_source
        self._config = config

    async def generate_time_analytics(
        self, filters: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        filters = filters or {}
        raw_range = filters.get("dateRange") or filters.get("date_range")
        if raw_range is None:
            date_range = DateRange.last_days(self._config.default_lookback_days)
        elif isinstance(raw_range, DateRange):
            date_range = raw_range
        else:
            date_range = DateRange.from_dict(raw_range)

        raw = await self._data_source.fetch_records(ReportFilters.from_dict(filters), date_range)
        records = sort_records(project_fields(raw, TIME_FIELDS), "date")
        times = [r["time_taken"] for r in records if is_number(r.get("time_taken"))]

        overview = {
            "totalTimeSpent": sum(times),
            "averageSessionTime": round(mean(times), 2),
            "mostActiveHour": most_active_hour(records),
            "longestSession": max(times, default=0),
            "shortestSession": min(times, default=0),
        }
        analytics = {
            "overview": overview,
            "subjectBreakdown": breakdown_by(records, "subject", "sessionCount"),
            "difficultyBreakdown": breakdown_by(records, "difficulty", "count"),
            "dailyPatterns": daily_patterns(records),
            "weeklyTrends": weekly_trends(records),
            "recommendations": time_recommendations(times),
        }
        logger.info("Time analytics over %d sessions", len(records))
        return {
            "success": True,
            "analytics": analytics,
            "message": "Time analytics generated successfully",
        }
