"""Typed data model for report definitions, results and export artifacts.

Dict forms use the camelCase keys consumed by existing report viewers
(``dateRange``, ``selectedFields``, ``averageScore`` ...), so a JSON export
can be loaded back with :meth:`ReportDefinition.from_dict`.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Union

from src.modules.reporting.config import ReportingConfig
from src.modules.reporting.errors import ValidationError
from src.utils.helpers import parse_iso_datetime, to_iso, utcnow

Record = dict[str, Any]

REPORT_TYPES = (
    "performance",
    "attendance",
    "time_analytics",
    "engagement",
    "progress",
    "comparison",
    "custom",
)
SORT_ORDERS = ("asc", "desc")

# filter category -> record field it constrains
FILTER_FIELDS = {
    "students": "student_id",
    "classes": "class",
    "subjects": "subject",
    "quiz_types": "quiz_type",
    "difficulty_levels": "difficulty",
}
_FILTER_CAMEL = {
    "students": "students",
    "classes": "classes",
    "subjects": "subjects",
    "quiz_types": "quizTypes",
    "difficulty_levels": "difficultyLevels",
}


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key among *keys* (camelCase / snake_case aliases)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def as_tuple(value: Any, what: str) -> tuple:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(value)
    raise ValidationError(f"{what} must be a list, got {type(value).__name__}")


@dataclass(frozen=True)
class DateRange:
    """Inclusive timestamp window."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValidationError(
                f"dateRange start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DateRange":
        try:
            start = parse_iso_datetime(data["start"])
            end = parse_iso_datetime(data["end"])
        except KeyError as exc:
            raise ValidationError(f"dateRange is missing {exc.args[0]!r}") from exc
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"dateRange is not ISO-8601: {exc}") from exc
        return cls(start=start, end=end)

    @classmethod
    def last_days(cls, days: int, now: Optional[datetime] = None) -> "DateRange":
        end = now or utcnow()
        return cls(start=end - timedelta(days=days), end=end)

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def to_dict(self) -> dict[str, str]:
        return {"start": to_iso(self.start), "end": to_iso(self.end)}


@dataclass(frozen=True)
class ReportFilters:
    """Category filters; an empty category places no constraint."""

    students: tuple = ()
    classes: tuple = ()
    subjects: tuple = ()
    quiz_types: tuple = ()
    difficulty_levels: tuple = ()

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ReportFilters":
        data = data or {}
        values = {}
        for name, camel in _FILTER_CAMEL.items():
            values[name] = as_tuple(_pick(data, camel, name), name)
        return cls(**values)

    def constraints(self) -> dict[str, tuple]:
        """Non-empty categories keyed by the record field they constrain."""
        result = {}
        for name, record_field in FILTER_FIELDS.items():
            allowed = getattr(self, name)
            if allowed:
                result[record_field] = allowed
        return result

    def to_dict(self) -> dict[str, list]:
        return {camel: list(getattr(self, name)) for name, camel in _FILTER_CAMEL.items()}


@dataclass(frozen=True)
class ChartSpec:
    """Requested chart: ``bar``/``line`` use the axes, ``pie`` uses ``field``."""

    type: str
    title: Optional[str] = None
    x_axis: Optional[str] = None
    y_axis: Optional[str] = None
    field: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChartSpec":
        return cls(
            type=str(_pick(data, "type", default="")),
            title=_pick(data, "title"),
            x_axis=_pick(data, "xAxis", "x_axis"),
            y_axis=_pick(data, "yAxis", "y_axis"),
            field=_pick(data, "field"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        if self.title is not None:
            data["title"] = self.title
        if self.x_axis is not None:
            data["xAxis"] = self.x_axis
        if self.y_axis is not None:
            data["yAxis"] = self.y_axis
        if self.field is not None:
            data["field"] = self.field
        return data


@dataclass(frozen=True)
class ReportDefinition:
    """Saved description of what to query, how to shape it and how to export it."""

    id: str
    title: str
    description: str
    type: str
    date_range: DateRange
    filters: ReportFilters
    selected_fields: tuple[str, ...]
    group_by: Optional[str]
    sort_by: str
    sort_order: str
    chart_configs: tuple[ChartSpec, ...]
    format: str
    include_charts: bool
    created_at: datetime
    created_by: str

    @classmethod
    def from_config(
        cls,
        raw: Mapping[str, Any],
        config: ReportingConfig,
        now: Optional[datetime] = None,
        report_id: Optional[str] = None,
    ) -> "ReportDefinition":
        """Build and validate a new definition, filling in defaults.

        Filters may be given under ``filters`` or as top-level keys
        (``students``, ``subjects`` ...).

        Raises:
            ValidationError: On a missing title, unknown format/type/sort
                order, unregistered field names, or an inverted date range.
        """
        now = now or utcnow()
        title = raw.get("title")
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("A report title is required")

        raw_range = _pick(raw, "dateRange", "date_range")
        if raw_range is None:
            date_range = DateRange.last_days(config.default_lookback_days, now=now)
        elif isinstance(raw_range, DateRange):
            date_range = raw_range
        else:
            date_range = DateRange.from_dict(raw_range)

        filter_source = raw.get("filters")
        if filter_source is None:
            filter_source = raw
        filters = ReportFilters.from_dict(filter_source)

        return cls.validated(
            config,
            id=report_id or "report_" + uuid.uuid4().hex,
            title=title.strip(),
            description=raw.get("description") or "",
            type=raw.get("type") or "custom",
            date_range=date_range,
            filters=filters,
            selected_fields=_pick(raw, "selectedFields", "selected_fields"),
            group_by=_pick(raw, "groupBy", "group_by"),
            sort_by=_pick(raw, "sortBy", "sort_by", default=config.default_sort_by),
            sort_order=_pick(raw, "sortOrder", "sort_order", default=config.default_sort_order),
            chart_configs=_pick(raw, "chartConfigs", "charts", "chart_configs", default=()),
            format=raw.get("format") or config.default_format,
            include_charts=_pick(raw, "includeCharts", "include_charts", default=True) is not False,
            created_at=now,
            created_by=_pick(raw, "createdBy", "created_by", default="current_user"),
        )

    @classmethod
    def validated(cls, config: ReportingConfig, **values: Any) -> "ReportDefinition":
        registry = config.field_registry
        if values["type"] not in REPORT_TYPES:
            raise ValidationError(f"Unknown report type: {values['type']!r}")
        if values["format"] not in config.export_formats:
            raise ValidationError(
                f"Unknown format {values['format']!r}; expected one of {', '.join(config.export_formats)}"
            )
        if values["sort_order"] not in SORT_ORDERS:
            raise ValidationError(f"sortOrder must be 'asc' or 'desc', got {values['sort_order']!r}")

        selected = values["selected_fields"]
        if selected is None:
            selected = registry.keys()
        values["selected_fields"] = tuple(registry.require_all(as_tuple(selected, "selectedFields")))
        registry.require(values["sort_by"], "sortBy field")
        if values["group_by"] is not None:
            registry.require(values["group_by"], "groupBy field")

        charts = []
        for spec in as_tuple(values["chart_configs"], "chartConfigs"):
            charts.append(spec if isinstance(spec, ChartSpec) else ChartSpec.from_dict(spec))
        values["chart_configs"] = tuple(charts)
        return cls(**values)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], config: ReportingConfig) -> "ReportDefinition":
        """Rehydrate a stored definition (the output of :meth:`to_dict`)."""
        try:
            return cls.validated(
                config,
                id=data["id"],
                title=data["title"],
                description=data.get("description", ""),
                type=data.get("type", "custom"),
                date_range=DateRange.from_dict(data["dateRange"]),
                filters=ReportFilters.from_dict(data.get("filters")),
                selected_fields=data.get("selectedFields"),
                group_by=data.get("groupBy"),
                sort_by=data.get("sortBy", config.default_sort_by),
                sort_order=data.get("sortOrder", config.default_sort_order),
                chart_configs=data.get("charts", ()),
                format=data.get("format", config.default_format),
                include_charts=data.get("includeCharts", True),
                created_at=parse_iso_datetime(data["createdAt"]),
                created_by=data.get("createdBy", "current_user"),
            )
        except KeyError as exc:
            raise ValidationError(f"Stored report definition is missing {exc.args[0]!r}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "dateRange": self.date_range.to_dict(),
            "filters": self.filters.to_dict(),
            "selectedFields": list(self.selected_fields),
            "groupBy": self.group_by,
            "sortBy": self.sort_by,
            "sortOrder": self.sort_order,
            "charts": [spec.to_dict() for spec in self.chart_configs],
            "format": self.format,
            "includeCharts": self.include_charts,
            "createdAt": to_iso(self.created_at),
            "createdBy": self.created_by,
        }


@dataclass
class GroupedRecord:
    """Records sharing one ``group_by`` value."""

    group: Any
    items: list[Record] = field(default_factory=list)
    count: int = 0
    average_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.group,
            "items": [dict(item) for item in self.items],
            "count": self.count,
            "averageScore": self.average_score,
        }


@dataclass
class SummaryStats:
    """Headline numbers shown atop every report.

    The defaults are the empty-set values.
    """

    total_records: int = 0
    average_score: float = 0
    highest_score: float = 0
    lowest_score: float = 100
    average_time: int = 0
    completion_rate: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRecords": self.total_records,
            "averageScore": self.average_score,
            "highestScore": self.highest_score,
            "lowestScore": self.lowest_score,
            "averageTime": self.average_time,
            "completionRate": self.completion_rate,
        }


@dataclass
class ChartData:
    type: str
    title: str
    labels: list = field(default_factory=list)
    data: list = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "labels": list(self.labels),
            "data": list(self.data),
        }


Details = Union[list[Record], list[GroupedRecord]]


@dataclass
class ReportResult:
    """Freshly generated report data; never persisted."""

    summary: SummaryStats
    details: Details
    charts: list[ChartData]
    total_records: int
    date_range: DateRange
    generated_at: datetime

    @property
    def is_grouped(self) -> bool:
        return bool(self.details) and isinstance(self.details[0], GroupedRecord)

    def flat_details(self) -> list[Record]:
        """Detail rows with any grouping undone, in bucket order."""
        if not self.is_grouped:
            return list(self.details)
        rows: list[Record] = []
        for bucket in self.details:
            rows.extend(bucket.items)
        return rows

    def to_dict(self) -> dict[str, Any]:
        if self.is_grouped:
            details = [bucket.to_dict() for bucket in self.details]
        else:
            details = [dict(row) for row in self.details]
        return {
            "summary": self.summary.to_dict(),
            "details": details,
            "charts": [chart.to_dict() for chart in self.charts],
            "metadata": {
                "totalRecords": self.total_records,
                "dateRange": self.date_range.to_dict(),
                "generatedAt": to_iso(self.generated_at),
            },
        }


@dataclass
class ExportArtifact:
    """Result of a completed export write."""

    success: bool
    uri: str
    file_name: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "uri": self.uri,
            "fileName": self.file_name,
            "message": self.message,
        }
