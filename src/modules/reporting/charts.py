"""Chart payload builders (bar / line / pie).

Charts are best-effort: an unrecognised type or a spec missing the fields
it needs is logged and skipped instead of failing the report.
"""

import logging
from typing import Callable, Iterable, Optional

from src.modules.reporting.schemas import ChartData, ChartSpec, Record
from src.utils.helpers import is_number, safe_div, try_parse_datetime

logger = logging.getLogger(__name__)


def build_bar_chart(records: list[Record], spec: ChartSpec, **_) -> Optional[ChartData]:
    """Mean of ``y_axis`` per ``x_axis`` group, labels in first-seen order."""
    if not spec.x_axis or not spec.y_axis:
        return None
    grouped: dict = {}
    for record in records:
        values = grouped.setdefault(record.get(spec.x_axis), [])
        if is_number(record.get(spec.y_axis)):
            values.append(record[spec.y_axis])
    return ChartData(
        type="bar",
        title=spec.title or "Bar Chart",
        labels=list(grouped.keys()),
        data=[round(safe_div(sum(v), len(v)), 2) for v in grouped.values()],
    )


def build_line_chart(
    records: list[Record], spec: ChartSpec, date_label_format: str = "%m/%d/%Y", **_
) -> Optional[ChartData]:
    """``y_axis`` per record in ascending date order; undated records are dropped."""
    if not spec.y_axis:
        return None
    dated = []
    for record in records:
        moment = try_parse_datetime(record.get("date"))
        if moment is not None:
            dated.append((moment, record))
    dated.sort(key=lambda pair: pair[0])
    return ChartData(
        type="line",
        title=spec.title or "Line Chart",
        labels=[moment.strftime(date_label_format) for moment, _ in dated],
        data=[record.get(spec.y_axis) for _, record in dated],
    )


def build_pie_chart(records: list[Record], spec: ChartSpec, **_) -> Optional[ChartData]:
    """Record count per ``field`` value; records lacking the field are not counted."""
    if not spec.field:
        return None
    counts: dict = {}
    for record in records:
        if spec.field not in record:
            continue
        key = record[spec.field]
        counts[key] = counts.get(key, 0) + 1
    return ChartData(
        type="pie",
        title=spec.title or "Pie Chart",
        labels=list(counts.keys()),
        data=list(counts.values()),
    )


CHART_BUILDERS: dict[str, Callable[..., Optional[ChartData]]] = {
    "bar": build_bar_chart,
    "line": build_line_chart,
    "pie": build_pie_chart,
}


def build_charts(
    records: Iterable[Record],
    specs: Iterable[ChartSpec],
    date_label_format: str = "%m/%d/%Y",
) -> list[ChartData]:
    """One :class:`ChartData` per valid spec, in spec order."""
    records = list(records)
    charts = []
    for spec in specs:
        builder = CHART_BUILDERS.get(spec.type)
        if builder is None:
            logger.warning("Skipping chart with unsupported type %r", spec.type)
            continue
        chart = builder(records, spec, date_label_format=date_label_format)
        if chart is None:
            logger.warning("Skipping %s chart %r: required axis/field missing", spec.type, spec.title)
            continue
        charts.append(chart)
    return charts
