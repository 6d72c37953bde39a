"""Field projection, grouping and stable sorting of record sets."""

import logging
from typing import Any, Iterable, Optional

from src.modules.reporting.schemas import GroupedRecord, Record
from src.utils.helpers import is_number, safe_div, try_parse_datetime

logger = logging.getLogger(__name__)


def project_fields(records: Iterable[Record], selected_fields: Iterable[str]) -> list[Record]:
    """Keep only *selected_fields*, in selection order.

    A record lacking a selected field simply omits that key.
    """
    selected = list(selected_fields)
    return [
        {key: record[key] for key in selected if key in record}
        for record in records
    ]


def _sort_key(value: Any) -> tuple:
    # Rank numbers before parsed timestamps before plain strings so mixed columns compare.
    if is_number(value):
        return (0, value)
    moment = try_parse_datetime(value)
    if moment is not None:
        return (1, moment)
    return (2, str(value))


def sort_records(records: Iterable[Record], sort_by: str, sort_order: str = "asc") -> list[Record]:
    """Stable sort on *sort_by*.

    Equal keys keep their input order in both directions; records missing
    the key are placed last either way.
    """
    records = list(records)
    present = [r for r in records if r.get(sort_by) is not None]
    missing = [r for r in records if r.get(sort_by) is None]
    # sorted(reverse=True) preserves the relative order of equal elements
    ordered = sorted(
        present,
        key=lambda r: _sort_key(r[sort_by]),
        reverse=(sort_order == "desc"),
    )
    return ordered + missing


def group_records(records: Iterable[Record], group_by: str) -> list[GroupedRecord]:
    """Partition records into buckets by *group_by*, in first-seen order.

    Each bucket's ``average_score`` is the mean over members that carry a
    numeric ``score``; members without one are excluded, not zeroed.
    """
    buckets: dict[Any, GroupedRecord] = {}
    for record in records:
        key = record.get(group_by)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = GroupedRecord(group=key)
        bucket.items.append(record)

    for bucket in buckets.values():
        bucket.count = len(bucket.items)
        scores = [item["score"] for item in bucket.items if is_number(item.get("score"))]
        bucket.average_score = round(safe_div(sum(scores), len(scores)), 2)

    logger.debug("Grouped %d buckets by %s", len(buckets), group_by)
    return list(buckets.values())


def transform(
    records: Iterable[Record],
    selected_fields: Iterable[str],
    sort_by: str,
    sort_order: str = "asc",
    group_by: Optional[str] = None,
) -> tuple[list[Record], list]:
    """Sort and optionally group on the full records, then project.

    *sort_by* and *group_by* need not be among *selected_fields*.

    Returns:
        ``(flat, details)``: the projected sorted flat rows, and the
        report details (the same rows, or GroupedRecord buckets whose items
        keep the sorted order).
    """
    selected = list(selected_fields)
    ordered = sort_records(records, sort_by, sort_order)
    flat = project_fields(ordered, selected)
    if not group_by:
        return flat, flat
    buckets = group_records(ordered, group_by)
    for bucket in buckets:
        bucket.items = project_fields(bucket.items, selected)
    return flat, buckets
