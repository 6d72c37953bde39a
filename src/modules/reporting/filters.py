"""Filter predicates applied to raw record sets.

A record passes when it matches every non-empty filter category (membership
within a category is OR'd) and its ``date`` lies inside the range, inclusive.
Records with a missing or unparseable ``date`` never match a date range.
"""

import logging
from typing import Iterable

from src.modules.reporting.schemas import DateRange, Record, ReportFilters
from src.utils.helpers import try_parse_datetime

logger = logging.getLogger(__name__)


def matches_filters(record: Record, filters: ReportFilters) -> bool:
    for record_field, allowed in filters.constraints().items():
        if record.get(record_field) not in allowed:
            return False
    return True


def in_date_range(record: Record, date_range: DateRange) -> bool:
    moment = try_parse_datetime(record.get("date"))
    if moment is None:
        return False
    return date_range.contains(moment)


def apply_filters(
    records: Iterable[Record],
    filters: ReportFilters,
    date_range: DateRange,
) -> list[Record]:
    """Return the records (input order preserved) passing filters and date range."""
    records = list(records)
    kept = [
        record
        for record in records
        if matches_filters(record, filters) and in_date_range(record, date_range)
    ]
    logger.debug("Filter kept %d of %d records", len(kept), len(records))
    return kept
