"""Record sources for the reporting pipeline.

The engine depends only on :class:`DataSource`; :class:`InMemoryDataSource`
serves fixtures and :class:`SQLDataSource` queries the ``quiz_attempts``
table.
"""

import abc
import asyncio
import logging
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from src.database import get_session
from src.models.quiz_attempt import QuizAttempt
from src.modules.reporting.errors import DataSourceError
from src.modules.reporting.filters import apply_filters
from src.modules.reporting.fields import DEFAULT_FIELDS
from src.modules.reporting.schemas import DateRange, Record, ReportFilters
from src.utils.helpers import to_iso, to_naive_utc

logger = logging.getLogger(__name__)

# record key -> QuizAttempt attribute, where they differ
_ATTRIBUTE_OVERRIDES = {"class": "class_name"}


class DataSource(abc.ABC):
    """Supplies raw records for a report."""

    @abc.abstractmethod
    async def fetch_records(self, filters: ReportFilters, date_range: DateRange) -> list[Record]:
        """Return records matching every filter category and the date range.

        Implementations raise :class:`DataSourceError` on failure.
        """


class InMemoryDataSource(DataSource):
    """Fixture-backed source over a fixed list of records."""

    def __init__(self, records: Optional[Iterable[Record]] = None) -> None:
        self._records = [dict(r) for r in (records or [])]

    def add(self, record: Record) -> None:
        self._records.append(dict(record))

    async def fetch_records(self, filters: ReportFilters, date_range: DateRange) -> list[Record]:
        return [dict(r) for r in apply_filters(self._records, filters, date_range)]


def attempt_to_record(attempt: QuizAttempt, field_keys: Iterable[str]) -> Record:
    """Flatten an ORM row to a record, omitting NULL columns."""
    record: Record = {}
    for key in field_keys:
        attr = _ATTRIBUTE_OVERRIDES.get(key, key)
        value = getattr(attempt, attr, None)
        if value is None:
            continue
        record[key] = to_iso(value) if key == "date" else value
    return record


class SQLDataSource(DataSource):
    """Queries quiz attempts through the shared SQLAlchemy session."""

    def __init__(self, field_keys: Optional[Iterable[str]] = None) -> None:
        self._field_keys = list(field_keys or DEFAULT_FIELDS.keys())

    async def fetch_records(self, filters: ReportFilters, date_range: DateRange) -> list[Record]:
        try:
            return await asyncio.to_thread(self._query, filters, date_range)
        except SQLAlchemyError as exc:
            logger.error("Quiz attempt query failed: %s", exc)
            raise DataSourceError(f"Quiz attempt query failed: {exc}") from exc

    def _query(self, filters: ReportFilters, date_range: DateRange) -> list[Record]:
        stmt = select(QuizAttempt).where(
            QuizAttempt.date >= to_naive_utc(date_range.start),
            QuizAttempt.date <= to_naive_utc(date_range.end),
        )
        for record_field, allowed in filters.constraints().items():
            column = getattr(QuizAttempt, _ATTRIBUTE_OVERRIDES.get(record_field, record_field))
            stmt = stmt.where(column.in_(list(allowed)))
        stmt = stmt.order_by(QuizAttempt.id)

        with get_session() as session:
            rows = session.execute(stmt).scalars().all()
            records = [attempt_to_record(row, self._field_keys) for row in rows]
        logger.info("Fetched %d quiz attempts (filters=%s)", len(records), filters.to_dict())
        return records


def insert_attempts(records: Iterable[Record]) -> int:
    """Bulk-insert records into ``quiz_attempts``; returns the number written."""
    count = 0
    with get_session() as session:
        for record in records:
            values = {}
            for key, value in record.items():
                attr = _ATTRIBUTE_OVERRIDES.get(key, key)
                if not hasattr(QuizAttempt, attr):
                    continue
                values[attr] = to_naive_utc(value) if key == "date" else value
            session.add(QuizAttempt(**values))
            count += 1
    logger.info("Inserted %d quiz attempts", count)
    return count


__all__ = [
    "DataSource",
    "InMemoryDataSource",
    "SQLDataSource",
    "attempt_to_record",
    "insert_attempts",
]
