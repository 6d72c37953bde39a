"""Persistence of report definitions by id."""

import logging
from typing import Optional

from sqlalchemy import select

from src.database import get_session
from src.models.report import ReportDefinitionRecord
from src.modules.reporting.config import ReportingConfig
from src.modules.reporting.schemas import ReportDefinition
from src.utils.helpers import to_naive_utc

logger = logging.getLogger(__name__)


class ReportStore:
    """Stores :class:`ReportDefinition` objects in the ``report_definitions`` table.

    ``save`` is an upsert (last write wins); there is no locking, so
    concurrent saves of one id simply race.
    """

    def __init__(self, config: ReportingConfig) -> None:
        self._config = config

    def save(self, definition: ReportDefinition) -> None:
        payload = definition.to_dict()
        with get_session() as session:
            session.merge(
                ReportDefinitionRecord(
                    id=definition.id,
                    title=definition.title,
                    report_type=definition.type,
                    definition_json=payload,
                    created_by=definition.created_by,
                    created_at=to_naive_utc(definition.created_at),
                )
            )
        logger.info("Saved report definition %s", definition.id)

    def load(self, report_id: str) -> Optional[ReportDefinition]:
        """Return the stored definition, or None when the id is unknown."""
        with get_session() as session:
            row = session.get(ReportDefinitionRecord, report_id)
            payload = dict(row.definition_json) if row is not None else None
        if payload is None:
            logger.debug("No report definition with id %s", report_id)
            return None
        return ReportDefinition.from_dict(payload, self._config)

    def list_ids(self) -> list[str]:
        """All stored ids, oldest first."""
        with get_session() as session:
            stmt = select(ReportDefinitionRecord.id).order_by(
                ReportDefinitionRecord.created_at, ReportDefinitionRecord.id
            )
            return list(session.execute(stmt).scalars().all())
