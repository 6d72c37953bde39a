"""Custom report engine for quiz analytics.

Builds report definitions, runs the fetch -> transform -> aggregate -> chart
pipeline against an injected data source, persists definitions, and exports
freshly regenerated data.  Attendance and time analytics reuse the same
pipeline pieces.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from src.integrations.share import DirectoryShareTarget, ShareTarget
from src.modules.reporting.aggregator import summarize
from src.modules.reporting.attendance import AttendanceTracker
from src.modules.reporting.charts import build_charts
from src.modules.reporting.config import ReportingConfig
from src.modules.reporting.data_source import DataSource
from src.modules.reporting.errors import NotAvailableError, NotFoundError
from src.modules.reporting.exporter import Exporter
from src.modules.reporting.schemas import ExportArtifact, ReportDefinition, ReportResult
from src.modules.reporting.store import ReportStore
from src.modules.reporting.time_analytics import TimeAnalytics
from src.modules.reporting.transformer import transform
from src.utils.helpers import utcnow

logger = logging.getLogger(__name__)


class ReportingEngine:
    """Entry point for custom, attendance and time-analytics reports.

    Each call works on its own record set; the report store is the only
    shared state.
    """

    def __init__(
        self,
        data_source: DataSource,
        config: Optional[ReportingConfig] = None,
        store: Optional[ReportStore] = None,
        exporter: Optional[Exporter] = None,
        attendance: Optional[AttendanceTracker] = None,
        share_target: Optional[ShareTarget] = None,
    ) -> None:
        self.config = config or ReportingConfig()
        self.data_source = data_source
        self.store = store or ReportStore(self.config)
        self.exporter = exporter or Exporter(self.config)
        self.attendance = attendance or AttendanceTracker()
        self.time_analytics = TimeAnalytics(data_source, self.config)
        self.share_target = share_target or DirectoryShareTarget(self.config.share_dir)
        logger.info(
            "ReportingEngine initialised (source=%s, export_dir=%s)",
            type(data_source).__name__, self.config.export_dir,
        )

    # ------------------------------------------------------------------
    # 1. Custom report builder
    # ------------------------------------------------------------------

    async def create_custom_report(self, report_config: Mapping[str, Any]) -> dict[str, Any]:
        """Build, run and persist a custom report definition.

        Only ``title`` is required; see :meth:`ReportDefinition.from_config`
        for defaults.  The generated data is returned but never stored.
        """
        definition = ReportDefinition.from_config(report_config, self.config)
        logger.info("Creating custom report %s (%s)", definition.id, definition.title)

        data = await self.generate_report_data(definition)
        await asyncio.to_thread(self.store.save, definition)

        return {
            "success": True,
            "report": definition,
            "data": data,
            "message": "Custom report created successfully!",
        }

    # ------------------------------------------------------------------
    # 2. Pipeline
    # ------------------------------------------------------------------

    async def generate_report_data(self, definition: ReportDefinition) -> ReportResult:
        """Fetch, transform, aggregate and chart the data for *definition*."""
        raw = await self.data_source.fetch_records(definition.filters, definition.date_range)

        flat, details = transform(
            raw,
            definition.selected_fields,
            definition.sort_by,
            definition.sort_order,
            definition.group_by,
        )
        summary = summarize(flat)
        charts = []
        if definition.include_charts:
            charts = build_charts(flat, definition.chart_configs, self.config.date_label_format)

        logger.info(
            "Report %s: %d records, %d detail rows, %d charts",
            definition.id, len(flat), len(details), len(charts),
        )
        return ReportResult(
            summary=summary,
            details=details,
            charts=charts,
            total_records=len(flat),
            date_range=definition.date_range,
            generated_at=utcnow(),
        )

    # ------------------------------------------------------------------
    # 3. Export & share
    # ------------------------------------------------------------------

    async def load_report(self, report_id: str) -> ReportDefinition:
        definition = await asyncio.to_thread(self.store.load, report_id)
        if definition is None:
            logger.error("Report not found: %s", report_id)
            raise NotFoundError(f"Report not found: {report_id}")
        return definition

    async def export_report(self, report_id: str, fmt: Optional[str] = None) -> ExportArtifact:
        """Regenerate the stored report from live data and write it as *fmt*.

        *fmt* defaults to the format saved on the definition.
        """
        definition = await self.load_report(report_id)
        data = await self.generate_report_data(definition)
        return await self.exporter.export(definition, data, fmt or definition.format)

    async def share_report(self, uri: str) -> dict[str, Any]:
        """Hand an exported artifact to the configured share target."""
        if not self.share_target.is_available():
            raise NotAvailableError("Sharing is not available on this platform")
        path = Path(uri)
        if not path.is_file():
            raise NotFoundError(f"Artifact not found: {uri}")
        destination = await asyncio.to_thread(self.share_target.share, path)
        return {
            "success": True,
            "destination": destination,
            "message": "Report shared successfully",
        }

    # ------------------------------------------------------------------
    # 4. Attendance & time analytics
    # ------------------------------------------------------------------

    async def track_attendance(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return await self.attendance.track_attendance(data)

    async def generate_attendance_report(
        self, filters: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        return await self.attendance.generate_attendance_report(filters)

    async def generate_time_analytics(
        self, filters: Optional[Mapping[str, Any]] = None
    ) -> dict[str, Any]:
        return await self.time_analytics.generate_time_analytics(filters)
