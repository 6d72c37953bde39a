"""Report export: PDF, CSV, JSON and XLSX serializers.

Every serializer writes ``<sanitized-title>_<epoch-millis>.<ext>`` into the
configured export directory and returns an :class:`ExportArtifact` only once
the file is on disk.  Grouped details are flattened back to rows for the
tabular formats (CSV, XLSX, PDF); JSON keeps the grouped structure.
"""

import abc
import asyncio
import csv
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from src.modules.reporting.config import ReportingConfig
from src.modules.reporting.errors import SerializationError, UnsupportedFormatError
from src.modules.reporting.fields import FieldRegistry
from src.modules.reporting.schemas import (
    ChartData,
    ExportArtifact,
    Record,
    ReportDefinition,
    ReportResult,
)
from src.utils.helpers import sanitize_filename, to_iso
from src.utils.pdf_report_builder import PDFReportBuilder

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tabular helpers
# ---------------------------------------------------------------------------

def table_columns(rows: list[Record]) -> list[str]:
    """Columns are the keys of the first row, in its key order."""
    return list(rows[0].keys()) if rows else []


def table_rows(rows: list[Record], columns: list[str]) -> list[list[Any]]:
    """Row values aligned to *columns*; missing keys become empty strings."""
    return [["" if row.get(col) is None else row[col] for col in columns] for row in rows]


def _display(value: Any) -> str:
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# PDF content model
# ---------------------------------------------------------------------------

@dataclass
class ReportDocument:
    """Rendering-library-neutral content of a PDF report."""

    title: str
    description: str
    generated_at: str
    summary: dict[str, Any]
    headers: list[str]
    rows: list[list[Any]]
    charts: list[ChartData] = field(default_factory=list)
    group_label: Optional[str] = None
    groups: list[list[Any]] = field(default_factory=list)


def build_document(
    definition: ReportDefinition,
    result: ReportResult,
    registry: FieldRegistry,
) -> ReportDocument:
    """Lay out header, summary block and data table for *result*."""
    rows = result.flat_details()
    columns = table_columns(rows)
    summary = result.summary
    document = ReportDocument(
        title=definition.title,
        description=definition.description,
        generated_at=to_iso(result.generated_at),
        summary={
            "Total Records": summary.total_records,
            "Average Score": f"{summary.average_score}%",
            "Highest Score": f"{summary.highest_score}%",
            "Completion Rate": f"{summary.completion_rate:.2f}%",
        },
        headers=registry.labels(columns),
        rows=table_rows(rows, columns),
        charts=list(result.charts) if definition.include_charts else [],
    )
    if result.is_grouped:
        document.group_label = registry.label(definition.group_by)
        document.groups = [
            [_display(bucket.group), bucket.count, bucket.average_score]
            for bucket in result.details
        ]
    return document


class DocumentBackend(abc.ABC):
    """Turns a :class:`ReportDocument` into a file."""

    @abc.abstractmethod
    def render(self, document: ReportDocument, filepath: Path) -> None:
        """Write the rendered document to *filepath*."""


class HtmlPdfBackend(DocumentBackend):
    """Renders through :class:`PDFReportBuilder` (HTML + matplotlib -> xhtml2pdf)."""

    def __init__(self, company_name: str = "") -> None:
        self._company_name = company_name

    def build(self, document: ReportDocument) -> PDFReportBuilder:
        builder = PDFReportBuilder(title=document.title, company_name=self._company_name)
        builder.add_header(document.description, document.generated_at)
        builder.add_metrics_summary(document.summary)

        for chart in document.charts:
            if chart.type == "bar":
                builder.add_bar_chart(chart.labels, chart.data, chart.title)
            elif chart.type == "line":
                builder.add_line_chart(chart.labels, chart.data, chart.title)
            elif chart.type == "pie":
                builder.add_pie_chart(chart.labels, chart.data, chart.title)

        if document.groups:
            builder.add_heading("Groups")
            builder.add_table(
                [document.group_label, "Count", "Average Score"], document.groups
            )
        builder.add_heading("Detailed Data")
        builder.add_table(document.headers, document.rows)
        return builder

    def render(self, document: ReportDocument, filepath: Path) -> None:
        self.build(document).build_pdf(str(filepath))


# ---------------------------------------------------------------------------
# Exporter
# ---------------------------------------------------------------------------

class Exporter:
    """Dispatches a generated report to a format-specific serializer."""

    def __init__(
        self,
        config: ReportingConfig,
        pdf_backend: Optional[DocumentBackend] = None,
    ) -> None:
        self._config = config
        self._registry = config.field_registry
        self._pdf_backend = pdf_backend or HtmlPdfBackend(config.company_name)
        self._writers = {
            "pdf": self._write_pdf,
            "csv": self._write_csv,
            "json": self._write_json,
            "xlsx": self._write_xlsx,
        }

    @property
    def formats(self) -> list[str]:
        return list(self._writers.keys())

    async def export(
        self,
        definition: ReportDefinition,
        result: ReportResult,
        fmt: str,
    ) -> ExportArtifact:
        """Serialize *result* as *fmt* and return the written artifact.

        Raises:
            UnsupportedFormatError: No serializer exists for *fmt*.
            SerializationError: Rendering or writing the file failed.
        """
        writer = self._writers.get(fmt)
        if writer is None:
            logger.error("Unsupported export format %r", fmt)
            raise UnsupportedFormatError(f"Unsupported export format: {fmt!r}")

        file_name = "{stem}_{ts}.{ext}".format(
            stem=sanitize_filename(definition.title),
            ts=int(time.time() * 1000),
            ext=fmt,
        )
        filepath = self._config.export_dir / file_name
        try:
            await asyncio.to_thread(self._prepare_and_write, writer, definition, result, filepath)
        except Exception as exc:
            logger.error("Failed to export %s as %s: %s", definition.id, fmt, exc)
            filepath.unlink(missing_ok=True)
            raise SerializationError(f"Failed to write {fmt} export: {exc}") from exc

        logger.info("Exported report %s to %s", definition.id, filepath)
        return ExportArtifact(
            success=True,
            uri=str(filepath.resolve()),
            file_name=file_name,
            message=f"Report exported to {fmt.upper()} successfully",
        )

    @staticmethod
    def _prepare_and_write(writer, definition, result, filepath: Path) -> None:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        writer(definition, result, filepath)

    # -- serializers ------------------------------------------------------

    def _write_pdf(self, definition: ReportDefinition, result: ReportResult, filepath: Path) -> None:
        document = build_document(definition, result, self._registry)
        self._pdf_backend.render(document, filepath)

    def _write_csv(self, definition: ReportDefinition, result: ReportResult, filepath: Path) -> None:
        rows = result.flat_details()
        columns = table_columns(rows)
        with open(filepath, "w", newline="", encoding="utf-8") as fh:
            if not rows:
                return
            csv.writer(fh, lineterminator="\n").writerow(self._registry.labels(columns))
            body = csv.writer(fh, quoting=csv.QUOTE_ALL, lineterminator="\n")
            for values in table_rows(rows, columns):
                body.writerow(values)

    def _write_json(self, definition: ReportDefinition, result: ReportResult, filepath: Path) -> None:
        payload = {"report": definition.to_dict(), "data": result.to_dict()}
        content = json.dumps(payload, indent=2, ensure_ascii=False)
        filepath.write_text(content, encoding="utf-8")

    def _write_xlsx(self, definition: ReportDefinition, result: ReportResult, filepath: Path) -> None:
        rows = result.flat_details()
        columns = table_columns(rows)
        df_data = pd.DataFrame(table_rows(rows, columns), columns=self._registry.labels(columns))
        summary = result.summary.to_dict()
        df_summary = pd.DataFrame(
            {"Metric": list(summary.keys()), "Value": list(summary.values())}
        )
        with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
            df_data.to_excel(writer, sheet_name="Report", index=False)
            df_summary.to_excel(writer, sheet_name="Summary", index=False)
