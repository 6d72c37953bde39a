"""Tests for the CSV, JSON, XLSX and PDF serializers."""

import csv
import json
from pathlib import Path

import pandas as pd
import pytest

from src.modules.reporting.aggregator import summarize
from src.modules.reporting.errors import SerializationError, UnsupportedFormatError
from src.modules.reporting.exporter import Exporter, HtmlPdfBackend, build_document
from src.modules.reporting.schemas import ChartData, DateRange, ReportDefinition, ReportResult
from src.modules.reporting.transformer import transform
from tests.factories import NOW


def _report(config, records, title="Term 1 Maths", **overrides):
    raw = {"title": title, "selectedFields": ["student_name", "class", "score"], "sortBy": "score"}
    raw.update(overrides)
    definition = ReportDefinition.from_config(raw, config, now=NOW)
    flat, details = transform(
        records, definition.selected_fields, definition.sort_by,
        definition.sort_order, definition.group_by,
    )
    result = ReportResult(
        summary=summarize(flat),
        details=details,
        charts=[ChartData(type="pie", title="Classes", labels=["Class 8A", "Class 8B"], data=[6, 4])],
        total_records=len(flat),
        date_range=definition.date_range,
        generated_at=NOW,
    )
    return definition, result


class BrokenBackend:
    def render(self, document, filepath):
        raise OSError("disk full")


class TruncatingBackend:
    def render(self, document, filepath):
        Path(filepath).write_bytes(b"%PDF partial")
        raise OSError("disk full")


class TestCsv:

    @pytest.mark.asyncio
    async def test_header_and_rows(self, config, records):
        definition, result = _report(config, records)
        artifact = await Exporter(config).export(definition, result, "csv")
        lines = Path(artifact.uri).read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1 + len(records)
        assert lines[0] == "Student Name,Class,Score"
        assert lines[1] == '"Student S5","Class 8A","45"'
        for row in csv.reader(lines[1:]):
            assert len(row) == 3

    @pytest.mark.asyncio
    async def test_grouped_details_are_flattened(self, config, records):
        definition, result = _report(config, records, groupBy="class")
        artifact = await Exporter(config).export(definition, result, "csv")
        lines = Path(artifact.uri).read_text(encoding="utf-8").splitlines()
        assert len(lines) == 11

    @pytest.mark.asyncio
    async def test_empty_report_writes_empty_file(self, config):
        definition, result = _report(config, [])
        artifact = await Exporter(config).export(definition, result, "csv")
        assert artifact.success is True
        assert Path(artifact.uri).read_text(encoding="utf-8") == ""

    @pytest.mark.asyncio
    async def test_missing_values_are_blank(self, config):
        rows = [{"student_name": "A", "class": "8A", "score": 1}, {"student_name": "B", "score": 2}]
        definition, result = _report(config, rows)
        artifact = await Exporter(config).export(definition, result, "csv")
        lines = Path(artifact.uri).read_text(encoding="utf-8").splitlines()
        assert lines[2] == '"B","","2"'


class TestJson:

    @pytest.mark.asyncio
    async def test_payload_contains_definition_and_data(self, config, records):
        definition, result = _report(config, records)
        artifact = await Exporter(config).export(definition, result, "json")
        payload = json.loads(Path(artifact.uri).read_text(encoding="utf-8"))
        assert payload["report"] == definition.to_dict()
        assert payload["data"] == result.to_dict()
        assert payload["data"]["summary"]["totalRecords"] == 10
        assert payload["data"]["metadata"]["dateRange"] == definition.date_range.to_dict()

    @pytest.mark.asyncio
    async def test_grouped_structure_preserved(self, config, records):
        definition, result = _report(config, records, groupBy="class")
        artifact = await Exporter(config).export(definition, result, "json")
        payload = json.loads(Path(artifact.uri).read_text(encoding="utf-8"))
        buckets = payload["data"]["details"]
        assert [b["count"] for b in buckets] == [6, 4]
        assert set(buckets[0]) == {"group", "items", "count", "averageScore"}
        assert payload["data"]["metadata"]["totalRecords"] == 10

    @pytest.mark.asyncio
    async def test_stored_definition_can_be_reloaded(self, config, records):
        definition, result = _report(config, records)
        artifact = await Exporter(config).export(definition, result, "json")
        payload = json.loads(Path(artifact.uri).read_text(encoding="utf-8"))
        assert ReportDefinition.from_dict(payload["report"], config) == definition


class TestXlsx:

    @pytest.mark.asyncio
    async def test_report_and_summary_sheets(self, config, records):
        definition, result = _report(config, records)
        artifact = await Exporter(config).export(definition, result, "xlsx")
        sheets = pd.read_excel(artifact.uri, sheet_name=None)
        assert set(sheets) == {"Report", "Summary"}
        assert list(sheets["Report"].columns) == ["Student Name", "Class", "Score"]
        assert len(sheets["Report"]) == 10
        assert list(sheets["Summary"]["Metric"])[0] == "totalRecords"


class TestPdf:

    def test_document_layout(self, config, records):
        definition, result = _report(config, records, groupBy="class", description="Weekly")
        document = build_document(definition, result, config.field_registry)
        assert document.headers == ["Student Name", "Class", "Score"]
        assert document.summary["Total Records"] == 10
        assert document.summary["Completion Rate"].endswith("%")
        assert document.description == "Weekly"
        assert sum(g[1] for g in document.groups) == 10

    def test_charts_omitted_when_disabled(self, config, records):
        definition, result = _report(config, records, includeCharts=False)
        assert build_document(definition, result, config.field_registry).charts == []

    def test_html_backend_renders_content(self, config, records):
        definition, result = _report(config, records)
        document = build_document(definition, result, config.field_registry)
        html = HtmlPdfBackend("Springfield High").build(document).build_html()
        assert "Term 1 Maths" in html
        assert "Springfield High" in html
        assert "Student S6" in html
        assert "data:image/png;base64," in html


class TestExporterErrors:

    @pytest.mark.asyncio
    async def test_unknown_format(self, config, records):
        definition, result = _report(config, records)
        with pytest.raises(UnsupportedFormatError):
            await Exporter(config).export(definition, result, "docx")

    @pytest.mark.asyncio
    async def test_backend_failure_becomes_serialization_error(self, config, records):
        definition, result = _report(config, records)
        exporter = Exporter(config, pdf_backend=BrokenBackend())
        with pytest.raises(SerializationError):
            await exporter.export(definition, result, "pdf")

    @pytest.mark.asyncio
    async def test_failed_write_leaves_no_file(self, config, records):
        definition, result = _report(config, records)
        exporter = Exporter(config, pdf_backend=TruncatingBackend())
        with pytest.raises(SerializationError):
            await exporter.export(definition, result, "pdf")
        assert list(config.export_dir.glob("*.pdf")) == []

    @pytest.mark.asyncio
    async def test_json_rejects_values_it_cannot_encode(self, config, records):
        rows = [dict(r) for r in records]
        rows[0]["student_name"] = {"Student", "S1"}
        definition, result = _report(config, rows)
        with pytest.raises(SerializationError):
            await Exporter(config).export(definition, result, "json")
        assert list(config.export_dir.glob("*.json")) == []

    @pytest.mark.asyncio
    async def test_file_name_is_sanitized(self, config, records):
        definition, result = _report(config, records, title="Maths / Science  Q1")
        artifact = await Exporter(config).export(definition, result, "json")
        assert artifact.file_name.startswith("Maths_Science_Q1_")
        assert artifact.message == "Report exported to JSON successfully"
        assert artifact.to_dict()["fileName"] == artifact.file_name

    def test_supported_formats(self, config):
        assert sorted(Exporter(config).formats) == ["csv", "json", "pdf", "xlsx"]


def test_date_range_in_metadata_is_iso(config, records):
    definition, result = _report(config, records)
    assert result.to_dict()["metadata"]["dateRange"] == DateRange.last_days(30, now=NOW).to_dict()
