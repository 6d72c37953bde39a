"""Reporting module: custom report pipeline, exports, attendance and time analytics."""

from src.modules.reporting.attendance import AttendanceTracker
from src.modules.reporting.config import ReportingConfig, load_config
from src.modules.reporting.data_source import DataSource, InMemoryDataSource, SQLDataSource
from src.modules.reporting.errors import (
    DataSourceError,
    NotAvailableError,
    NotFoundError,
    ReportingError,
    SerializationError,
    UnsupportedFormatError,
    ValidationError,
)
from src.modules.reporting.exporter import Exporter
from src.modules.reporting.fields import FieldRegistry
from src.modules.reporting.report_engine import ReportingEngine
from src.modules.reporting.store import ReportStore
from src.modules.reporting.time_analytics import TimeAnalytics

__all__ = [
    "AttendanceTracker",
    "DataSource",
    "DataSourceError",
    "Exporter",
    "FieldRegistry",
    "InMemoryDataSource",
    "NotAvailableError",
    "NotFoundError",
    "ReportStore",
    "ReportingConfig",
    "ReportingEngine",
    "ReportingError",
    "SQLDataSource",
    "SerializationError",
    "TimeAnalytics",
    "UnsupportedFormatError",
    "ValidationError",
    "load_config",
]
