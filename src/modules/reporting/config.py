"""Configuration loading for the reporting engine.

Settings come from ``config/settings.yaml`` (``reporting`` and ``database``
sections), with ``.env`` and environment variables taking precedence.
The result is an explicit :class:`ReportingConfig` handed to the engine.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from src.modules.reporting.fields import DEFAULT_FIELDS, FieldRegistry

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("pdf", "csv", "xlsx", "json")


@dataclass(frozen=True)
class ReportingConfig:
    """Immutable settings shared by every reporting component."""

    field_registry: FieldRegistry = field(default_factory=FieldRegistry)
    export_formats: tuple[str, ...] = EXPORT_FORMATS
    export_dir: Path = Path("data/exports")
    share_dir: Optional[Path] = None
    default_lookback_days: int = 30
    default_sort_by: str = "student_name"
    default_sort_order: str = "asc"
    default_format: str = "pdf"
    date_label_format: str = "%m/%d/%Y"
    company_name: str = "Quiz Reports"
    database_url: Optional[str] = None


def _load_yaml(config_path: Path) -> dict[str, Any]:
    """Load the YAML configuration file."""
    if not config_path.exists():
        logger.warning("Config file not found: %s. Using defaults.", config_path)
        return {}
    with open(config_path, "r", encoding="utf-8") as fh:
        config = yaml.safe_load(fh) or {}
    logger.info("Configuration loaded from %s", config_path)
    return config


def load_config(
    config_path: str = "config/settings.yaml",
    env_path: str = ".env",
) -> ReportingConfig:
    """Build a :class:`ReportingConfig` from YAML, ``.env`` and environment."""
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)
        logger.info("Loaded environment from %s", env_path)

    raw = _load_yaml(Path(config_path))
    rep = raw.get("reporting", {}) or {}
    db = raw.get("database", {}) or {}

    fields = rep.get("fields") or DEFAULT_FIELDS
    export_dir = os.getenv("REPORT_EXPORT_DIR") or rep.get("export_dir", "data/exports")
    share_dir = os.getenv("REPORT_SHARE_DIR") or rep.get("share_dir")

    return ReportingConfig(
        field_registry=FieldRegistry(dict(fields)),
        export_dir=Path(export_dir),
        share_dir=Path(share_dir) if share_dir else None,
        default_lookback_days=int(rep.get("default_lookback_days", 30)),
        default_sort_by=rep.get("default_sort_by", "student_name"),
        default_sort_order=rep.get("default_sort_order", "asc"),
        default_format=rep.get("default_format", "pdf"),
        date_label_format=rep.get("date_label_format", "%m/%d/%Y"),
        company_name=rep.get("company_name", "Quiz Reports"),
        database_url=os.getenv("DATABASE_URL") or db.get("url"),
    )
