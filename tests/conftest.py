"""Shared pytest fixtures for Quiz Reports tests."""

import sys
from datetime import timedelta
from pathlib import Path

import pytest

# Ensure project root is on sys.path so 'src' is importable.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from tests.factories import NOW, make_record  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_db_engine():
    """Autouse fixture: reset the global DB engine before and after every test.

    This prevents cross-test pollution when tests create their own in-memory
    databases.
    """
    from src.database import reset_engine
    reset_engine()
    yield
    reset_engine()


@pytest.fixture()
def test_db():
    """Provide an in-memory SQLite database with all tables created.

    Yields a database URL string. The engine is automatically torn down
    after the test by the autouse ``_reset_db_engine`` fixture.
    """
    from src.database import reset_engine, init_db
    reset_engine()
    db_url = "sqlite:///:memory:"
    init_db(database_url=db_url, echo=False)
    yield db_url


@pytest.fixture()
def config(tmp_path):
    """ReportingConfig writing exports and shares under tmp_path."""
    from src.modules.reporting.config import ReportingConfig
    return ReportingConfig(
        export_dir=tmp_path / "exports",
        share_dir=tmp_path / "shared",
    )


@pytest.fixture()
def records():
    """Ten records: six in Class 8A, four in Class 8B, two subjects."""
    return [
        make_record("S1", score=90, time_taken=400, completion_rate=95, days_ago=1),
        make_record("S2", score=60, time_taken=800, completion_rate=70, days_ago=2, difficulty="Hard"),
        make_record("S3", subject="Science", score=75, time_taken=500, completion_rate=85, days_ago=3),
        make_record("S4", score=82, time_taken=650, completion_rate=81, days_ago=4, difficulty="Medium"),
        make_record("S5", subject="Science", score=45, time_taken=900, completion_rate=50, days_ago=5),
        make_record("S6", score=99, time_taken=300, completion_rate=100, days_ago=6),
        make_record("S7", klass="Class 8B", score=70, time_taken=700, completion_rate=80, days_ago=1),
        make_record("S8", klass="Class 8B", subject="Science", score=55, time_taken=750, completion_rate=60, days_ago=2),
        make_record("S9", klass="Class 8B", score=88, time_taken=550, completion_rate=92, days_ago=3, difficulty="Hard"),
        make_record("S10", klass="Class 8B", score=64, time_taken=620, completion_rate=40, days_ago=4),
    ]


@pytest.fixture()
def source(records):
    from src.modules.reporting.data_source import InMemoryDataSource
    return InMemoryDataSource(records)


class FakeDocumentBackend:
    """Captures rendered documents and writes a placeholder file."""

    def __init__(self):
        self.documents = []

    def render(self, document, filepath):
        self.documents.append(document)
        Path(filepath).write_bytes(b"%PDF-1.4 fake")


@pytest.fixture()
def pdf_backend():
    return FakeDocumentBackend()


@pytest.fixture()
def engine(test_db, config, source, pdf_backend):
    """ReportingEngine over the in-memory source and an in-memory database."""
    from src.modules.reporting.exporter import Exporter
    from src.modules.reporting.report_engine import ReportingEngine
    return ReportingEngine(
        source,
        config=config,
        exporter=Exporter(config, pdf_backend=pdf_backend),
    )


@pytest.fixture()
def date_range():
    """Window covering the last week before NOW."""
    return {
        "start": (NOW - timedelta(days=7)).isoformat(),
        "end": NOW.isoformat(),
    }
