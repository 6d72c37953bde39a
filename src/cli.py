"""Typer CLI application for Quiz Reports.

Provides commands for creating and exporting custom reports, tracking
attendance, and running time analytics against the local database.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.modules.reporting.errors import ReportingError

console = Console()
app = typer.Typer(
    name="quizreport",
    help="Quiz Reports -- custom analytics reports, exports, attendance & time analytics.",
    add_completion=False,
    no_args_is_help=True,
)

CONFIG_OPTION = typer.Option("config/settings.yaml", "--config", "-c", help="Path to settings.yaml.")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging level and format."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context."""
    return asyncio.run(coro)


def _get_reporting_engine(config_path: str):
    """Load configuration, initialise the database and build a ReportingEngine."""
    from src.database import init_db
    from src.modules.reporting import ReportingEngine, SQLDataSource, load_config

    config = load_config(config_path)
    init_db(database_url=config.database_url)
    source = SQLDataSource(config.field_registry.keys())
    return ReportingEngine(source, config=config)


def _fail(exc: Exception) -> None:
    console.print("[red]✘[/red] " + str(exc))
    raise typer.Exit(code=1)


def _split_csv(value: Optional[str]) -> Optional[list[str]]:
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _parse_chart(text: str) -> dict:
    """Parse ``bar:x:y``, ``line:y`` or ``pie:field`` into a chart spec."""
    parts = text.split(":")
    chart_type = parts[0]
    if chart_type == "bar" and len(parts) == 3:
        return {"type": "bar", "xAxis": parts[1], "yAxis": parts[2], "title": f"{parts[2]} by {parts[1]}"}
    if chart_type == "line" and len(parts) == 2:
        return {"type": "line", "yAxis": parts[1], "title": f"{parts[1]} over time"}
    if chart_type == "pie" and len(parts) == 2:
        return {"type": "pie", "field": parts[1], "title": f"{parts[1]} distribution"}
    raise typer.BadParameter("Chart must be bar:X:Y, line:Y or pie:FIELD, got " + text)


def _print_summary(summary: dict, title: str = "Summary") -> None:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan", min_width=20)
    table.add_column("Value", min_width=10)
    for key, value in summary.items():
        table.add_row(key, str(value))
    console.print(table)


# ------------------------------------------------------------------
# setup
# ------------------------------------------------------------------
@app.command()
def setup(
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Create database tables and data directories."""
    _setup_logging(verbose)
    from src.database import init_db
    from src.modules.reporting import load_config

    cfg = load_config(config)
    console.print(Panel("[bold cyan]Quiz Reports Setup[/bold cyan]"))
    init_db(database_url=cfg.database_url)
    console.print("[green]✔[/green] Database tables created.")
    cfg.export_dir.mkdir(parents=True, exist_ok=True)
    console.print("[green]✔[/green] " + str(cfg.export_dir) + "/")
    if Path(config).exists():
        console.print("[green]✔[/green] " + config + " found.")
    else:
        console.print("[yellow]⚠[/yellow] " + config + " not found. Using defaults.")


# ------------------------------------------------------------------
# seed
# ------------------------------------------------------------------
@app.command()
def seed(
    count: int = typer.Option(100, "--count", "-n", help="Number of synthetic attempts."),
    days: int = typer.Option(30, "--days", help="Spread attempts over this many past days."),
    random_seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible data."),
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Insert synthetic quiz attempts for demos."""
    _setup_logging(verbose)
    from src.database import init_db
    from src.modules.reporting import load_config
    from src.modules.reporting.data_source import insert_attempts
    from src.modules.reporting.sample_data import generate_records

    cfg = load_config(config)
    init_db(database_url=cfg.database_url)
    written = insert_attempts(generate_records(count=count, days=days, seed=random_seed))
    console.print("[green]✔[/green] Inserted " + str(written) + " quiz attempts.")


# ------------------------------------------------------------------
# fields
# ------------------------------------------------------------------
@app.command()
def fields(
    config: str = CONFIG_OPTION,
) -> None:
    """List the field keys available to reports."""
    from src.modules.reporting import load_config

    registry = load_config(config).field_registry
    table = Table(title="Report Fields", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Label")
    for key in registry.keys():
        table.add_row(key, registry.label(key))
    console.print(table)


# ------------------------------------------------------------------
# create
# ------------------------------------------------------------------
@app.command()
def create(
    title: str = typer.Argument(..., help="Report title."),
    description: str = typer.Option("", "--description", "-d", help="Report description."),
    students: Optional[List[str]] = typer.Option(None, "--student", help="Student id filter (repeatable)."),
    classes: Optional[List[str]] = typer.Option(None, "--class", help="Class filter (repeatable)."),
    subjects: Optional[List[str]] = typer.Option(None, "--subject", help="Subject filter (repeatable)."),
    difficulties: Optional[List[str]] = typer.Option(None, "--difficulty", help="Difficulty filter (repeatable)."),
    quiz_types: Optional[List[str]] = typer.Option(None, "--quiz-type", help="Quiz type filter (repeatable)."),
    start: Optional[str] = typer.Option(None, "--start", help="Range start (ISO-8601)."),
    end: Optional[str] = typer.Option(None, "--end", help="Range end (ISO-8601)."),
    selected: Optional[str] = typer.Option(None, "--fields", help="Comma-separated field keys."),
    group_by: Optional[str] = typer.Option(None, "--group-by", help="Field to group by."),
    sort_by: Optional[str] = typer.Option(None, "--sort-by", help="Field to sort by."),
    sort_order: Optional[str] = typer.Option(None, "--sort-order", help="asc or desc."),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="Default export format: pdf, csv, xlsx, json."),
    charts: Optional[List[str]] = typer.Option(None, "--chart", help="Chart spec bar:X:Y, line:Y or pie:FIELD (repeatable)."),
    no_charts: bool = typer.Option(False, "--no-charts", help="Skip chart generation."),
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Create, run and save a custom report."""
    _setup_logging(verbose)
    report_config = {
        "title": title,
        "description": description,
        "students": students,
        "classes": classes,
        "subjects": subjects,
        "difficultyLevels": difficulties,
        "quizTypes": quiz_types,
        "selectedFields": _split_csv(selected),
        "groupBy": group_by,
        "sortBy": sort_by,
        "sortOrder": sort_order,
        "format": fmt,
        "charts": [_parse_chart(c) for c in (charts or [])],
        "includeCharts": not no_charts,
    }
    if start or end:
        report_config["dateRange"] = {"start": start, "end": end}

    try:
        engine = _get_reporting_engine(config)
        result = _run_async(engine.create_custom_report(report_config))
    except ReportingError as exc:
        _fail(exc)

    report = result["report"]
    data = result["data"]
    console.print(Panel("[bold cyan]" + report.title + "[/bold cyan]\nid: " + report.id))
    _print_summary(data.summary.to_dict())
    for chart in data.charts:
        console.print("[bold]" + chart.title + "[/bold]: " + str(dict(zip(chart.labels, chart.data))))
    console.print("[green]✔[/green] " + result["message"])


# ------------------------------------------------------------------
# list
# ------------------------------------------------------------------
@app.command(name="list")
def list_reports(
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List saved report definitions."""
    _setup_logging(verbose)
    engine = _get_reporting_engine(config)
    table = Table(title="Saved Reports", show_header=True, header_style="bold magenta")
    table.add_column("Id", style="cyan")
    table.add_column("Title")
    table.add_column("Format")
    for report_id in engine.store.list_ids():
        definition = engine.store.load(report_id)
        table.add_row(report_id, definition.title, definition.format)
    console.print(table)


# ------------------------------------------------------------------
# export
# ------------------------------------------------------------------
@app.command()
def export(
    report_id: str = typer.Argument(..., help="Saved report id."),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="pdf, csv, xlsx or json (default: saved format)."),
    share: bool = typer.Option(False, "--share", help="Copy the artifact to the share directory."),
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Regenerate a saved report from current data and export it."""
    _setup_logging(verbose)
    try:
        engine = _get_reporting_engine(config)
        artifact = _run_async(engine.export_report(report_id, fmt))
        console.print("[green]✔[/green] " + artifact.message + ": " + artifact.uri)
        if share:
            shared = _run_async(engine.share_report(artifact.uri))
            console.print("[green]✔[/green] " + shared["message"] + ": " + shared["destination"])
    except ReportingError as exc:
        _fail(exc)


# ------------------------------------------------------------------
# attendance
# ------------------------------------------------------------------
@app.command()
def track(
    student_id: str = typer.Argument(..., help="Student id."),
    quiz_id: str = typer.Argument(..., help="Quiz id."),
    class_id: str = typer.Argument(..., help="Class id."),
    attendance_status: str = typer.Option("present", "--status", "-s", help="present, absent or late."),
    participation: str = typer.Option("full", "--participation", "-p", help="full, partial or minimal."),
    time_spent: float = typer.Option(0, "--time-spent", help="Seconds spent."),
    answered: int = typer.Option(0, "--answered", help="Questions answered."),
    completion: float = typer.Option(0, "--completion", help="Completion percentage."),
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Record one attendance event."""
    _setup_logging(verbose)
    try:
        engine = _get_reporting_engine(config)
        result = _run_async(engine.track_attendance({
            "studentId": student_id,
            "quizId": quiz_id,
            "classId": class_id,
            "status": attendance_status,
            "participationLevel": participation,
            "timeSpent": time_spent,
            "questionsAnswered": answered,
            "completionPercentage": completion,
        }))
    except ReportingError as exc:
        _fail(exc)
    console.print("[green]✔[/green] " + result["message"] + " (" + result["attendance"].id + ")")


@app.command()
def attendance(
    students: Optional[List[str]] = typer.Option(None, "--student", help="Student id filter (repeatable)."),
    classes: Optional[List[str]] = typer.Option(None, "--class", help="Class id filter (repeatable)."),
    as_json: bool = typer.Option(False, "--json", help="Print the full report as JSON."),
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Summarise attendance with weekly presence rates."""
    _setup_logging(verbose)
    try:
        engine = _get_reporting_engine(config)
        report = _run_async(engine.generate_attendance_report({"students": students, "classes": classes}))
    except ReportingError as exc:
        _fail(exc)
    if as_json:
        console.print_json(json.dumps(report, default=str))
        return
    _print_summary(report["summary"], title="Attendance")
    for week in report["trends"]["weeklyRates"]:
        console.print(week["week"] + ": " + str(week["rate"]) + "% present")


# ------------------------------------------------------------------
# time analytics
# ------------------------------------------------------------------
@app.command(name="time-analytics")
def time_analytics(
    subjects: Optional[List[str]] = typer.Option(None, "--subject", help="Subject filter (repeatable)."),
    students: Optional[List[str]] = typer.Option(None, "--student", help="Student id filter (repeatable)."),
    config: str = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show time-on-task analytics and recommendations."""
    _setup_logging(verbose)
    try:
        engine = _get_reporting_engine(config)
        result = _run_async(engine.generate_time_analytics({"subjects": subjects, "students": students}))
    except ReportingError as exc:
        _fail(exc)
    analytics = result["analytics"]
    _print_summary(analytics["overview"], title="Time Overview")
    for rec in analytics["recommendations"]:
        console.print("[yellow]⚠[/yellow] " + rec["message"])


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
