"""Tests for chart payload builders."""

from src.modules.reporting.charts import build_charts
from src.modules.reporting.schemas import ChartSpec


def test_pie_counts_by_field():
    charts = build_charts(
        [{"difficulty": "Easy"}, {"difficulty": "Easy"}, {"difficulty": "Hard"}],
        [ChartSpec(type="pie", field="difficulty")],
    )
    assert len(charts) == 1
    assert charts[0].labels == ["Easy", "Hard"]
    assert charts[0].data == [2, 1]


def test_pie_skips_records_without_field():
    charts = build_charts(
        [{"difficulty": "Easy"}, {"score": 3}],
        [ChartSpec(type="pie", field="difficulty")],
    )
    assert charts[0].data == [1]
    assert sum(charts[0].data) <= 2


def test_bar_means_per_group_in_first_seen_order():
    rows = [
        {"subject": "Science", "score": 60},
        {"subject": "Maths", "score": 80},
        {"subject": "Science", "score": 71},
    ]
    chart = build_charts(rows, [ChartSpec(type="bar", title="By subject", x_axis="subject", y_axis="score")])[0]
    assert chart.title == "By subject"
    assert chart.labels == ["Science", "Maths"]
    assert chart.data == [65.5, 80]


def test_line_orders_by_date_and_formats_labels():
    rows = [
        {"date": "2025-03-02T10:00:00+00:00", "score": 2},
        {"date": "2025-03-01T10:00:00+00:00", "score": 1},
        {"score": 99},
    ]
    chart = build_charts(rows, [ChartSpec(type="line", y_axis="score")])[0]
    assert chart.labels == ["03/01/2025", "03/02/2025"]
    assert chart.data == [1, 2]


def test_label_format_is_configurable():
    rows = [{"date": "2025-03-01T10:00:00Z", "score": 1}]
    chart = build_charts(rows, [ChartSpec(type="line", y_axis="score")], date_label_format="%Y-%m-%d")[0]
    assert chart.labels == ["2025-03-01"]


def test_invalid_specs_are_skipped():
    specs = [
        ChartSpec(type="radar", field="score"),
        ChartSpec(type="bar", x_axis="subject"),
        ChartSpec(type="pie"),
        ChartSpec(type="pie", field="subject"),
    ]
    charts = build_charts([{"subject": "Art"}], specs)
    assert [c.type for c in charts] == ["pie"]


def test_empty_record_set_gives_empty_series():
    chart = build_charts([], [ChartSpec(type="bar", x_axis="class", y_axis="score")])[0]
    assert chart.labels == []
    assert chart.data == []
