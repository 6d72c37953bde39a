"""Tests for time-on-task analytics."""

import pytest

from src.modules.reporting.data_source import InMemoryDataSource
from src.modules.reporting.time_analytics import (
    TimeAnalytics,
    most_active_hour,
    time_recommendations,
)
from tests.factories import make_record


class TestTimeAnalytics:

    @pytest.mark.asyncio
    async def test_overview(self, source, config, date_range):
        result = await TimeAnalytics(source, config).generate_time_analytics({"dateRange": date_range})
        assert result["success"] is True
        overview = result["analytics"]["overview"]
        assert overview["totalTimeSpent"] == 6170
        assert overview["averageSessionTime"] == 617
        assert overview["longestSession"] == 900
        assert overview["shortestSession"] == 300
        assert overview["mostActiveHour"] == 12

    @pytest.mark.asyncio
    async def test_breakdowns(self, source, config, date_range):
        result = await TimeAnalytics(source, config).generate_time_analytics({"dateRange": date_range})
        analytics = result["analytics"]
        science = analytics["subjectBreakdown"]["Science"]
        assert science == {"totalTime": 2150, "sessionCount": 3, "averageTime": 716.67}
        assert sum(e["count"] for e in analytics["difficultyBreakdown"].values()) == 10
        assert analytics["dailyPatterns"]["2025-03-14"] == {"totalTime": 1100, "sessionCount": 2}
        weekly = analytics["weeklyTrends"]
        assert sum(w["sessionCount"] for w in weekly.values()) == 10
        assert set(weekly) == {"2025-W10", "2025-W11"}
        assert analytics["recommendations"] == []

    @pytest.mark.asyncio
    async def test_filters_apply(self, source, config, date_range):
        result = await TimeAnalytics(source, config).generate_time_analytics(
            {"dateRange": date_range, "subjects": ["Science"]}
        )
        assert list(result["analytics"]["subjectBreakdown"]) == ["Science"]

    @pytest.mark.asyncio
    async def test_empty_set(self, config, date_range):
        result = await TimeAnalytics(InMemoryDataSource(), config).generate_time_analytics(
            {"dateRange": date_range}
        )
        overview = result["analytics"]["overview"]
        assert overview == {
            "totalTimeSpent": 0,
            "averageSessionTime": 0,
            "mostActiveHour": None,
            "longestSession": 0,
            "shortestSession": 0,
        }


class TestRecommendations:

    def test_many_long_sessions_trigger_advice(self):
        advice = time_recommendations([100, 100, 1000, 1000])
        assert [a["type"] for a in advice] == ["time_management"]

    def test_few_long_sessions_do_not(self):
        assert time_recommendations([100, 100, 100, 1000]) == []

    def test_empty(self):
        assert time_recommendations([]) == []


def test_most_active_hour_tie_goes_to_earliest():
    rows = [{"date": "2025-03-01T15:00:00Z"}, {"date": "2025-03-02T09:00:00Z"}]
    assert most_active_hour(rows) == 9


@pytest.mark.asyncio
async def test_sessions_without_time_are_left_out_of_overview(config, date_range):
    source = InMemoryDataSource([
        make_record("S1", time_taken=300),
        make_record("S2", time_taken=600),
        make_record("S3", time_taken=None),
    ])
    result = await TimeAnalytics(source, config).generate_time_analytics({"dateRange": date_range})
    overview = result["analytics"]["overview"]
    assert overview["shortestSession"] == 300
    assert overview["averageSessionTime"] == 450
    assert overview["totalTimeSpent"] == 900
