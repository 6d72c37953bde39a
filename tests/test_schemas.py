"""Tests for report definition construction and validation."""

import pytest

from src.modules.reporting.errors import ValidationError
from src.modules.reporting.fields import FieldRegistry
from src.modules.reporting.config import ReportingConfig
from src.modules.reporting.schemas import ChartSpec, DateRange, ReportDefinition, ReportFilters
from tests.factories import NOW


class TestFromConfig:

    def test_defaults_applied(self, config):
        definition = ReportDefinition.from_config({"title": "Weekly"}, config, now=NOW)
        assert definition.id.startswith("report_")
        assert definition.type == "custom"
        assert definition.format == "pdf"
        assert definition.sort_by == "student_name"
        assert definition.sort_order == "asc"
        assert definition.group_by is None
        assert definition.include_charts is True
        assert definition.created_by == "current_user"
        assert definition.selected_fields == tuple(config.field_registry.keys())
        assert (definition.date_range.end - definition.date_range.start).days == 30
        assert definition.date_range.end == NOW

    def test_ids_are_unique(self, config):
        first = ReportDefinition.from_config({"title": "A"}, config)
        second = ReportDefinition.from_config({"title": "A"}, config)
        assert first.id != second.id

    def test_top_level_and_nested_filters(self, config):
        top = ReportDefinition.from_config({"title": "T", "subjects": ["Science"]}, config)
        nested = ReportDefinition.from_config(
            {"title": "T", "filters": {"difficultyLevels": ["Hard"], "quiz_types": ["practice"]}},
            config,
        )
        assert top.filters.subjects == ("Science",)
        assert nested.filters.difficulty_levels == ("Hard",)
        assert nested.filters.quiz_types == ("practice",)

    def test_chart_specs_parsed(self, config):
        definition = ReportDefinition.from_config(
            {"title": "T", "charts": [{"type": "bar", "xAxis": "class", "yAxis": "score"}]},
            config,
        )
        assert definition.chart_configs == (ChartSpec(type="bar", x_axis="class", y_axis="score"),)


class TestValidation:

    @pytest.mark.parametrize("raw", [
        {},
        {"title": "   "},
        {"title": "T", "format": "docx"},
        {"title": "T", "type": "leaderboard"},
        {"title": "T", "sortOrder": "up"},
        {"title": "T", "selectedFields": ["score", "shoe_size"]},
        {"title": "T", "groupBy": "homeroom"},
        {"title": "T", "sortBy": "nickname"},
        {"title": "T", "dateRange": {"start": "2025-03-02", "end": "2025-03-01"}},
        {"title": "T", "dateRange": {"start": "2025-03-01"}},
        {"title": "T", "dateRange": {"start": "soon", "end": "later"}},
        {"title": "T", "subjects": 42},
    ])
    def test_invalid_configs_raise(self, config, raw):
        with pytest.raises(ValidationError):
            ReportDefinition.from_config(raw, config)

    def test_validation_error_is_value_error(self, config):
        with pytest.raises(ValueError):
            ReportDefinition.from_config({}, config)

    def test_custom_registry_narrows_fields(self):
        narrow = ReportingConfig(field_registry=FieldRegistry({"score": "Score", "student_name": "Name"}))
        with pytest.raises(ValidationError):
            ReportDefinition.from_config({"title": "T", "selectedFields": ["subject"]}, narrow)
        definition = ReportDefinition.from_config({"title": "T"}, narrow)
        assert definition.selected_fields == ("score", "student_name")


class TestDictForms:

    def test_definition_survives_dict_round_trip(self, config, date_range):
        definition = ReportDefinition.from_config(
            {
                "title": "Science by class",
                "dateRange": date_range,
                "subjects": ["Science"],
                "selectedFields": ["student_name", "class", "score"],
                "groupBy": "class",
                "sortBy": "score",
                "sortOrder": "desc",
                "charts": [{"type": "pie", "field": "class", "title": "Classes"}],
                "format": "json",
            },
            config,
        )
        data = definition.to_dict()
        assert data["dateRange"] == date_range
        assert data["filters"]["subjects"] == ["Science"]
        assert ReportDefinition.from_dict(data, config) == definition

    def test_from_dict_missing_key(self, config):
        with pytest.raises(ValidationError):
            ReportDefinition.from_dict({"title": "x"}, config)

    def test_filters_to_dict_uses_camel_case(self):
        assert ReportFilters(quiz_types=("homework",)).to_dict() == {
            "students": [],
            "classes": [],
            "subjects": [],
            "quizTypes": ["homework"],
            "difficultyLevels": [],
        }

    def test_date_range_accepts_zulu_suffix(self):
        window = DateRange.from_dict({"start": "2025-03-01T00:00:00Z", "end": "2025-03-02T00:00:00Z"})
        assert window.to_dict() == {
            "start": "2025-03-01T00:00:00+00:00",
            "end": "2025-03-02T00:00:00+00:00",
        }
