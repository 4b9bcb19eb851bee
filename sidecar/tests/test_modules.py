"""Tests for module ID mapping and metric label formatting."""

from api.models import Metric
from rules.modules import (
    format_metric_compact,
    format_metric_display,
    format_metric_full,
    format_metric_subtitle,
    map_module_id,
    module_display_name,
)


def _metric(**overrides) -> Metric:
    fields = {"metric_id": "I25", "metric_name": "In OR <18 hrs"}
    fields.update(overrides)
    return Metric(**fields)


class TestModuleIds:
    def test_known_and_unknown_ids(self):
        assert map_module_id("timeliness_sch") == "timeliness_sch"
        assert map_module_id("custom_module") == "custom_module"

    def test_display_names(self):
        assert module_display_name("ssi_assessment") == "Surgical Site Infection (SSI)"
        assert module_display_name("custom_module") == "custom_module"


class TestMetricFormatting:
    def test_display_with_and_without_question_code(self):
        assert format_metric_display(_metric(question_code="I25")) == "I25 - In OR <18 hrs"
        assert format_metric_display(_metric()) == "In OR <18 hrs"

    def test_compact_truncates_long_names(self):
        assert format_metric_compact(_metric(question_code="I25")) == "I25"
        long_name = _metric(metric_name="Supracondylar humerus fracture timing")
        assert format_metric_compact(long_name) == "Supracondylar humeru..."

    def test_full_label(self):
        metric = _metric(specialty_id="ORTHO", question_code="I25")
        assert format_metric_full(metric) == "ORTHO I25 - In OR <18 hrs"
        assert format_metric_full(_metric()) == "In OR <18 hrs"

    def test_subtitle(self):
        metric = _metric(domain="Timeliness", threshold_hours=18.0, version="2")
        assert format_metric_subtitle(metric) == "Timeliness • ≤18h • v2"
        assert format_metric_subtitle(_metric(threshold_hours=0.5)) == "≤0.5h"
        assert format_metric_subtitle(_metric()) == ""

    def test_metric_accepts_api_field_names(self):
        metric = Metric.model_validate({
            "metricId": "I25",
            "metricName": "In OR <18 hrs",
            "questionCode": "I25",
            "contentVersion": "3",
        })
        assert metric.version == "3"
        assert metric.question_code == "I25"
