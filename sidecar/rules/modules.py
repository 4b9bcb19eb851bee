"""Module ID mapping and metric display formatting."""

from __future__ import annotations

from api.models import Metric

# Intake-page module IDs -> abstraction module IDs (time rules, alias tables)
MODULE_ID_MAPPING: dict[str, str] = {
    "timeliness_sch": "timeliness_sch",
    "timeliness_urgent": "timeliness_urgent",
    "ssi_assessment": "ssi_assessment",
    "return_or": "return_or",
    "neurovascular_injury": "neurovascular_injury",
}

MODULE_DISPLAY_NAMES: dict[str, str] = {
    "timeliness_sch": "Timeliness – SCH",
    "timeliness_urgent": "Timeliness – Other Urgent Ortho",
    "ssi_assessment": "Surgical Site Infection (SSI)",
    "return_or": "Return to OR (Unplanned)",
    "neurovascular_injury": "Neurovascular Injury",
}


def map_module_id(intake_module_id: str) -> str:
    return MODULE_ID_MAPPING.get(intake_module_id, intake_module_id)


def module_display_name(module_id: str) -> str:
    return MODULE_DISPLAY_NAMES.get(module_id, module_id)


def format_metric_display(metric: Metric) -> str:
    """Dropdown label, e.g. "I25 - In OR <18 hrs"; the bare name when there is no question code."""
    if metric.question_code:
        return f"{metric.question_code} - {metric.metric_name}"
    return metric.metric_name


def format_metric_compact(metric: Metric) -> str:
    if metric.question_code:
        return metric.question_code
    if len(metric.metric_name) > 20:
        return metric.metric_name[:20] + "..."
    return metric.metric_name


def format_metric_full(metric: Metric) -> str:
    parts = [p for p in (metric.specialty_id, metric.question_code) if p]
    prefix = " ".join(parts) + " - " if parts else ""
    return prefix + metric.metric_name


def format_metric_subtitle(metric: Metric) -> str:
    """Domain • threshold • version, skipping whatever is missing."""
    parts = []
    if metric.domain:
        parts.append(metric.domain)
    if metric.threshold_hours not in (None, ""):
        threshold = metric.threshold_hours
        if isinstance(threshold, float) and threshold.is_integer():
            threshold = int(threshold)
        parts.append(f"≤{threshold}h")
    if metric.version:
        parts.append(f"v{metric.version}")
    return " • ".join(parts)
