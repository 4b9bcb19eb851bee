"""
Time-window rules for timeliness metrics.

Each rule names a start and an end timestamp field and a target in hours.
``resolve`` reads both timestamps from the case payload, computes elapsed
minutes (clamped at zero), and grades the interval:

    pass     elapsed hours <= target (inclusive)
    warning  over target but within the configured warning threshold
    fail     otherwise
    inactive no rule for the module, or a timestamp is missing/unparseable
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Optional

from api.models import TimeRule, TimeRuleResult, TimeStatus
from rules.field_resolvers import resolve_timestamp

logger = logging.getLogger(__name__)


TIME_RULES: dict[str, TimeRule] = {
    # Supracondylar humerus fracture: arrival to incision within 19 hours
    "timeliness_sch": TimeRule(
        target_hours=19,
        start_field="ArrivalInstant",
        end_field="IncisionStartInstant",
        description="ED arrival to incision",
        warning_threshold_hours=16,
        critical_threshold_hours=19,
    ),
    "timeliness_urgent": TimeRule(
        target_hours=6,
        start_field="ArrivalInstant",
        end_field="IncisionStartInstant",
        description="Arrival to definitive care",
        warning_threshold_hours=4,
        critical_threshold_hours=6,
    ),
    "timeliness_open_fx_abx": TimeRule(
        target_hours=1,
        start_field="ArrivalInstant",
        end_field="AbxFirstDose",
        description="Arrival to first antibiotic dose",
        warning_threshold_hours=0.75,
        critical_threshold_hours=1,
    ),
    "ssi_assessment": TimeRule(
        target_hours=24,
        start_field="IncisionStartInstant",
        end_field="AbxFirstDose",
        description="Surgery to antibiotic",
        warning_threshold_hours=20,
        critical_threshold_hours=24,
    ),
    "vte_prophylaxis": TimeRule(
        target_hours=24,
        start_field="IncisionStartInstant",
        end_field="VteProphylaxisStart",
        description="Surgery to VTE prophylaxis",
        warning_threshold_hours=18,
        critical_threshold_hours=24,
    ),
    "vte_prophylaxis_high_risk": TimeRule(
        target_hours=12,
        start_field="IncisionStartInstant",
        end_field="VteProphylaxisStart",
        description="Surgery to VTE prophylaxis (high risk)",
        warning_threshold_hours=8,
        critical_threshold_hours=12,
    ),
    "compartment_syndrome": TimeRule(
        target_hours=6,
        start_field="SymptomsOnset",
        end_field="FasciotomyStart",
        description="Symptom onset to fasciotomy",
        warning_threshold_hours=4,
        critical_threshold_hours=6,
    ),
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def delta_minutes(start: Optional[datetime], end: Optional[datetime]) -> Optional[int]:
    """Whole minutes from start to end, never negative. None if either end is missing."""
    if start is None or end is None:
        return None
    raw_ms = (end - start).total_seconds() * 1000
    return max(0, _round_half_up(raw_ms / 60000))


def hours_1dp(minutes: int) -> float:
    return _round_half_up(minutes / 60 * 10) / 10


def format_hours(minutes: int) -> str:
    return f"{hours_1dp(minutes):.1f}h"


def format_time_delta(minutes: Optional[int]) -> str:
    if minutes is None:
        return "N/A"
    return format_hours(minutes)


def _format_target(hours: float) -> str:
    return f"≤{hours:g}h"


def get_time_rule(module_id: str) -> Optional[TimeRule]:
    return TIME_RULES.get(module_id)


def available_time_rules() -> list[str]:
    return list(TIME_RULES)


def target_display(module_id: str) -> str:
    rule = TIME_RULES.get(module_id)
    if rule is None:
        return ""
    return _format_target(rule.target_hours)


class TimeRuleResolver:
    """Grades a case payload against a module's time rule.

    Rules default to the built-in catalogue; pass ``rules`` to evaluate
    against a different table (tests, per-site overrides).
    """

    def __init__(self, rules: Optional[dict[str, TimeRule]] = None, observer=None):
        self._rules = TIME_RULES if rules is None else rules
        self._observer = observer

    def get_rule(self, module_id: str) -> Optional[TimeRule]:
        return self._rules.get(module_id)

    def resolve(self, module_id: str, payload: Any) -> TimeRuleResult:
        rule = self._rules.get(module_id)
        if rule is None:
            logger.debug("No time rule for module '%s'", module_id)
            return TimeRuleResult()

        return self.resolve_rule(rule, payload, key=module_id)

    def resolve_rule(self, rule: TimeRule, payload: Any, key: str = "") -> TimeRuleResult:
        start = resolve_timestamp(payload, rule.start_field)
        end = resolve_timestamp(payload, rule.end_field)
        minutes = delta_minutes(start, end)

        if minutes is None:
            result = TimeRuleResult(
                description=rule.description,
                target_display=_format_target(rule.target_hours),
            )
            self._report(key, result)
            return result

        delta_hours = minutes / 60
        target_met = delta_hours <= rule.target_hours

        if target_met:
            status = TimeStatus.PASS
        elif rule.warning_threshold_hours and delta_hours <= rule.warning_threshold_hours:
            status = TimeStatus.WARNING
        else:
            status = TimeStatus.FAIL

        result = TimeRuleResult(
            delta_minutes=minutes,
            status=status,
            target_met=target_met,
            description=rule.description,
            delta_display=format_hours(minutes),
            target_display=_format_target(rule.target_hours),
        )
        self._report(key, result)
        return result

    def _report(self, key: str, result: TimeRuleResult) -> None:
        if self._observer is None:
            return
        self._observer.record_event(
            "computed",
            f"time_rule:{key}",
            {"status": result.status.value, "deltaMinutes": result.delta_minutes},
        )
