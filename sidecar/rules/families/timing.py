"""
Timing family: on-time-to-surgery signals (SCH 19-hour rule).

Prefers the server's precomputed ``derived.target_19h_met`` flag and only
falls back to computing arrival → incision from raw timestamps when the
flag is absent or does not read as yes/no.
"""

from __future__ import annotations

from typing import Any

from api.models import Signal, Status, TimeStatus
from rules.field_resolvers import get_path
from rules.status import normalize_status
from rules.time_rules import TimeRuleResolver
from .base import BaseSignalFamily

TIMING_MODULE_ID = "timeliness_sch"


class TimingFamily(BaseSignalFamily):

    def __init__(self, module_id: str = TIMING_MODULE_ID, resolver: TimeRuleResolver | None = None):
        self._module_id = module_id
        self._resolver = resolver or TimeRuleResolver()

    @property
    def family_id(self) -> str:
        return "timing"

    @property
    def display_name(self) -> str:
        return "Time to surgery"

    @property
    def keywords(self) -> list[tuple[str, ...]]:
        return [("timing",), ("sch",), ("19h",)]

    @property
    def signal_ids(self) -> list[str]:
        return ["on_time_19h"]

    def evaluate(self, signal: Signal, payload: Any) -> Status:
        flag = normalize_status(get_path(payload, "derived.target_19h_met"))
        if flag in (Status.PASS, Status.FAIL):
            return flag

        result = self._resolver.resolve(self._module_id, payload)
        if result.status == TimeStatus.INACTIVE:
            return Status.INACTIVE
        return Status.PASS if result.target_met else Status.FAIL
