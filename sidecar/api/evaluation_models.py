from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from api.models import (
    DisplayConfig,
    Followup,
    FollowupState,
    GroupView,
    JoinReport,
    ProvenanceEvent,
    SignalResult,
    Status,
    TimeRule,
    TimeRuleResult,
    WireModel,
)


class CaseEvaluation(WireModel):
    metric_id: str
    module_id: str
    timing: Optional[TimeRuleResult] = None
    results: list[SignalResult] = Field(default_factory=list)
    groups: list[GroupView] = Field(default_factory=list)
    active_groups: list[GroupView] = Field(default_factory=list)
    followups: FollowupState = Field(default_factory=FollowupState)
    join_report: Optional[JoinReport] = None
    provenance: list[ProvenanceEvent] = Field(default_factory=list)


class EvaluateRequest(WireModel):
    payload: dict[str, Any] = Field(default_factory=dict)
    followup_values: dict[str, Any] = Field(default_factory=dict)
    display: Optional[DisplayConfig] = None
    produced_signals: Optional[list[dict[str, Any]]] = None
    module_id: Optional[str] = None


class TimeRuleEntry(WireModel):
    module_id: str
    rule: TimeRule
    target_display: str


class TimeRuleListResponse(WireModel):
    rules: list[TimeRuleEntry] = Field(default_factory=list)


class SignalStatusRequest(WireModel):
    values: dict[str, Any] = Field(default_factory=dict)


class SignalStatusResponse(WireModel):
    statuses: dict[str, Status] = Field(default_factory=dict)


class JoinReportRequest(WireModel):
    module_id: Optional[str] = None
    produced: list[Any] = Field(default_factory=list)
    expected: list[Any] = Field(default_factory=list)


class FollowupResolveRequest(WireModel):
    followups: list[Followup] = Field(default_factory=list)
    values: dict[str, Any] = Field(default_factory=dict)
