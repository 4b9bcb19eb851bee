from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with the browser client and metadata API (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Status(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    CAUTION = "caution"
    INACTIVE = "inactive"


class TimeStatus(str, Enum):
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"
    INACTIVE = "inactive"


class TimeRule(WireModel):
    target_hours: float
    start_field: str
    end_field: str
    description: str
    warning_threshold_hours: Optional[float] = None
    critical_threshold_hours: Optional[float] = None


class TimeRuleResult(WireModel):
    delta_minutes: Optional[int] = None
    status: TimeStatus = TimeStatus.INACTIVE
    target_met: bool = False
    description: str = "No time rule defined"
    delta_display: str = "N/A"
    target_display: str = ""


class Signal(WireModel):
    id: str = Field(validation_alias=AliasChoices("id", "signalCode"))
    label: str = Field(default="", validation_alias=AliasChoices("label", "signalName"))
    group: str = Field(default="", validation_alias=AliasChoices("group", "signalGroup"))
    definition: Optional[str] = None
    rule: Optional[str] = None
    tooltip: Optional[str] = None
    family: Optional[str] = None        # explicit fallback-inference family tag


class SignalResult(WireModel):
    id: str
    status: Status
    label: Optional[str] = None
    group: Optional[str] = None
    evidence: Optional[Union[str, list[str]]] = None
    cites: Optional[list[str]] = None
    source: str = "inferred"            # "server" | "inferred"


class SignalGroup(WireModel):
    group_name: str
    display_order: int = 0
    signals: list[Signal] = Field(default_factory=list)


class Followup(WireModel):
    followup_name: str
    followup_type: Optional[str] = None
    depends_on: Optional[str] = None
    followup_text: Optional[str] = None


class Specialty(WireModel):
    id: Optional[str] = None
    name: str
    display_order: int = 0
    metric_count: Optional[int] = None


class Metric(WireModel):
    metric_id: str
    metric_name: str
    specialty: str = ""
    specialty_id: Optional[str] = None
    domain: Optional[str] = None
    question_code: Optional[str] = None
    threshold_hours: Optional[Union[float, str]] = None
    version: Optional[str] = Field(default=None, validation_alias=AliasChoices("version", "contentVersion"))


class DisplayItem(WireModel):
    display_name: str
    display_order: int = 0
    bind_signal: Optional[str] = None
    bind_followup: Optional[str] = None


class BoundSignal(WireModel):
    signal_code: str
    signal_name: str = ""


class Prompt(WireModel):
    prompt_name: str
    prompt_text: str = ""
    bound_signals: list[BoundSignal] = Field(default_factory=list)


class ProvenanceRule(WireModel):
    signal_code: str
    source_system: Optional[str] = None
    source_table: Optional[str] = None
    source_field: Optional[str] = None
    source_field_path: Optional[str] = None
    extraction_method: Optional[str] = None


class CompleteMetricConfig(WireModel):
    metric: Metric
    signal_groups: list[SignalGroup] = Field(default_factory=list)
    followups: list[Followup] = Field(default_factory=list)
    display_items: list[DisplayItem] = Field(default_factory=list)
    prompts: list[Prompt] = Field(default_factory=list)
    provenance: list[ProvenanceRule] = Field(default_factory=list)


class DisplayConfig(WireModel):
    """Per-question planning configuration for group visibility and ordering."""

    visible_groups: dict[str, bool] = Field(default_factory=dict)
    group_order: Optional[list[str]] = None
    field_order: dict[str, list[str]] = Field(default_factory=dict)
    active_group_ids: Optional[list[str]] = None


class StatusCounts(WireModel):
    pass_: int = Field(default=0, alias="pass")
    fail: int = 0
    caution: int = 0
    inactive: int = 0


class GroupView(WireModel):
    group_name: str
    display_order: int = 0
    signals: list[SignalResult] = Field(default_factory=list)
    counts: StatusCounts = Field(default_factory=StatusCounts)
    active_count: int = 0


class JoinReport(WireModel):
    missing: list[str] = Field(default_factory=list)
    extra: list[str] = Field(default_factory=list)
    matched: list[str] = Field(default_factory=list)


class FollowupState(WireModel):
    visible: list[Followup] = Field(default_factory=list)
    hidden: list[Followup] = Field(default_factory=list)
    complete: bool = True
    total_count: int = 0


class ProvenanceEvent(WireModel):
    source: str                         # "computed" | "api" | "static" | "user"
    key: str
    detail: Optional[dict[str, Any]] = None
    ts: float
    page: str = ""
