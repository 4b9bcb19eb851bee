import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from api.evaluation_models import (
    CaseEvaluation,
    EvaluateRequest,
    FollowupResolveRequest,
    JoinReportRequest,
    SignalStatusRequest,
    SignalStatusResponse,
    TimeRuleEntry,
    TimeRuleListResponse,
)
from api.models import CompleteMetricConfig, FollowupState, JoinReport, TimeRuleResult
from metadata.client import MetadataClient, MetadataFetchError, MetadataNotFound
from rules import default_registry
from rules.aggregator import MetricConfigAggregator
from rules.canonicalizer import SignalCanonicalizer
from rules.followups import FollowupDependencyResolver
from rules.provenance import ProvenanceRecorder
from rules.status import statuses_from_values
from rules.time_rules import TIME_RULES, TimeRuleResolver, target_display

_logger = logging.getLogger(__name__)

router = APIRouter()

_aggregator: Optional[MetricConfigAggregator] = None


def get_aggregator() -> MetricConfigAggregator:
    """Return the process-wide aggregator (stateless apart from its HTTP session)."""
    global _aggregator
    if _aggregator is None:
        _aggregator = MetricConfigAggregator(client=MetadataClient(), registry=default_registry)
    return _aggregator


def close_aggregator() -> None:
    global _aggregator
    if _aggregator is not None:
        _aggregator.close()
        _aggregator = None


def _load_config(metric_id: str) -> CompleteMetricConfig:
    try:
        return get_aggregator().load(metric_id)
    except MetadataNotFound:
        raise HTTPException(status_code=404, detail=f"Metric '{metric_id}' not found.")
    except MetadataFetchError as e:
        _logger.warning("Metadata fetch failed for %s: %s", metric_id, e)
        raise HTTPException(
            status_code=502,
            detail="Metric metadata is unavailable. Please try again.",
        )


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/time-rules", response_model=TimeRuleListResponse)
def list_time_rules():
    return TimeRuleListResponse(rules=[
        TimeRuleEntry(module_id=module_id, rule=rule, target_display=target_display(module_id))
        for module_id, rule in TIME_RULES.items()
    ])


@router.post("/time-rules/{module_id}/resolve", response_model=TimeRuleResult)
def resolve_time_rule(module_id: str, payload: dict):
    return TimeRuleResolver().resolve(module_id, payload)


@router.get("/signal-families")
def list_signal_families():
    return {"families": default_registry.list_families()}


@router.post("/signals/status", response_model=SignalStatusResponse)
def signal_statuses(body: SignalStatusRequest):
    return SignalStatusResponse(statuses=statuses_from_values(body.values))


@router.post("/signals/join-report", response_model=JoinReport)
def join_report(body: JoinReportRequest):
    return SignalCanonicalizer().diff_join(body.produced, body.expected, body.module_id)


@router.post("/followups/resolve", response_model=FollowupState)
def resolve_followups(body: FollowupResolveRequest):
    return FollowupDependencyResolver().resolve(body.followups, body.values)


@router.get("/metrics/{metric_id}/config", response_model=CompleteMetricConfig)
def metric_config(metric_id: str):
    return _load_config(metric_id)


@router.post("/metrics/{metric_id}/evaluate", response_model=CaseEvaluation)
def evaluate_case(metric_id: str, body: EvaluateRequest, trace: bool = Query(False)):
    config = _load_config(metric_id)
    recorder = ProvenanceRecorder(page=f"/metrics/{metric_id}/evaluate") if trace else None
    return get_aggregator().evaluate(
        config,
        body.payload,
        followup_values=body.followup_values,
        display=body.display,
        produced_signals=body.produced_signals,
        module_id=body.module_id,
        recorder=recorder,
    )
