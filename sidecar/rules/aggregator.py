"""
Metric configuration loading and whole-case evaluation.

``MetricConfigAggregator.load`` fetches the complete metric package from
the metadata API.  Fetch errors propagate unchanged: retry and fallback
policy belongs to the caller.

``evaluate`` composes the pure resolvers over an already-loaded config and
one case payload.  It holds no state between calls and never mutates the
payload, so concurrent evaluations need no coordination.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from api.evaluation_models import CaseEvaluation
from api.models import CompleteMetricConfig, DisplayConfig, Signal
from metadata.client import MetadataClient
from rules.canonicalizer import SignalCanonicalizer
from rules.evaluator import SignalEvaluator
from rules.followups import FollowupDependencyResolver
from rules.grouping import GroupOrderResolver, sort_groups
from rules.modules import map_module_id
from rules.provenance import ProvenanceRecorder
from rules.registry import SignalFamilyRegistry
from rules.time_rules import TimeRuleResolver

logger = logging.getLogger(__name__)


class MetricConfigAggregator:

    def __init__(
        self,
        client: Optional[MetadataClient] = None,
        registry: Optional[SignalFamilyRegistry] = None,
        canonicalizer: Optional[SignalCanonicalizer] = None,
        time_resolver: Optional[TimeRuleResolver] = None,
    ):
        self._client = client or MetadataClient()
        self._registry = registry
        self._canonicalizer = canonicalizer or SignalCanonicalizer()
        self._time_resolver = time_resolver

    def close(self) -> None:
        self._client.close()

    def load(self, metric_id: str) -> CompleteMetricConfig:
        """Fetch the complete configuration for *metric_id*, groups in display order.

        Raises MetadataFetchError (or MetadataNotFound) on any fetch failure.
        """
        config = self._client.get_complete(metric_id)
        logger.info(
            "Loaded metric %s: %d groups, %d followups",
            metric_id, len(config.signal_groups), len(config.followups),
        )
        return config.model_copy(update={"signal_groups": sort_groups(config.signal_groups)})

    def evaluate(
        self,
        config: CompleteMetricConfig,
        payload: dict[str, Any],
        followup_values: Optional[dict[str, Any]] = None,
        display: Optional[DisplayConfig] = None,
        produced_signals: Optional[list[Any]] = None,
        module_id: Optional[str] = None,
        recorder: Optional[ProvenanceRecorder] = None,
    ) -> CaseEvaluation:
        metric_id = config.metric.metric_id
        module_id = module_id or map_module_id(metric_id)

        time_resolver = self._time_resolver or TimeRuleResolver(observer=recorder)
        evaluator = SignalEvaluator(self._registry, self._canonicalizer, observer=recorder)
        grouping = GroupOrderResolver(observer=recorder)
        followup_resolver = FollowupDependencyResolver()

        timing = None
        if time_resolver.get_rule(module_id) is not None:
            timing = time_resolver.resolve(module_id, payload)

        signals = _catalog_signals(config)
        results = evaluator.evaluate_all(signals, payload, module_id)
        results_by_id = {r.id: r for r in results}

        # groups lists every visible group; active_groups drops all-inactive ones
        groups = GroupOrderResolver().build_group_views(
            config.signal_groups, results_by_id, display, active_only=False,
        )
        active_groups = grouping.build_group_views(config.signal_groups, results_by_id, display)
        followups = followup_resolver.resolve(config.followups, followup_values or {})

        if produced_signals is None and isinstance(payload, dict) and isinstance(payload.get("mergedSignals"), list):
            produced_signals = payload["mergedSignals"]
        join_report = None
        if produced_signals is not None:
            join_report = self._canonicalizer.diff_join(produced_signals, signals, module_id)

        return CaseEvaluation(
            metric_id=metric_id,
            module_id=module_id,
            timing=timing,
            results=results,
            groups=groups,
            active_groups=active_groups,
            followups=followups,
            join_report=join_report,
            provenance=recorder.events if recorder is not None else [],
        )

    def evaluate_case(self, metric_id: str, payload: dict[str, Any], **kwargs) -> CaseEvaluation:
        return self.evaluate(self.load(metric_id), payload, **kwargs)


def _catalog_signals(config: CompleteMetricConfig) -> list[Signal]:
    """All signals in group order, each stamped with its owning group."""
    signals: list[Signal] = []
    for group in config.signal_groups:
        for signal in group.signals:
            if signal.group != group.group_name:
                signal = signal.model_copy(update={"group": group.group_name})
            signals.append(signal)
    return signals
