"""
Per-signal status evaluation.

Priority order for each signal:

1. Server-computed result in ``payload["mergedSignals"]`` with a matching
   ID.  Its status is returned as-is and no local inference runs.
2. Fallback inference by the signal's family (see ``rules.families``).
   This path is a demo/offline heuristic, not an authoritative verdict;
   swap the registry to change it.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from api.models import Signal, SignalResult, Status
from rules.canonicalizer import SignalCanonicalizer
from rules.registry import SignalFamilyRegistry
from rules.status import normalize_status

logger = logging.getLogger(__name__)


def _merged_signals(payload: Any) -> list[dict]:
    if not isinstance(payload, dict):
        return []
    merged = payload.get("mergedSignals")
    if not isinstance(merged, list):
        return []
    return [entry for entry in merged if isinstance(entry, dict)]


def _coerce_server_status(raw: Any) -> Status:
    try:
        return Status(raw)
    except ValueError:
        return normalize_status(raw)


class SignalEvaluator:

    def __init__(
        self,
        registry: Optional[SignalFamilyRegistry] = None,
        canonicalizer: Optional[SignalCanonicalizer] = None,
        observer=None,
    ):
        if registry is None:
            from rules import default_registry
            registry = default_registry
        self._registry = registry
        self._canonicalizer = canonicalizer or SignalCanonicalizer()
        self._observer = observer

    def find_server_result(self, signal: Signal, payload: Any, module_id: Optional[str] = None) -> Optional[dict]:
        target = self._canonicalizer.canonicalize(module_id, signal.id)
        for entry in _merged_signals(payload):
            entry_id = entry.get("id")
            if not isinstance(entry_id, str):
                continue
            if self._canonicalizer.canonicalize(module_id, entry_id) == target:
                return entry
        return None

    def infer(self, signal: Signal, payload: Any) -> Status:
        family = self._registry.classify(signal)
        if family is None:
            return Status.PASS
        try:
            return family.evaluate(signal, payload)
        except Exception:
            logger.exception("Family '%s' failed on signal '%s'", family.family_id, signal.id)
            return Status.INACTIVE

    def evaluate(self, signal: Signal, payload: Any, module_id: Optional[str] = None) -> Status:
        return self.evaluate_result(signal, payload, module_id).status

    def evaluate_result(self, signal: Signal, payload: Any, module_id: Optional[str] = None) -> SignalResult:
        server = self.find_server_result(signal, payload, module_id)
        if server is not None:
            result = SignalResult(
                id=signal.id,
                status=_coerce_server_status(server.get("status")),
                label=signal.label or None,
                group=signal.group or None,
                evidence=_evidence(server.get("evidence")),
                cites=_cites(server.get("cites")),
                source="server",
            )
        else:
            result = SignalResult(
                id=signal.id,
                status=self.infer(signal, payload),
                label=signal.label or None,
                group=signal.group or None,
            )

        logger.debug("Signal %s -> %s (%s)", signal.id, result.status.value, result.source)
        if self._observer is not None:
            self._observer.record_event(
                "computed",
                f"signal:{signal.id}",
                {"status": result.status.value, "source": result.source},
            )
        return result

    def evaluate_all(self, signals: list[Signal], payload: Any, module_id: Optional[str] = None) -> list[SignalResult]:
        return [self.evaluate_result(signal, payload, module_id) for signal in signals]


def _evidence(raw: Any):
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        return [str(item) for item in raw]
    return None


def _cites(raw: Any) -> Optional[list[str]]:
    if isinstance(raw, list):
        return [str(item) for item in raw]
    return None
