"""
Signal ID canonicalization.

The AI intake pipeline and the static signal catalogue do not always agree
on signal IDs.  Each module carries an alias table (producer ID → catalogue
ID); canonicalizing both sides before a join makes the same logical signal
compare equal regardless of which subsystem produced it.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from api.models import JoinReport

logger = logging.getLogger(__name__)

# Per-module alias tables: produced ID -> canonical catalogue ID
SIGNAL_ALIAS_MAP: dict[str, dict[str, str]] = {
    "timeliness_sch": {
        # Legacy intake ID from before the USNWR matrix IDs were adopted
        "SCH_TimelinessBreach": "on_time_19h",
    },
}


def _signal_id(signal: Any) -> Optional[str]:
    if isinstance(signal, str):
        return signal
    if isinstance(signal, dict):
        return signal.get("id")
    return getattr(signal, "id", None)


def _unique_ids(signals: Iterable[Any]) -> list[str]:
    seen: set[str] = set()
    ids: list[str] = []
    for signal in signals:
        signal_id = _signal_id(signal)
        if signal_id is None or signal_id in seen:
            continue
        seen.add(signal_id)
        ids.append(signal_id)
    return ids


class SignalCanonicalizer:
    """Alias lookup plus the produced-vs-expected join diagnostic."""

    def __init__(self, alias_map: Optional[dict[str, dict[str, str]]] = None):
        self._alias_map = SIGNAL_ALIAS_MAP if alias_map is None else alias_map

    def canonicalize(self, module_id: Optional[str], signal_id: str) -> str:
        if not module_id:
            return signal_id
        return self._alias_map.get(module_id, {}).get(signal_id, signal_id)

    def canonicalize_all(self, module_id: Optional[str], signals: list[Any]) -> list[Any]:
        """Map the ``id`` of each signal; other fields and order are preserved.

        Accepts dicts or pydantic models and returns new objects of the same
        kind; inputs are not mutated.
        """
        mapped = []
        for signal in signals:
            signal_id = _signal_id(signal)
            if signal_id is None:
                mapped.append(signal)
                continue
            canonical = self.canonicalize(module_id, signal_id)
            if isinstance(signal, dict):
                mapped.append({**signal, "id": canonical})
            elif hasattr(signal, "model_copy"):
                mapped.append(signal.model_copy(update={"id": canonical}))
            else:
                mapped.append(signal)
        return mapped

    def diff_join(
        self,
        produced: Iterable[Any],
        expected: Iterable[Any],
        module_id: Optional[str] = None,
    ) -> JoinReport:
        """Compare produced signals against the expected catalogue by canonical ID.

        missing: expected IDs the producer did not emit
        extra:   produced IDs the catalogue does not know
        matched: IDs present on both sides
        Lists keep first-seen order and contain no duplicates.
        """
        produced_ids = [self.canonicalize(module_id, sid) for sid in _unique_ids(produced)]
        expected_ids = [self.canonicalize(module_id, sid) for sid in _unique_ids(expected)]
        produced_ids = _unique_ids(produced_ids)
        expected_ids = _unique_ids(expected_ids)

        produced_set = set(produced_ids)
        expected_set = set(expected_ids)

        report = JoinReport(
            missing=[sid for sid in expected_ids if sid not in produced_set],
            extra=[sid for sid in produced_ids if sid not in expected_set],
            matched=[sid for sid in produced_ids if sid in expected_set],
        )
        if report.missing or report.extra:
            logger.debug(
                "Signal join drift module=%s missing=%d extra=%d matched=%d",
                module_id, len(report.missing), len(report.extra), len(report.matched),
            )
        return report


_default = SignalCanonicalizer()


def canonicalize_signal_id(module_id: Optional[str], signal_id: str) -> str:
    return _default.canonicalize(module_id, signal_id)


def diff_join(produced: Iterable[Any], expected: Iterable[Any], module_id: Optional[str] = None) -> JoinReport:
    return _default.diff_join(produced, expected, module_id)
