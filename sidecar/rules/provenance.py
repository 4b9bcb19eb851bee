"""
Provenance tracking for evaluation passes.

Evaluator components accept an optional observer and report what they
computed (signal evaluated, group filtered, time rule graded).  The
observer is injected per evaluation; there is no process-wide event bus.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Any, Optional, Protocol

from api.models import ProvenanceEvent

logger = logging.getLogger(__name__)

MAX_EVENTS = 100
THROTTLE_WINDOW_MS = 500


class EvaluationObserver(Protocol):
    def record_event(self, source: str, key: str, detail: Optional[dict[str, Any]] = None) -> None:
        ...


class ProvenanceRecorder:
    """Bounded in-memory event log (keeps the last MAX_EVENTS events)."""

    def __init__(self, page: str = "", max_events: int = MAX_EVENTS, clock=time.time):
        self.page = page
        self._events: deque[ProvenanceEvent] = deque(maxlen=max_events)
        self._seen: set[str] = set()
        self._last: dict[str, float] = {}
        self._clock = clock

    def _key(self, event: ProvenanceEvent) -> str:
        return f"{event.source}:{event.page}:{event.key}"

    def record(self, event: ProvenanceEvent) -> None:
        self._events.append(event)

    def record_once(self, event: ProvenanceEvent) -> None:
        """Record only the first event per source/page/key combination."""
        key = self._key(event)
        if key in self._seen:
            return
        self._seen.add(key)
        self.record(event)

    def record_throttled(self, event: ProvenanceEvent) -> None:
        """Drop repeats of the same source/page/key inside the throttle window."""
        key = self._key(event)
        now_ms = self._clock() * 1000
        if self._last.get(key, float("-inf")) > now_ms - THROTTLE_WINDOW_MS:
            return
        self._last[key] = now_ms
        self.record(event)

    def record_event(self, source: str, key: str, detail: Optional[dict[str, Any]] = None) -> None:
        self.record(ProvenanceEvent(source=source, key=key, detail=detail, ts=self._clock(), page=self.page))

    @property
    def events(self) -> list[ProvenanceEvent]:
        return list(self._events)

    def clear(self) -> None:
        logger.debug("Clearing %d provenance events", len(self._events))
        self._events.clear()
        self._seen.clear()
        self._last.clear()

