from __future__ import annotations

from typing import Any

from api.models import Signal, Status
from .base import BaseSignalFamily

DEFAULT_FAMILY_ID = "default"


class PermissiveFamily(BaseSignalFamily):
    """Fallback for signal ids no other family claims.

    Returns pass: having no inference rule for a signal is a known gap in
    the offline heuristics, not evidence that the measure failed.
    """

    @property
    def family_id(self) -> str:
        return DEFAULT_FAMILY_ID

    @property
    def display_name(self) -> str:
        return "Unclassified (permissive default)"

    def evaluate(self, signal: Signal, payload: Any) -> Status:
        return Status.PASS
