"""Families driven by ``clinical`` flags on the case payload."""

from __future__ import annotations

from typing import Any

from api.models import Signal, Status
from rules.field_resolvers import get_path
from rules.status import is_flag_set
from .base import BaseSignalFamily


class NeurovascularFamily(BaseSignalFamily):
    """Fails when the case documents neurovascular compromise."""

    @property
    def family_id(self) -> str:
        return "neurovascular"

    @property
    def display_name(self) -> str:
        return "Neurovascular status"

    @property
    def keywords(self) -> list[tuple[str, ...]]:
        return [("neuro",), ("vascular",)]

    def evaluate(self, signal: Signal, payload: Any) -> Status:
        compromised = get_path(payload, "clinical.neurovascular_compromise")
        return Status.FAIL if is_flag_set(compromised) else Status.PASS


class OpenFractureFamily(BaseSignalFamily):
    """Fails when the fracture is documented as open."""

    @property
    def family_id(self) -> str:
        return "open_fracture"

    @property
    def display_name(self) -> str:
        return "Open fracture"

    @property
    def keywords(self) -> list[tuple[str, ...]]:
        return [("open", "fracture")]

    def evaluate(self, signal: Signal, payload: Any) -> Status:
        open_fracture = get_path(payload, "clinical.open_fracture")
        return Status.FAIL if is_flag_set(open_fracture) else Status.PASS


# Any of these flags marks a documented infection concern.
_INFECTION_FLAG_PATHS = (
    "clinical.ssi_suspected",
    "clinical.infection_concern",
    "derived.ssi_flag",
)


class InfectionFamily(BaseSignalFamily):
    """Surgical-site infection review.

    Caution when any infection flag is set, otherwise pass.
    """

    @property
    def family_id(self) -> str:
        return "infection"

    @property
    def display_name(self) -> str:
        return "Surgical site infection"

    @property
    def keywords(self) -> list[tuple[str, ...]]:
        return [("ssi",), ("infection",)]

    def evaluate(self, signal: Signal, payload: Any) -> Status:
        if any(is_flag_set(get_path(payload, path)) for path in _INFECTION_FLAG_PATHS):
            return Status.CAUTION
        return Status.PASS
