"""Families for workup milestones (consults, imaging).

Both report ``inactive`` rather than ``fail`` when nothing is documented:
an absent consult note is missing evidence, not a failed measure.
"""

from __future__ import annotations

from typing import Any

from api.models import Signal, Status
from rules.field_resolvers import get_path
from rules.status import is_flag_set
from .base import BaseSignalFamily


class ConsultFamily(BaseSignalFamily):

    @property
    def family_id(self) -> str:
        return "consult"

    @property
    def display_name(self) -> str:
        return "Orthopedic consult"

    @property
    def keywords(self) -> list[tuple[str, ...]]:
        return [("consult",)]

    def evaluate(self, signal: Signal, payload: Any) -> Status:
        return Status.PASS if is_flag_set(get_path(payload, "consults.ortho")) else Status.INACTIVE


class ImagingFamily(BaseSignalFamily):

    @property
    def family_id(self) -> str:
        return "imaging"

    @property
    def display_name(self) -> str:
        return "Imaging"

    @property
    def keywords(self) -> list[tuple[str, ...]]:
        return [("imaging",)]

    def evaluate(self, signal: Signal, payload: Any) -> Status:
        ct_done = is_flag_set(get_path(payload, "imaging.ct.performed"))
        xray = is_flag_set(get_path(payload, "imaging.xray"))
        return Status.PASS if ct_done or xray else Status.INACTIVE
