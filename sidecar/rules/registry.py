from __future__ import annotations

import logging
from typing import Optional

from api.models import Signal
from .families.base import BaseSignalFamily

logger = logging.getLogger(__name__)


class SignalFamilyRegistry:
    """Registry of fallback inference families, keyed by family tag."""

    def __init__(self):
        self._families: dict[str, BaseSignalFamily] = {}
        # Maps exact signal IDs to the family that evaluates them
        self._signal_families: dict[str, BaseSignalFamily] = {}
        self._default: Optional[BaseSignalFamily] = None

    def register(self, family: BaseSignalFamily) -> None:
        family_id = family.family_id
        if family_id in self._families:
            logger.warning(f"Overwriting existing signal family '{family_id}'")
        self._families[family_id] = family
        for signal_id in family.signal_ids:
            self._signal_families[signal_id] = family
        logger.info(f"Registered signal family: {family_id}")

    def register_signal(self, signal_id: str, family_id: str) -> None:
        """Pin an exact signal ID to a registered family."""
        family = self._families.get(family_id)
        if family is None:
            raise KeyError(f"Unknown signal family '{family_id}'")
        self._signal_families[signal_id] = family

    def set_default(self, family: BaseSignalFamily) -> None:
        """Family used when nothing else claims a signal. Not part of keyword matching."""
        self._default = family
        self._families.setdefault(family.family_id, family)

    def get(self, family_id: str) -> Optional[BaseSignalFamily]:
        return self._families.get(family_id)

    def classify(self, signal: Signal) -> Optional[BaseSignalFamily]:
        """Pick the family that evaluates *signal*.

        1. Explicit ``signal.family`` tag
        2. Exact signal ID registration
        3. Keyword sets, in registration order
        4. The default family
        """
        if signal.family:
            family = self._families.get(signal.family)
            if family is not None:
                return family
            logger.warning(f"Signal '{signal.id}' names unknown family '{signal.family}'")

        family = self._signal_families.get(signal.id)
        if family is not None:
            return family

        for family in self._families.values():
            if family is self._default:
                continue
            if family.matches(signal.id):
                return family

        logger.debug(f"No family for signal '{signal.id}', using default")
        return self._default

    def list_families(self) -> list[dict]:
        return [family.get_metadata() for family in self._families.values()]

    def __contains__(self, family_id: str) -> bool:
        return family_id in self._families
