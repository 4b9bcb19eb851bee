from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from api.models import Signal, Status


class BaseSignalFamily(ABC):
    """Abstract base class for fallback signal inference rules.

    A family is used only when the server did not supply a status for the
    signal.  Its verdict is a heuristic for demo/offline use and is not
    authoritative.
    """

    @property
    @abstractmethod
    def family_id(self) -> str:
        """Unique tag, e.g., 'timing'."""
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @property
    def keywords(self) -> list[tuple[str, ...]]:
        """Signal-id keyword sets for legacy ids without an explicit family tag.

        Each tuple matches when every keyword in it occurs in the lowercased
        signal id; the family matches when any tuple does.
        """
        return []

    @property
    def signal_ids(self) -> list[str]:
        """Exact signal ids that belong to this family."""
        return []

    @abstractmethod
    def evaluate(self, signal: Signal, payload: Any) -> Status:
        """Infer a status from the case payload. Must not raise on missing data."""
        ...

    def matches(self, signal_id: str) -> bool:
        lowered = signal_id.lower()
        return any(all(kw in lowered for kw in group) for group in self.keywords)

    def get_metadata(self) -> dict:
        return {
            "family_id": self.family_id,
            "display_name": self.display_name,
            "keywords": [list(group) for group in self.keywords],
            "signal_ids": self.signal_ids,
        }
