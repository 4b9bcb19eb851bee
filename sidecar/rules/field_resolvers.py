"""
Named accessors for logical case fields.

Case payloads arrive in more than one historical shape: the legacy export
keeps timestamps under ``times`` with PascalCase keys
(``times.ArrivalInstant``) while the structured export nests lowercase keys
under ``events`` (``events.arrival``, ``events.surgery.start``).  A
FieldResolver tries an ordered list of dotted paths and returns the first
non-empty value.  Supporting a new schema variant means appending a path.

Accessors never raise: a missing key, a non-dict node, or a list where a
dict was expected all read as absent.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)


def get_path(payload: Any, path: str) -> Any:
    """Read a dotted path from nested dicts, returning None when any hop is missing."""
    node = payload
    for part in path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
        if node is None:
            return None
    return node


def _is_empty(value: Any) -> bool:
    return value is None or value is False or value == "" or value == 0


@dataclass(frozen=True)
class FieldResolver:
    """Ordered list of payload paths for one logical field."""

    name: str
    paths: tuple[str, ...]

    def resolve(self, payload: Any) -> Any:
        for path in self.paths:
            value = get_path(payload, path)
            if not _is_empty(value):
                return value
        return None


def default_paths(field_name: str) -> tuple[str, ...]:
    """Lookup order for a field with no registered resolver.

    ``times[field]`` first, then ``events[field.lower()]``, then the
    payload root under the lowercased name.
    """
    lower = field_name.lower()
    return (f"times.{field_name}", f"events.{lower}", lower)


# Extra paths follow the default lookup order so the canonical schema wins.
_EXTRA_PATHS: dict[str, tuple[str, ...]] = {
    "ArrivalInstant": ("events.arrival",),
    "IncisionStartInstant": ("events.surgery.start", "events.incision"),
    "AbxFirstDose": ("events.antibiotics.first_dose", "medications.abx_first_dose"),
    "SurgeryEndInstant": ("events.surgery.end",),
}

FIELD_RESOLVERS: dict[str, FieldResolver] = {
    name: FieldResolver(name, default_paths(name) + extra)
    for name, extra in _EXTRA_PATHS.items()
}


def resolver_for(field_name: str) -> FieldResolver:
    resolver = FIELD_RESOLVERS.get(field_name)
    if resolver is not None:
        return resolver
    return FieldResolver(field_name, default_paths(field_name))


def resolve_field(payload: Any, field_name: str) -> Any:
    return resolver_for(field_name).resolve(payload)


def _pad_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


# Fractional seconds of any length; fromisoformat on 3.10 wants 3 or 6 digits
_FRACTION_RE = re.compile(r"(?<=:\d{2})\.(\d+)")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a timestamp as an aware UTC datetime.

    Accepts ISO-8601 strings (any number of fractional-second digits, "Z"
    or an offset), datetimes, and numbers as epoch milliseconds.  Naive
    timestamps are assumed to be UTC.  Unparseable values return None and
    are treated the same as absent ones.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        return None
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug("Epoch timestamp out of range: %r", value)
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        text = _FRACTION_RE.sub(_pad_fraction, text, count=1)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable timestamp %r", value)
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def resolve_timestamp(payload: Any, field_name: str) -> Optional[datetime]:
    return parse_timestamp(resolve_field(payload, field_name))
