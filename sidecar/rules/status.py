"""
Conversion of raw signal values into a display status.

Every place that turns a raw value (a boolean flag, a "yes"/"no" string,
a numeric count, a server-supplied status string) into a Status goes
through ``normalize_status`` so the mapping stays uniform.
"""

from __future__ import annotations

import math
from typing import Any

from api.models import Status

_PASS_WORDS = {"yes", "true", "pass"}
_FAIL_WORDS = {"no", "false", "fail"}
_CAUTION_WORDS = {"warning", "caution"}


def normalize_status(value: Any) -> Status:
    """Map a raw value onto pass/fail/caution/inactive.

    - None → inactive
    - bool: True → pass, False → fail
    - str (case-insensitive): yes/true/pass → pass, no/false/fail → fail,
      warning/caution → caution, "inactive" → inactive, any other
      non-empty string → pass, blank string → inactive
    - int/float: non-zero → pass, zero → fail
    - anything else → inactive
    """
    if value is None:
        return Status.INACTIVE
    if isinstance(value, Status):
        return value
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return Status.PASS if value else Status.FAIL
    if isinstance(value, str):
        lower = value.strip().lower()
        if not lower:
            return Status.INACTIVE
        if lower in _PASS_WORDS:
            return Status.PASS
        if lower in _FAIL_WORDS:
            return Status.FAIL
        if lower in _CAUTION_WORDS:
            return Status.CAUTION
        if lower == Status.INACTIVE.value:
            return Status.INACTIVE
        return Status.PASS
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return Status.PASS
        return Status.PASS if value != 0 else Status.FAIL
    return Status.INACTIVE


def statuses_from_values(values: dict[str, Any]) -> dict[str, Status]:
    """Normalize a ``{signal_id: raw_value}`` map in one pass."""
    return {signal_id: normalize_status(raw) for signal_id, raw in values.items()}


def is_truthy(value: Any) -> bool:
    """Truthiness as the browser client sees it.

    Empty lists and dicts count as truthy; NaN does not.
    """
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    return True


def is_flag_set(value: Any) -> bool:
    """Whether a payload flag marks its condition as present.

    Scalars go through ``normalize_status`` and count only when they map to
    pass, so "no", "false", 0 and blanks are unset.  Nested records (a
    consult note, an imaging entry) count as documented.
    """
    if isinstance(value, (dict, list)):
        return True
    return normalize_status(value) == Status.PASS
