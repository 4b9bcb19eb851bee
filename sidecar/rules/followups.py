"""
Conditional follow-up questions.

A follow-up with ``dependsOn = X`` is shown only while the answer to X is
truthy.  Yes/no controls post the strings "yes" and "no", so a literal
"no" (or "false") counts as a negative answer.

Dependencies are single-level: each follow-up does one lookup in the
current answers, never a walk up a chain, so a cyclic configuration leaves
the affected questions hidden instead of looping.

Nothing here is cached.  Callers re-run ``resolve`` on every answer change
so visibility is recomputed before completeness.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from api.models import Followup, FollowupState
from rules.status import is_truthy

logger = logging.getLogger(__name__)

_NEGATIVE_ANSWERS = {"no", "false"}


def dependency_met(value: Any) -> bool:
    if isinstance(value, str) and value.strip().lower() in _NEGATIVE_ANSWERS:
        return False
    return is_truthy(value)


def is_answered(value: Any) -> bool:
    """``0`` and ``False`` are answers; None and the empty string are not."""
    return value is not None and value != ""


class FollowupDependencyResolver:

    def is_visible(self, followup: Followup, values: Mapping[str, Any]) -> bool:
        if not followup.depends_on:
            return True
        return dependency_met(values.get(followup.depends_on))

    def visible_followups(self, followups: Iterable[Followup], values: Mapping[str, Any]) -> list[Followup]:
        return [f for f in followups if self.is_visible(f, values)]

    def hidden_followups(self, followups: Iterable[Followup], values: Mapping[str, Any]) -> list[Followup]:
        return [f for f in followups if not self.is_visible(f, values)]

    def is_complete(self, visible: Iterable[Followup], values: Mapping[str, Any]) -> bool:
        return all(is_answered(values.get(f.followup_name)) for f in visible)

    def resolve(self, followups: list[Followup], values: Mapping[str, Any]) -> FollowupState:
        visible = self.visible_followups(followups, values)
        hidden = self.hidden_followups(followups, values)
        if hidden:
            logger.debug(
                "Hidden followups: %s",
                ", ".join(f"{f.followup_name}<-{f.depends_on}" for f in hidden),
            )
        return FollowupState(
            visible=visible,
            hidden=hidden,
            complete=self.is_complete(visible, values),
            total_count=len(followups),
        )
