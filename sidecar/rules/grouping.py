"""
Group visibility, group ordering and in-group signal ordering for display.

Visibility runs before evaluation (which groups the reviewer wants to see);
the active-group pass runs after evaluation and drops any group whose
signals are all inactive.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, TypeVar

from api.models import DisplayConfig, GroupView, SignalGroup, SignalResult, Status, StatusCounts

logger = logging.getLogger(__name__)

T = TypeVar("T")


def sort_groups(groups: Iterable[SignalGroup]) -> list[SignalGroup]:
    """Ascending displayOrder; ties keep catalogue order."""
    return sorted(groups, key=lambda g: g.display_order)


def order_signals(items: Sequence[T], field_order: Optional[Sequence[str]]) -> list[T]:
    """Arrange items by a configured field order.

    Each field-order entry picks the first not-yet-placed item whose id OR
    label equals it (historical configs used both keys).  Items the field
    order never names follow in their original order.
    """
    if not field_order:
        return list(items)

    placed: list[T] = []
    placed_ids: set[int] = set()
    for key in field_order:
        for item in items:
            if id(item) in placed_ids:
                continue
            if getattr(item, "id", None) == key or getattr(item, "label", None) == key:
                placed.append(item)
                placed_ids.add(id(item))
                break
    placed.extend(item for item in items if id(item) not in placed_ids)
    return placed


def count_statuses(results: Iterable[SignalResult]) -> StatusCounts:
    counts = {Status.PASS: 0, Status.FAIL: 0, Status.CAUTION: 0, Status.INACTIVE: 0}
    for result in results:
        counts[result.status] += 1
    return StatusCounts(
        pass_=counts[Status.PASS],
        fail=counts[Status.FAIL],
        caution=counts[Status.CAUTION],
        inactive=counts[Status.INACTIVE],
    )


def has_active_signal(results: Iterable[SignalResult]) -> bool:
    return any(result.status != Status.INACTIVE for result in results)


class GroupOrderResolver:

    def __init__(self, observer=None):
        self._observer = observer

    def resolve_visible_groups(
        self,
        all_group_names: Sequence[str],
        visibility_map: Optional[dict[str, bool]] = None,
        explicit_order: Optional[Sequence[str]] = None,
        active_group_ids: Optional[Sequence[str]] = None,
    ) -> list[str]:
        """Ordered list of group names to render.

        ``active_group_ids`` (a planning-config selection) replaces the
        visibility filter when given.  ``explicit_order`` is authoritative:
        it is filtered to the visible set and visible groups it omits are
        not appended.
        """
        visibility_map = visibility_map or {}
        if active_group_ids is not None:
            visible = list(active_group_ids)
        else:
            visible = [name for name in all_group_names if visibility_map.get(name) is not False]

        if explicit_order is None:
            return visible

        visible_set = set(visible)
        ordered: list[str] = []
        for name in explicit_order:
            if name in visible_set and name not in ordered:
                ordered.append(name)
        return ordered

    def build_group_views(
        self,
        groups: Sequence[SignalGroup],
        results: dict[str, SignalResult],
        config: Optional[DisplayConfig] = None,
        active_only: bool = True,
    ) -> list[GroupView]:
        """Visible groups in render order with their evaluated, ordered signals.

        With ``active_only`` a group survives only if at least one of its
        signals evaluated to something other than inactive.
        """
        config = config or DisplayConfig()
        by_name = {}
        for group in sort_groups(groups):
            by_name.setdefault(group.group_name, group)

        names = self.resolve_visible_groups(
            list(by_name),
            config.visible_groups,
            config.group_order,
            config.active_group_ids,
        )

        views: list[GroupView] = []
        for name in names:
            group = by_name.get(name)
            if group is None:
                continue
            # fieldOrder names catalogue ids or labels
            ordered = order_signals(group.signals, config.field_order.get(name))
            group_results = [results[s.id] for s in ordered if s.id in results]
            if active_only and not has_active_signal(group_results):
                logger.debug("Suppressing group '%s': no active signals", name)
                self._report(name, "suppressed")
                continue
            shown = [r for r in group_results if r.status != Status.INACTIVE] if active_only else group_results
            counts = count_statuses(group_results)
            views.append(GroupView(
                group_name=name,
                display_order=group.display_order,
                signals=shown,
                counts=counts,
                active_count=len(group_results) - counts.inactive,
            ))
            self._report(name, "rendered")
        return views

    def _report(self, group_name: str, outcome: str) -> None:
        if self._observer is not None:
            self._observer.record_event("computed", f"group:{group_name}", {"outcome": outcome})
