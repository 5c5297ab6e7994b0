"""
Slot Resolver

Pure function over a RegistryState snapshot: given a slot name and an
optional context, return the ordered, filtered list of contributions that
apply to that slot.

Ordering: plugins are walked in registration order and descriptors in
declaration order; the accumulated list is then stable-sorted by descending
priority, so ties keep their accumulation order.  No caching is performed;
the linear scan is acceptable for small plugin counts.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NamedTuple

if TYPE_CHECKING:
    from plugin_host.plugins.manifest import SlotDescriptor
    from plugin_host.plugins.registry import RegistryState

logger = logging.getLogger(__name__)


class ResolvedSlot(NamedTuple):
    """A slot descriptor together with the plugin that owns it."""

    descriptor: SlotDescriptor
    plugin: str


def resolve_slot(state: RegistryState, slot_name: str, context: Any = None) -> list[ResolvedSlot]:
    """
    Resolve the contributions to ``slot_name``.

    Keeps descriptors of enabled plugins whose name equals ``slot_name`` and
    whose condition is absent or returns a truthy value for ``context``.  A
    condition that raises is logged and treated as not matching.

    Args:
        state:     Registry snapshot to resolve against.
        slot_name: Name of the slot, e.g. "nav.actions".
        context:   Arbitrary value passed to each descriptor's condition.

    Returns:
        List of ResolvedSlot, highest priority first.
    """
    matches: list[ResolvedSlot] = []
    for plugin_name, manifest in state.plugins.items():
        if plugin_name not in state.enabled:
            continue
        for descriptor in manifest.slots:
            if descriptor.name != slot_name:
                continue
            if _condition_holds(descriptor, plugin_name, context):
                matches.append(ResolvedSlot(descriptor, plugin_name))

    # list.sort is stable: equal priorities keep registration/declaration order
    matches.sort(key=lambda entry: entry.descriptor.priority, reverse=True)
    return matches


def _condition_holds(descriptor: SlotDescriptor, plugin_name: str, context: Any) -> bool:
    try:
        return descriptor.matches(context)
    except Exception as exc:
        logger.warning(
            "Slot condition for %s (component %s, plugin %s) raised: %s",
            descriptor.name,
            descriptor.component,
            plugin_name,
            exc,
        )
        return False
