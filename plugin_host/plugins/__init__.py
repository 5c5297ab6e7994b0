"""
Plugin Registry & Slot Composition

Public API:
    PluginManifest, SlotDescriptor, RouteDescriptor, SlotPosition: manifest schema
    RegistryStore: owned registry of plugins, bundle, routes, enabled set
    LifecycleManager: on_init / on_destroy with failure isolation
    resolve_slot: ordered, filtered contributions for a slot
    compose_slot, render_slot: position-aware composition into a render tree
    match_route: plugin route lookup
    PluginLoader: module / URL / backend-list loading
"""

from .composition import SlotRender, compose_slot, render_slot
from .lifecycle import HookResult, LifecycleManager
from .loader import LoadReport, PluginLoader
from .manifest import PluginManifest, RouteDescriptor, SlotDescriptor, SlotPosition
from .registry import RegistrationResult, RegistrationStatus, RegistryState, RegistryStore
from .routing import RouteMatch, match_route
from .slots import ResolvedSlot, resolve_slot

__all__ = [
    "HookResult",
    "LifecycleManager",
    "LoadReport",
    "PluginLoader",
    "PluginManifest",
    "RegistrationResult",
    "RegistrationStatus",
    "RegistryState",
    "RegistryStore",
    "ResolvedSlot",
    "RouteDescriptor",
    "RouteMatch",
    "SlotDescriptor",
    "SlotPosition",
    "SlotRender",
    "compose_slot",
    "match_route",
    "render_slot",
    "resolve_slot",
]
