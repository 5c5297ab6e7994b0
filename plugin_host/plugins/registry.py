"""
Plugin Registry Store

RegistryStore owns and alone mutates the registry state: registered
plugin manifests, the merged component bundle, merged routes and the set of
enabled plugins.

State is published as immutable RegistryState snapshots (copy-on-write), so
a render that reads the state while a register/unregister is suspended on a
hook observes either the full pre-state or the full post-state.

Registry events (plugin_host.plugins.hooks) are dispatched to subscribers after
each transaction; exceptions raised by subscribers are caught and logged.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from plugin_host.exceptions import (
    DuplicateRegistrationError,
    ManifestValidationError,
    MissingComponentError,
    PluginHostError,
)
from plugin_host.plugins.hooks import ALL_HOOKS, HOOK_PLUGIN_REGISTERED, HOOK_PLUGIN_UNREGISTERED
from plugin_host.plugins.lifecycle import HookResult, LifecycleManager
from plugin_host.plugins.manifest import PluginManifest, parse_bundle, parse_manifest
from plugin_host.plugins.slots import resolve_slot

if TYPE_CHECKING:
    from plugin_host.plugins.manifest import Renderable, RouteDescriptor
    from plugin_host.plugins.slots import ResolvedSlot

logger = logging.getLogger(__name__)

Listener = Callable[[PluginManifest], Any]


def _empty() -> Mapping[str, Any]:
    return MappingProxyType({})


# ── State snapshot ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RegisteredRoute:
    """A route together with the plugin that contributed it."""

    plugin: str
    route: RouteDescriptor


@dataclass(frozen=True)
class RegistryState:
    """
    Immutable snapshot of the registry.

    Attributes:
        plugins:           name -> manifest, in registration order.
        enabled:           names of enabled plugins.
        bundle:            merged component bundle.
        component_owners:  bundle key -> name of the plugin that last set it.
        plugin_components: name -> bundle keys the plugin contributed.
        registered_routes: routes in registration order, tagged with owner.
    """

    plugins: Mapping[str, PluginManifest] = field(default_factory=_empty)
    enabled: frozenset[str] = frozenset()
    bundle: Mapping[str, Renderable] = field(default_factory=_empty)
    component_owners: Mapping[str, str] = field(default_factory=_empty)
    plugin_components: Mapping[str, tuple[str, ...]] = field(default_factory=_empty)
    registered_routes: tuple[RegisteredRoute, ...] = field(default_factory=tuple)

    @property
    def routes(self) -> list[RouteDescriptor]:
        return [entry.route for entry in self.registered_routes]

    def is_enabled(self, name: str) -> bool:
        return name in self.enabled


# ── Results ───────────────────────────────────────────────────────────────────


class RegistrationStatus(str, Enum):
    REGISTERED = "registered"
    DUPLICATE = "duplicate"
    INVALID = "invalid"
    INIT_FAILED = "init_failed"


class UnregistrationStatus(str, Enum):
    UNREGISTERED = "unregistered"
    NOT_REGISTERED = "not_registered"


@dataclass(frozen=True)
class RegistrationResult:
    plugin: str | None
    status: RegistrationStatus
    error: PluginHostError | None = None
    missing_components: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status is RegistrationStatus.REGISTERED


@dataclass(frozen=True)
class UnregistrationResult:
    plugin: str
    status: UnregistrationStatus
    destroy: HookResult | None = None

    @property
    def ok(self) -> bool:
        return self.status is UnregistrationStatus.UNREGISTERED


# ── Store ─────────────────────────────────────────────────────────────────────


class RegistryStore:
    """
    Owned registry of plugins.

    Construct one per host application and pass it by reference to
    consumers (FastAPI dependencies read it from ``app.state``).
    """

    def __init__(
        self,
        lifecycle: LifecycleManager | None = None,
        *,
        strict_components: bool = False,
    ) -> None:
        self._lifecycle = lifecycle or LifecycleManager()
        self._strict_components = strict_components
        self._state = RegistryState()
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    # ── Snapshot access ───────────────────────────────────────────────────────

    @property
    def state(self) -> RegistryState:
        """The current immutable snapshot."""
        return self._state

    @property
    def bundle(self) -> Mapping[str, Renderable]:
        return self._state.bundle

    @property
    def routes(self) -> list[RouteDescriptor]:
        return self._state.routes

    def get(self, name: str) -> PluginManifest | None:
        """Return the manifest registered under name, or None."""
        return self._state.plugins.get(name)

    def all_plugins(self) -> list[PluginManifest]:
        """Return all registered manifests in registration order."""
        return list(self._state.plugins.values())

    def is_registered(self, name: str) -> bool:
        return name in self._state.plugins

    def is_enabled(self, name: str) -> bool:
        return self._state.is_enabled(name)

    def get_component(self, key: str) -> Renderable | None:
        """Return the renderable registered under key, or None."""
        return self._state.bundle.get(key)

    def resolve(self, slot_name: str, context: Any = None) -> list[ResolvedSlot]:
        """Resolve the contributions for slot_name against the current snapshot."""
        return resolve_slot(self._state, slot_name, context)

    # ── Events ────────────────────────────────────────────────────────────────

    def subscribe(self, event: str, listener: Listener) -> None:
        """Subscribe a sync or async callable to a registry event."""
        if event not in ALL_HOOKS:
            msg = f"Unknown registry event: {event}"
            raise ValueError(msg)
        self._listeners[event].append(listener)

    async def _fire(self, event: str, manifest: PluginManifest) -> None:
        for listener in self._listeners.get(event, []):
            try:
                result = listener(manifest)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.warning("Listener for %s raised on plugin %s: %s", event, manifest.name, exc)

    # ── Registration ──────────────────────────────────────────────────────────

    async def register(
        self,
        manifest: PluginManifest | Mapping[str, Any],
        bundle: Mapping[str, Renderable] | None = None,
    ) -> RegistrationResult:
        """
        Register a plugin.

        The manifest is validated, on_init is run through the lifecycle
        manager, and only on success is a new snapshot published.  Nothing
        is raised: the outcome is reported in the returned result.
        """
        try:
            manifest = parse_manifest(manifest)
            own = {**(manifest.components or {}), **parse_bundle(bundle, manifest.name)}
        except ManifestValidationError as exc:
            logger.error("Rejected plugin manifest: %s", exc.message, extra={"details": exc.details})
            return RegistrationResult(plugin=exc.details.get("plugin"), status=RegistrationStatus.INVALID, error=exc)

        name = manifest.name
        if name in self._state.plugins:
            logger.warning("Plugin '%s' is already loaded", name)
            return RegistrationResult(
                plugin=name, status=RegistrationStatus.DUPLICATE, error=DuplicateRegistrationError(name)
            )

        missing = self._missing_components(manifest, own)
        if missing and self._strict_components:
            error = MissingComponentError(missing[0], plugin=name, where=f"plugin '{name}'")
            logger.error("Rejected plugin %s: unresolved components %s", name, ", ".join(missing))
            return RegistrationResult(
                plugin=name, status=RegistrationStatus.INVALID, error=error, missing_components=missing
            )

        hook = await self._lifecycle.run_init(manifest)
        if not hook.ok:
            return RegistrationResult(plugin=name, status=RegistrationStatus.INIT_FAILED, error=hook.error)

        # Another registration may have completed while on_init was awaited.
        if name in self._state.plugins:
            logger.warning("Plugin '%s' is already loaded", name)
            return RegistrationResult(
                plugin=name, status=RegistrationStatus.DUPLICATE, error=DuplicateRegistrationError(name)
            )

        self._state = self._with_plugin(self._state, manifest, own)
        for key in missing:
            logger.warning("Component '%s' not found for plugin '%s'", key, name)

        await self._fire(HOOK_PLUGIN_REGISTERED, manifest)
        logger.info("Plugin registered: %s v%s", name, manifest.version)
        return RegistrationResult(plugin=name, status=RegistrationStatus.REGISTERED, missing_components=missing)

    async def unregister(self, name: str) -> UnregistrationResult:
        """
        Unregister a plugin.

        on_destroy failures are logged and never block removal.  The plugin's
        own bundle keys, its routes and its translations are withdrawn.
        """
        manifest = self._state.plugins.get(name)
        if manifest is None:
            return UnregistrationResult(plugin=name, status=UnregistrationStatus.NOT_REGISTERED)

        hook = await self._lifecycle.run_destroy(manifest)

        if name not in self._state.plugins:
            return UnregistrationResult(plugin=name, status=UnregistrationStatus.NOT_REGISTERED, destroy=hook)

        self._state = self._without_plugin(self._state, name)

        await self._fire(HOOK_PLUGIN_UNREGISTERED, manifest)
        logger.info("Plugin unregistered: %s", name)
        return UnregistrationResult(plugin=name, status=UnregistrationStatus.UNREGISTERED, destroy=hook)

    async def teardown(self) -> None:
        """Unregister every plugin, most recently registered first."""
        for name in reversed(list(self._state.plugins)):
            await self.unregister(name)

    # ── Enablement ────────────────────────────────────────────────────────────

    def enable(self, name: str) -> bool:
        """Mark a registered plugin enabled. Returns False if it is unknown."""
        if name not in self._state.plugins:
            return False
        if name not in self._state.enabled:
            self._state = replace(self._state, enabled=self._state.enabled | {name})
            logger.info("Plugin enabled: %s", name)
        return True

    def disable(self, name: str) -> bool:
        """Mark a registered plugin disabled. Returns False if it is unknown."""
        if name not in self._state.plugins:
            return False
        if name in self._state.enabled:
            self._state = replace(self._state, enabled=self._state.enabled - {name})
            logger.info("Plugin disabled: %s", name)
        return True

    # ── Snapshot builders ─────────────────────────────────────────────────────

    def _missing_components(self, manifest: PluginManifest, own: Mapping[str, Renderable]) -> tuple[str, ...]:
        available = self._state.bundle.keys() | own.keys()
        return tuple(sorted(manifest.component_keys() - available))

    @staticmethod
    def _with_plugin(state: RegistryState, manifest: PluginManifest, own: Mapping[str, Renderable]) -> RegistryState:
        name = manifest.name

        bundle = dict(state.bundle)
        owners = dict(state.component_owners)
        for key, component in own.items():
            previous = owners.get(key)
            if previous is not None and previous != name:
                logger.warning("Component '%s' from plugin '%s' overrides plugin '%s'", key, name, previous)
            bundle[key] = component
            owners[key] = name

        plugins = {**state.plugins, name: manifest}
        routes = state.registered_routes + tuple(RegisteredRoute(plugin=name, route=r) for r in manifest.routes)
        enabled = (state.enabled | {name}) if manifest.enabled is not False else state.enabled

        return RegistryState(
            plugins=MappingProxyType(plugins),
            enabled=enabled,
            bundle=MappingProxyType(bundle),
            component_owners=MappingProxyType(owners),
            plugin_components=MappingProxyType({**state.plugin_components, name: tuple(own)}),
            registered_routes=routes,
        )

    @staticmethod
    def _without_plugin(state: RegistryState, name: str) -> RegistryState:
        bundle = dict(state.bundle)
        owners = dict(state.component_owners)
        for key in state.plugin_components.get(name, ()):
            owner = owners.pop(key, None)
            if owner is not None and owner != name:
                logger.warning("Removing component '%s' now provided by plugin '%s'", key, owner)
            bundle.pop(key, None)

        plugins = {k: v for k, v in state.plugins.items() if k != name}
        plugin_components = {k: v for k, v in state.plugin_components.items() if k != name}

        return RegistryState(
            plugins=MappingProxyType(plugins),
            enabled=state.enabled - {name},
            bundle=MappingProxyType(bundle),
            component_owners=MappingProxyType(owners),
            plugin_components=MappingProxyType(plugin_components),
            registered_routes=tuple(entry for entry in state.registered_routes if entry.plugin != name),
        )
