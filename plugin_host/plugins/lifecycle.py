"""
Plugin Lifecycle Manager

Runs a plugin's on_init / on_destroy hooks around registry mutations.

Hooks may be plain functions or return an awaitable; the result is awaited
before the transaction is declared finished.  Failures never propagate:
they are logged and reported as a failed HookResult so callers can tell
"plugin loaded" apart from "plugin failed to load".
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from plugin_host.exceptions import DestroyHookError, InitHookError, PluginHostError

if TYPE_CHECKING:
    from plugin_host.plugins.manifest import Hook, PluginManifest

logger = logging.getLogger(__name__)


class HookPhase(str, Enum):
    INIT = "init"
    DESTROY = "destroy"


@dataclass(frozen=True)
class HookResult:
    """Outcome of running one lifecycle hook."""

    plugin: str
    phase: HookPhase
    error: PluginHostError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class LifecycleManager:
    """Invokes lifecycle hooks with failure isolation."""

    async def run_init(self, manifest: PluginManifest) -> HookResult:
        """Run on_init; a failure means the registration must be aborted."""
        return await self._run(manifest.name, HookPhase.INIT, manifest.on_init)

    async def run_destroy(self, manifest: PluginManifest) -> HookResult:
        """Run on_destroy; a failure is logged but never blocks removal."""
        return await self._run(manifest.name, HookPhase.DESTROY, manifest.on_destroy)

    async def _run(self, plugin: str, phase: HookPhase, hook: Hook | None) -> HookResult:
        if hook is None:
            return HookResult(plugin=plugin, phase=phase)

        try:
            result = hook()
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            error_cls = InitHookError if phase is HookPhase.INIT else DestroyHookError
            error = error_cls(plugin, str(exc) or type(exc).__name__)
            logger.error("%s", error.message, exc_info=exc)
            return HookResult(plugin=plugin, phase=phase, error=error)

        logger.debug("Plugin %s: %s hook completed", plugin, phase.value)
        return HookResult(plugin=plugin, phase=phase)
