"""
Plugin route matching.

Matches a request path against the routes contributed by enabled plugins,
in registration order.  Patterns support literal segments and ``:param`` or
``{param}`` placeholders; a trailing slash is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from plugin_host.exceptions import MissingComponentError

if TYPE_CHECKING:
    from plugin_host.plugins.manifest import Renderable, RouteDescriptor
    from plugin_host.plugins.registry import RegistryState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteMatch:
    plugin: str
    route: RouteDescriptor
    component: Renderable
    params: dict[str, str]


def _segments(path: str) -> list[str]:
    return [part for part in path.strip("/").split("/") if part]


def match_path(pattern: str, path: str) -> dict[str, str] | None:
    """Return the captured params if path matches pattern, else None."""
    expected = _segments(pattern)
    actual = _segments(path)
    if len(expected) != len(actual):
        return None

    params: dict[str, str] = {}
    for want, got in zip(expected, actual):
        if want.startswith(":") and len(want) > 1:
            params[want[1:]] = got
        elif want.startswith("{") and want.endswith("}") and len(want) > 2:
            params[want[1:-1]] = got
        elif want != got:
            return None
    return params


def match_route(state: RegistryState, path: str) -> RouteMatch | None:
    """
    Find the first route of an enabled plugin matching path.

    A matching route whose component is missing from the bundle is logged
    and treated as not found; later routes are still considered.
    """
    for entry in state.registered_routes:
        if entry.plugin not in state.enabled:
            continue
        params = match_path(entry.route.path, path)
        if params is None:
            continue
        component = state.bundle.get(entry.route.component)
        if component is None:
            error = MissingComponentError(entry.route.component, plugin=entry.plugin, where=f"route {entry.route.path}")
            logger.warning("%s", error.message)
            continue
        return RouteMatch(plugin=entry.plugin, route=entry.route, component=component, params=params)
    return None
