"""
Plugin Page Routes

GET /api/v1/routes/        → routes contributed by registered plugins
GET /api/v1/routes/match   → render the plugin route matching ?path=
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from plugin_host.dependencies import get_request_locale, get_store
from plugin_host.exceptions import FragmentRenderError
from plugin_host.plugins.registry import RegistryStore  # noqa: TC001
from plugin_host.plugins.routing import match_route

router = APIRouter(tags=["Plugin Routes"])
logger = logging.getLogger(__name__)


class RegisteredRouteResponse(BaseModel):
    path: str
    component: str
    title: str | None = None
    meta: dict[str, Any]
    plugin: str
    enabled: bool


@router.get("/", response_model=list[RegisteredRouteResponse])
async def list_routes(store: RegistryStore = Depends(get_store)) -> list[RegisteredRouteResponse]:
    """List plugin routes in registration order."""
    state = store.state
    return [
        RegisteredRouteResponse(
            path=entry.route.path,
            component=entry.route.component,
            title=entry.route.title,
            meta=entry.route.meta,
            plugin=entry.plugin,
            enabled=state.is_enabled(entry.plugin),
        )
        for entry in state.registered_routes
    ]


@router.get("/match")
async def render_route(
    path: str = Query(..., min_length=1),
    locale: str = Depends(get_request_locale),
    store: RegistryStore = Depends(get_store),
) -> dict[str, Any]:
    """Render the component of the first enabled plugin route matching path."""
    match = match_route(store.state, path)
    if match is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No plugin route matches {path}")

    try:
        content = match.component(params=match.params, locale=locale)
    except Exception as exc:
        raise FragmentRenderError(match.route.component, match.plugin, str(exc) or type(exc).__name__) from exc

    return jsonable_encoder(
        {
            "plugin": match.plugin,
            "path": match.route.path,
            "params": match.params,
            "meta": match.route.meta,
            "content": content,
        }
    )
