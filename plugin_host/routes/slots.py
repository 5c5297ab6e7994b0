"""
Slot Routes

GET  /api/v1/slots/{slot_name}         → resolved contributions, highest priority first
POST /api/v1/slots/{slot_name}/render  → composed render tree for the slot

The optional ``context`` query parameter of the GET route is a JSON document
handed to each descriptor's condition.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from plugin_host.config import Settings  # noqa: TC001
from plugin_host.dependencies import get_settings, get_store
from plugin_host.plugins.composition import render_slot
from plugin_host.plugins.registry import RegistryStore  # noqa: TC001

router = APIRouter(tags=["Slots"])
logger = logging.getLogger(__name__)


class ResolvedSlotResponse(BaseModel):
    plugin: str
    name: str
    position: str
    component: str
    priority: int
    props: dict[str, Any]


class SlotRenderRequest(BaseModel):
    default_content: Any = None
    context: Any = None
    props: dict[str, Any] = {}
    css_class: str | None = None


def _parse_context(raw: str | None) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"context must be valid JSON: {exc.msg}",
        ) from exc


@router.get("/{slot_name}", response_model=list[ResolvedSlotResponse])
async def resolve_slot_contributions(
    slot_name: str,
    context: str | None = Query(None, description="JSON context passed to slot conditions"),
    store: RegistryStore = Depends(get_store),
) -> list[ResolvedSlotResponse]:
    """List the contributions that apply to a slot, in render order."""
    return [
        ResolvedSlotResponse(
            plugin=entry.plugin,
            name=entry.descriptor.name,
            position=entry.descriptor.position.value,
            component=entry.descriptor.component,
            priority=entry.descriptor.priority,
            props=entry.descriptor.props,
        )
        for entry in store.resolve(slot_name, _parse_context(context))
    ]


@router.post("/{slot_name}/render")
async def render_slot_tree(
    slot_name: str,
    payload: SlotRenderRequest,
    store: RegistryStore = Depends(get_store),
    config: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Compose a slot with its default content and return the render tree."""
    render = render_slot(
        store,
        slot_name,
        default_content=payload.default_content,
        context=payload.context,
        extra_props=payload.props,
        container_tag=config.slot_container_tag,
        css_class=payload.css_class,
    )
    return jsonable_encoder(render.to_dict())
