"""
Plugin Administration Routes

GET    /api/v1/plugins/               → list all registered plugins
GET    /api/v1/plugins/{name}         → get single plugin by name
POST   /api/v1/plugins/load           → load a plugin module from a URL or local reference
POST   /api/v1/plugins/reload         → fetch the backend's active list and load it
POST   /api/v1/plugins/{name}/enable  → enable plugin
POST   /api/v1/plugins/{name}/disable → disable plugin
DELETE /api/v1/plugins/{name}         → unregister plugin

Registry state lives in memory only; nothing is persisted across restarts.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from plugin_host.dependencies import get_loader, get_store
from plugin_host.exceptions import PluginNotFoundError
from plugin_host.plugins.loader import LoadReport, PluginLoader  # noqa: TC001
from plugin_host.plugins.manifest import PluginManifest  # noqa: TC001
from plugin_host.plugins.registry import RegistrationResult, RegistryStore  # noqa: TC001

router = APIRouter(tags=["Plugins"])
logger = logging.getLogger(__name__)


# ── Pydantic schemas ───────────────────────────────────────────────────────────


class PluginLoadRequest(BaseModel):
    url: str


class SlotResponse(BaseModel):
    name: str
    position: str
    component: str
    priority: int
    target: str | None = None
    props: dict[str, Any]
    conditional: bool


class PluginRouteResponse(BaseModel):
    path: str
    component: str
    meta: dict[str, Any]
    plugin: str


class PluginResponse(BaseModel):
    name: str
    version: str
    description: str | None = None
    author: str | None = None
    enabled: bool
    slots: list[SlotResponse]
    routes: list[PluginRouteResponse]
    components: list[str]
    locales: list[str]


class RegistrationResponse(BaseModel):
    plugin: str | None
    status: str
    missing_components: list[str] = []


class LoadFailure(BaseModel):
    source: str
    error: str


class LoadReportResponse(BaseModel):
    loaded: list[str]
    failed: list[LoadFailure]
    fetch_error: str | None = None


# ── Helpers ────────────────────────────────────────────────────────────────────


def _build_response(manifest: PluginManifest, store: RegistryStore) -> PluginResponse:
    state = store.state
    return PluginResponse(
        name=manifest.name,
        version=manifest.version,
        description=manifest.description,
        author=manifest.author,
        enabled=state.is_enabled(manifest.name),
        slots=[
            SlotResponse(
                name=slot.name,
                position=slot.position.value,
                component=slot.component,
                priority=slot.priority,
                target=slot.target,
                props=slot.props,
                conditional=slot.condition is not None,
            )
            for slot in manifest.slots
        ],
        routes=[
            PluginRouteResponse(path=r.path, component=r.component, meta=r.meta, plugin=manifest.name)
            for r in manifest.routes
        ],
        components=list(state.plugin_components.get(manifest.name, ())),
        locales=list(manifest.translations),
    )


def _get_or_404(name: str, store: RegistryStore) -> PluginManifest:
    manifest = store.get(name)
    if manifest is None:
        raise PluginNotFoundError(name)
    return manifest


def _registration_response(result: RegistrationResult) -> RegistrationResponse:
    if not result.ok and result.error is not None:
        raise result.error
    return RegistrationResponse(
        plugin=result.plugin,
        status=result.status.value,
        missing_components=list(result.missing_components),
    )


def _report_response(report: LoadReport) -> LoadReportResponse:
    return LoadReportResponse(
        loaded=report.loaded,
        failed=[
            LoadFailure(source=o.source, error=o.error.message if o.error else "registration failed")
            for o in report.failed
        ],
        fetch_error=report.fetch_error.message if report.fetch_error else None,
    )


# ── Routes ─────────────────────────────────────────────────────────────────────


@router.get("/", response_model=list[PluginResponse])
async def list_plugins(store: RegistryStore = Depends(get_store)) -> list[PluginResponse]:
    """List all registered plugins in registration order."""
    return [_build_response(m, store) for m in store.all_plugins()]


@router.post("/load", response_model=RegistrationResponse, status_code=201)
async def load_plugin(
    payload: PluginLoadRequest,
    loader: PluginLoader = Depends(get_loader),
) -> RegistrationResponse:
    """Resolve a plugin module from a URL (or local reference) and register it."""
    result = await loader.load_from_url(payload.url)
    logger.info("Plugin load requested: %s -> %s", payload.url, result.status.value)
    return _registration_response(result)


@router.post("/reload", response_model=LoadReportResponse)
async def reload_active_plugins(loader: PluginLoader = Depends(get_loader)) -> LoadReportResponse:
    """Fetch the backend's active plugin list and load every entry not yet registered."""
    return _report_response(await loader.load_all())


@router.get("/{name}", response_model=PluginResponse)
async def get_plugin(name: str, store: RegistryStore = Depends(get_store)) -> PluginResponse:
    """Get a single plugin by name."""
    return _build_response(_get_or_404(name, store), store)


@router.post("/{name}/enable", response_model=PluginResponse)
async def enable_plugin(name: str, store: RegistryStore = Depends(get_store)) -> PluginResponse:
    """Enable a plugin; its slot contributions resolve again."""
    manifest = _get_or_404(name, store)
    store.enable(name)
    return _build_response(manifest, store)


@router.post("/{name}/disable", response_model=PluginResponse)
async def disable_plugin(name: str, store: RegistryStore = Depends(get_store)) -> PluginResponse:
    """Disable a plugin without unregistering it."""
    manifest = _get_or_404(name, store)
    store.disable(name)
    return _build_response(manifest, store)


@router.delete("/{name}", status_code=204)
async def unregister_plugin(name: str, store: RegistryStore = Depends(get_store)) -> None:
    """Unregister a plugin, running its on_destroy hook."""
    _get_or_404(name, store)
    await store.unregister(name)
