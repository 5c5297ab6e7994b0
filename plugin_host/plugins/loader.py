"""
Plugin Loader

Turns plugin references into registered plugins:

    load_from_module(module): a resolved {manifest, components} unit
    load_from_url(url): resolve a module via the ModuleResolver first
    load_all(): fetch the active plugin list from the backend
                and load every entry concurrently
    load_local(references): load startup plugins from local references

Module resolution is a capability supplied by the host (ModuleResolver).
Two resolvers ship here: ImportModuleResolver (importlib, for
``package.module[:attribute]`` references) and RemoteModuleResolver
(downloads Python source over httpx).  DefaultModuleResolver picks one by
URL scheme.

A failing plugin never aborts a batch and never rolls back plugins already
loaded in the same batch; each failure is logged and recorded in the
LoadReport.
"""

from __future__ import annotations

import asyncio
import hashlib
import importlib
import importlib.abc
import importlib.util
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import CodeType
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from plugin_host.exceptions import PluginFetchError, PluginHostError, PluginModuleError

if TYPE_CHECKING:
    from plugin_host.plugins.registry import RegistrationResult, RegistryStore

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("manifest", "components")


# ── Backend payload ───────────────────────────────────────────────────────────


class ActivePluginEntry(BaseModel):
    """One item of ``GET /plugins/active``."""

    entry: str


_ACTIVE_PLUGINS = TypeAdapter(list[ActivePluginEntry])


# ── Module resolvers ──────────────────────────────────────────────────────────


class ModuleResolver(Protocol):
    async def resolve(self, reference: str) -> Any:
        """Return an object or mapping exposing ``manifest`` and ``components``."""
        ...


class ImportModuleResolver:
    """Resolve ``package.module`` or ``package.module:attribute`` with importlib."""

    async def resolve(self, reference: str) -> Any:
        module_path, _, attribute = reference.partition(":")
        try:
            module = importlib.import_module(module_path)
        except ImportError as exc:
            msg = f"Cannot import plugin module '{module_path}': {exc}"
            raise PluginModuleError(msg, source=reference) from exc

        if not attribute:
            return module
        try:
            return getattr(module, attribute)
        except AttributeError as exc:
            msg = f"Plugin module '{module_path}' has no attribute '{attribute}'"
            raise PluginModuleError(msg, source=reference) from exc


class _SourceLoader(importlib.abc.InspectLoader):
    """Loader over source text already downloaded from ``origin``."""

    def __init__(self, source: str, origin: str):
        self._source = source
        self._origin = origin

    def get_source(self, fullname: str) -> str:
        return self._source

    def get_code(self, fullname: str) -> CodeType:
        return self.source_to_code(self._source, self._origin)


class RemoteModuleResolver:
    """Download Python source from a URL and execute it as a fresh module."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def resolve(self, reference: str) -> Any:
        try:
            response = await self._client.get(reference)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            msg = f"Failed to fetch plugin module {reference}: {exc}"
            raise PluginFetchError(msg, url=reference) from exc

        module_name = f"plugin_host_remote_{hashlib.sha1(reference.encode()).hexdigest()[:12]}"
        spec = importlib.util.spec_from_loader(module_name, _SourceLoader(response.text, reference), origin=reference)
        if spec is None or spec.loader is None:
            msg = f"Failed to create module spec for {reference}"
            raise PluginModuleError(msg, source=reference)
        module = importlib.util.module_from_spec(spec)

        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            msg = f"Failed to execute plugin module {reference}: {exc}"
            raise PluginModuleError(msg, source=reference) from exc
        return module


class DefaultModuleResolver:
    """http(s) URLs go to RemoteModuleResolver, anything else to ImportModuleResolver."""

    def __init__(self, client: httpx.AsyncClient):
        self.remote = RemoteModuleResolver(client)
        self.local = ImportModuleResolver()

    async def resolve(self, reference: str) -> Any:
        if urlsplit(reference).scheme in ("http", "https"):
            return await self.remote.resolve(reference)
        return await self.local.resolve(reference)


# ── Reports ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LoadOutcome:
    """Result of loading a single plugin reference."""

    source: str
    result: RegistrationResult | None = None
    error: PluginHostError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.result is not None and self.result.ok


@dataclass
class LoadReport:
    """Result of a batch load."""

    outcomes: list[LoadOutcome] = field(default_factory=list)
    fetch_error: PluginFetchError | None = None

    @property
    def loaded(self) -> list[str]:
        return [o.result.plugin for o in self.outcomes if o.ok and o.result and o.result.plugin]

    @property
    def failed(self) -> list[LoadOutcome]:
        return [o for o in self.outcomes if not o.ok]


# ── Loader ────────────────────────────────────────────────────────────────────


def _module_field(module: Any, name: str) -> Any:
    if isinstance(module, Mapping):
        return module.get(name)
    return getattr(module, name, None)


class PluginLoader:
    """Feeds resolved plugin modules to the registry store."""

    def __init__(
        self,
        store: RegistryStore,
        resolver: ModuleResolver | None = None,
        client: httpx.AsyncClient | None = None,
        backend_base_url: str | None = None,
        active_path: str = "/plugins/active",
        timeout: float = 10.0,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._store = store
        self._resolver = resolver or DefaultModuleResolver(self._client)
        self.backend_base_url = backend_base_url.rstrip("/") if backend_base_url else None
        self.active_path = active_path

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def load_from_module(self, module: Any, source: str | None = None) -> RegistrationResult:
        """
        Register a resolved plugin module.

        Raises:
            PluginModuleError: If ``manifest`` or ``components`` is missing
        """
        values = {}
        for name in _REQUIRED_FIELDS:
            value = _module_field(module, name)
            if value is None:
                msg = f"Plugin module{f' {source}' if source else ''} is missing '{name}'"
                raise PluginModuleError(msg, field=name, source=source)
            values[name] = value
        return await self._store.register(values["manifest"], values["components"])

    async def load_from_url(self, url: str) -> RegistrationResult:
        """Resolve a module from url and register it."""
        module = await self._resolver.resolve(url)
        return await self.load_from_module(module, source=url)

    async def load_local(self, references: list[str]) -> LoadReport:
        """Load startup plugins given as local references, concurrently."""
        return LoadReport(outcomes=await self._load_many(references))

    async def load_all(self) -> LoadReport:
        """
        Fetch the active plugin list from the backend and load every entry.

        A failed fetch is logged and leaves registry state untouched.
        """
        if not self.backend_base_url:
            error = PluginFetchError("No backend URL configured for active plugins")
            logger.warning("%s", error.message)
            return LoadReport(fetch_error=error)

        list_url = f"{self.backend_base_url}{self.active_path}"
        try:
            response = await self._client.get(list_url)
            response.raise_for_status()
            entries = _ACTIVE_PLUGINS.validate_python(response.json())
        except (httpx.HTTPError, ValueError, PydanticValidationError) as exc:
            error = PluginFetchError(f"Failed to fetch active plugins: {exc}", url=list_url)
            logger.warning("%s", error.message)
            return LoadReport(fetch_error=error)

        urls = [f"{self.backend_base_url}{item.entry}" for item in entries]
        report = LoadReport(outcomes=await self._load_many(urls))
        logger.info("Loaded %d plugins (%d failed).", len(report.loaded), len(report.failed))
        return report

    async def _load_many(self, references: list[str]) -> list[LoadOutcome]:
        return list(await asyncio.gather(*(self._load_one(ref) for ref in references)))

    async def _load_one(self, reference: str) -> LoadOutcome:
        try:
            result = await self.load_from_url(reference)
        except PluginHostError as exc:
            logger.error("Failed to load plugin from %s: %s", reference, exc.message)
            return LoadOutcome(source=reference, error=exc)
        except Exception as exc:
            logger.exception("Failed to load plugin from %s", reference)
            return LoadOutcome(source=reference, error=PluginModuleError(str(exc), source=reference))

        if not result.ok:
            return LoadOutcome(source=reference, result=result, error=result.error)
        return LoadOutcome(source=reference, result=result)
