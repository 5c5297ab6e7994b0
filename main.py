"""
Plugin host entry point.

create_app() builds the host application: one RegistryStore, one
TranslationManager bound to it and one PluginLoader, created in the lifespan
and attached to ``app.state``.  Startup loads the configured local plugins
and then the backend's active plugins; shutdown unregisters every plugin so
on_destroy hooks run.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from plugin_host.config import Settings, settings
from plugin_host.exception_handlers import register_exception_handlers
from plugin_host.i18n.translations import TranslationManager
from plugin_host.middleware.language import LanguageMiddleware
from plugin_host.middleware.logging import StructuredLoggingMiddleware, setup_structured_logging
from plugin_host.plugins.lifecycle import LifecycleManager
from plugin_host.plugins.loader import ModuleResolver, PluginLoader
from plugin_host.plugins.registry import RegistryStore
from plugin_host.routes import i18n, pages, plugins, slots

logger = logging.getLogger(__name__)


def build_services(
    config: Settings,
    client: httpx.AsyncClient | None = None,
    resolver: ModuleResolver | None = None,
) -> tuple[RegistryStore, TranslationManager, PluginLoader]:
    """Construct the store, translation manager and loader for one host."""
    store = RegistryStore(LifecycleManager(), strict_components=config.strict_components)
    translations = TranslationManager(default_locale=config.default_locale)
    translations.bind(store)
    loader = PluginLoader(
        store,
        resolver=resolver,
        client=client,
        backend_base_url=config.backend_base_url,
        active_path=config.active_plugins_path,
        timeout=config.request_timeout_seconds,
    )
    return store, translations, loader


def create_app(
    config: Settings | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    resolver: ModuleResolver | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Create the FastAPI application."""
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if configure_logging:
            setup_structured_logging(config.log_level, json_format=config.log_json)

        store, translations, loader = build_services(config, client=client, resolver=resolver)
        app.state.plugin_store = store
        app.state.translations = translations
        app.state.plugin_loader = loader

        logger.info("Starting %s v%s (%s)", config.app_name, config.app_version, config.environment)
        if config.local_plugins:
            report = await loader.load_local(config.local_plugins)
            logger.info("Local plugins: %d loaded, %d failed", len(report.loaded), len(report.failed))
        if config.backend_base_url:
            await loader.load_all()

        try:
            yield
        finally:
            logger.info("Shutting down, unregistering %d plugins", len(store.all_plugins()))
            await store.teardown()
            await loader.aclose()

    app = FastAPI(
        title=config.app_name,
        description="Host application composing plugin-contributed slots, routes and translations",
        debug=config.debug,
        version=config.app_version,
        lifespan=lifespan,
    )

    app.state.settings = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LanguageMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(plugins.router, prefix="/api/v1/plugins")
    app.include_router(slots.router, prefix="/api/v1/slots")
    app.include_router(pages.router, prefix="/api/v1/routes")
    app.include_router(i18n.router, prefix="/api/v1/i18n")

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
