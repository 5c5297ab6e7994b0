"""
FastAPI dependencies.

The settings passed to create_app() are attached to ``app.state`` when the
application is built; the registry store, translation manager and loader are
built once in the application lifespan and attached there too.  Routes
receive them by reference through these dependencies instead of importing a
global.
"""

from fastapi import Request

from plugin_host.config import Settings
from plugin_host.i18n.translations import TranslationManager
from plugin_host.plugins.loader import PluginLoader
from plugin_host.plugins.registry import RegistryStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RegistryStore:
    return request.app.state.plugin_store


def get_translations(request: Request) -> TranslationManager:
    return request.app.state.translations


def get_loader(request: Request) -> PluginLoader:
    return request.app.state.plugin_loader


def get_request_locale(request: Request) -> str:
    """Locale detected by LanguageMiddleware, or the manager's current locale."""
    locale = getattr(request.state, "locale", None)
    return locale or request.app.state.translations.locale
