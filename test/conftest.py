"""
Pytest configuration and fixtures for plugin host tests
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

from plugin_host.config import Settings  # noqa: E402
from plugin_host.i18n.translations import TranslationManager  # noqa: E402
from plugin_host.plugins.registry import RegistryStore  # noqa: E402


@pytest.fixture
def store() -> RegistryStore:
    """A fresh, empty registry store."""
    return RegistryStore()


@pytest.fixture
def translations(store: RegistryStore) -> TranslationManager:
    """A translation manager bound to the store fixture."""
    manager = TranslationManager(default_locale="en")
    manager.bind(store)
    return manager


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment: no backend, no local plugins."""
    return Settings(
        _env_file=None,
        backend_base_url=None,
        local_plugins=[],
        strict_components=False,
        log_json=False,
    )


@pytest.fixture
def app(test_settings):
    from main import create_app

    return create_app(test_settings, configure_logging=False)


@pytest.fixture
def client(app):
    """TestClient with the lifespan running (store, translations and loader on app.state)."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def theme_client(test_settings):
    """TestClient whose startup loaded the sample theme plugin from a local reference."""
    from main import create_app

    config = test_settings.model_copy(update={"local_plugins": ["utils.sample_plugins:theme_plugin"]})
    with TestClient(create_app(config, configure_logging=False)) as c:
        yield c
