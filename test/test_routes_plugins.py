"""
Plugin Administration Route Tests

Test classes:
    TestHealth          — health endpoint and request id propagation
    TestListAndGet      — listing and single-plugin lookup
    TestLoad            — POST /load and POST /reload
    TestEnablement      — enable / disable endpoints
    TestUnregister      — DELETE endpoint
    TestErrorEnvelope   — uniform JSON error format
"""

from __future__ import annotations

import asyncio

# ══════════════════════════════════════════════════════════════════════════════
# 1. TestHealth
# ══════════════════════════════════════════════════════════════════════════════


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_request_id_echoed(self, client):
        response = client.get("/api/v1/plugins/", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self, client):
        assert client.get("/api/v1/plugins/").headers["X-Request-ID"]

    def test_services_attached_to_app_state(self, client):
        from plugin_host.i18n.translations import TranslationManager
        from plugin_host.plugins.loader import PluginLoader
        from plugin_host.plugins.registry import RegistryStore

        state = client.app.state
        assert isinstance(state.plugin_store, RegistryStore)
        assert isinstance(state.translations, TranslationManager)
        assert isinstance(state.plugin_loader, PluginLoader)


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestListAndGet
# ══════════════════════════════════════════════════════════════════════════════


class TestListAndGet:
    def test_empty_registry(self, client):
        response = client.get("/api/v1/plugins/")
        assert response.status_code == 200
        assert response.json() == []

    def test_startup_plugin_listed(self, theme_client):
        data = theme_client.get("/api/v1/plugins/").json()
        assert [p["name"] for p in data] == ["theme"]

    def test_get_plugin(self, theme_client):
        response = theme_client.get("/api/v1/plugins/theme")
        assert response.status_code == 200
        data = response.json()
        assert data["version"] == "1.2.0"
        assert data["enabled"] is True
        assert data["slots"][0] == {
            "name": "sidebar.footer",
            "position": "prepend",
            "component": "FooterBadge",
            "priority": 100,
            "target": None,
            "props": {},
            "conditional": False,
        }
        assert data["routes"][0]["path"] == "/about/:section"
        assert sorted(data["components"]) == ["AboutPage", "FooterBadge"]
        assert sorted(data["locales"]) == ["en", "fr"]

    def test_get_unknown_plugin(self, client):
        response = client.get("/api/v1/plugins/ghost")
        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "PLUGIN_NOT_FOUND"


# ══════════════════════════════════════════════════════════════════════════════
# 3. TestLoad
# ══════════════════════════════════════════════════════════════════════════════


class TestLoad:
    def test_load_local_reference(self, client):
        response = client.post("/api/v1/plugins/load", json={"url": "utils.sample_plugins:analytics_plugin"})
        assert response.status_code == 201
        assert response.json() == {"plugin": "analytics", "status": "registered", "missing_components": []}
        assert client.app.state.plugin_store.is_registered("analytics")

    def test_load_duplicate_conflicts(self, theme_client):
        response = theme_client.post("/api/v1/plugins/load", json={"url": "utils.sample_plugins:theme_plugin"})
        assert response.status_code == 409
        assert response.json()["error"]["error_code"] == "PLUGIN_DUPLICATE_REGISTRATION"

    def test_load_incomplete_module(self, client):
        response = client.post("/api/v1/plugins/load", json={"url": "utils.sample_plugins:incomplete_plugin"})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["error_code"] == "PLUGIN_MODULE_INVALID"
        assert error["details"]["field"] == "components"

    def test_load_unknown_module(self, client):
        response = client.post("/api/v1/plugins/load", json={"url": "utils.does_not_exist"})
        assert response.status_code == 400

    def test_load_requires_url(self, client):
        response = client.post("/api/v1/plugins/load", json={})
        assert response.status_code == 422
        assert response.json()["error"]["error_code"] == "VALIDATION_FAILED"

    def test_reload_without_backend(self, client):
        response = client.post("/api/v1/plugins/reload")
        assert response.status_code == 200
        data = response.json()
        assert data["loaded"] == []
        assert data["fetch_error"]


# ══════════════════════════════════════════════════════════════════════════════
# 4. TestEnablement
# ══════════════════════════════════════════════════════════════════════════════


class TestEnablement:
    def test_disable_then_enable(self, theme_client):
        response = theme_client.post("/api/v1/plugins/theme/disable")
        assert response.status_code == 200
        assert response.json()["enabled"] is False
        assert theme_client.get("/api/v1/slots/sidebar.footer").json() == []

        response = theme_client.post("/api/v1/plugins/theme/enable")
        assert response.json()["enabled"] is True
        assert len(theme_client.get("/api/v1/slots/sidebar.footer").json()) == 1

    def test_enable_unknown_plugin(self, client):
        assert client.post("/api/v1/plugins/ghost/enable").status_code == 404


# ══════════════════════════════════════════════════════════════════════════════
# 5. TestUnregister
# ══════════════════════════════════════════════════════════════════════════════


class TestUnregister:
    def test_delete_runs_destroy_and_removes(self, theme_client):
        from utils import sample_plugins

        sample_plugins.calls.clear()
        response = theme_client.delete("/api/v1/plugins/theme")
        assert response.status_code == 204
        assert sample_plugins.calls == ["theme:destroy"]
        assert theme_client.get("/api/v1/plugins/theme").status_code == 404
        assert theme_client.get("/api/v1/routes/").json() == []

    def test_delete_unknown_plugin(self, client):
        assert client.delete("/api/v1/plugins/ghost").status_code == 404

    def test_shutdown_tears_down_plugins(self, app):
        from fastapi.testclient import TestClient

        calls = []
        with TestClient(app) as c:
            store = c.app.state.plugin_store
            asyncio.run(store.register({"name": "temp", "onDestroy": lambda: calls.append("destroy")}))
        assert calls == ["destroy"]
        assert store.all_plugins() == []


# ══════════════════════════════════════════════════════════════════════════════
# 6. TestErrorEnvelope
# ══════════════════════════════════════════════════════════════════════════════


class TestErrorEnvelope:
    def test_envelope_fields(self, client):
        error = client.get("/api/v1/plugins/ghost", headers={"X-Request-ID": "abc"}).json()["error"]
        assert error["status_code"] == 404
        assert error["type"] == "Not Found"
        assert error["message"] == "Plugin not found: ghost"
        assert error["details"] == {"plugin": "ghost"}
        assert error["path"] == "/api/v1/plugins/ghost"
        assert error["request_id"] == "abc"

    def test_unknown_route(self, client):
        error = client.get("/api/v1/nowhere").json()["error"]
        assert error["error_code"] == "RESOURCE_NOT_FOUND"
