"""
Plugin Manifest Schema Tests

Test classes:
    TestSlotPosition     — the six composition positions
    TestSlotDescriptor   — defaults, frozen model, condition semantics
    TestRouteDescriptor  — path normalisation, title
    TestPluginManifest   — defaults, camelCase hooks, component keys
    TestParseManifest    — validation errors surfaced as ManifestValidationError
    TestParseBundle      — bundle key/value validation
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

# ══════════════════════════════════════════════════════════════════════════════
# 1. TestSlotPosition
# ══════════════════════════════════════════════════════════════════════════════


class TestSlotPosition:
    def test_six_positions(self):
        from plugin_host.plugins.manifest import SlotPosition

        assert {p.value for p in SlotPosition} == {"append", "prepend", "replace", "before", "after", "wrap"}

    def test_position_from_string(self):
        from plugin_host.plugins.manifest import SlotPosition

        assert SlotPosition("wrap") is SlotPosition.WRAP


# ══════════════════════════════════════════════════════════════════════════════
# 2. TestSlotDescriptor
# ══════════════════════════════════════════════════════════════════════════════


class TestSlotDescriptor:
    def test_default_priority_is_zero(self):
        from plugin_host.plugins.manifest import SlotDescriptor

        d = SlotDescriptor(name="nav.actions", position="append", component="Btn")
        assert d.priority == 0
        assert d.props == {}
        assert d.condition is None

    def test_target_is_carried(self):
        from plugin_host.plugins.manifest import SlotDescriptor

        d = SlotDescriptor(name="s", position="before", component="C", target="header")
        assert d.target == "header"

    def test_descriptor_is_frozen(self):
        from plugin_host.plugins.manifest import SlotDescriptor

        d = SlotDescriptor(name="s", position="append", component="C")
        with pytest.raises(ValidationError):
            d.priority = 10

    def test_unknown_position_rejected(self):
        from plugin_host.plugins.manifest import SlotDescriptor

        with pytest.raises(ValidationError):
            SlotDescriptor(name="s", position="sideways", component="C")

    def test_matches_without_condition(self):
        from plugin_host.plugins.manifest import SlotDescriptor

        assert SlotDescriptor(name="s", position="append", component="C").matches({"any": 1}) is True

    def test_truthy_condition_result_matches(self):
        from plugin_host.plugins.manifest import SlotDescriptor

        truthy = SlotDescriptor(name="s", position="append", component="C", condition=lambda ctx: ctx.get("user"))
        assert truthy.matches({"user": {"id": 1}}) is True
        assert truthy.matches({"user": None}) is False
        assert truthy.matches({}) is False

    def test_condition_receives_context(self):
        from plugin_host.plugins.manifest import SlotDescriptor

        d = SlotDescriptor(name="s", position="append", component="C", condition=lambda ctx: ctx["admin"])
        assert d.matches({"admin": True}) is True
        assert d.matches({"admin": False}) is False


# ══════════════════════════════════════════════════════════════════════════════
# 3. TestRouteDescriptor
# ══════════════════════════════════════════════════════════════════════════════


class TestRouteDescriptor:
    def test_leading_slash_added(self):
        from plugin_host.plugins.manifest import RouteDescriptor

        assert RouteDescriptor(path="about", component="About").path == "/about"

    def test_title_from_meta(self):
        from plugin_host.plugins.manifest import RouteDescriptor

        route = RouteDescriptor(path="/about", component="About", meta={"title": "About us"})
        assert route.title == "About us"
        assert RouteDescriptor(path="/x", component="X").title is None


# ══════════════════════════════════════════════════════════════════════════════
# 4. TestPluginManifest
# ══════════════════════════════════════════════════════════════════════════════


class TestPluginManifest:
    def test_defaults(self):
        from plugin_host.plugins.manifest import PluginManifest

        m = PluginManifest(name="theme")
        assert m.version == "0.0.0"
        assert m.slots == []
        assert m.routes == []
        assert m.components is None
        assert m.enabled is True
        assert m.translations == {}

    def test_camel_case_hooks_accepted(self):
        from plugin_host.plugins.manifest import PluginManifest

        def init():
            return None

        def destroy():
            return None

        m = PluginManifest.model_validate({"name": "p", "onInit": init, "onDestroy": destroy})
        assert m.on_init is init
        assert m.on_destroy is destroy

    def test_snake_case_hooks_accepted(self):
        from plugin_host.plugins.manifest import PluginManifest

        def init():
            return None

        assert PluginManifest.model_validate({"name": "p", "on_init": init}).on_init is init

    def test_name_with_surrounding_whitespace_rejected(self):
        from plugin_host.plugins.manifest import PluginManifest

        with pytest.raises(ValidationError, match="surrounding whitespace"):
            PluginManifest(name="theme ")

    def test_inner_whitespace_kept(self):
        from plugin_host.plugins.manifest import PluginManifest

        assert PluginManifest(name="dark theme").name == "dark theme"

    def test_blank_name_rejected(self):
        from plugin_host.plugins.manifest import PluginManifest

        with pytest.raises(ValidationError):
            PluginManifest(name="   ")

    def test_component_keys_from_slots_and_routes(self):
        from plugin_host.plugins.manifest import PluginManifest

        m = PluginManifest.model_validate(
            {
                "name": "p",
                "slots": [{"name": "a", "position": "append", "component": "A"}],
                "routes": [{"path": "/b", "component": "B"}],
            }
        )
        assert m.component_keys() == {"A", "B"}

    def test_unknown_fields_ignored(self):
        from plugin_host.plugins.manifest import PluginManifest

        m = PluginManifest.model_validate({"name": "p", "homepage": "https://example.org"})
        assert not hasattr(m, "homepage")


# ══════════════════════════════════════════════════════════════════════════════
# 5. TestParseManifest
# ══════════════════════════════════════════════════════════════════════════════


class TestParseManifest:
    def test_instance_returned_unchanged(self):
        from plugin_host.plugins.manifest import PluginManifest, parse_manifest

        m = PluginManifest(name="p")
        assert parse_manifest(m) is m

    def test_mapping_validated(self):
        from plugin_host.plugins.manifest import SlotPosition, parse_manifest

        m = parse_manifest({"name": "p", "slots": [{"name": "s", "position": "replace", "component": "C"}]})
        assert m.slots[0].position is SlotPosition.REPLACE

    def test_non_mapping_rejected(self):
        from plugin_host.exceptions import ManifestValidationError
        from plugin_host.plugins.manifest import parse_manifest

        with pytest.raises(ManifestValidationError):
            parse_manifest(["not", "a", "manifest"])

    def test_errors_reported_with_plugin_name(self):
        from plugin_host.exceptions import ManifestValidationError
        from plugin_host.plugins.manifest import parse_manifest

        with pytest.raises(ManifestValidationError) as exc_info:
            parse_manifest({"name": "bad", "slots": [{"name": "s", "position": "nowhere", "component": "C"}]})

        err = exc_info.value
        assert err.status_code == 422
        assert err.details["plugin"] == "bad"
        assert any(e["field"].startswith("slots.0.position") for e in err.details["errors"])

    def test_missing_name_rejected(self):
        from plugin_host.exceptions import ManifestValidationError
        from plugin_host.plugins.manifest import parse_manifest

        with pytest.raises(ManifestValidationError) as exc_info:
            parse_manifest({"version": "1.0.0"})
        assert "plugin" not in exc_info.value.details


# ══════════════════════════════════════════════════════════════════════════════
# 6. TestParseBundle
# ══════════════════════════════════════════════════════════════════════════════


class TestParseBundle:
    def test_none_is_empty(self):
        from plugin_host.plugins.manifest import parse_bundle

        assert parse_bundle(None) == {}

    def test_valid_bundle_copied(self):
        from plugin_host.plugins.manifest import parse_bundle

        source = {"C": lambda **p: "c"}
        bundle = parse_bundle(source)
        assert bundle == source
        assert bundle is not source

    def test_non_callable_rejected(self):
        from plugin_host.exceptions import ManifestValidationError
        from plugin_host.plugins.manifest import parse_bundle

        with pytest.raises(ManifestValidationError) as exc_info:
            parse_bundle({"C": "not callable"}, plugin="p")
        assert exc_info.value.details["errors"][0]["field"] == "components.C"

    def test_non_mapping_rejected(self):
        from plugin_host.exceptions import ManifestValidationError
        from plugin_host.plugins.manifest import parse_bundle

        with pytest.raises(ManifestValidationError):
            parse_bundle([lambda: None])
