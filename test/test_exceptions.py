"""
Tests for custom exception classes

Tests exception initialization, messages, status codes, error codes and details,
plus the JSON error envelope helpers.
"""

import json

from fastapi import status

from plugin_host.exception_handlers import create_error_response, get_error_type, get_http_error_code
from plugin_host.exceptions import (
    DestroyHookError,
    DuplicateRegistrationError,
    ErrorCode,
    FragmentRenderError,
    InitHookError,
    ManifestValidationError,
    MissingComponentError,
    PluginFetchError,
    PluginHostError,
    PluginModuleError,
    PluginNotFoundError,
)


class TestPluginHostError:
    """Test base PluginHostError class"""

    def test_default(self):
        """Test PluginHostError with default values"""
        exc = PluginHostError("Test error")
        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.details == {}
        assert exc.error_code is ErrorCode.INTERNAL_ERROR

    def test_custom_error_code(self):
        exc = PluginHostError("Test error", error_code=ErrorCode.SERVICE_UNAVAILABLE)
        assert exc.error_code is ErrorCode.SERVICE_UNAVAILABLE

    def test_custom_error_code_does_not_leak_to_class(self):
        PluginHostError("Test error", error_code=ErrorCode.SERVICE_UNAVAILABLE)
        assert PluginHostError("Other").error_code is ErrorCode.INTERNAL_ERROR

    def test_subclasses_share_base(self):
        for exc in (
            DuplicateRegistrationError("p"),
            PluginNotFoundError("p"),
            InitHookError("p", "r"),
            PluginFetchError(),
        ):
            assert isinstance(exc, PluginHostError)


class TestRegistrationExceptions:
    """Test registration-related exceptions"""

    def test_manifest_validation_error(self):
        errors = [{"field": "slots.0.position", "message": "bad", "type": "enum"}]
        exc = ManifestValidationError("Invalid manifest", plugin="theme", errors=errors)
        assert exc.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert exc.details == {"errors": errors, "plugin": "theme"}
        assert exc.error_code is ErrorCode.MANIFEST_INVALID

    def test_duplicate_registration_error(self):
        exc = DuplicateRegistrationError("theme")
        assert exc.status_code == status.HTTP_409_CONFLICT
        assert "theme" in exc.message

    def test_plugin_not_found_error(self):
        exc = PluginNotFoundError("theme")
        assert exc.status_code == status.HTTP_404_NOT_FOUND
        assert exc.message == "Plugin not found: theme"

    def test_plugin_module_error(self):
        exc = PluginModuleError("missing", field="manifest", source="pkg.mod")
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert exc.details == {"field": "manifest", "source": "pkg.mod"}


class TestLifecycleExceptions:
    """Test lifecycle hook exceptions"""

    def test_init_hook_error(self):
        exc = InitHookError("theme", "boom")
        assert exc.message == "Error initializing plugin 'theme': boom"
        assert exc.error_code is ErrorCode.INIT_HOOK_FAILED

    def test_destroy_hook_error(self):
        exc = DestroyHookError("theme", "boom")
        assert exc.message == "Error destroying plugin 'theme': boom"
        assert exc.error_code is ErrorCode.DESTROY_HOOK_FAILED


class TestCompositionExceptions:
    """Test composition and loading exceptions"""

    def test_missing_component_error(self):
        exc = MissingComponentError("Badge", plugin="theme", where="slot sidebar.footer")
        assert exc.message == "Component 'Badge' not found for slot sidebar.footer"
        assert exc.details == {"component": "Badge", "plugin": "theme"}

    def test_missing_component_error_without_location(self):
        assert MissingComponentError("Badge").message == "Component 'Badge' not found"

    def test_fragment_render_error(self):
        exc = FragmentRenderError("Badge", "theme", "bad props")
        assert exc.details == {"component": "Badge", "plugin": "theme", "reason": "bad props"}

    def test_plugin_fetch_error(self):
        exc = PluginFetchError(url="http://backend/plugins/active")
        assert exc.status_code == status.HTTP_502_BAD_GATEWAY
        assert exc.message == "Failed to fetch plugins"
        assert exc.details == {"url": "http://backend/plugins/active"}


class TestErrorResponse:
    """Test the JSON error envelope helpers"""

    def test_create_error_response(self):
        response = create_error_response(
            status_code=404,
            message="Plugin not found: theme",
            error_code=ErrorCode.PLUGIN_NOT_FOUND,
            details={"plugin": "theme"},
            path="/api/v1/plugins/theme",
        )
        body = json.loads(response.body)
        assert response.status_code == 404
        assert body["error"]["error_code"] == "PLUGIN_NOT_FOUND"
        assert body["error"]["type"] == "Not Found"
        assert body["error"]["details"] == {"plugin": "theme"}
        assert "request_id" not in body["error"]

    def test_error_type_fallback(self):
        assert get_error_type(418) == "Error"
        assert get_error_type(502) == "Bad Gateway"

    def test_http_error_code_mapping(self):
        assert get_http_error_code(404) == ErrorCode.RESOURCE_NOT_FOUND.value
        assert get_http_error_code(418) == ErrorCode.UNKNOWN_ERROR.value
