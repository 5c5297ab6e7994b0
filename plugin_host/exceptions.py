"""
Custom Exception Classes for the Plugin Host

This module defines the error taxonomy of the plugin registry. None of these
exceptions is allowed to crash the host: the registry, lifecycle manager,
loader and composer catch them, log them and report them through result
objects. The HTTP layer maps them to a uniform JSON error envelope.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in API error responses."""

    # Manifest / registration
    MANIFEST_INVALID = "PLUGIN_MANIFEST_INVALID"
    PLUGIN_DUPLICATE = "PLUGIN_DUPLICATE_REGISTRATION"
    PLUGIN_NOT_FOUND = "PLUGIN_NOT_FOUND"
    PLUGIN_MODULE_INVALID = "PLUGIN_MODULE_INVALID"

    # Lifecycle
    INIT_HOOK_FAILED = "PLUGIN_INIT_HOOK_FAILED"
    DESTROY_HOOK_FAILED = "PLUGIN_DESTROY_HOOK_FAILED"

    # Composition
    COMPONENT_MISSING = "PLUGIN_COMPONENT_MISSING"
    FRAGMENT_RENDER_FAILED = "PLUGIN_FRAGMENT_RENDER_FAILED"

    # Loading
    FETCH_FAILED = "PLUGIN_FETCH_FAILED"

    # Generic
    VALIDATION_FAILED = "VALIDATION_FAILED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class PluginHostError(Exception):
    """Base exception class for all plugin host errors"""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Registration Exceptions
# ============================================================================


class ManifestValidationError(PluginHostError):
    """Raised when a plugin manifest does not match the manifest schema"""

    error_code = ErrorCode.MANIFEST_INVALID

    def __init__(self, message: str, plugin: str | None = None, errors: list[dict[str, Any]] | None = None):
        details: dict[str, Any] = {"errors": errors or []}
        if plugin:
            details["plugin"] = plugin
        super().__init__(message=message, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, details=details)


class DuplicateRegistrationError(PluginHostError):
    """Raised when a plugin name is already registered"""

    error_code = ErrorCode.PLUGIN_DUPLICATE

    def __init__(self, plugin: str):
        super().__init__(
            message=f"Plugin '{plugin}' is already registered",
            status_code=status.HTTP_409_CONFLICT,
            details={"plugin": plugin},
        )


class PluginNotFoundError(PluginHostError):
    """Raised when a plugin is not registered"""

    error_code = ErrorCode.PLUGIN_NOT_FOUND

    def __init__(self, plugin: str):
        super().__init__(
            message=f"Plugin not found: {plugin}",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"plugin": plugin},
        )


class PluginModuleError(PluginHostError):
    """Raised when a resolved plugin module lacks a required field"""

    error_code = ErrorCode.PLUGIN_MODULE_INVALID

    def __init__(self, message: str, field: str | None = None, source: str | None = None):
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if source:
            details["source"] = source
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


# ============================================================================
# Lifecycle Exceptions
# ============================================================================


class InitHookError(PluginHostError):
    """Raised when a plugin's on_init hook fails"""

    error_code = ErrorCode.INIT_HOOK_FAILED

    def __init__(self, plugin: str, reason: str):
        super().__init__(
            message=f"Error initializing plugin '{plugin}': {reason}",
            details={"plugin": plugin, "reason": reason},
        )


class DestroyHookError(PluginHostError):
    """Raised when a plugin's on_destroy hook fails"""

    error_code = ErrorCode.DESTROY_HOOK_FAILED

    def __init__(self, plugin: str, reason: str):
        super().__init__(
            message=f"Error destroying plugin '{plugin}': {reason}",
            details={"plugin": plugin, "reason": reason},
        )


# ============================================================================
# Composition Exceptions
# ============================================================================


class MissingComponentError(PluginHostError):
    """Raised when a slot or route references a component absent from the bundle"""

    error_code = ErrorCode.COMPONENT_MISSING

    def __init__(self, component: str, plugin: str | None = None, where: str | None = None):
        message = f"Component '{component}' not found"
        if where:
            message = f"{message} for {where}"
        details: dict[str, Any] = {"component": component}
        if plugin:
            details["plugin"] = plugin
        super().__init__(message=message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class FragmentRenderError(PluginHostError):
    """Raised when a contributed fragment fails to render"""

    error_code = ErrorCode.FRAGMENT_RENDER_FAILED

    def __init__(self, component: str, plugin: str, reason: str):
        super().__init__(
            message=f"Component '{component}' from plugin '{plugin}' failed to render: {reason}",
            details={"component": component, "plugin": plugin, "reason": reason},
        )


# ============================================================================
# Loading Exceptions
# ============================================================================


class PluginFetchError(PluginHostError):
    """Raised when the active plugin list or a remote module cannot be fetched"""

    error_code = ErrorCode.FETCH_FAILED

    def __init__(self, message: str = "Failed to fetch plugins", url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message=message, status_code=status.HTTP_502_BAD_GATEWAY, details=details)
