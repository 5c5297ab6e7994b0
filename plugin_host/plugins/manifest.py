"""
Plugin Manifest Schema

PluginManifest: declarative description of one plugin's contributions
(slots, routes, components, translations) and lifecycle hooks.

Manifests are validated with pydantic at the registration boundary, so a
malformed manifest is rejected with a structured ManifestValidationError
instead of failing later at render time.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from plugin_host.exceptions import ManifestValidationError

# A renderable is any callable invoked with keyword props.
Renderable = Callable[..., Any]
Bundle = dict[str, Renderable]
Hook = Callable[[], Any]


class SlotPosition(str, Enum):
    """How a contribution composes relative to a slot's default content."""

    APPEND = "append"
    PREPEND = "prepend"
    REPLACE = "replace"
    BEFORE = "before"
    AFTER = "after"
    WRAP = "wrap"


class SlotDescriptor(BaseModel):
    """
    One contribution of a plugin to a named slot.

    Attributes:
        name:      Slot name, e.g. "sidebar.footer".
        position:  One of the six SlotPosition values.
        component: Key of the renderable in the component bundle.
        target:    Reserved; carried but never interpreted.
        priority:  Higher values render earlier / more outward. Defaults to 0.
        condition: Optional predicate over the slot context.
        props:     Props passed to the component when rendered.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    position: SlotPosition
    component: str = Field(min_length=1)
    target: str | None = None
    priority: int = 0
    condition: Callable[[Any], Any] | None = None
    props: dict[str, Any] = Field(default_factory=dict)

    def matches(self, context: Any = None) -> bool:
        """Return True when the condition is absent or returns a truthy value."""
        if self.condition is None:
            return True
        return bool(self.condition(context))


class RouteDescriptor(BaseModel):
    """
    A page route contributed by a plugin.

    The route component is called with ``params`` (captured path segments)
    and ``locale`` keyword arguments.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(min_length=1)
    component: str = Field(min_length=1)
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("path")
    @classmethod
    def _leading_slash(cls, value: str) -> str:
        if not value.startswith("/"):
            return f"/{value}"
        return value

    @property
    def title(self) -> str | None:
        return self.meta.get("title")


class PluginManifest(BaseModel):
    """
    Declarative description of one plugin.

    ``version`` is informational only and never compared.  Hooks may be plain
    functions or coroutine functions; camelCase keys (``onInit``,
    ``onDestroy``) are accepted for manifests authored as plain mappings.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    version: str = "0.0.0"
    description: str | None = None
    author: str | None = None
    slots: list[SlotDescriptor] = Field(default_factory=list)
    routes: list[RouteDescriptor] = Field(default_factory=list)
    components: dict[str, Renderable] | None = None
    on_init: Hook | None = Field(default=None, validation_alias=AliasChoices("on_init", "onInit"))
    on_destroy: Hook | None = Field(default=None, validation_alias=AliasChoices("on_destroy", "onDestroy"))
    enabled: bool = True
    translations: dict[str, dict[str, str]] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            msg = "plugin name must not be blank"
            raise ValueError(msg)
        if value != value.strip():
            msg = "plugin name must not have surrounding whitespace"
            raise ValueError(msg)
        return value

    def component_keys(self) -> set[str]:
        """Bundle keys referenced by this manifest's slots and routes."""
        return {slot.component for slot in self.slots} | {route.component for route in self.routes}


def parse_manifest(data: PluginManifest | Mapping[str, Any]) -> PluginManifest:
    """
    Validate a manifest against the schema.

    Args:
        data: An already-built PluginManifest (returned unchanged) or a mapping.

    Returns:
        PluginManifest instance

    Raises:
        ManifestValidationError: If the manifest is malformed
    """
    if isinstance(data, PluginManifest):
        return data
    if not isinstance(data, Mapping):
        msg = f"Manifest must be a mapping, got {type(data).__name__}"
        raise ManifestValidationError(msg)

    try:
        return PluginManifest.model_validate(dict(data))
    except ValidationError as exc:
        name = data.get("name") if isinstance(data.get("name"), str) else None
        errors = [
            {"field": ".".join(str(loc) for loc in err["loc"]), "message": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        msg = f"Invalid manifest{f' for {name!r}' if name else ''}: {len(errors)} error(s)"
        raise ManifestValidationError(msg, plugin=name, errors=errors) from exc


def parse_bundle(data: Mapping[str, Any] | None, plugin: str | None = None) -> Bundle:
    """
    Validate a component bundle: string keys mapped to callables.

    Raises:
        ManifestValidationError: If a key is not a string or a value is not callable
    """
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        msg = f"Component bundle must be a mapping, got {type(data).__name__}"
        raise ManifestValidationError(msg, plugin=plugin)

    errors = []
    for key, value in data.items():
        if not isinstance(key, str) or not key:
            errors.append({"field": f"components.{key}", "message": "key must be a non-empty string", "type": "key"})
        elif not callable(value):
            errors.append({"field": f"components.{key}", "message": "component must be callable", "type": "callable"})
    if errors:
        msg = f"Invalid component bundle{f' for {plugin!r}' if plugin else ''}: {len(errors)} error(s)"
        raise ManifestValidationError(msg, plugin=plugin, errors=errors)
    return dict(data)
