"""
Slot Composition Renderer

Assembles the render tree of one slot from resolved contributions, the
slot's default content and position semantics:

    replace: if any, they alone form the core; default, before and after
             are discarded
    before: core content ahead of the default content
    after: core content behind the default content
    wrap: applied in reverse order around the core, so the first
          (highest priority) wrapper ends up outermost
    prepend: siblings rendered ahead of the container
    append: siblings rendered behind the container

Every contributed fragment is rendered inside an isolation boundary: if the
component raises, only that fragment is suppressed and the failure is logged.
A descriptor whose component key is absent from the bundle is skipped with a
warning.  Neither case raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from plugin_host.exceptions import FragmentRenderError, MissingComponentError, PluginHostError
from plugin_host.plugins.manifest import SlotPosition
from plugin_host.plugins.slots import resolve_slot

if TYPE_CHECKING:
    from collections.abc import Mapping

    from plugin_host.plugins.manifest import Renderable
    from plugin_host.plugins.registry import RegistryStore
    from plugin_host.plugins.slots import ResolvedSlot

logger = logging.getLogger(__name__)


# ── Render tree ───────────────────────────────────────────────────────────────


@dataclass
class Fragment:
    """Output of one contributed component."""

    key: str
    component: str
    plugin: str
    position: SlotPosition
    content: Any = None
    children: list[Node] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": "fragment",
            "key": self.key,
            "component": self.component,
            "plugin": self.plugin,
            "position": self.position.value,
            "content": self.content,
        }
        if self.children:
            data["children"] = [node.to_dict() for node in self.children]
        return data


@dataclass
class DefaultContent:
    """The slot's own content, passed through untouched."""

    content: Any

    def to_dict(self) -> dict[str, Any]:
        return {"type": "default", "content": self.content}


@dataclass
class Container:
    """Element holding the (possibly wrapped) core content of a slot."""

    slot: str
    tag: str = "div"
    css_class: str | None = None
    children: list[Node] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "container",
            "slot": self.slot,
            "tag": self.tag,
            "class": self.css_class,
            "children": [node.to_dict() for node in self.children],
        }


Node = Union[Fragment, DefaultContent, Container]


@dataclass
class SlotRender:
    """Final tree of a slot: prepend fragments, the container, append fragments."""

    slot: str
    nodes: list[Node] = field(default_factory=list)
    errors: list[PluginHostError] = field(default_factory=list)

    @property
    def container(self) -> Container:
        return next(node for node in self.nodes if isinstance(node, Container))

    def to_dict(self) -> dict[str, Any]:
        return {
            "slot": self.slot,
            "nodes": [node.to_dict() for node in self.nodes],
            "errors": [{"error_code": err.error_code.value, "message": err.message} for err in self.errors],
        }


# ── Composition ───────────────────────────────────────────────────────────────


def compose_slot(
    slot_name: str,
    resolved: list[ResolvedSlot],
    bundle: Mapping[str, Renderable],
    default_content: Any = None,
    extra_props: dict[str, Any] | None = None,
    *,
    container_tag: str = "div",
    css_class: str | None = None,
) -> SlotRender:
    """
    Compose the render tree of a slot.

    Args:
        slot_name:       Name of the slot being rendered.
        resolved:        Output of resolve_slot(), highest priority first.
        bundle:          Component bundle to look components up in.
        default_content: The slot's own content, or None.
        extra_props:     Props merged under each descriptor's own props.
        container_tag:   Tag name recorded on the container node.
        css_class:       Class recorded on the container node.

    Returns:
        SlotRender holding the tree and any isolated failures.
    """
    render = SlotRender(slot=slot_name)
    buckets: dict[SlotPosition, list[ResolvedSlot]] = {position: [] for position in SlotPosition}
    for entry in resolved:
        buckets[entry.descriptor.position].append(entry)

    def fragments(position: SlotPosition) -> list[Node]:
        nodes: list[Node] = []
        for index, entry in enumerate(buckets[position]):
            fragment = _render_fragment(render, entry, index, bundle, extra_props)
            if fragment is not None:
                nodes.append(fragment)
        return nodes

    core: list[Node]
    if buckets[SlotPosition.REPLACE]:
        core = fragments(SlotPosition.REPLACE)
    else:
        core = fragments(SlotPosition.BEFORE)
        if default_content is not None:
            core.append(DefaultContent(default_content))
        core.extend(fragments(SlotPosition.AFTER))

    wraps = buckets[SlotPosition.WRAP]
    for index in reversed(range(len(wraps))):
        wrapper = _render_fragment(render, wraps[index], index, bundle, extra_props, children=core)
        if wrapper is not None:
            core = [wrapper]

    render.nodes = [
        *fragments(SlotPosition.PREPEND),
        Container(slot=slot_name, tag=container_tag, css_class=css_class, children=core),
        *fragments(SlotPosition.APPEND),
    ]
    return render


def render_slot(
    store: RegistryStore,
    slot_name: str,
    default_content: Any = None,
    context: Any = None,
    extra_props: dict[str, Any] | None = None,
    **options: Any,
) -> SlotRender:
    """Resolve and compose a slot from a single registry snapshot."""
    state = store.state
    resolved = resolve_slot(state, slot_name, context)
    return compose_slot(slot_name, resolved, state.bundle, default_content, extra_props, **options)


def _render_fragment(
    render: SlotRender,
    entry: ResolvedSlot,
    index: int,
    bundle: Mapping[str, Renderable],
    extra_props: dict[str, Any] | None,
    children: list[Node] | None = None,
) -> Fragment | None:
    descriptor, plugin = entry
    component = bundle.get(descriptor.component)
    if component is None:
        error = MissingComponentError(descriptor.component, plugin=plugin, where=f"slot {descriptor.name}")
        logger.warning("%s", error.message)
        render.errors.append(error)
        return None

    props = {**(extra_props or {}), **descriptor.props}
    if children is not None:
        props["children"] = children

    try:
        content = component(**props)
    except Exception as exc:
        error = FragmentRenderError(descriptor.component, plugin, str(exc) or type(exc).__name__)
        logger.error("%s", error.message, exc_info=exc)
        render.errors.append(error)
        return None

    return Fragment(
        key=f"{descriptor.name}-{descriptor.component}-{index}",
        component=descriptor.component,
        plugin=plugin,
        position=descriptor.position,
        content=content,
        children=list(children) if children is not None else [],
    )
