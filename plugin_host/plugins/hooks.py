"""
Registry Event Constants

Centralised list of registry events that collaborators (e.g. the translation
manager) can subscribe to via RegistryStore.subscribe().
Event names follow the `category.action` convention.
"""

from __future__ import annotations

# ── Registration lifecycle ────────────────────────────────────────────────────
HOOK_PLUGIN_REGISTERED = "plugin.registered"
HOOK_PLUGIN_UNREGISTERED = "plugin.unregistered"

# ── Master list ───────────────────────────────────────────────────────────────
ALL_HOOKS: list[str] = [
    HOOK_PLUGIN_REGISTERED,
    HOOK_PLUGIN_UNREGISTERED,
]
