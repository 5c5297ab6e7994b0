"""
Translation Manager

Holds the per-locale ``key -> string`` tables contributed by plugins.
Tables grow at plugin registration and shrink key-by-key at unregistration;
bind() wires a manager to a RegistryStore's registration events.

Lookup falls back from the current locale to the default locale and finally
to the key itself.  ``{{name}}`` tokens are replaced with the matching param.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from plugin_host.plugins.hooks import HOOK_PLUGIN_REGISTERED, HOOK_PLUGIN_UNREGISTERED

if TYPE_CHECKING:
    from plugin_host.plugins.manifest import PluginManifest
    from plugin_host.plugins.registry import RegistryStore

logger = logging.getLogger(__name__)

TranslationTable = Mapping[str, Mapping[str, str]]


class TranslationManager:
    """Locale state plus the merged translation table."""

    def __init__(
        self,
        default_locale: str = "en",
        locale: str | None = None,
        translations: TranslationTable | None = None,
    ) -> None:
        self.default_locale = default_locale
        self._locale = locale or default_locale
        self._table: TranslationTable = MappingProxyType({})
        if translations:
            self.add_translations(translations)

    # ── Locale ────────────────────────────────────────────────────────────────

    @property
    def locale(self) -> str:
        return self._locale

    def set_locale(self, locale: str) -> None:
        self._locale = locale
        logger.debug("Locale set to %s", locale)

    @property
    def available_locales(self) -> list[str]:
        return list(self._table)

    @property
    def table(self) -> TranslationTable:
        """Current table snapshot (read-only)."""
        return self._table

    # ── Mutation ──────────────────────────────────────────────────────────────

    def add_translations(self, delta: TranslationTable) -> None:
        """Shallow-merge each locale's keys; a key already present is overwritten."""
        table = {locale: dict(keys) for locale, keys in self._table.items()}
        for locale, keys in delta.items():
            current = table.setdefault(locale, {})
            for key, value in keys.items():
                if key in current and current[key] != value:
                    logger.debug("Translation %s.%s overwritten", locale, key)
                current[key] = value
        self._publish(table)

    def remove_translations(self, delta: TranslationTable) -> None:
        """Delete exactly the keys listed per locale; overwritten values are not restored."""
        table = {locale: dict(keys) for locale, keys in self._table.items()}
        for locale, keys in delta.items():
            current = table.get(locale)
            if current is None:
                continue
            for key in keys:
                current.pop(key, None)
            if not current:
                del table[locale]
        self._publish(table)

    def _publish(self, table: dict[str, dict[str, str]]) -> None:
        self._table = MappingProxyType({locale: MappingProxyType(keys) for locale, keys in table.items()})

    # ── Lookup ────────────────────────────────────────────────────────────────

    def lookup(self, key: str, params: Mapping[str, Any] | None = None, locale: str | None = None) -> str:
        """
        Translate a key.

        Args:
            key:    Translation key, e.g. "nav.home".
            params: Values for ``{{name}}`` tokens; every occurrence is replaced.
            locale: Locale to use instead of the current one.

        Returns:
            The translated string, or the key itself when no locale has it.
        """
        table = self._table
        value = table.get(locale or self._locale, {}).get(key)
        if value is None:
            value = table.get(self.default_locale, {}).get(key, key)
        if params:
            for name, replacement in params.items():
                value = value.replace(f"{{{{{name}}}}}", str(replacement))
        return value

    t = lookup

    # ── Registry wiring ───────────────────────────────────────────────────────

    def bind(self, store: RegistryStore) -> None:
        """Merge and withdraw plugin translations as plugins come and go."""
        store.subscribe(HOOK_PLUGIN_REGISTERED, self._on_registered)
        store.subscribe(HOOK_PLUGIN_UNREGISTERED, self._on_unregistered)

    def _on_registered(self, manifest: PluginManifest) -> None:
        if manifest.translations:
            self.add_translations(manifest.translations)

    def _on_unregistered(self, manifest: PluginManifest) -> None:
        if manifest.translations:
            self.remove_translations(manifest.translations)
