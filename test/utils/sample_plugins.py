"""
Sample plugin modules for loader and HTTP tests.

Each module-level object follows the plugin module contract: a ``manifest``
and a ``components`` bundle.  ``calls`` records lifecycle hook invocations.
"""

from types import SimpleNamespace

calls: list[str] = []


def footer_badge(label: str = "theme", **props):
    return f"<badge>{label}</badge>"


def page_component(params=None, locale=None, **props):
    return {"page": "about", "params": params or {}, "locale": locale}


def exploding_component(**props):
    raise RuntimeError("boom")


def _theme_init():
    calls.append("theme:init")


def _theme_destroy():
    calls.append("theme:destroy")


theme_plugin = SimpleNamespace(
    manifest={
        "name": "theme",
        "version": "1.2.0",
        "slots": [
            {"name": "sidebar.footer", "position": "prepend", "component": "FooterBadge", "priority": 100},
        ],
        "routes": [{"path": "/about/:section", "component": "AboutPage", "meta": {"title": "About"}}],
        "translations": {
            "en": {"theme.hello": "Hello {{name}}"},
            "fr": {"theme.hello": "Bonjour {{name}}"},
        },
        "onInit": _theme_init,
        "onDestroy": _theme_destroy,
    },
    components={"FooterBadge": footer_badge, "AboutPage": page_component},
)

analytics_plugin = {
    "manifest": {
        "name": "analytics",
        "slots": [{"name": "nav.actions", "position": "append", "component": "Tracker"}],
    },
    "components": {"Tracker": lambda **props: "<tracker/>"},
}

broken_plugin = {
    "manifest": {
        "name": "broken",
        "slots": [{"name": "nav.actions", "position": "append", "component": "Exploding"}],
    },
    "components": {"Exploding": exploding_component},
}

# Missing the required ``components`` field
incomplete_plugin = SimpleNamespace(manifest={"name": "incomplete"})
