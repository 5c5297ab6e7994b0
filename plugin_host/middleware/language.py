"""
Language Detection Middleware

Sets request.state.locale from:
  1. X-Language request header (exact match against known locales)
  2. Accept-Language header (quality-weighted, best-match)
  3. the translation manager's current locale (fallback)

Settings are read from ``app.state.settings`` (set by create_app), falling
back to the environment settings for applications built without it.  Known
locales are the configured supported languages plus every locale a
registered plugin has contributed translations for.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from plugin_host.config import settings as default_settings
from plugin_host.i18n.locale import negotiate_locale

if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import Request
    from starlette.responses import Response


class LanguageMiddleware(BaseHTTPMiddleware):
    """Detect the request locale and attach it to request.state.locale."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        config = getattr(request.app.state, "settings", None) or default_settings
        translations = getattr(request.app.state, "translations", None)
        fallback = translations.locale if translations is not None else config.default_locale
        known = list(dict.fromkeys([*config.supported_languages, *(translations.available_locales if translations else [])]))

        locale = request.headers.get("X-Language", "").strip()
        if locale not in known:
            locale = negotiate_locale(request.headers.get("Accept-Language", ""), known, fallback) or fallback
        request.state.locale = locale
        return await call_next(request)
