"""
i18n (Internationalization) package

Plugin-extensible translation tables plus locale negotiation helpers.
"""

from .locale import (
    LANGUAGE_NAMES,
    RTL_LOCALES,
    get_language_info,
    is_rtl_locale,
    negotiate_locale,
    parse_accept_language,
)
from .translations import TranslationManager

__all__ = [
    "LANGUAGE_NAMES",
    "RTL_LOCALES",
    "TranslationManager",
    "get_language_info",
    "is_rtl_locale",
    "negotiate_locale",
    "parse_accept_language",
]
