"""
Locale helpers

Pure functions used by the translation layer:
- Accept-Language parsing into preference-ordered tags
- Negotiation of a request locale against the locales plugins provide
- Language metadata (display name, text direction)
"""

from __future__ import annotations

# Base language codes whose scripts read right-to-left
RTL_LOCALES: frozenset[str] = frozenset({"ar", "he", "fa", "ur", "yi", "ku"})

# Display names for common locales; unknown codes fall back to the code itself
LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "fr": "Français",
    "de": "Deutsch",
    "es": "Español",
    "ar": "العربية",
    "zh": "中文",
    "ja": "日本語",
    "pt": "Português",
    "it": "Italiano",
    "ko": "한국어",
}


def base_language(locale: str) -> str:
    """"zh-Hant-TW" -> "zh"; also accepts "_" as separator."""
    return locale.replace("_", "-").split("-")[0].lower()


def is_rtl_locale(locale: str) -> bool:
    """Return True when the locale's base language is written right-to-left."""
    return base_language(locale) in RTL_LOCALES


def parse_accept_language(header: str) -> list[str]:
    """Return the tags of an Accept-Language header, most preferred first.

    Tags without a q-value weigh 1.0; malformed q-values also weigh 1.0,
    tags with q=0 are dropped.  Equal weights keep header order.

    Args:
        header: e.g. "fr-CA,fr;q=0.9,en;q=0.7".
    """
    weighted: list[tuple[float, str]] = []
    for part in (header or "").split(","):
        tag, _, params = part.strip().partition(";")
        tag = tag.strip()
        if not tag or tag == "*":
            continue
        weight = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                weight = float(params[2:])
            except ValueError:
                weight = 1.0
        if weight > 0:
            weighted.append((weight, tag))

    weighted.sort(key=lambda item: item[0], reverse=True)
    return [tag for _, tag in weighted]


def negotiate_locale(header: str, available: list[str], default: str | None = None) -> str | None:
    """Pick the best locale from ``available`` for an Accept-Language header.

    Each preferred tag is tried as an exact (case-insensitive) match, then by
    base language.  Falls back to ``default`` when nothing matches.
    """
    by_lower = {locale.lower(): locale for locale in available}
    by_base: dict[str, str] = {}
    for locale in available:
        by_base.setdefault(base_language(locale), locale)

    for tag in parse_accept_language(header):
        exact = by_lower.get(tag.lower())
        if exact is not None:
            return exact
        fallback = by_base.get(base_language(tag))
        if fallback is not None:
            return fallback
    return default


def get_language_info(locale: str) -> dict[str, str | bool]:
    """Return ``code``, ``name`` and ``is_rtl`` for a locale."""
    return {
        "code": locale,
        "name": LANGUAGE_NAMES.get(locale, LANGUAGE_NAMES.get(base_language(locale), locale)),
        "is_rtl": is_rtl_locale(locale),
    }
