"""
Internationalization Routes

GET /api/v1/i18n/locales          → current, default and available locales
PUT /api/v1/i18n/locale           → change the current locale
GET /api/v1/i18n/translate/{key}  → translate a key for the request locale;
                                    query parameters fill ``{{name}}`` tokens
"""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from plugin_host.dependencies import get_request_locale, get_translations
from plugin_host.i18n.locale import get_language_info
from plugin_host.i18n.translations import TranslationManager

router = APIRouter(tags=["Internationalization"])
logger = logging.getLogger(__name__)


class LocaleUpdate(BaseModel):
    locale: str = Field(min_length=1)


class LanguageInfo(BaseModel):
    code: str
    name: str
    is_rtl: bool


class LocalesResponse(BaseModel):
    current: str
    default: str
    available: list[LanguageInfo]


class TranslationResponse(BaseModel):
    key: str
    locale: str
    value: str


def _locales_response(translations: TranslationManager) -> LocalesResponse:
    return LocalesResponse(
        current=translations.locale,
        default=translations.default_locale,
        available=[LanguageInfo(**get_language_info(code)) for code in translations.available_locales],
    )


@router.get("/locales", response_model=LocalesResponse)
async def list_locales(translations: TranslationManager = Depends(get_translations)) -> LocalesResponse:
    """List the locales plugins have contributed translations for."""
    return _locales_response(translations)


@router.put("/locale", response_model=LocalesResponse)
async def set_locale(
    payload: LocaleUpdate,
    translations: TranslationManager = Depends(get_translations),
) -> LocalesResponse:
    """Change the current locale used when a request names none."""
    translations.set_locale(payload.locale)
    logger.info("Locale changed to %s", payload.locale)
    return _locales_response(translations)


@router.get("/translate/{key}", response_model=TranslationResponse)
async def translate(
    key: str,
    request: Request,
    locale: str = Depends(get_request_locale),
    translations: TranslationManager = Depends(get_translations),
) -> TranslationResponse:
    """Translate a key; falls back to the default locale, then to the key."""
    params = dict(request.query_params)
    return TranslationResponse(key=key, locale=locale, value=translations.lookup(key, params, locale=locale))
