"""i18n Routes - Message catalogs and the current locale.

Endpoints:
- GET /api/i18n/locales - Supported locales with display names
- GET /api/i18n/messages/{locale} - Full catalog (English for unknown locales)
- POST /api/i18n/translate - Resolve one key with parameters
- GET /api/i18n/locale - Current locale
- PUT /api/i18n/locale - Change the current locale
"""
from fastapi import APIRouter, HTTPException, Request, status
from models import Locale, LocaleUpdateRequest, TranslateRequest
from services.locale_state import get_locale_name
from services.translation import message_catalog_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/i18n", tags=["i18n"])


def _effective_locale(value) -> Locale:
    """Locale a catalog lookup will actually use."""
    try:
        return Locale(value)
    except ValueError:
        return Locale.EN


@router.get("/locales")
async def list_locales():
    return {
        "locales": [
            {"code": locale.value, "name": get_locale_name(locale)}
            for locale in Locale
        ]
    }


@router.get("/messages/{locale}")
async def get_messages(locale: str):
    return message_catalog_service.load_locale(locale)


@router.post("/translate")
async def translate(request: Request, body: TranslateRequest):
    """Resolve a dotted key. Unknown keys come back unchanged."""
    locale = body.locale or request.app.state.locale_state.get_current_locale()
    return {
        "key": body.key,
        "locale": _effective_locale(locale).value,
        "text": message_catalog_service.translate(locale, body.key, body.params),
    }


@router.get("/locale")
async def get_locale(request: Request):
    locale_state = request.app.state.locale_state
    locale = locale_state.get_current_locale()
    return {
        "locale": locale.value,
        "name": get_locale_name(locale),
        "document_language": locale_state.document_language,
    }


@router.put("/locale")
async def update_locale(request: Request, body: LocaleUpdateRequest):
    """Persist a new locale; subscribers are notified before this returns."""
    locale = request.app.state.locale_state.set_locale(body.locale)
    if locale is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported locale: {body.locale}"
        )
    logger.info(f"Locale changed to {locale.value}")
    return {"locale": locale.value, "name": get_locale_name(locale)}
