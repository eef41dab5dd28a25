"""Translation resolver and message catalog loading.

resolve() is the pure lookup used everywhere text is rendered: it walks a
nested catalog along a dotted key path and interpolates {name} placeholders.
It never raises; a key that cannot be resolved to a string comes back
unchanged so the gap is visible on screen.

MessageCatalogService owns the on-disk catalogs (messages/<locale>.json) and
caches them per locale, falling back to English when a catalog is unreadable.
"""
from typing import Any, Dict, Mapping, Optional
from pathlib import Path
import json
import logging
import re

from models import Locale

logger = logging.getLogger(__name__)

MESSAGES_DIR = Path(__file__).resolve().parent.parent / "messages"
FALLBACK_LOCALE = Locale.EN

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def resolve(
    catalog: Optional[Mapping[str, Any]],
    key_path: str,
    params: Optional[Mapping[str, Any]] = None,
) -> str:
    """Resolve a dotted key path against a nested catalog.

    Returns key_path itself when any segment is missing, an intermediate node
    is not a mapping, or the final value is not a string.
    """
    if not isinstance(key_path, str):
        return str(key_path)

    value: Any = catalog
    for segment in key_path.split("."):
        if isinstance(value, Mapping):
            value = value.get(segment)
        else:
            return key_path

    if not isinstance(value, str):
        return key_path

    if params:
        return _interpolate(value, params)
    return value


def _interpolate(template: str, params: Mapping[str, Any]) -> str:
    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in params or params[name] is None:
            return match.group(0)
        rendered = str(params[name])
        # An empty rendering keeps the placeholder visible
        return rendered or match.group(0)

    return _PLACEHOLDER.sub(_replace, template)


class MessageCatalogService:
    """Loads and caches message catalogs, one JSON document per locale."""

    def __init__(self, messages_dir: Path = MESSAGES_DIR):
        self.messages_dir = Path(messages_dir)
        self._catalogs: Dict[Locale, Dict[str, Any]] = {}

    def load_locale(self, locale) -> Dict[str, Any]:
        """Return the catalog for a locale, loading it on first use.

        Unsupported locales and unreadable catalogs fall back to English;
        if English itself cannot be read an empty catalog is returned.
        """
        try:
            locale = Locale(locale)
        except ValueError:
            logger.warning(f"Unsupported locale {locale!r}, using {FALLBACK_LOCALE.value}")
            locale = FALLBACK_LOCALE

        if locale in self._catalogs:
            return self._catalogs[locale]

        path = self.messages_dir / f"{locale.value}.json"
        try:
            with open(path, encoding="utf-8") as fh:
                catalog = json.load(fh)
            if not isinstance(catalog, dict):
                raise ValueError(f"catalog root must be an object, got {type(catalog).__name__}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load locale {locale.value}: {e}")
            if locale != FALLBACK_LOCALE:
                return self.load_locale(FALLBACK_LOCALE)
            return {}

        self._catalogs[locale] = catalog
        return catalog

    def translate(self, locale, key_path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        return resolve(self.load_locale(locale), key_path, params)

    def clear_cache(self) -> None:
        self._catalogs.clear()


# Singleton instance
message_catalog_service = MessageCatalogService()
