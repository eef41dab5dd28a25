"""Locale State - the process-wide current locale as an owned state cell.

The cell is created once at bootstrap and handed to whatever renders text
(app.state.locale_state for the API). Reads are lock-free; writes go through
set_locale(), which persists the preference, updates the document language
indicator and then notifies subscribers synchronously. Subscribers replace a
full page reload: each one re-renders only what depends on the locale.

Regional formatting (en-IN / hi-IN) is delegated to Babel's CLDR data.
"""
from typing import Callable, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from pathlib import Path
import json
import logging
import threading

from babel import dates as babel_dates
from babel import numbers as babel_numbers

from models import Locale

logger = logging.getLogger(__name__)

LOCALE_STORAGE_KEY = "locale"
DEFAULT_LOCALE = Locale.EN
SUPPORTED_LOCALES = frozenset(locale.value for locale in Locale)

LOCALE_NAMES = {
    Locale.EN: "English",
    Locale.HI: "हिंदी",
}

# Babel region tags for each supported locale
REGION_TAGS = {
    Locale.EN: "en_IN",
    Locale.HI: "hi_IN",
}

LocaleListener = Callable[[Locale], None]


# ============================================================================
# PREFERENCE STORES
# ============================================================================

class InMemoryPreferenceStore:
    """Preference store kept in process memory (tests, single session)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFilePreferenceStore:
    """Preference store backed by a single JSON document on disk.

    An unreadable or malformed file reads as "no preferences".
    """

    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable preference file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False)
        tmp_path.replace(self.path)


# ============================================================================
# LOCALE STATE
# ============================================================================

def _locale_from_language_tag(tag: Optional[str]) -> Optional[Locale]:
    """Map an environment language tag (hi-IN, hi_IN.UTF-8, ...) to a Locale."""
    if not tag:
        return None
    primary = tag.replace("_", "-").split("-")[0].split(".")[0].strip().lower()
    if primary == Locale.HI.value:
        return Locale.HI
    return None


class LocaleState:
    """Single-writer cell holding the current locale."""

    def __init__(self, store, environment_language: Optional[Callable[[], Optional[str]]] = None):
        self.store = store
        self._environment_language = environment_language or (lambda: None)
        self._listeners: List[LocaleListener] = []
        self._write_lock = threading.Lock()
        # Held across persist and fan-out so listeners see writes in store order
        self._notify_lock = threading.RLock()
        self.document_language: Optional[str] = None

    def get_current_locale(self) -> Locale:
        """Persisted preference, else environment language, else English.

        Only reads the store.
        """
        saved = self.store.get(LOCALE_STORAGE_KEY)
        if saved in SUPPORTED_LOCALES:
            return Locale(saved)

        detected = _locale_from_language_tag(self._environment_language())
        if detected is not None:
            return detected

        return DEFAULT_LOCALE

    def set_locale(self, locale) -> Optional[Locale]:
        """Persist a new locale and notify subscribers.

        Concurrent calls run one at a time: a write and its notifications
        finish before the next write lands. Returns the locale now in effect.
        Unsupported values are refused and leave the state untouched.
        """
        try:
            locale = Locale(locale)
        except ValueError:
            logger.warning(f"Refusing unsupported locale {locale!r}")
            return None

        with self._notify_lock:
            with self._write_lock:
                self.store.set(LOCALE_STORAGE_KEY, locale.value)
                self.document_language = locale.value
                listeners = list(self._listeners)

            for listener in listeners:
                try:
                    listener(locale)
                except Exception:
                    logger.exception(f"Locale listener {listener!r} failed")

        return locale

    def init_locale(self) -> Locale:
        locale = self.get_current_locale()
        self.document_language = locale.value
        return locale

    def subscribe(self, listener: LocaleListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        with self._write_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._write_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe


# ============================================================================
# FORMATTING
# ============================================================================

def _region_tag(locale) -> str:
    try:
        return REGION_TAGS[Locale(locale)]
    except ValueError:
        return REGION_TAGS[DEFAULT_LOCALE]


def get_locale_name(locale) -> str:
    try:
        return LOCALE_NAMES[Locale(locale)]
    except ValueError:
        return LOCALE_NAMES[DEFAULT_LOCALE]


def format_date(value: datetime, locale) -> str:
    """2-digit day, short month, full year and the region's short time."""
    tag = _region_tag(locale)
    day_part = babel_dates.format_date(value, format="dd MMM y", locale=tag)
    time_part = babel_dates.format_time(value, format="short", locale=tag)
    return f"{day_part}, {time_part}"


def format_number(value, locale) -> str:
    if isinstance(value, float):
        value = Decimal(str(value))
    return babel_numbers.format_decimal(value, locale=_region_tag(locale))
