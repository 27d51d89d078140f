# -*- coding: utf-8 -*-
"""
Internationalization (i18n) for TaskFlow.

Toasts, reminder notifications and relative date labels ("Today",
"Tomorrow") go through tr(). English and German are supported; the
initial language comes from the user preferences or the system locale.
"""

import locale
import logging
from PySide6.QtCore import QLocale

from app.i18n.translations import TRANSLATIONS

logger = logging.getLogger(__name__)

# Language code -> Qt locale used for weekday and month names
QT_LOCALES = {
    "en": QLocale.English,
    "de": QLocale.German,
}
DEFAULT_LANGUAGE = "en"

_current_language = DEFAULT_LANGUAGE


def detect_system_language() -> str:
    """Return 'de' when the system locale is German, 'en' otherwise."""
    system_locale = locale.getlocale()[0] or ""
    return "de" if system_locale.lower().startswith("de") else DEFAULT_LANGUAGE


def resolve_language(preference: str) -> str:
    """Map the 'language' preference ('auto', 'en', 'de') to a language code"""
    if preference == "auto":
        return detect_system_language()
    return preference if preference in QT_LOCALES else DEFAULT_LANGUAGE


def get_language() -> str:
    return _current_language


def set_language(lang: str) -> None:
    """Switch the UI language; unsupported codes fall back to English."""
    global _current_language
    _current_language = lang if lang in QT_LOCALES else DEFAULT_LANGUAGE
    QLocale.setDefault(QLocale(QT_LOCALES[_current_language]))
    logger.debug(f"Language set to '{_current_language}'")


def tr(key: str, **kwargs) -> str:
    """
    Translate a key into the current language.

    Missing keys fall back to English, then to the key itself.

    Args:
        key: Translation key (e.g., 'toast.save_failed')
        **kwargs: Values for the placeholders in the text
    """
    text = TRANSLATIONS[_current_language].get(key) or TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key)

    if kwargs:
        try:
            text = text.format(**kwargs)
        except (KeyError, ValueError):
            logger.warning(f"Could not format translation '{key}' with {kwargs}")

    return text
