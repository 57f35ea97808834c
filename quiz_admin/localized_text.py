"""
Locale helpers for LocalizedText values.
"""
from typing import Optional

from .errors import ValidationError
from .models import LocalizedText


SUPPORTED_LOCALES = ("en", "ar")
DEFAULT_LOCALE = "en"
RTL_LOCALES = ("ar",)


def normalize_locale(locale: Optional[str]) -> str:
    """Map any locale tag onto a supported locale, defaulting to English."""
    if not locale:
        return DEFAULT_LOCALE
    primary = locale.split("-")[0].split("_")[0].lower()
    return primary if primary in SUPPORTED_LOCALES else DEFAULT_LOCALE


def is_rtl(locale: str) -> bool:
    return normalize_locale(locale) in RTL_LOCALES


def localize(text: LocalizedText, locale: Optional[str]) -> str:
    """
    Return the string for the requested locale.

    Args:
        text: Localized value to read
        locale: Requested locale; 'ar' reads the Arabic field, anything else English

    Returns:
        The selected string, possibly empty
    """
    return text.get(normalize_locale(locale))


def localize_with_fallback(text: LocalizedText, locale: Optional[str]) -> str:
    """Like localize, but fall back to English when the Arabic field is empty."""
    value = localize(text, locale)
    return value or text.en


def with_locale(text: LocalizedText, locale: str, value: str) -> LocalizedText:
    """
    Replace one locale field, leaving the other untouched.

    Raises:
        ValidationError: If locale is not one of the supported locales
    """
    if locale not in SUPPORTED_LOCALES:
        raise ValidationError(f"Unsupported locale: {locale!r}")
    if locale == "ar":
        return LocalizedText(en=text.en, ar=value)
    return LocalizedText(en=value, ar=text.ar)
