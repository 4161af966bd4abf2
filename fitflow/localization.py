# fitflow/localization.py
from typing import Optional

SUPPORTED_LOCALES = {
    "en": "English",
    "es": "Español",
    "fr": "Français",
    "de": "Deutsch",
    "it": "Italiano",
    "pt": "Português",
    "ru": "Русский",
    "zh": "中文",
    "ja": "日本語",
    "ko": "한국어",
}

DEFAULT_LOCALE = "en"


def resolve_locale(stored: Optional[str], accept_language: Optional[str] = None) -> str:
    """Stored preference first, then the browser's primary language, then English."""
    stored = (stored or "").strip().lower()
    if stored in SUPPORTED_LOCALES:
        return stored

    # "fr-CA,fr;q=0.9,en;q=0.8" -> "fr"
    first = (accept_language or "").split(",")[0].strip()
    primary = first.split(";")[0].split("-")[0].strip().lower()
    if primary in SUPPORTED_LOCALES:
        return primary

    return DEFAULT_LOCALE
