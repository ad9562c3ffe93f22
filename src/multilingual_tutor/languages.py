"""
Language Catalog for Multilingual Tutor
Fixed set of supported languages with their speech locales
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class LanguageEntry:
    """A supported language"""
    code: str
    display_name: str
    voice_locale: str


LANGUAGES: Tuple[LanguageEntry, ...] = (
    LanguageEntry("en", "English", "en-US"),
    LanguageEntry("fr", "French", "fr-FR"),
    LanguageEntry("es", "Spanish", "es-ES"),
    LanguageEntry("de", "German", "de-DE"),
    LanguageEntry("it", "Italian", "it-IT"),
    LanguageEntry("pt", "Portuguese", "pt-PT"),
    LanguageEntry("ja", "Japanese", "ja-JP"),
    LanguageEntry("zh", "Chinese", "zh-CN"),
    LanguageEntry("ko", "Korean", "ko-KR"),
    LanguageEntry("ar", "Arabic", "ar-SA"),
    LanguageEntry("ru", "Russian", "ru-RU"),
    LanguageEntry("hi", "Hindi", "hi-IN"),
)

_BY_CODE: Dict[str, LanguageEntry] = {lang.code: lang for lang in LANGUAGES}


def get_language(code: str) -> Optional[LanguageEntry]:
    """Look up a catalog entry by its code"""
    return _BY_CODE.get(code)


def language_name(code: str, default: str) -> str:
    """Display name for a code, or ``default`` when the code is unknown"""
    lang = _BY_CODE.get(code)
    return lang.display_name if lang else default


def voice_locale(code: str) -> Optional[str]:
    lang = _BY_CODE.get(code)
    return lang.voice_locale if lang else None


def language_codes() -> List[str]:
    return [lang.code for lang in LANGUAGES]
