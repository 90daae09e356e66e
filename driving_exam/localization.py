"""
Localization Helpers

Four-locale text values and the resolver that turns an inbound language signal
(usually the ``Accept-Language`` header) into one of the supported locales.

Supported locales:
- UZL: Uzbek (Latin script), the primary locale and the fallback
- UZC: Uzbek (Cyrillic script)
- RU: Russian
- EN: English

Resolution never fails; anything unrecognized degrades to ``UZL``.

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional


class AcceptLanguage(enum.Enum):
    UZL = "uzl"
    UZC = "uzc"
    RU = "ru"
    EN = "en"

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def locale_code(self) -> str:
        return _LOCALE_CODES[self]

    @property
    def field_suffix(self) -> str:
        """Suffix of the per-locale model columns, e.g. ``text_uzl``."""
        return f"_{self.value}"

    def __str__(self) -> str:
        return self.value


DEFAULT_LANGUAGE = AcceptLanguage.UZL

_DISPLAY_NAMES = {
    AcceptLanguage.UZL: "O'zbek (Lotin)",
    AcceptLanguage.UZC: "Ўзбек (Кирилл)",
    AcceptLanguage.RU: "Русский",
    AcceptLanguage.EN: "English",
}

_LOCALE_CODES = {
    AcceptLanguage.UZL: "uz",
    AcceptLanguage.UZC: "uz_Cyrl",
    AcceptLanguage.RU: "ru",
    AcceptLanguage.EN: "en",
}

# Keys are normalized: lower case, "_" replaced by "-"
_ALIASES = {
    "uzl": AcceptLanguage.UZL,
    "uz-latn": AcceptLanguage.UZL,
    "uzbek": AcceptLanguage.UZL,
    "uzc": AcceptLanguage.UZC,
    "uz-cyrl": AcceptLanguage.UZC,
    "ru": AcceptLanguage.RU,
    "ru-ru": AcceptLanguage.RU,
    "rus": AcceptLanguage.RU,
    "russian": AcceptLanguage.RU,
    "en": AcceptLanguage.EN,
    "en-us": AcceptLanguage.EN,
    "eng": AcceptLanguage.EN,
    "english": AcceptLanguage.EN,
}


def _normalize(signal: str) -> str:
    return signal.strip().lower().replace("_", "-")


def _match(signal: Optional[str]) -> Optional[AcceptLanguage]:
    if signal is None or not signal.strip():
        return None

    language = _ALIASES.get(_normalize(signal))
    if language is not None:
        return language

    wanted = signal.strip().casefold()
    for candidate, display_name in _DISPLAY_NAMES.items():
        if display_name.casefold() == wanted:
            return candidate
    return None


def resolve_language(signal: Optional[str]) -> AcceptLanguage:
    """
    Resolve a raw language signal to a supported locale.

    Args:
        signal: Header-like string such as ``"ru-RU"``, ``"uz_Latn"`` or
            ``"English"``; may be None or blank

    Returns:
        The matching AcceptLanguage, or ``UZL`` when nothing matches
    """
    language = _match(signal)
    return language if language is not None else DEFAULT_LANGUAGE


def is_valid_language(signal: Optional[str]) -> bool:
    return _match(signal) is not None


@dataclass(frozen=True)
class LocalizedText:
    """Text in all four locales. Build it with ``LocalizedText.of``."""

    uzl: Optional[str]
    uzc: Optional[str]
    en: Optional[str]
    ru: Optional[str]

    @classmethod
    def of(
        cls,
        uzl: Optional[str],
        uzc: Optional[str] = None,
        en: Optional[str] = None,
        ru: Optional[str] = None,
    ) -> "LocalizedText":
        # Missing translations fall back to the primary slot, never to ""
        return cls(
            uzl=uzl,
            uzc=uzc if uzc is not None else uzl,
            en=en if en is not None else uzl,
            ru=ru if ru is not None else uzl,
        )

    @classmethod
    def from_fields(cls, instance: Any, field: str) -> "LocalizedText":
        """Read ``<field>_uzl`` .. ``<field>_ru`` columns from a model instance."""
        values = {
            language.value: getattr(instance, f"{field}{language.field_suffix}", None) or None
            for language in AcceptLanguage
        }
        return cls.of(**values)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Optional[str]]]) -> Optional["LocalizedText"]:
        if data is None:
            return None
        return cls.of(data.get("uzl"), data.get("uzc"), data.get("en"), data.get("ru"))

    @property
    def is_blank(self) -> bool:
        """True when no locale holds any text."""
        return not any(self.to_dict().values())

    def get(self, language: AcceptLanguage) -> Optional[str]:
        return getattr(self, language.value)

    def render(self, language: Optional[AcceptLanguage]):
        """Project one locale, or all four when ``language`` is None."""
        if language is None:
            return self.to_dict()
        return self.get(language)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"uzl": self.uzl, "uzc": self.uzc, "en": self.en, "ru": self.ru}
