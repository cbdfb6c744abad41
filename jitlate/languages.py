"""
Supported languages and utilities.

Locales are grouped into tiers by how well current LLMs translate them.
Right-to-left detection works on any code, listed or not.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, NamedTuple


class LanguageTier(str, Enum):
    """Expected translation quality."""

    HIGH = "high"              # Nuanced, accurate, context-aware
    GOOD = "good"              # Reliable, suitable for professional use
    FUNCTIONAL = "functional"  # Usable, review recommended


class SupportedLanguage(NamedTuple):
    code: str      # Locale code, e.g. "es_MX"
    language: str  # "Spanish"
    region: str    # "Mexico"
    tier: LanguageTier


def _tier(tier: LanguageTier, *rows: tuple[str, str, str]) -> list[SupportedLanguage]:
    return [SupportedLanguage(code, language, region, tier) for code, language, region in rows]


# =============================================================================
# Language Table
# =============================================================================


TIER_1_LANGUAGES: list[SupportedLanguage] = _tier(
    LanguageTier.HIGH,
    ("en_US", "English", "United States"),
    ("en_GB", "English", "United Kingdom"),
    ("de_DE", "German", "Germany"),
    ("es_ES", "Spanish", "Spain"),
    ("es_MX", "Spanish", "Mexico"),
    ("fr_FR", "French", "France"),
    ("it_IT", "Italian", "Italy"),
    ("ja_JP", "Japanese", "Japan"),
    ("pt_BR", "Portuguese", "Brazil"),
    ("pt_PT", "Portuguese", "Portugal"),
    ("zh_CN", "Chinese", "China (Simplified)"),
    ("zh_TW", "Chinese", "Taiwan (Traditional)"),
)

TIER_2_LANGUAGES: list[SupportedLanguage] = _tier(
    LanguageTier.GOOD,
    ("ar_SA", "Arabic", "Saudi Arabia"),
    ("bn_BD", "Bengali", "Bangladesh"),
    ("cs_CZ", "Czech", "Czech Republic"),
    ("da_DK", "Danish", "Denmark"),
    ("el_GR", "Greek", "Greece"),
    ("fi_FI", "Finnish", "Finland"),
    ("he_IL", "Hebrew", "Israel"),
    ("hi_IN", "Hindi", "India"),
    ("hu_HU", "Hungarian", "Hungary"),
    ("id_ID", "Indonesian", "Indonesia"),
    ("ko_KR", "Korean", "South Korea"),
    ("nl_NL", "Dutch", "Netherlands"),
    ("nb_NO", "Norwegian", "Norway"),
    ("pl_PL", "Polish", "Poland"),
    ("ro_RO", "Romanian", "Romania"),
    ("ru_RU", "Russian", "Russia"),
    ("sv_SE", "Swedish", "Sweden"),
    ("th_TH", "Thai", "Thailand"),
    ("tr_TR", "Turkish", "Turkey"),
    ("uk_UA", "Ukrainian", "Ukraine"),
    ("vi_VN", "Vietnamese", "Vietnam"),
)

TIER_3_LANGUAGES: list[SupportedLanguage] = _tier(
    LanguageTier.FUNCTIONAL,
    ("bg_BG", "Bulgarian", "Bulgaria"),
    ("ca_ES", "Catalan", "Spain"),
    ("fa_IR", "Persian", "Iran"),
    ("hr_HR", "Croatian", "Croatia"),
    ("lt_LT", "Lithuanian", "Lithuania"),
    ("lv_LV", "Latvian", "Latvia"),
    ("ms_MY", "Malay", "Malaysia"),
    ("sk_SK", "Slovak", "Slovakia"),
    ("sl_SI", "Slovenian", "Slovenia"),
    ("sr_RS", "Serbian", "Serbia"),
    ("sw_KE", "Swahili", "Kenya"),
    ("tl_PH", "Tagalog", "Philippines"),
    ("ur_PK", "Urdu", "Pakistan"),
)

SUPPORTED_LANGUAGES: list[SupportedLanguage] = [
    *TIER_1_LANGUAGES,
    *TIER_2_LANGUAGES,
    *TIER_3_LANGUAGES,
]

_BY_CODE: dict[str, SupportedLanguage] = {lang.code.lower(): lang for lang in SUPPORTED_LANGUAGES}

SUPPORTED_LOCALE_CODES: frozenset[str] = frozenset(lang.code for lang in SUPPORTED_LANGUAGES)

# Bare language code -> name, e.g. "es" -> "Spanish"
LANGUAGE_NAMES: dict[str, str] = {
    lang.code.split("_")[0]: lang.language for lang in SUPPORTED_LANGUAGES
}
LANGUAGE_NAMES.update({"en": "English", "no": "Norwegian", "ps": "Pashto", "sd": "Sindhi", "ug": "Uyghur"})


# Scripts written right-to-left
RTL_LANGUAGES: frozenset[str] = frozenset({"ar", "he", "fa", "ur", "ps", "sd", "ug"})


# Languages to pre-warm caches for
WARM_UP_LANGUAGES: list[str] = ["es", "fr", "de", "pt", "zh", "ja", "ko", "it", "nl", "pl", "ru"]


# =============================================================================
# Utilities
# =============================================================================


def normalize_locale(code: str) -> str:
    """Normalize a locale code: "es-mx" -> "es_MX", "FR" -> "fr"."""
    parts = code.strip().replace("-", "_").split("_", 1)
    if len(parts) == 1:
        return parts[0].lower()
    return f"{parts[0].lower()}_{parts[1].upper()}"


def base_language(code: str) -> str:
    """Language part of a locale code: "pt_BR" -> "pt"."""
    return normalize_locale(code).split("_")[0]


def normalize_language_code(code: str) -> str:
    """Normalize a language code or English language name to a locale code."""
    code = code.lower().strip()

    # Handle common variants
    variants = {name.lower(): base for base, name in LANGUAGE_NAMES.items()}
    variants.update({
        "farsi": "fa",
        "filipino": "tl",
        "portugese": "pt",
        "chinese simplified": "zh_CN",
        "chinese traditional": "zh_TW",
    })

    return normalize_locale(variants.get(code, code))


def is_language_supported(code: str) -> bool:
    """Check if a locale code ("en_US", "es-ES") is in the language table."""
    return normalize_locale(code).lower() in _BY_CODE


def get_language_info(code: str) -> SupportedLanguage | None:
    """Get language table entry by locale code."""
    return _BY_CODE.get(normalize_locale(code).lower())


def get_language_tier(code: str) -> LanguageTier | None:
    info = get_language_info(code)
    return info.tier if info else None


def get_languages_by_tier(tier: LanguageTier | str) -> list[SupportedLanguage]:
    tier = LanguageTier(tier)
    if tier is LanguageTier.HIGH:
        return TIER_1_LANGUAGES
    if tier is LanguageTier.GOOD:
        return TIER_2_LANGUAGES
    return TIER_3_LANGUAGES


def get_language_name(code: str) -> str:
    """Get human-readable language name ("es_MX" -> "Spanish (Mexico)")."""
    info = get_language_info(code)
    if info:
        return f"{info.language} ({info.region})"
    return LANGUAGE_NAMES.get(base_language(code), code)


def is_rtl(code: str) -> bool:
    """Check if language is right-to-left. Region suffixes are ignored."""
    return base_language(code) in RTL_LANGUAGES


def text_direction(code: str) -> Literal["ltr", "rtl"]:
    return "rtl" if is_rtl(code) else "ltr"
