"""Standard locale codes recognised by the host application."""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class LocaleInfo:
    """A supported locale.

    Attributes:
        code: Lowercase BCP 47 style code (e.g., "zh-tw").
        name: English name.
        native_name: Name in the language itself.
    """

    code: str
    name: str
    native_name: str


STANDARD_LOCALES: List[LocaleInfo] = [
    LocaleInfo("en", "English", "English"),
    LocaleInfo("af", "Afrikaans", "Afrikaans"),
    LocaleInfo("am", "Amharic", "አማርኛ"),
    LocaleInfo("ar", "Arabic", "العربية"),
    LocaleInfo("az", "Azerbaijani", "Azərbaycan"),
    LocaleInfo("be", "Belarusian", "Беларуская мова"),
    LocaleInfo("bg", "Bulgarian", "български език"),
    LocaleInfo("bn", "Bengali", "বাংলা"),
    LocaleInfo("ca", "Catalan", "català"),
    LocaleInfo("cs", "Czech", "čeština"),
    LocaleInfo("da", "Danish", "Dansk"),
    LocaleInfo("de", "German", "Deutsch"),
    LocaleInfo("dv", "Dhivehi", "ދިވެހި"),
    LocaleInfo("el", "Greek", "Ελληνικά"),
    LocaleInfo("en-gb", "English (GB)", "English (GB)"),
    LocaleInfo("eo", "Esperanto", "Esperanto"),
    LocaleInfo("es", "Spanish", "Español"),
    LocaleInfo("eu", "Basque", "Euskara"),
    LocaleInfo("fa", "Persian", "فارسی"),
    LocaleInfo("fi", "Finnish", "suomi"),
    LocaleInfo("fr", "French", "français"),
    LocaleInfo("ga", "Irish", "Gaeilge"),
    LocaleInfo("gl", "Galician", "Galego"),
    LocaleInfo("he", "Hebrew", "עברית"),
    LocaleInfo("hi", "Hindi", "हिन्दी"),
    LocaleInfo("hr", "Croatian", "Hrvatski"),
    LocaleInfo("hu", "Hungarian", "Magyar"),
    LocaleInfo("id", "Indonesian", "Bahasa Indonesia"),
    LocaleInfo("it", "Italian", "Italiano"),
    LocaleInfo("ja", "Japanese", "日本語"),
    LocaleInfo("ka", "Georgian", "ქართული"),
    LocaleInfo("kh", "Khmer", "ខេមរភាសា"),
    LocaleInfo("kn", "Kannada", "ಕನ್ನಡ"),
    LocaleInfo("ko", "Korean", "한국어"),
    LocaleInfo("ky", "Kyrgyz", "Кыргызча"),
    LocaleInfo("la", "Latin", "Latina"),
    LocaleInfo("lt", "Lithuanian", "Lietuvių"),
    LocaleInfo("lv", "Latvian", "Latviešu"),
    LocaleInfo("ml", "Malayalam", "മലയാളം"),
    LocaleInfo("ms", "Malay", "Bahasa Melayu"),
    LocaleInfo("nan-tw", "Taiwanese (Min Nan)", "閩南語"),
    LocaleInfo("ne", "Nepali", "नेपाली"),
    LocaleInfo("nl", "Dutch", "Nederlands"),
    LocaleInfo("nn", "Norwegian Nynorsk", "Nynorsk"),
    LocaleInfo("no", "Norwegian", "Norsk"),
    LocaleInfo("oc", "Occitan", "Occitan"),
    LocaleInfo("or", "Odia", "ଓଡ଼ିଆ"),
    LocaleInfo("pl", "Polish", "język polski"),
    LocaleInfo("pt", "Portuguese", "Português"),
    LocaleInfo("pt-br", "Brazilian Portuguese", "Português do Brasil"),
    LocaleInfo("ro", "Romanian", "Română"),
    LocaleInfo("ru", "Russian", "Русский"),
    LocaleInfo("sa", "Sanskrit", "संस्कृतम्"),
    LocaleInfo("si", "Sinhalese", "සිංහල"),
    LocaleInfo("sk", "Slovak", "Slovenčina"),
    LocaleInfo("sl", "Slovenian", "Slovenščina"),
    LocaleInfo("sq", "Albanian", "Shqip"),
    LocaleInfo("sr", "Serbian", "српски језик"),
    LocaleInfo("sv", "Swedish", "Svenska"),
    LocaleInfo("sw", "Swahili", "Kiswahili"),
    LocaleInfo("ta", "Tamil", "தமிழ்"),
    LocaleInfo("te", "Telugu", "తెలుగు"),
    LocaleInfo("th", "Thai", "ไทย"),
    LocaleInfo("tl", "Filipino (Tagalog)", "Tagalog"),
    LocaleInfo("tr", "Turkish", "Türkçe"),
    LocaleInfo("tt", "Tatar", "Татарча"),
    LocaleInfo("uk", "Ukrainian", "Українська"),
    LocaleInfo("ur", "Urdu", "اردو"),
    LocaleInfo("uz", "Uzbek", "oʻzbekcha"),
    LocaleInfo("vi", "Vietnamese", "Tiếng Việt"),
    LocaleInfo("zh", "Chinese (Simplified)", "简体中文"),
    LocaleInfo("zh-tw", "Chinese (Traditional)", "繁體中文"),
]

LOCALE_MAP: Dict[str, LocaleInfo] = {info.code: info for info in STANDARD_LOCALES}

# Legacy codes and script variants
LOCALE_ALIASES: Dict[str, str] = {
    "zh-cn": "zh",
    "zh-hans": "zh",
    "zh-hant": "zh-tw",
    "pt-pt": "pt",
}


def is_valid_locale(code: str) -> bool:
    return code.lower() in LOCALE_MAP


def get_locale_info(code: str) -> Optional[LocaleInfo]:
    return LOCALE_MAP.get(code.lower())


def normalize_locale_code(code: str) -> str:
    """Lowercase a code and use hyphens as separators (zh_CN -> zh-cn)."""
    return code.strip().lower().replace("_", "-")


def resolve_locale(code: str) -> str:
    """Normalize a code and map aliases to their standard code."""
    normalized = normalize_locale_code(code)
    return LOCALE_ALIASES.get(normalized, normalized)
