"""Languages supported by the alignment backend."""

from __future__ import annotations

ENGLISH = "en"

SUPPORTED_LANGS: frozenset[str] = frozenset(
    {
        "af", "am", "an", "ar", "as", "az", "ba", "bg",
        "bn", "bpy", "bs", "ca", "cmn", "cs", "cy", "da",
        "de", "el", "en", "eo", "es", "et", "eu", "fa",
        "fi", "fr", "ga", "gd", "gn", "grc", "gu", "hak",
        "hi", "hr", "ht", "hu", "hy", "hyw", "ia", "id",
        "is", "it", "ja", "jbo", "ka", "kk", "kl", "kn",
        "ko", "kok", "ku", "ky", "la", "lfn", "lt", "lv",
        "mi", "mk", "ml", "mr", "ms", "mt", "my", "nb",
        "nci", "ne", "nl", "om", "or", "pa", "pap", "pl",
        "pt", "py", "quc", "ro", "ru", "sd", "shn", "si",
        "sk", "sl", "sq", "sr", "sv", "sw", "ta", "te",
        "tn", "tr", "tt", "ur", "uz", "vi", "yue", "zh",
    }
)


def normalize_lang(lang: str | None) -> str | None:
    raw = str(lang or "").strip().lower()
    return raw or None


def is_supported(lang: str | None) -> bool:
    return normalize_lang(lang) in SUPPORTED_LANGS


def is_english(lang: str | None) -> bool:
    return normalize_lang(lang) == ENGLISH
