"""
Language support: script-based language detection and the language catalog.

Detection is a Unicode-block heuristic, not a statistical classifier. It only
distinguishes scripts, so every Latin-script document is reported as English.
"""

import re
from typing import Dict, List, Optional, Pattern, Tuple

from ..models.schemas import LanguageOption


# Checked in order; the first script found anywhere in the text wins.
SCRIPT_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("hi", re.compile("[ऀ-ॿ]")),  # Devanagari
    ("ar", re.compile("[؀-ۿ]")),  # Arabic
    ("zh", re.compile("[一-鿿]")),  # CJK unified ideographs
    ("ta", re.compile("[஀-௿]")),  # Tamil
    ("te", re.compile("[ఀ-౿]")),  # Telugu
    ("bn", re.compile("[ঀ-৿]")),  # Bengali
)

DEFAULT_LANGUAGE = "en"


LANGUAGE_CATALOG: Dict[str, str] = {
    "en": "English",
    "hi": "Hindi/हिंदी",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "zh": "Chinese",
    "ar": "Arabic",
    "bn": "Bengali/বাংলা",
    "ta": "Tamil/தமிழ்",
    "te": "Telugu/తెలుగు",
    "mr": "Marathi/मराठी",
    "gu": "Gujarati/ગુજરાતી",
    "kn": "Kannada/ಕನ್ನಡ",
    "ml": "Malayalam/മലയാളം",
    "pa": "Punjabi/ਪੰਜਾਬੀ",
    "ur": "Urdu/اردو",
}


def detect_language(text: Optional[str]) -> str:
    """
    Classify text into a language code by the scripts it contains.

    Args:
        text: Text to inspect

    Returns:
        Code of the first matching script in SCRIPT_PATTERNS, or "en"

    Example:
        >>> detect_language("Rent is due on the 1st. किराया")
        'hi'
    """
    if not text:
        return DEFAULT_LANGUAGE

    for code, pattern in SCRIPT_PATTERNS:
        if pattern.search(text):
            return code

    return DEFAULT_LANGUAGE


def language_display_name(code: str) -> str:
    """Return the display name for a code; unknown codes are their own name."""
    return LANGUAGE_CATALOG.get(code, code)


def available_languages() -> List[LanguageOption]:
    """List the catalog in its fixed order."""
    return [
        LanguageOption(code=code, display_name=name)
        for code, name in LANGUAGE_CATALOG.items()
    ]
