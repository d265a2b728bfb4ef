"""
PlantCare AI - Translation Cache
Memoizes translations per (text, target language) and sanity-checks the script
of what comes back. Inject one instance wherever cached translation is needed.
"""

import logging
import re
from typing import Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

# Unicode blocks for the scripts we expect per language
SCRIPT_RANGES = {
    "hi": re.compile(r"[\u0900-\u097F]"),  # Devanagari
    "mr": re.compile(r"[\u0900-\u097F]"),  # Devanagari
    "kn": re.compile(r"[\u0C80-\u0CFF]"),  # Kannada
    "ta": re.compile(r"[\u0B80-\u0BFF]"),  # Tamil
    "te": re.compile(r"[\u0C00-\u0C7F]"),  # Telugu
    "bn": re.compile(r"[\u0980-\u09FF]"),  # Bengali
    "gu": re.compile(r"[\u0A80-\u0AFF]"),  # Gujarati
    "ml": re.compile(r"[\u0D00-\u0D7F]"),  # Malayalam
    "pa": re.compile(r"[\u0A00-\u0A7F]"),  # Gurmukhi
    "ur": re.compile(r"[\u0600-\u06FF]"),  # Arabic
    "or": re.compile(r"[\u0B00-\u0B7F]"),  # Oriya
}

SHORT_TEXT_CHARS = 20
MIN_SCRIPT_RATIO = 0.2

TranslateFn = Callable[[List[str], str], List[str]]


def is_text_in_expected_script(text: str, lang_code: str) -> bool:
    """
    True if `text` plausibly uses the script of `lang_code`.

    Short strings (plant names, mostly) and languages without a known range
    always pass; otherwise more than 20% of non-space characters must match.
    """
    if not text or lang_code == "en":
        return True
    pattern = SCRIPT_RANGES.get(lang_code)
    if pattern is None:
        return True

    non_space = re.sub(r"\s", "", text)
    if len(non_space) < SHORT_TEXT_CHARS:
        return True
    return len(pattern.findall(text)) / len(non_space) > MIN_SCRIPT_RATIO


class TranslationCache:
    """Caches successful translations. Failures fall back to the source text, uncached."""

    def __init__(self, translate: TranslateFn):
        self._translate = translate
        self._entries: Dict[Tuple[str, str], str] = {}

    def get(self, text: str, target: str) -> Tuple[str, bool]:
        """Returns (translated text, script looks right)."""
        if not text or target == "en":
            return text, True

        key = (text, target)
        if key not in self._entries:
            try:
                translated = self._translate([text], target)
            except Exception as e:
                logger.error(f"Translation error: {e}")
                return text, True
            self._entries[key] = (translated[0] if translated else "") or text

        cached = self._entries[key]
        return cached, is_text_in_expected_script(cached, target)
