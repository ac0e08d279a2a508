"""
Text measurement helpers used by quota checks and chunk responses
"""

import re
from typing import Iterable

_WHITESPACE = re.compile(r"\s+")


def count_words(text: str) -> int:
    """Whitespace-delimited word count; blank text has zero words"""
    stripped = (text or "").strip()
    if not stripped:
        return 0
    return len(_WHITESPACE.split(stripped))


def count_words_in(texts: Iterable[str]) -> int:
    return sum(count_words(text) for text in texts)


def is_within_word_count_quota(word_count: int, max_words: int, tolerance_percent: float = 5.0) -> bool:
    """
    Check a word count against a nominal cap plus a percentage tolerance

    Args:
        word_count: Words in the incoming document
        max_words: Nominal per-document cap
        tolerance_percent: Allowed overshoot in percent of the cap

    Returns:
        True if word_count <= max_words * (1 + tolerance_percent / 100)
    """
    # Integer arithmetic keeps the boundary exact (1050 of 1000 at 5%)
    return word_count * 100 <= max_words * (100 + tolerance_percent)
