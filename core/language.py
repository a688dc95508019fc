"""
Reply-language detection.
Rule-based: decides whether to answer in English or in romanized Hindi-English (Hinglish).
"""

import re

from core.text_cleaner import has_devanagari

ENGLISH = "english"
HINGLISH = "hinglish"

DEFAULT_THRESHOLD = 2.0
MARKER_WEIGHT = 1.0
CHAT_CUE_BONUS = 0.5

HINGLISH_MARKERS = (
    "hai", "hain", "tha", "thi", "the", "kya", "kyu", "kyun", "kyunki", "kisi", "kis",
    "kaun", "kab", "kaha", "kahaan", "kaise", "nahi", "nahin", "ka", "ki", "ke",
    "mein", "me", "mai", "mei", "hum", "ap", "aap", "tum", "kr", "kar", "karo", "karna",
    "chahiye", "bhi", "sirf", "jaldi", "kitna", "ho", "hoga", "hogaya", "krdo",
    "pls", "plz", "yaar", "shukriya", "dhanyavaad", "dhanyavad",
)

# Question words that count double.
DOUBLE_WEIGHT_MARKERS = frozenset({"kab", "kaha", "kaise"})

MARKER_WEIGHTS = {
    word: MARKER_WEIGHT * (2 if word in DOUBLE_WEIGHT_MARKERS else 1) for word in HINGLISH_MARKERS
}

_MARKER_RES = tuple(
    (re.compile(r"(?<!\S)" + re.escape(word) + r"(?!\S)"), weight) for word, weight in MARKER_WEIGHTS.items()
)
_CHAT_CUE_RE = re.compile("[:)(!?]{2,}|\\.{3,}|\U0001F602|\U0001F44D|\U0001F64F")


def hinglish_score(text: str) -> float:
    """Weighted marker-word hits plus a flat 0.5 when any chat cue is present."""
    lowered = (text or "").lower()
    score = sum(weight for pattern, weight in _MARKER_RES if pattern.search(lowered))
    if _CHAT_CUE_RE.search(lowered):
        score += CHAT_CUE_BONUS
    return score


def detect_mode(text: str, threshold: float = DEFAULT_THRESHOLD) -> str:
    """Return "hinglish" for Devanagari input or a score >= threshold, else "english"."""
    if has_devanagari(text):
        # Devanagari questions are answered in romanized Hinglish, not in Devanagari.
        return HINGLISH
    return HINGLISH if hinglish_score(text) >= threshold else ENGLISH
