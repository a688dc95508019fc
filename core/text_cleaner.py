"""
Multilingual text normalizer.
Strips punctuation and English / Hinglish / Hindi stopwords so that chunks and
queries are embedded on their content words only.
"""

import re

EN_STOPWORDS = frozenset("""
a about above after again against all am an and any are aren't as at
be because been before being below between both but by
can't cannot could couldn't did didn't do does doesn't doing don't down during
each few for from further
had hadn't has hasn't have haven't having he he'd he'll he's her here here's hers herself him himself his how how's
i i'd i'll i'm i've if in into is isn't it it's its itself
let's
me more most mustn't my myself
no nor not of off on once only or other ought our ours ourselves out over own
same shan't she she'd she'll she's should shouldn't so some such
than that that's the their theirs them themselves then there there's these they they'd they'll they're they've this those through to too
under until up very
was wasn't we we'd we'll we're we've were weren't what what's when when's where where's which while who who's whom why why's with won't would wouldn't
you you'd you'll you're you've your yours yourself yourselves
""".split())

HINGLISH_STOPWORDS = frozenset([
    "hai", "hain", "ho", "hona", "hoga", "hogi", "honge", "hote", "hota", "thi", "tha", "the",
    "kya", "kyu", "kyun", "kyunki", "kisi", "kis", "kaun", "konsa", "kab", "kaha", "kahaan", "kaise",
    "nahi", "nahin", "na", "mat", "bas", "sirf", "bhi", "hi", "to", "tho", "ab", "abhi", "phir", "fir",
    "ye", "yeh", "vo", "woh", "aisa", "waisa", "jab", "tab", "agar", "lekin", "magar", "par", "per", "ya", "aur",
    "ka", "ki", "ke", "mein", "me", "mai", "mei", "mujhe", "mujhko", "hume", "humko", "tumhe", "aap", "ap", "hum", "tum",
    "se", "ko", "tak", "pe", "liye",
    "kr", "kar", "karo", "karna", "karke", "krke", "krna", "hogaya", "chahiye", "chahie", "krdo", "kardo",
    "de", "do", "lo", "le", "dena", "lena",
])

HINDI_STOPWORDS = frozenset([
    "है", "हैं", "हो", "होना", "होगा", "होगी", "होंगे", "होते", "होता", "था", "थी", "थे",
    "क्या", "क्यों", "क्योंकि", "किसी", "कौन", "कौनसा", "कब", "कहाँ", "कैसे",
    "नहीं", "मत", "बस", "सिर्फ", "भी", "ही", "तो", "अब", "अभी", "फिर",
    "यह", "ये", "वह", "वो", "जब", "तब", "अगर", "लेकिन", "मगर", "या", "और",
    "का", "की", "के", "में", "मे", "मुझे", "हमें", "तुम्हें", "आप", "हम", "तुम",
    "से", "को", "तक", "पर", "लिए", "चाहिए", "कर", "करो", "करना", "करके",
])

# Brand, product and place names that must survive even when they collide with a stopword.
PROTECTED_TOKENS = frozenset([
    "hca", "hari", "chand", "anand", "anil", "duke", "kansai", "special", "highlead", "merrow",
    "megasew", "amf", "reece", "delhi", "india", "solution", "solutions", "automation",
    "garment", "leather", "mattress",
])

STOPWORD_CONFIG = "EN+Hinglish+Hindi"

_DISALLOWED_CHARS_RE = re.compile(r"[^a-z0-9\u0900-\u097F\s]")
_DEVANAGARI_RE = re.compile(r"[\u0900-\u097F]")


def has_devanagari(text: str) -> bool:
    return bool(_DEVANAGARI_RE.search(text or ""))


def _keep(token: str) -> bool:
    if token in PROTECTED_TOKENS:
        return True
    return not (
        token in EN_STOPWORDS
        or token in HINGLISH_STOPWORDS
        or token in HINDI_STOPWORDS
    )


def clean(text: str) -> str:
    """
    Normalize text for embedding.

    Lower-cases, replaces anything outside [a-z0-9], whitespace and the
    Devanagari block with a space, then drops stopwords (protected tokens are
    always kept). The result may be empty.
    """
    if not text:
        return ""
    stripped = _DISALLOWED_CHARS_RE.sub(" ", text.lower())
    return " ".join(t for t in stripped.split() if _keep(t))


def clean_for_embedding(text: str) -> str:
    """Cleaned text, or the lower-cased raw text when cleaning leaves nothing."""
    return clean(text) or (text or "").lower()
