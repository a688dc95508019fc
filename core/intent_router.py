"""
Small-talk intent routing.
Greetings, thanks, farewells, acknowledgments and help requests are answered
with canned replies instead of going through retrieval.
"""

import random
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, List, Optional, Pattern, Sequence

from core.language import HINGLISH

ULTRA_SHORT_MAX_LENGTH = 3


class Intent(str, Enum):
    GREETING = "greeting"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    ACKNOWLEDGMENT = "acknowledgment"
    THANKS = "thanks"
    FAREWELL = "farewell"
    HELP = "help"


@dataclass(frozen=True)
class IntentRule:
    priority: int
    intent: Intent
    pattern: Pattern


# Trailing punctuation / emoji only.
_TAIL = r"[\s\W_]*$"


def _rule(priority: int, intent: Intent, pattern: str) -> IntentRule:
    return IntentRule(priority, intent, re.compile(pattern, re.IGNORECASE))


DEFAULT_RULES: Sequence[IntentRule] = (
    _rule(10, Intent.GREETING,
          r"^(hi+|hello+|hey+|hlo|hola|namaste|namaskar|salaam|salam|yo)(\s+(there|ji|all|team|everyone))?" + _TAIL),
    _rule(20, Intent.MORNING, r"^good\s*morning\b"),
    _rule(21, Intent.AFTERNOON, r"^good\s*afternoon\b"),
    _rule(22, Intent.EVENING, r"^good\s*evening\b"),
    _rule(30, Intent.ACKNOWLEDGMENT,
          r"^(ok+|okay|okie|hmm+|sure|done|fine|alright|all\s*right|got\s*it|cool|noted|theek\s*hai|thik\s*hai|acc?ha)" + _TAIL),
    _rule(40, Intent.THANKS,
          r"^(thanks|thank\s*you|thank\s*u|thx|ty|much\s*appreciated|appreciated?|great\s*thanks|many\s*thanks"
          r"|shukriya|dhanyavaad|dhanyavad)\b"),
    _rule(50, Intent.FAREWELL, r"^(bye|goodbye|good\s*bye|see\s*ya|see\s*you|take\s*care|tc|catch\s*you\s*later)\b"),
    _rule(60, Intent.HELP, r"^(who\s*are\s*you|what\s*can\s*you\s*do|help(\s*me)?|menu|options)" + _TAIL),
)


def _alnum_length(text: str) -> int:
    # Letters, digits and combining marks (Devanagari vowel signs are category M).
    return sum(1 for ch in text if unicodedata.category(ch)[0] in "LNM")


class IntentRouter:
    """Ordered, priority-based matcher over a rule table."""

    def __init__(self, rules: Sequence[IntentRule] = DEFAULT_RULES):
        self._rules: List[IntentRule] = sorted(rules, key=lambda r: r.priority)

    @property
    def rules(self) -> List[IntentRule]:
        return list(self._rules)

    def route(self, text: str) -> Optional[Intent]:
        """Return the matched small-talk intent, or None to fall through to retrieval."""
        text = (text or "").strip()
        if _alnum_length(text) <= ULTRA_SHORT_MAX_LENGTH:
            return Intent.GREETING

        for rule in self._rules:
            if rule.pattern.search(text):
                return rule.intent
        return None


def time_of_day_greeting(hour: int) -> str:
    if hour < 5:
        return "Good night"
    if hour < 12:
        return "Good morning"
    if hour < 17:
        return "Good afternoon"
    if hour < 21:
        return "Good evening"
    return "Hello"


ENGLISH_REPLIES: Dict[Intent, List[str]] = {
    Intent.GREETING: [
        "{opening}! 👋 I'm {org}'s assistant. Ask me anything about {org} (brands, machines, spares, etc.).",
        "Hello! 👋 How can I help you with {org} today?",
        "Hi! 👋 I'm here for {org} queries. Try \"About {org}\", \"Which brands do you represent?\" or \"Spares info\".",
    ],
    Intent.MORNING: ["Good morning! ☀️ How can I help with {org} today?"],
    Intent.AFTERNOON: ["Good afternoon! 😊 What would you like to know about {org}?"],
    Intent.EVENING: ["Good evening! 🌙 Need help with {org} machines or spares?"],
    Intent.ACKNOWLEDGMENT: [
        "Alright! 👍 Let me know if you have another question about {org}.",
        "Sure. Anything else you'd like to know?",
    ],
    Intent.THANKS: [
        "You're welcome! 🙏 Anything else I can do for you about {org}?",
        "Happy to help! If you need more info, just ask. 🙂",
    ],
    Intent.FAREWELL: [
        "Take care! 👋 If you need {org} help later, I'm here.",
        "Bye! Have a great day. 👋",
    ],
    Intent.HELP: [
        "I answer from {org}'s knowledge base. You can ask: \"Which brands do we represent?\", "
        "\"What machines do we offer?\" or \"Which industries do we serve?\"",
    ],
}

HINGLISH_REPLIES: Dict[Intent, List[str]] = {
    Intent.GREETING: [
        "{opening}! 👋 {org} assistant bol raha hoon. {org} se related kuch bhi puchhiye (brands, machines, spares).",
        "Namaste! 👋 {org} ke baare mein madad chahiye?",
        "Hi! 👋 Aap {org} queries puchh sakte ho, jaise \"About {org}\" ya \"Spares info\".",
    ],
    Intent.MORNING: ["Good morning! ☀️ Aaj {org} mein kis cheez mein help chahiye?"],
    Intent.AFTERNOON: ["Good afternoon! 😊 {org} ke baare mein kya jaanna chahoge?"],
    Intent.EVENING: ["Good evening! 🌙 {org} machines ya spares par madad chahiye to batayein."],
    Intent.ACKNOWLEDGMENT: [
        "Theek hai! 👍 Aur kuch puchhna ho to bataiye.",
        "Accha ji. {org} ke baare mein aur kuch?",
    ],
    Intent.THANKS: [
        "Shukriya! 🙏 Aur kuch madad chahiye to pooch lijiye.",
        "Welcome ji! 🙂 Aur koi {org} info chahiye?",
    ],
    Intent.FAREWELL: [
        "Theek hai, milte hain! 👋 Jab chahein {org} help ke liye ping kar dijiyega.",
        "Bye! 👋 Din shubh rahe.",
    ],
    Intent.HELP: [
        "Main {org} ke knowledge base se answer karta hoon. Aap pooch sakte ho: \"Hum kin brands ko represent "
        "karte hain?\" ya \"Hum kaun-kaun se industries serve karte hain?\"",
    ],
}


class SmallTalkResponder:
    """Picks a canned reply per (intent, mode). Randomness and clock are injectable for tests."""

    def __init__(
        self,
        org_name: str = "HCA",
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._org = org_name
        self._rng = rng or random.Random()
        self._clock = clock

    def reply(self, intent: Intent, mode: str) -> str:
        bank = HINGLISH_REPLIES if mode == HINGLISH else ENGLISH_REPLIES
        options = bank.get(intent, bank[Intent.GREETING])
        template = self._rng.choice(options)
        return template.format(org=self._org, opening=time_of_day_greeting(self._clock().hour))
