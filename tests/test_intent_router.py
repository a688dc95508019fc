"""
Tests for small-talk routing and canned replies.
"""

import random
import re
from datetime import datetime

import pytest

from core.intent_router import (
    DEFAULT_RULES,
    ENGLISH_REPLIES,
    HINGLISH_REPLIES,
    Intent,
    IntentRouter,
    IntentRule,
    SmallTalkResponder,
    time_of_day_greeting,
)
from core.language import ENGLISH, HINGLISH


@pytest.fixture
def router():
    return IntentRouter()


class TestRouting:

    @pytest.mark.parametrize("text,intent", [
        ("hello", Intent.GREETING),
        ("Hey there 😊", Intent.GREETING),
        ("namaste ji", Intent.GREETING),
        ("Good morning!", Intent.MORNING),
        ("good afternoon team", Intent.AFTERNOON),
        ("Good Evening", Intent.EVENING),
        ("okay", Intent.ACKNOWLEDGMENT),
        ("hmmm...", Intent.ACKNOWLEDGMENT),
        ("got it 👍", Intent.ACKNOWLEDGMENT),
        ("thanks a lot", Intent.THANKS),
        ("Thank you!", Intent.THANKS),
        ("shukriya", Intent.THANKS),
        ("goodbye", Intent.FAREWELL),
        ("see you later", Intent.FAREWELL),
        ("take care", Intent.FAREWELL),
        ("who are you?", Intent.HELP),
        ("help", Intent.HELP),
        ("menu", Intent.HELP),
    ])
    def test_patterns(self, router, text, intent):
        assert router.route(text) == intent

    @pytest.mark.parametrize("text", ["hi!", "ok", "?!?", "yo 👋", "  a  "])
    def test_ultra_short_is_greeting(self, router, text):
        assert router.route(text) == Intent.GREETING

    def test_ultra_short_guard_wins_over_thanks(self, router):
        # "ty" matches the thanks pattern too, but only has 2 alphanumeric chars
        assert router.route("ty!") == Intent.GREETING

    @pytest.mark.parametrize("text", ["\u0915\u0940\u092e\u0924?", "\u0926\u093e\u092e \u0915\u094d\u092f\u093e"])
    def test_devanagari_vowel_signs_count_toward_length(self, router, text):
        assert router.route(text) is None

    @pytest.mark.parametrize("text", [
        "Which brands do you represent?",
        "hello, which brands do you represent?",
        "Does HCA help with automation?",
        "type of machines",
        "okay so what is the warranty period",
    ])
    def test_questions_fall_through(self, router, text):
        assert router.route(text) is None

    def test_rules_evaluated_in_priority_order(self):
        rules = [
            IntentRule(2, Intent.THANKS, re.compile(r"^thanks")),
            IntentRule(1, Intent.FAREWELL, re.compile(r"thanks.*bye")),
        ]
        router = IntentRouter(rules)
        assert [r.priority for r in router.rules] == [1, 2]
        assert router.route("thanks and bye") == Intent.FAREWELL
        assert router.route("thanks a lot") == Intent.THANKS

    def test_default_table_order(self):
        order = [r.intent for r in sorted(DEFAULT_RULES, key=lambda r: r.priority)]
        assert order == [
            Intent.GREETING, Intent.MORNING, Intent.AFTERNOON, Intent.EVENING,
            Intent.ACKNOWLEDGMENT, Intent.THANKS, Intent.FAREWELL, Intent.HELP,
        ]


class TestTimeOfDay:

    @pytest.mark.parametrize("hour,expected", [
        (0, "Good night"), (4, "Good night"),
        (5, "Good morning"), (11, "Good morning"),
        (12, "Good afternoon"), (16, "Good afternoon"),
        (17, "Good evening"), (20, "Good evening"),
        (21, "Hello"), (23, "Hello"),
    ])
    def test_buckets(self, hour, expected):
        assert time_of_day_greeting(hour) == expected


class TestResponder:

    def test_every_intent_has_replies_in_both_modes(self):
        for intent in Intent:
            assert ENGLISH_REPLIES[intent]
            assert HINGLISH_REPLIES[intent]

    def test_seeded_rng_is_reproducible(self):
        clock = lambda: datetime(2024, 1, 1, 10, 0)
        a = SmallTalkResponder(rng=random.Random(42), clock=clock)
        b = SmallTalkResponder(rng=random.Random(42), clock=clock)
        replies_a = [a.reply(Intent.GREETING, ENGLISH) for _ in range(10)]
        replies_b = [b.reply(Intent.GREETING, ENGLISH) for _ in range(10)]
        assert replies_a == replies_b

    def test_reply_comes_from_bank(self):
        responder = SmallTalkResponder(org_name="HCA", rng=random.Random(1))
        expected = {t.format(org="HCA", opening="") for t in HINGLISH_REPLIES[Intent.THANKS]}
        assert responder.reply(Intent.THANKS, HINGLISH) in expected

    def test_greeting_uses_clock_for_opening(self):
        responder = SmallTalkResponder(rng=random.Random(0), clock=lambda: datetime(2024, 1, 1, 18, 0))
        replies = {responder.reply(Intent.GREETING, ENGLISH) for _ in range(50)}
        assert any(r.startswith("Good evening!") for r in replies)
        assert not any("{opening}" in r or "{org}" in r for r in replies)

    def test_org_name_is_substituted(self):
        responder = SmallTalkResponder(org_name="Acme", rng=random.Random(3))
        assert "Acme" in responder.reply(Intent.HELP, ENGLISH)
