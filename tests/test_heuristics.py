"""
Keyword heuristics — the fallback used whenever the model is unavailable.

Pure functions, no fixtures needed.
"""

import pytest

from smart_booking.domain import heuristics
from smart_booking.domain.results import (
    CHAT_ACTIONS,
    DURATIONS,
    MAX_SUGGESTIONS,
    MOODS,
    PRIORITIES,
    SENTIMENTS,
    TOPICS,
    EmailRequest,
)


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


def test_urgent_medical_message():
    result = heuristics.classify("This is urgent, I need a doctor appointment")
    assert result.sentiment == "urgent"
    assert result.priority == "high"
    assert result.topics == ("Medical consultation",)
    assert result.suggested_duration == 15


def test_long_strategy_message():
    text = "I would like to discuss our company strategy for next year. " * 5
    assert len(text) > 200
    result = heuristics.classify(text)
    assert result.suggested_duration == 60
    assert result.topics == ("Business consultation",)
    assert result.sentiment == "neutral"
    assert result.priority == "medium"


def test_medium_length_message_gets_thirty_minutes():
    text = "x" * 120
    assert heuristics.classify(text).suggested_duration == 30


def test_business_wins_over_technical():
    result = heuristics.classify("Meeting about a technical issue")
    assert result.topics == ("Business consultation",)


def test_technical_wins_over_medical():
    result = heuristics.classify("Bug in the health tracker")
    assert result.topics == ("Technical support",)


def test_no_keywords_means_general_consultation():
    result = heuristics.classify("Hello there")
    assert result.topics == ("General consultation",)


def test_keywords_are_case_insensitive():
    result = heuristics.classify("ASAP please")
    assert result.sentiment == "urgent"


def test_fallback_carries_fixed_suggestions_and_confidence():
    result = heuristics.classify("anything")
    assert result.suggestions == heuristics.FALLBACK_SUGGESTIONS
    assert result.confidence == 0.5


@pytest.mark.parametrize(
    "text, sentiment, priority, topics, duration",
    [
        ("URGENT: need help with a critical bug ASAP", "urgent", "high", ("Technical support",), 15),
        ("a" * 250, "neutral", "medium", ("General consultation",), 60),
    ],
)
def test_classify_whole_result(text, sentiment, priority, topics, duration):
    result = heuristics.classify(text)
    assert result.sentiment == sentiment
    assert result.priority == priority
    assert result.topics == topics
    assert result.suggested_duration == duration


@pytest.mark.parametrize("text", ["", " ", "🙂" * 300, "urgent" * 100, "\x00\n\t"])
def test_classify_is_total(text):
    result = heuristics.classify(text)
    assert result.sentiment in SENTIMENTS
    assert result.priority in PRIORITIES
    assert result.suggested_duration in DURATIONS
    assert result.topics and all(t in TOPICS for t in result.topics)
    assert len(result.suggestions) <= MAX_SUGGESTIONS


# ---------------------------------------------------------------------------
# fallback_reply
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text, action, mood",
    [
        ("I want to book a slot", "book_appointment", "excited"),
        ("Do you post on Twitter?", "show_social", "helpful"),
        ("Tell me about Claude", "explain_features", "professional"),
        ("I need support", None, "helpful"),
        ("Hello", None, "friendly"),
    ],
)
def test_reply_chosen_by_keyword(text, action, mood):
    reply = heuristics.fallback_reply(text)
    assert reply.action == action
    assert reply.mood == mood


def test_booking_keywords_take_precedence():
    reply = heuristics.fallback_reply("How do I schedule on Instagram?")
    assert reply.action == "book_appointment"


@pytest.mark.parametrize("text", ["", "book", "social", "claude", "help", "zzz"])
def test_every_reply_is_well_formed(text):
    reply = heuristics.fallback_reply(text)
    assert reply.content
    assert reply.mood in MOODS
    assert reply.action is None or reply.action in CHAT_ACTIONS
    assert 0 < len(reply.suggestions) <= MAX_SUGGESTIONS


# ---------------------------------------------------------------------------
# fallback_email
# ---------------------------------------------------------------------------


def _request(**overrides):
    fields = dict(name="Ann", date="2026-04-01", time="14:30", message="", analysis={})
    fields.update(overrides)
    return EmailRequest(**fields)


def test_email_has_booking_details():
    email = heuristics.fallback_email(_request(), "help@example.com")
    assert email.startswith("Dear Ann,")
    assert "- Date: 2026-04-01" in email
    assert "- Time: 14:30" in email
    assert "- Duration: 30 minutes" in email
    assert "- Type: General consultation" in email
    assert email.endswith("help@example.com")


def test_email_uses_analysis_when_present():
    analysis = {"suggestedDuration": 60, "topics": ["Technical support"], "priority": "high"}
    email = heuristics.fallback_email(_request(analysis=analysis, message="Server down"), "x@y.z")
    assert "- Duration: 60 minutes" in email
    assert "- Type: Technical support" in email
    assert 'Your message: "Server down"' in email
    assert "High Priority" in email


def test_email_tolerates_garbage_analysis():
    email = heuristics.fallback_email(_request(analysis={"topics": "nope"}), "x@y.z")
    assert "- Type: General consultation" in email
