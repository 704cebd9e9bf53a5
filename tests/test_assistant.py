"""
Assistant operations against the scripted model and an in-memory store.

No network, no credentials, no LLM API calls.
"""

import json

import pytest

from smart_booking.adapters.simulator_model import SimulatorLanguageModel
from smart_booking.adapters.sqlite_store import SqliteBookingStore
from smart_booking.assistant import Assistant, AssistantConfig
from smart_booking.domain import heuristics
from smart_booking.domain.errors import InvalidRequest, UsageLimitExceeded
from smart_booking.domain.model import ModelError
from smart_booking.domain.results import EmailRequest
from smart_booking.domain.store import StoreError

USER = "ann@example.com"

GOOD_ANALYSIS = json.dumps({
    "sentiment": "positive",
    "suggestedDuration": 45,
    "topics": ["Business consultation"],
    "priority": "low",
    "suggestions": ["Bring your slides"],
})

GOOD_CHAT = json.dumps({
    "content": "Let's get you booked!",
    "suggestions": ["Tomorrow morning", "Next week"],
    "action": "book_appointment",
    "mood": "excited",
})


@pytest.fixture
def model():
    return SimulatorLanguageModel()


@pytest.fixture
def store():
    return SqliteBookingStore(":memory:", default_daily_limit=2)


@pytest.fixture
def assistant(model, store):
    return Assistant(AssistantConfig(model=model, store=store, support_address="help@example.com"))


class BrokenStore(SqliteBookingStore):
    """Every usage and analytics write fails; reads still work."""

    async def reserve_call(self, email):
        raise StoreError("disk full")

    async def log_interaction(self, *args, **kwargs):
        raise StoreError("disk full")

    async def recent_social_posts(self, limit=3):
        raise StoreError("disk full")


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_analyze_accepts_valid_reply(assistant, model):
    model.queue_reply("Here is my analysis: " + GOOD_ANALYSIS)
    result = await assistant.analyze("Let's talk strategy")
    assert not result.degraded
    assert result.value.sentiment == "positive"
    assert result.value.suggested_duration == 45
    assert model.max_tokens == [1000]


@pytest.mark.asyncio
async def test_analyze_partial_reply_falls_back_to_heuristics(assistant, model):
    message = "urgent: server problem"
    model.queue_reply('Sure! {"sentiment":"positive"}')
    result = await assistant.analyze(message)
    assert result.degraded
    assert result.reason == "SchemaViolation"
    assert result.value == heuristics.classify(message)


@pytest.mark.asyncio
async def test_analyze_outage_falls_back_to_heuristics(assistant, model):
    message = "Need a doctor appointment"
    model.queue_failure()
    result = await assistant.analyze(message)
    assert result.degraded
    assert result.reason == "ModelError"
    assert result.value == heuristics.classify(message)


@pytest.mark.asyncio
async def test_analyze_rejects_blank_message_without_calling_model(assistant, model):
    with pytest.raises(InvalidRequest):
        await assistant.analyze("   ")
    assert model.calls == 0


# ---------------------------------------------------------------------------
# chat
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_chat_success_is_logged_and_counted(assistant, model, store):
    model.queue_reply(GOOD_CHAT)
    result = await assistant.chat("I'd like to book", {"userHistory": []}, USER)
    assert not result.degraded
    assert result.value.action == "book_appointment"
    assert (await store.get_usage(USER)).calls_used == 1
    assert (await store.get_stats()).total_chats == 1


@pytest.mark.asyncio
async def test_degraded_chat_gives_the_call_back(assistant, model, store):
    model.queue_failure()
    result = await assistant.chat("Tell me about Claude", None, USER)
    assert result.degraded
    assert result.value == heuristics.fallback_reply("Tell me about Claude")
    assert (await store.get_usage(USER)).calls_used == 0
    assert (await store.get_stats()).total_chats == 0


@pytest.mark.asyncio
async def test_chat_over_limit_never_calls_model(assistant, model):
    model.queue_reply(GOOD_CHAT)
    model.queue_reply(GOOD_CHAT)
    await assistant.chat("hi", None, USER)
    await assistant.chat("hi", None, USER)

    with pytest.raises(UsageLimitExceeded) as info:
        await assistant.chat("hi", None, USER)
    assert info.value.email == USER
    assert model.calls == 2


@pytest.mark.asyncio
async def test_anonymous_chat_is_not_metered(assistant, model, store):
    model.queue_reply(GOOD_CHAT)
    result = await assistant.chat("hi")
    assert not result.degraded
    assert (await store.get_stats()).total_users == 0


@pytest.mark.asyncio
async def test_chat_prompt_carries_recent_history_and_posts(assistant, model, store):
    await store.cache_social_post("Twitter", {"text": "Calendar sync is live"})
    history = [{"role": "user", "content": f"turn {i}"} for i in range(5)]
    model.queue_reply(GOOD_CHAT)

    await assistant.chat("hi", {"userHistory": history})

    prompt = model.prompts[0]
    assert "Calendar sync is live" in prompt
    assert "turn 4" in prompt and "turn 2" in prompt
    assert "turn 1" not in prompt
    assert model.max_tokens == [1200]


@pytest.mark.asyncio
async def test_chat_without_cached_posts_uses_defaults(assistant, model):
    model.queue_reply(GOOD_CHAT)
    await assistant.chat("hi")
    assert "Reduced booking time by 80%" in model.prompts[0]


@pytest.mark.asyncio
async def test_chat_survives_broken_store(model):
    assistant = Assistant(AssistantConfig(model=model, store=BrokenStore(":memory:")))
    model.queue_reply(GOOD_CHAT)
    result = await assistant.chat("hi", None, USER)
    assert not result.degraded
    assert result.value.content == "Let's get you booked!"


@pytest.mark.asyncio
async def test_chat_rejects_blank_message(assistant, model, store):
    with pytest.raises(InvalidRequest):
        await assistant.chat("", None, USER)
    assert model.calls == 0
    assert await store.get_usage(USER) is None


# ---------------------------------------------------------------------------
# draft_email
# ---------------------------------------------------------------------------


def _email_request():
    return EmailRequest(
        name="Ann",
        date="2026-04-01",
        time="14:30",
        message="Quarterly review",
        analysis={"suggestedDuration": 60, "priority": "high", "topics": ["Business consultation"]},
    )


@pytest.mark.asyncio
async def test_draft_email_returns_model_text(assistant, model):
    model.queue_reply("\nDear Ann,\n\nSee you soon.\n")
    result = await assistant.draft_email(_email_request())
    assert not result.degraded
    assert result.value == "Dear Ann,\n\nSee you soon."
    prompt = model.prompts[0]
    assert "- Duration: 60 minutes" in prompt
    assert "help@example.com" in prompt


@pytest.mark.asyncio
async def test_draft_email_falls_back_to_template(assistant, model):
    model.queue_failure(ModelError("overloaded"))
    request = _email_request()
    result = await assistant.draft_email(request)
    assert result.degraded
    assert result.value == heuristics.fallback_email(request, "help@example.com")


@pytest.mark.asyncio
async def test_draft_email_blank_reply_falls_back(assistant, model):
    model.queue_reply("   ")
    result = await assistant.draft_email(_email_request())
    assert result.degraded
    assert result.reason == "NoPayloadFound"
