"""
AI-backed operations: chat reply, message analysis, email drafting.

Every operation follows the same four steps:
  1. Compose: build the prompt from the caller's fields
  2. Invoke:  one call to the language model, no retry
  3. Extract: pull the structured payload out of the raw reply
  4. Resolve: the model's value, or the local fallback marked degraded

Failures in 2 or 3 never reach the caller; they are logged and replaced
by the keyword heuristics (analysis, chat) or the static template (email).
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from smart_booking.domain import heuristics
from smart_booking.domain.errors import InvalidRequest, UsageLimitExceeded
from smart_booking.domain.extraction import (
    ExtractError,
    extract_chat_reply,
    extract_classification,
    extract_prose,
)
from smart_booking.domain.model import LanguageModel
from smart_booking.domain.results import (
    ChatReply,
    ClassificationResult,
    EmailRequest,
    Resolved,
)
from smart_booking.domain.store import BookingStore, SocialPost, StoreError
from smart_booking.prompts import load_prompt

log = logging.getLogger(__name__)

T = TypeVar("T")

HISTORY_TURNS = 3

DEFAULT_SOCIAL_POSTS = (
    SocialPost("Twitter", "Just launched our AI booking system! Reduced booking time by 80% #SmartBooking"),
    SocialPost("LinkedIn", "Case study: How AI transformed appointment scheduling for 500+ businesses"),
    SocialPost("Instagram", "Behind the scenes: Our Claude AI integration process"),
)


@dataclass
class AssistantConfig:
    model: LanguageModel
    store: BookingStore
    support_address: str = "support@smartbookingpro.com"
    chat_max_tokens: int = 1200
    analysis_max_tokens: int = 1000
    email_max_tokens: int = 1000


class Assistant:
    """
    Stateless between requests: every call builds its own prompt and result.

    Only chat is metered.  A call is reserved before the model is invoked
    and given back if the reply ends up degraded.
    """

    def __init__(self, config: AssistantConfig):
        self._cfg = config

    # -- operations ----------------------------------------------------------

    async def chat(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        user_email: str | None = None,
    ) -> Resolved[ChatReply]:
        _require_text(message)
        context = context or {}

        if user_email and not await self._reserve(user_email):
            log.info("chat user=%s rejected: daily limit reached", user_email)
            raise UsageLimitExceeded(user_email)

        prompt = await self._chat_prompt(message, context)
        result = await self._run(
            "chat",
            prompt,
            self._cfg.chat_max_tokens,
            extract_chat_reply,
            lambda: heuristics.fallback_reply(message),
        )

        if result.degraded:
            if user_email:
                await self._best_effort("release call", self._cfg.store.release_call(user_email))
            return result

        await self._best_effort(
            "log interaction",
            self._cfg.store.log_interaction(
                user_email, message, result.value.to_dict(), context, result.elapsed_ms,
            ),
        )
        return result

    async def analyze(self, message: str) -> Resolved[ClassificationResult]:
        _require_text(message)
        prompt = f"{load_prompt('analyze')}\n\nMessage: {json.dumps(message)}"
        return await self._run(
            "analyze",
            prompt,
            self._cfg.analysis_max_tokens,
            extract_classification,
            lambda: heuristics.classify(message),
        )

    async def draft_email(self, request: EmailRequest) -> Resolved[str]:
        analysis = request.analysis if isinstance(request.analysis, dict) else {}
        topics = analysis.get("topics")
        details = "\n".join([
            "Details:",
            f"- Name: {request.name}",
            f"- Date: {request.date}",
            f"- Time: {request.time}",
            f"- Duration: {analysis.get('suggestedDuration') or 30} minutes",
            f"- Priority: {analysis.get('priority') or 'medium'}",
            f"- Topics: {', '.join(map(str, topics)) if isinstance(topics, list) and topics else 'General consultation'}",
            f"- User message: {json.dumps(request.message)}",
            f"- Contact address for changes: {self._cfg.support_address}",
        ])
        return await self._run(
            "draft_email",
            f"{load_prompt('email')}\n\n{details}",
            self._cfg.email_max_tokens,
            extract_prose,
            lambda: heuristics.fallback_email(request, self._cfg.support_address),
        )

    # -- the shared state machine --------------------------------------------

    async def _run(
        self,
        operation: str,
        prompt: str,
        max_tokens: int,
        extract: Callable[[str], T],
        fallback: Callable[[], T],
    ) -> Resolved[T]:
        started = time.monotonic()
        try:
            raw = await self._cfg.model.complete(prompt, max_tokens=max_tokens)
            value = extract(raw)
        except ExtractError as exc:
            log.warning("%s: unusable model reply (%s: %s), using fallback",
                        operation, type(exc).__name__, exc)
            reason = type(exc).__name__
        except Exception as exc:
            log.warning("%s: model call failed (%s: %s), using fallback",
                        operation, type(exc).__name__, exc)
            reason = type(exc).__name__
        else:
            elapsed_ms = _elapsed_ms(started)
            log.info("%s: model reply accepted in %dms", operation, elapsed_ms)
            return Resolved(value, elapsed_ms=elapsed_ms)

        return Resolved(fallback(), degraded=True, reason=reason, elapsed_ms=_elapsed_ms(started))

    # -- helpers -------------------------------------------------------------

    async def _chat_prompt(self, message: str, context: dict[str, Any]) -> str:
        history = context.get("userHistory")
        recent = history[-HISTORY_TURNS:] if isinstance(history, list) else []

        posts = await self._social_posts()
        social = "\n".join(f"- {p.platform}: {json.dumps(p.text)}" for p in posts)

        return (
            f"{load_prompt('chat')}\n\n"
            f"Social media context:\n{social}\n\n"
            f"Current context:\n"
            f"- Chat history: {json.dumps(recent)}\n"
            f"- User message: {json.dumps(message)}"
        )

    async def _social_posts(self) -> tuple[SocialPost, ...]:
        try:
            posts = await self._cfg.store.recent_social_posts(limit=len(DEFAULT_SOCIAL_POSTS))
        except StoreError as exc:
            log.warning("social post cache unavailable: %s", exc)
            return DEFAULT_SOCIAL_POSTS
        return tuple(posts) or DEFAULT_SOCIAL_POSTS

    async def _reserve(self, user_email: str) -> bool:
        try:
            return await self._cfg.store.reserve_call(user_email)
        except StoreError as exc:
            # Usage tracking is best-effort; an unreachable store doesn't block chat.
            log.error("usage check failed for %s: %s", user_email, exc)
            return True

    @staticmethod
    async def _best_effort(what: str, operation: Awaitable[None]) -> None:
        try:
            await operation
        except StoreError as exc:
            log.error("Failed to %s: %s", what, exc)


def _require_text(message: str) -> None:
    if not isinstance(message, str) or not message.strip():
        raise InvalidRequest("Message is required")


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
