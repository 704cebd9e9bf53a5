"""
Structured results produced by the AI-backed operations.

Every result is built fresh for one request and never mutated.  The
camelCase dictionaries returned by ``to_dict()`` are the wire shape the
frontend expects and the shape stored verbatim next to bookings and
chat interactions.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

Sentiment = Literal["positive", "neutral", "urgent"]
Priority = Literal["high", "medium", "low"]
ChatAction = Literal["book_appointment", "show_social", "explain_features"]
Mood = Literal["helpful", "excited", "professional", "friendly"]

SENTIMENTS = ("positive", "neutral", "urgent")
PRIORITIES = ("high", "medium", "low")
DURATIONS = (15, 30, 45, 60, 90)
TOPICS = (
    "Business consultation",
    "Technical support",
    "Medical consultation",
    "General consultation",
)
CHAT_ACTIONS = ("book_appointment", "show_social", "explain_features")
MOODS = ("helpful", "excited", "professional", "friendly")
MAX_SUGGESTIONS = 3

T = TypeVar("T")


@dataclass(frozen=True)
class ClassificationResult:
    """Judgment about a booking message: how urgent, how long, what about."""
    sentiment: Sentiment
    suggested_duration: int          # minutes, one of DURATIONS
    topics: tuple[str, ...]          # canonical labels from TOPICS
    priority: Priority
    suggestions: tuple[str, ...]     # at most MAX_SUGGESTIONS
    confidence: float | None = None  # 0.0–1.0 when the model reports one

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "sentiment": self.sentiment,
            "suggestedDuration": self.suggested_duration,
            "topics": list(self.topics),
            "priority": self.priority,
            "suggestions": list(self.suggestions),
        }
        if self.confidence is not None:
            data["confidence"] = self.confidence
        return data


@dataclass(frozen=True)
class ChatReply:
    """One assistant turn in the booking chat."""
    content: str
    suggestions: tuple[str, ...]
    action: ChatAction | None
    mood: Mood

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "suggestions": list(self.suggestions),
            "action": self.action,
            "mood": self.mood,
        }


@dataclass(frozen=True)
class EmailRequest:
    """What the caller knows about an appointment when asking for an email."""
    name: str
    date: str
    time: str
    message: str = ""
    # Opaque analysis blob sent back by the frontend; may be partial.
    analysis: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Resolved(Generic[T]):
    """
    The value an AI-backed operation hands back to its caller.

    degraded is True whenever the local fallback, not the model, produced
    the value.  reason names the failure that forced the fallback.
    """
    value: T
    degraded: bool = False
    reason: str | None = None
    elapsed_ms: int = 0
