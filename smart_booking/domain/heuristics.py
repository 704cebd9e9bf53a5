"""
Deterministic keyword heuristics used whenever the language model is unavailable.

No I/O and no failure path: every function here returns a fully populated
value for any input, so the AI-backed operations can always fall back to it.
"""

from typing import Any

from smart_booking.domain.results import ChatReply, ClassificationResult, EmailRequest

_URGENT_WORDS = ("urgent", "asap", "emergency", "critical", "immediately")

# Checked in order; the first category with a hit wins.
_TOPIC_RULES = (
    ("Business consultation", ("meeting", "consultation", "strategy", "interview")),
    ("Technical support", ("support", "technical", "issue", "problem", "bug")),
    ("Medical consultation", ("medical", "health", "doctor", "appointment")),
)
_DEFAULT_TOPIC = "General consultation"

LONG_MESSAGE_CHARS = 200
SHORT_MESSAGE_CHARS = 50

FALLBACK_SUGGESTIONS = (
    "Standard booking recommended",
    "Consider morning slots",
    "Prepare questions in advance",
)
FALLBACK_CONFIDENCE = 0.5


def _contains_any(lower: str, words: tuple[str, ...]) -> bool:
    return any(w in lower for w in words)


def _duration_for(text: str) -> int:
    if len(text) > LONG_MESSAGE_CHARS:
        return 60
    if len(text) < SHORT_MESSAGE_CHARS:
        return 15
    return 30


def classify(text: str) -> ClassificationResult:
    """Keyword-based stand-in for the model's message analysis."""
    text = text or ""
    lower = text.lower()

    urgent = _contains_any(lower, _URGENT_WORDS)

    topic = _DEFAULT_TOPIC
    for label, words in _TOPIC_RULES:
        if _contains_any(lower, words):
            topic = label
            break

    return ClassificationResult(
        sentiment="urgent" if urgent else "neutral",
        suggested_duration=_duration_for(text),
        topics=(topic,),
        priority="high" if urgent else "medium",
        suggestions=FALLBACK_SUGGESTIONS,
        confidence=FALLBACK_CONFIDENCE,
    )


# -- chat ----------------------------------------------------------------------

_BOOKING_WORDS = ("book", "appointment", "schedule")
_SOCIAL_WORDS = ("social", "twitter", "instagram", "linkedin")
_FEATURE_WORDS = ("ai", "claude", "how", "features")
_HELP_WORDS = ("help", "support", "question")

_BOOKING_REPLY = ChatReply(
    content=(
        "I'd be happy to help you book an appointment! Our AI-powered system "
        "makes scheduling fast and easy. According to our recent social media "
        "posts, we've reduced booking time by 80%! Ready to experience it yourself?"
    ),
    suggestions=("Yes, let's book!", "Tell me more about AI booking", "What services do you offer?"),
    action="book_appointment",
    mood="excited",
)

_SOCIAL_REPLY = ChatReply(
    content=(
        "Great question about our social media! We're active across platforms "
        "sharing our AI booking innovations:\n\n"
        "Twitter: latest features and quick tips about smart scheduling\n"
        "LinkedIn: case studies showing 80% time reduction for clients\n"
        "Instagram: behind-the-scenes of our Claude AI development\n\n"
        "What caught your attention?"
    ),
    suggestions=("Book an appointment", "Learn about AI features", "Tell me about the 80% improvement"),
    action="show_social",
    mood="helpful",
)

_FEATURE_REPLY = ChatReply(
    content=(
        "Our system uses Claude AI! Here's what makes Smart Booking Pro special:\n\n"
        "- Intelligent message analysis\n"
        "- Smart duration suggestions based on content\n"
        "- Personalized email generation\n"
        "- Optimal time slot recommendations\n"
        "- Real-time analytics and insights\n\n"
        "This has reduced booking time by 80% for our users. Want to try it yourself?"
    ),
    suggestions=("Book an appointment", "See it in action", "What services do you offer?"),
    action="explain_features",
    mood="professional",
)

_HELP_REPLY = ChatReply(
    content=(
        "I'm here to help! As your Smart Booking assistant, I can:\n\n"
        "- Book appointments through natural conversation\n"
        "- Answer questions about our services\n"
        "- Explain our AI features\n"
        "- Handle all your scheduling needs\n\n"
        "What would you like to know?"
    ),
    suggestions=("Book an appointment", "Learn about services", "How does AI booking work?"),
    action=None,
    mood="helpful",
)

_DEFAULT_REPLY = ChatReply(
    content=(
        "Hello! I'm your Smart Booking assistant. I make appointment scheduling "
        "easy and fast: I can chat naturally to understand your needs, find the "
        "right appointment slot, and send you a confirmation email.\n\n"
        "What can I help you with today?"
    ),
    suggestions=("Book an appointment", "Learn about AI features", "View our services"),
    action=None,
    mood="friendly",
)

_REPLY_RULES = (
    (_BOOKING_WORDS, _BOOKING_REPLY),
    (_SOCIAL_WORDS, _SOCIAL_REPLY),
    (_FEATURE_WORDS, _FEATURE_REPLY),
    (_HELP_WORDS, _HELP_REPLY),
)

def fallback_reply(text: str) -> ChatReply:
    """Canned chat reply chosen by keyword, used when the model can't answer."""
    lower = (text or "").lower()
    for words, reply in _REPLY_RULES:
        if _contains_any(lower, words):
            return reply
    return _DEFAULT_REPLY


# -- email ---------------------------------------------------------------------


def _analysis_duration(analysis: dict[str, Any]) -> Any:
    return analysis.get("suggestedDuration") or 30


def _analysis_topics(analysis: dict[str, Any]) -> str:
    topics = analysis.get("topics")
    if isinstance(topics, (list, tuple)) and topics:
        return ", ".join(str(t) for t in topics)
    return "General consultation"


def fallback_email(request: EmailRequest, support_address: str) -> str:
    """Plain-text confirmation email filled in from the booking details."""
    analysis = request.analysis if isinstance(request.analysis, dict) else {}

    lines = [
        f"Dear {request.name},",
        "",
        "Thank you for booking your appointment with Smart Booking Pro!",
        "",
        "Appointment Details:",
        f"- Date: {request.date}",
        f"- Time: {request.time}",
        f"- Duration: {_analysis_duration(analysis)} minutes",
        f"- Type: {_analysis_topics(analysis)}",
    ]
    if request.message:
        lines += ["", f'Your message: "{request.message}"']
    if analysis.get("priority") == "high":
        lines += ["", "High Priority: we have noted the urgency of your request."]
    lines += [
        "",
        "We look forward to meeting with you! If you need to reschedule or have "
        "questions, please contact us at least 24 hours in advance.",
        "",
        "Best regards,",
        "The Smart Booking Pro Team",
        support_address,
    ]
    return "\n".join(lines)
