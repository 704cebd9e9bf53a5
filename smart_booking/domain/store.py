"""
BookingStore port: bookings and the per-user usage counters, plus analytics.

Bookings are the only authoritative data.  Usage counters and interaction
logs are best-effort: callers log and swallow StoreError for those.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class StoreError(Exception):
    """The relational store could not complete an operation."""


@dataclass
class NewBooking:
    name: str
    email: str
    appointment_date: str   # ISO: "2026-04-01"
    appointment_time: str   # "14:30"
    message: str = ""
    ai_analysis: dict[str, Any] | None = None
    email_content: str = ""


@dataclass
class Booking:
    booking_id: int
    name: str
    email: str
    appointment_date: str
    appointment_time: str
    message: str
    ai_analysis: dict[str, Any] | None
    email_content: str
    status: str             # "confirmed", "cancelled", ...
    email_status: str       # "pending", "sent", "failed"
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.booking_id,
            "name": self.name,
            "email": self.email,
            "appointment_date": self.appointment_date,
            "appointment_time": self.appointment_time,
            "message": self.message,
            "ai_analysis": self.ai_analysis,
            "email_content": self.email_content,
            "status": self.status,
            "email_status": self.email_status,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class UsageInfo:
    email: str
    calls_used: int
    calls_limit: int
    usage_date: str | None   # day the counter belongs to


@dataclass
class SocialPost:
    platform: str
    text: str


@dataclass
class BookingStats:
    total_bookings: int
    total_users: int
    total_chats: int
    today_bookings: int
    avg_response_time_ms: int
    weekly_bookings: list[tuple[str, int]] = field(default_factory=list)


class BookingStore(ABC):
    """
    Port: persistence for the booking service.

    Implementations must make reserve_call() a single atomic operation:
    two concurrent callers competing for the last allowed call must not
    both succeed.
    """

    # -- bookings ------------------------------------------------------------

    @abstractmethod
    async def create_booking(self, booking: NewBooking) -> Booking:
        """Insert a booking and return it with its id and timestamps."""
        ...

    @abstractmethod
    async def get_booking(self, booking_id: int) -> Booking | None:
        ...

    @abstractmethod
    async def set_email_status(self, booking_id: int, email_status: str) -> None:
        ...

    @abstractmethod
    async def list_bookings(
        self, limit: int = 50, offset: int = 0, status: str | None = None
    ) -> list[Booking]:
        """Newest first. status=None means every status."""
        ...

    @abstractmethod
    async def count_bookings(self, status: str | None = None) -> int:
        ...

    # -- users & usage -------------------------------------------------------

    @abstractmethod
    async def reserve_call(self, email: str) -> bool:
        """
        Consume one AI call from the user's daily allowance.

        Creates the user on first use.  Returns False, without changing
        anything, when today's limit is already reached.
        """
        ...

    @abstractmethod
    async def release_call(self, email: str) -> None:
        """Give back a call reserved today. Never goes below zero."""
        ...

    @abstractmethod
    async def get_usage(self, email: str) -> UsageInfo | None:
        ...

    @abstractmethod
    async def set_limit(self, email: str, limit: int) -> None:
        """Change a user's daily allowance, creating the user if needed. 0 blocks them."""
        ...

    @abstractmethod
    async def upsert_user(self, email: str, name: str | None = None) -> None:
        """Create the user or refresh their name and last activity."""
        ...

    # -- analytics -----------------------------------------------------------

    @abstractmethod
    async def log_interaction(
        self,
        user_email: str | None,
        message: str,
        response: dict[str, Any],
        context: dict[str, Any],
        response_time_ms: int,
    ) -> None:
        ...

    @abstractmethod
    async def get_stats(self) -> BookingStats:
        ...

    # -- social media cache --------------------------------------------------

    @abstractmethod
    async def cache_social_post(
        self,
        platform: str,
        post_data: dict[str, Any],
        engagement_data: dict[str, Any] | None = None,
    ) -> None:
        ...

    @abstractmethod
    async def recent_social_posts(self, limit: int = 3) -> list[SocialPost]:
        """Most recently fetched posts first."""
        ...

    # -- lifecycle -----------------------------------------------------------

    @abstractmethod
    async def ping(self) -> None:
        """Raise StoreError if the store is unreachable."""
        ...

    @abstractmethod
    async def close(self) -> None:
        ...
