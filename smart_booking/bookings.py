"""
Booking creation: persist the booking, then email the confirmation.

The two steps are reported independently.  Once the row is committed the
booking exists, whatever happens to the email; a delivery failure is
recorded on the row (email_status = "failed") and returned to the caller
instead of failing the whole request.
"""

import logging
from dataclasses import dataclass, replace

from smart_booking.communication.ports import ConfirmationMailer, MailerError
from smart_booking.communication.templates import render_confirmation
from smart_booking.domain import heuristics
from smart_booking.domain.errors import InvalidRequest
from smart_booking.domain.results import EmailRequest
from smart_booking.domain.store import Booking, BookingStore, NewBooking, StoreError

log = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "appointment_date", "appointment_time")


@dataclass
class BookingOutcome:
    booking: Booking
    email_sent: bool
    email_error: str | None = None


class BookingService:

    def __init__(
        self,
        store: BookingStore,
        mailer: ConfirmationMailer,
        sender_name: str = "Smart Booking Pro",
        support_address: str = "support@smartbookingpro.com",
    ):
        self._store = store
        self._mailer = mailer
        self._sender_name = sender_name
        self._support_address = support_address

    async def create(self, request: NewBooking) -> BookingOutcome:
        """Validate, store, and confirm a booking. StoreError on insert propagates."""
        missing = [f for f in REQUIRED_FIELDS if not str(getattr(request, f) or "").strip()]
        if missing:
            raise InvalidRequest(f"Missing required fields: {', '.join(missing)}")

        if not request.email_content.strip():
            request = replace(request, email_content=heuristics.fallback_email(
                EmailRequest(
                    name=request.name,
                    date=request.appointment_date,
                    time=request.appointment_time,
                    message=request.message,
                    analysis=request.ai_analysis or {},
                ),
                self._support_address,
            ))

        booking = await self._store.create_booking(request)
        log.info("booking=%d created for %s on %s %s",
                 booking.booking_id, booking.email,
                 booking.appointment_date, booking.appointment_time)

        email_error = None
        try:
            tracking_id = await self._mailer.send(
                render_confirmation(booking, sender_name=self._sender_name)
            )
        except MailerError as exc:
            log.error("booking=%d confirmation email failed: %s", booking.booking_id, exc)
            email_error = str(exc)
        else:
            log.info("booking=%d confirmation sent (%s)", booking.booking_id, tracking_id)

        email_status = "failed" if email_error else "sent"
        try:
            await self._store.set_email_status(booking.booking_id, email_status)
            await self._store.upsert_user(booking.email, booking.name)
            booking = await self._store.get_booking(booking.booking_id) or booking
        except StoreError as exc:
            log.error("booking=%d follow-up bookkeeping failed: %s", booking.booking_id, exc)

        return BookingOutcome(
            booking=booking,
            email_sent=email_error is None,
            email_error=email_error,
        )
