"""Booking creation, listing, and aggregate stats."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from smart_booking.api.models import BookingRequest
from smart_booking.api.services import Services, get_services
from smart_booking.domain.store import StoreError

router = APIRouter(prefix="/api", tags=["bookings"])
log = logging.getLogger(__name__)


@router.post("/create-booking")
async def create_booking(body: BookingRequest, services: Services = Depends(get_services)):
    try:
        outcome = await services.bookings.create(body.to_domain())
    except StoreError as exc:
        log.error("Booking creation failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Booking creation failed"},
        )

    booking = outcome.booking
    payload: dict[str, Any] = {
        "success": True,
        "bookingId": booking.booking_id,
        "emailSent": outcome.email_sent,
        "message": (
            "Booking created and confirmation email sent successfully!"
            if outcome.email_sent
            else "Booking created, but the confirmation email could not be sent."
        ),
        "booking": {
            "id": booking.booking_id,
            "name": booking.name,
            "email": booking.email,
            "date": booking.appointment_date,
            "time": booking.appointment_time,
            "createdAt": booking.created_at.isoformat(),
        },
    }
    if outcome.email_error:
        payload["emailError"] = "Confirmation email delivery failed"
    return payload


@router.get("/bookings")
async def list_bookings(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    status_filter: str = Query("all", alias="status"),
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    booking_status = None if status_filter == "all" else status_filter
    bookings = await services.store.list_bookings(limit, offset, booking_status)
    total = await services.store.count_bookings(booking_status)
    return {
        "bookings": [b.to_dict() for b in bookings],
        "total": total,
        "page": offset // limit + 1,
        "limit": limit,
    }


@router.get("/stats")
async def stats(services: Services = Depends(get_services)) -> dict[str, Any]:
    s = await services.store.get_stats()
    return {
        "totalBookings": s.total_bookings,
        "totalUsers": s.total_users,
        "totalChats": s.total_chats,
        "todayBookings": s.today_bookings,
        "avgResponseTime": s.avg_response_time_ms,
        "weeklyBookings": [{"date": day, "bookings": n} for day, n in s.weekly_bookings],
        "lastUpdated": datetime.now(timezone.utc).isoformat(),
    }
