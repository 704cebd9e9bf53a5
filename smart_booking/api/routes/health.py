"""Service banner and health check."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from smart_booking.api.services import Services, get_services
from smart_booking.config import APP_NAME, APP_VERSION
from smart_booking.domain.store import StoreError

router = APIRouter(tags=["health"])

ENDPOINTS = {
    "health": "/health",
    "chatbot": "/api/chatbot",
    "analyze": "/api/analyze-message",
    "email": "/api/generate-email",
    "booking": "/api/create-booking",
    "bookings": "/api/bookings",
    "stats": "/api/stats",
}


@router.get("/")
async def root() -> dict[str, Any]:
    return {
        "message": f"{APP_NAME} backend is running",
        "version": APP_VERSION,
        "features": [
            "AI chatbot with social media awareness",
            "Smart appointment booking",
            "AI-generated confirmation emails",
            "Real-time analytics",
        ],
        "endpoints": ENDPOINTS,
    }


@router.get("/health")
async def health_check(services: Services = Depends(get_services)) -> dict[str, Any]:
    """Report which collaborators are reachable.

    The AI entry only checks that a key is configured; it never calls the model.
    """
    try:
        await services.store.ping()
        database = "connected"
    except StoreError:
        database = "error"

    email = "configured" if await services.mailer.verify() else "error"

    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": APP_VERSION,
        "services": {
            "database": database,
            "email": email,
            "ai": "configured" if services.settings.anthropic_api_key else "not configured",
        },
    }
