"""
AI-backed endpoints: chat, message analysis, email drafting.

Chat and email drafting always answer 200; a degraded reply carries
"fallback": true.  Analysis keeps its historical contract: a degraded
result comes back as HTTP 500 with the fallback analysis under "fallback",
which existing clients use directly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from smart_booking.api.models import AnalyzeRequest, ChatRequest, EmailDraftRequest
from smart_booking.api.services import Services, get_services

router = APIRouter(prefix="/api", tags=["assistant"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/chatbot")
async def chatbot(body: ChatRequest, services: Services = Depends(get_services)) -> dict[str, Any]:
    result = await services.assistant.chat(body.message, body.context, body.user_email)
    payload: dict[str, Any] = {
        "response": result.value.to_dict(),
        "responseTime": result.elapsed_ms,
        "timestamp": _now_iso(),
        "fallback": result.degraded,
    }
    if result.degraded:
        payload["error"] = "AI temporarily unavailable"
    return payload


@router.post("/analyze-message")
async def analyze_message(body: AnalyzeRequest, services: Services = Depends(get_services)):
    result = await services.assistant.analyze(body.message)
    if result.degraded:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Analysis failed",
                "fallback": result.value.to_dict(),
                "degraded": True,
            },
        )
    return result.value.to_dict()


@router.post("/generate-email")
async def generate_email(
    body: EmailDraftRequest, services: Services = Depends(get_services)
) -> dict[str, Any]:
    result = await services.assistant.draft_email(body.to_domain())
    payload: dict[str, Any] = {
        "emailContent": result.value,
        "generatedAt": _now_iso(),
        "fallback": result.degraded,
    }
    if result.degraded:
        payload["error"] = "AI email generation failed, using template"
    return payload
