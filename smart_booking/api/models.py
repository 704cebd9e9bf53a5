"""Pydantic request models for the booking API.

Field names are snake_case in Python and camelCase on the wire, matching
what the frontend sends.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic_core import PydanticCustomError

from smart_booking.domain.results import EmailRequest
from smart_booking.domain.store import NewBooking


def _not_blank(value: str) -> str:
    if not value:
        raise PydanticCustomError("blank", "must not be blank")
    return value


RequiredText = Annotated[str, AfterValidator(_not_blank)]


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class ChatRequest(_ApiModel):
    message: RequiredText
    context: dict[str, Any] | None = None
    user_email: str | None = Field(default=None, alias="userEmail")


class AnalyzeRequest(_ApiModel):
    message: RequiredText


class EmailDraftRequest(_ApiModel):
    name: RequiredText
    date: RequiredText
    time: RequiredText
    message: str = ""
    analysis: dict[str, Any] | None = None

    def to_domain(self) -> EmailRequest:
        return EmailRequest(
            name=self.name,
            date=self.date,
            time=self.time,
            message=self.message,
            analysis=self.analysis or {},
        )


class BookingRequest(_ApiModel):
    name: RequiredText
    email: RequiredText
    appointment_date: RequiredText = Field(alias="appointmentDate")
    appointment_time: RequiredText = Field(alias="appointmentTime")
    message: str = ""
    ai_analysis: dict[str, Any] | None = Field(default=None, alias="aiAnalysis")
    email_content: str | None = Field(default=None, alias="emailContent")

    def to_domain(self) -> NewBooking:
        return NewBooking(
            name=self.name,
            email=self.email,
            appointment_date=self.appointment_date,
            appointment_time=self.appointment_time,
            message=self.message,
            ai_analysis=self.ai_analysis,
            email_content=self.email_content or "",
        )
