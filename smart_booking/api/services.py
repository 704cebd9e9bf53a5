"""The clients a running app owns, wired together once at startup."""

from dataclasses import dataclass

from fastapi import Request

from smart_booking.assistant import Assistant, AssistantConfig
from smart_booking.bookings import BookingService
from smart_booking.communication.ports import ConfirmationMailer
from smart_booking.config import Settings
from smart_booking.domain.model import LanguageModel
from smart_booking.domain.store import BookingStore


@dataclass
class Services:
    settings: Settings
    model: LanguageModel
    store: BookingStore
    mailer: ConfirmationMailer
    assistant: Assistant
    bookings: BookingService

    @classmethod
    def wire(
        cls,
        settings: Settings,
        model: LanguageModel,
        store: BookingStore,
        mailer: ConfirmationMailer,
    ) -> "Services":
        assistant = Assistant(AssistantConfig(
            model=model,
            store=store,
            support_address=settings.support_address,
        ))
        bookings = BookingService(
            store,
            mailer,
            sender_name=settings.sender_name,
            support_address=settings.support_address,
        )
        return cls(settings, model, store, mailer, assistant, bookings)

    async def close(self) -> None:
        await self.model.close()
        await self.store.close()


def get_services(request: Request) -> Services:
    return request.app.state.services
