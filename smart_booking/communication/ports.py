from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class OutgoingEmail:
    """A fully rendered message, ready to hand to a delivery service."""

    recipient: str
    subject: str
    text: str   # plain-text body
    html: str   # HTML alternative


class MailerError(Exception):
    """The delivery service refused or could not take the message."""


class ConfirmationMailer(ABC):
    """
    Port: how booking confirmations leave the system.

    Fire-and-forget: nothing about delivery feeds back into the booking
    beyond whether send() raised.
    """

    @abstractmethod
    async def send(self, message: OutgoingEmail) -> str:
        """
        Deliver the message.
        Returns a tracking ID (Message-ID or similar); raises MailerError.
        """
        ...

    @abstractmethod
    async def verify(self) -> bool:
        """True if the delivery service accepts our configuration."""
        ...
