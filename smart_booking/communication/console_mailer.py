import uuid

from .ports import ConfirmationMailer, OutgoingEmail


class ConsoleConfirmationMailer(ConfirmationMailer):
    """Adapter: print to console, keep sent messages in memory. For dev/testing."""

    def __init__(self):
        self.sent: list[OutgoingEmail] = []

    async def send(self, message: OutgoingEmail) -> str:
        tracking_id = f"console-{uuid.uuid4().hex[:12]}"
        self.sent.append(message)

        print(f"\n{'=' * 60}")
        print(f"  TO: {message.recipient}")
        print(f"  SUBJECT: {message.subject}")
        print(f"  TRACKING ID: {tracking_id}")
        print(f"{'=' * 60}")
        print(message.text)
        print(f"{'=' * 60}\n")

        return tracking_id

    async def verify(self) -> bool:
        return True
