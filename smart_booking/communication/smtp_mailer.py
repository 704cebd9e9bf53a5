import asyncio
import email.utils
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from .ports import ConfirmationMailer, MailerError, OutgoingEmail

log = logging.getLogger(__name__)


class SmtpConfirmationMailer(ConfirmationMailer):
    """
    Adapter: send confirmations through an SMTP relay (STARTTLS + login).

    smtplib is blocking, so every session runs in a worker thread; a slow
    relay holds up only the request waiting on it, for at most `timeout`
    seconds per socket operation.
    """

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        smtp_user: str,
        smtp_password: str,
        sender_name: str = "Smart Booking Pro",
        timeout: float = 30,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.sender_name = sender_name
        self.timeout = timeout

    async def send(self, message: OutgoingEmail) -> str:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = email.utils.formataddr((self.sender_name, self.smtp_user))
        msg["To"] = message.recipient
        msg["Message-ID"] = email.utils.make_msgid(domain="smart-booking")
        msg.attach(MIMEText(message.text, "plain", _charset="utf-8"))
        msg.attach(MIMEText(message.html, "html", _charset="utf-8"))

        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailerError(f"SMTP delivery to {message.recipient} failed: {exc}") from exc

        return msg["Message-ID"]

    async def verify(self) -> bool:
        try:
            await asyncio.to_thread(self._login_only)
        except (smtplib.SMTPException, OSError) as exc:
            log.warning("SMTP verification failed: %s", exc)
            return False
        return True

    # -- blocking sessions, run off the event loop ---------------------------

    def _deliver(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
            server.starttls()
            server.login(self.smtp_user, self.smtp_password)
            server.send_message(msg)

    def _login_only(self) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=min(self.timeout, 10)) as server:
            server.starttls()
            server.login(self.smtp_user, self.smtp_password)
