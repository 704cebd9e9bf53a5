"""
Adapter contract tests for ConfirmationMailer — console and SMTP.

The same contract is verified against:
  - ConsoleConfirmationMailer  (always runs, no credentials needed)
  - SmtpConfirmationMailer     (skipped if email credentials are not set)
"""

import asyncio
import os
import socket
import time

import pytest

from smart_booking.communication.console_mailer import ConsoleConfirmationMailer
from smart_booking.communication.factory import create_mailer
from smart_booking.communication.ports import MailerError, OutgoingEmail
from smart_booking.communication.smtp_mailer import SmtpConfirmationMailer
from smart_booking.config import Settings
from tests.contracts.mailer_contract import ConfirmationMailerContract

# ---------------------------------------------------------------------------
# Console simulator — always runs
# ---------------------------------------------------------------------------


class TestConsoleMailerContract(ConfirmationMailerContract):

    def create_mailer(self):
        return ConsoleConfirmationMailer()


# ---------------------------------------------------------------------------
# Real SMTP — skipped without credentials
# ---------------------------------------------------------------------------

SYSTEM_USER = os.environ.get("EMAIL_USER", "")
SYSTEM_PASSWORD = os.environ.get("EMAIL_PASSWORD", "")
SMTP_HOST = os.environ.get("EMAIL_SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.environ.get("EMAIL_SMTP_PORT", "587"))


@pytest.mark.skipif(
    not (SYSTEM_USER and SYSTEM_PASSWORD),
    reason="Email credentials not set",
)
class TestSmtpMailerContract(ConfirmationMailerContract):

    recipient = SYSTEM_USER

    def create_mailer(self):
        return SmtpConfirmationMailer(SMTP_HOST, SMTP_PORT, SYSTEM_USER, SYSTEM_PASSWORD)


# ---------------------------------------------------------------------------
# Failure modes and factory
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_unreachable_relay_raises_mailer_error():
    mailer = SmtpConfirmationMailer("127.0.0.1", 9, "user", "secret")
    with pytest.raises(MailerError):
        await mailer.send(OutgoingEmail("a@example.com", "s", "t", "<p>t</p>"))


@pytest.mark.asyncio
async def test_unreachable_relay_fails_verification():
    mailer = SmtpConfirmationMailer("127.0.0.1", 9, "user", "secret")
    assert await mailer.verify() is False


@pytest.mark.asyncio
async def test_console_keeps_what_it_sent(capsys):
    mailer = ConsoleConfirmationMailer()
    await mailer.send(OutgoingEmail("a@example.com", "Hello", "Body text", "<p>Body</p>"))
    assert [m.subject for m in mailer.sent] == ["Hello"]
    assert "Body text" in capsys.readouterr().out


def test_factory_defaults_to_console():
    assert isinstance(create_mailer(Settings()), ConsoleConfirmationMailer)


def test_factory_builds_smtp_mailer():
    settings = Settings(mail_channel="smtp", email_user="u@example.com", email_password="pw")
    mailer = create_mailer(settings)
    assert isinstance(mailer, SmtpConfirmationMailer)
    assert mailer.smtp_user == "u@example.com"


def test_factory_smtp_needs_credentials():
    with pytest.raises(ValueError):
        create_mailer(Settings(mail_channel="smtp"))


def test_factory_rejects_unknown_channel():
    with pytest.raises(ValueError):
        create_mailer(Settings(mail_channel="carrier-pigeon"))


# ---------------------------------------------------------------------------
# A relay that accepts the connection but never greets
# ---------------------------------------------------------------------------


@pytest.fixture
def stalled_relay_port():
    server = socket.create_server(("127.0.0.1", 0))
    try:
        yield server.getsockname()[1]
    finally:
        server.close()


@pytest.mark.asyncio
async def test_stalled_relay_does_not_block_other_work(stalled_relay_port):
    mailer = SmtpConfirmationMailer("127.0.0.1", stalled_relay_port, "user", "secret", timeout=1)
    sending = asyncio.create_task(
        mailer.send(OutgoingEmail("a@example.com", "s", "t", "<p>t</p>"))
    )

    started = time.monotonic()
    await asyncio.sleep(0.1)
    assert time.monotonic() - started < 0.5
    assert not sending.done()

    with pytest.raises(MailerError):
        await sending


@pytest.mark.asyncio
async def test_stalled_relay_verification_times_out(stalled_relay_port):
    mailer = SmtpConfirmationMailer("127.0.0.1", stalled_relay_port, "user", "secret", timeout=1)
    checking = asyncio.create_task(mailer.verify())

    started = time.monotonic()
    await asyncio.sleep(0.1)
    assert time.monotonic() - started < 0.5

    assert await checking is False
