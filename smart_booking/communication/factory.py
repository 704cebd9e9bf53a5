from smart_booking.config import Settings

from .ports import ConfirmationMailer


def create_mailer(settings: Settings) -> ConfirmationMailer:
    """
    Factory: create the right adapter based on config.

    MAIL_CHANNEL selects the adapter: "smtp" or "console" (the default).
    """
    channel = settings.mail_channel

    if channel == "smtp":
        from .smtp_mailer import SmtpConfirmationMailer

        if not settings.email_user or not settings.email_password:
            raise ValueError("MAIL_CHANNEL=smtp needs EMAIL_USER and EMAIL_PASSWORD")
        return SmtpConfirmationMailer(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_user=settings.email_user,
            smtp_password=settings.email_password,
            sender_name=settings.sender_name,
        )

    if channel == "console":
        from .console_mailer import ConsoleConfirmationMailer

        return ConsoleConfirmationMailer()

    raise ValueError(f"Unknown mail channel: {channel!r}")
