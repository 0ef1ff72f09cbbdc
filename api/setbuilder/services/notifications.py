"""Outbound error notifications."""

import logging
import smtplib
from email.message import EmailMessage
from setbuilder.config import settings

logger = logging.getLogger(__name__)


class Notifier:
    """Delivers operator notifications; the base class only logs."""

    def notify(self, subject: str, body: str) -> None:
        logger.warning(f"{subject}: {body}")


class EmailNotifier(Notifier):
    """Sends notifications as plain-text email over SMTP."""

    def __init__(self, host: str, port: int, sender: str, recipient: str):
        self.host = host
        self.port = port
        self.sender = sender
        self.recipient = recipient

    def notify(self, subject: str, body: str) -> None:
        super().notify(subject, body)
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.sender
        message["To"] = self.recipient
        message.set_content(body)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
                smtp.send_message(message)
        except (OSError, smtplib.SMTPException) as e:
            # Delivery failures are logged only
            logger.error(f"Failed to send notification '{subject}': {e}")


def get_notifier() -> Notifier:
    """Email notifier when SMTP is configured, logging notifier otherwise."""
    if not settings.smtp_host or not settings.mail_recipient:
        return Notifier()
    return EmailNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        sender=settings.mail_sender,
        recipient=settings.mail_recipient,
    )
