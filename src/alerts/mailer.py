"""Email senders, the collaborator the email channel hands messages to."""

from __future__ import annotations

import abc
import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import structlog
from pydantic import BaseModel

from src.core.config import EmailConfig

logger = structlog.get_logger(__name__)


class EmailMessage(BaseModel):
    """A rendered alert email."""

    recipients: list[str]
    sender: str
    subject: str
    html: str
    text: str


class EmailSender(abc.ABC):
    """Something that can deliver an EmailMessage."""

    @abc.abstractmethod
    async def send(self, message: EmailMessage) -> bool:
        """Deliver *message*. Returns True on success."""

    async def close(self) -> None:
        return None


class LoggingEmailSender(EmailSender):
    """Logs the message it would have sent. Used when no SMTP host is set."""

    async def send(self, message: EmailMessage) -> bool:
        logger.info(
            "email_alert_logged",
            subject=message.subject,
            recipients=message.recipients,
        )
        return True


class SmtpEmailSender(EmailSender):
    """Delivers via SMTP (STARTTLS + login when credentials are configured).

    ``smtplib`` is blocking, so each send runs in a worker thread.
    """

    def __init__(self, config: EmailConfig, timeout: float = 10.0) -> None:
        if not config.smtp_host:
            raise ValueError("SmtpEmailSender requires email.smtp_host")
        self._host = config.smtp_host
        self._port = config.smtp_port
        self._user = config.smtp_user
        self._password = config.smtp_password.get_secret_value()
        self._use_tls = config.use_tls
        self._timeout = timeout

    def _build_mime(self, message: EmailMessage) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = message.sender
        mime["To"] = ", ".join(message.recipients)
        # Last part is the preferred rendering.
        mime.attach(MIMEText(message.text, "plain", "utf-8"))
        mime.attach(MIMEText(message.html, "html", "utf-8"))
        return mime

    def _send_blocking(self, message: EmailMessage) -> None:
        mime = self._build_mime(message)
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
            if self._use_tls:
                server.starttls()
            if self._user:
                server.login(self._user, self._password)
            server.send_message(mime)

    async def send(self, message: EmailMessage) -> bool:
        try:
            await asyncio.to_thread(self._send_blocking, message)
        except (smtplib.SMTPException, OSError):
            logger.exception("smtp_send_error", host=self._host, subject=message.subject)
            return False
        return True


def create_email_sender(config: EmailConfig) -> EmailSender:
    if config.smtp_host:
        return SmtpEmailSender(config)
    return LoggingEmailSender()
