"""Alert delivery channels — console, file, webhook and email."""

from __future__ import annotations

import abc
import asyncio
import sys
import threading
from pathlib import Path
from typing import TextIO

import aiohttp
import structlog

from src.alerts.formatters import (
    build_webhook_payload,
    format_console,
    format_email_html,
    format_email_subject,
    format_email_text,
    format_file_record,
)
from src.alerts.mailer import EmailMessage, EmailSender
from src.alerts.types import Alert, DeliveryResult
from src.core.config import EmailConfig, FileChannelConfig, WebhookConfig

logger = structlog.get_logger(__name__)


class AlertChannel(abc.ABC):
    """Base class for alert delivery channels."""

    name: str = ""

    @abc.abstractmethod
    async def deliver(self, alert: Alert) -> DeliveryResult:
        """Attempt delivery. Expected failures come back as ``ok=False``."""

    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""
        return None

    def _ok(self) -> DeliveryResult:
        return DeliveryResult(channel=self.name, ok=True)

    def _fail(self, reason: str) -> DeliveryResult:
        return DeliveryResult(channel=self.name, ok=False, reason=reason)


class ConsoleChannel(AlertChannel):
    """Writes a human-readable block to stderr (or the given stream)."""

    name = "console"

    def __init__(self, stream: TextIO | None = None, color: bool = True) -> None:
        self._stream = stream
        self._color = color

    async def deliver(self, alert: Alert) -> DeliveryResult:
        stream = self._stream or sys.stderr
        stream.write(format_console(alert, color=self._color) + "\n")
        stream.flush()
        return self._ok()


class FileChannel(AlertChannel):
    """Appends one JSON line per alert, creating parent directories."""

    name = "file"

    def __init__(self, config: FileChannelConfig) -> None:
        self._path = Path(config.path)
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _append(self, line: str) -> None:
        with self._write_lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(line)

    async def deliver(self, alert: Alert) -> DeliveryResult:
        try:
            await asyncio.to_thread(self._append, format_file_record(alert))
        except OSError as exc:
            logger.warning(
                "file_alert_write_failed",
                path=str(self._path),
                alert_id=alert.id,
                error=str(exc),
            )
            return self._fail(f"write failed: {exc}")
        return self._ok()


class WebhookChannel(AlertChannel):
    """POSTs the alert as JSON to a configured URL."""

    name = "webhook"

    def __init__(self, config: WebhookConfig, timeout: float = 10.0) -> None:
        if not config.url:
            raise ValueError("WebhookChannel requires webhook.url")
        self._url = config.url
        self._alert_type = config.alert_type
        self._headers = {
            "Content-Type": "application/json",
            "User-Agent": config.user_agent,
            **config.headers,
        }
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
        return self._session

    async def deliver(self, alert: Alert) -> DeliveryResult:
        payload = build_webhook_payload(alert, self._alert_type)
        try:
            session = self._get_session()
            async with session.post(
                self._url, json=payload, headers=self._headers
            ) as resp:
                if 200 <= resp.status < 300:
                    return self._ok()
                body = await resp.text()
                logger.warning(
                    "webhook_send_failed",
                    url=self._url,
                    status=resp.status,
                    body=body[:200],
                    alert_id=alert.id,
                )
                return self._fail(f"HTTP {resp.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.warning(
                "webhook_send_error",
                url=self._url,
                alert_id=alert.id,
                error=repr(exc),
            )
            return self._fail(repr(exc))

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


class EmailChannel(AlertChannel):
    """Renders subject, HTML and text and hands them to an EmailSender."""

    name = "email"

    def __init__(self, config: EmailConfig, sender: EmailSender) -> None:
        if not config.recipients:
            raise ValueError("EmailChannel requires email.recipients")
        self._recipients = list(config.recipients)
        self._from = config.sender
        self._sender = sender

    def render(self, alert: Alert) -> EmailMessage:
        return EmailMessage(
            recipients=self._recipients,
            sender=self._from,
            subject=format_email_subject(alert),
            html=format_email_html(alert),
            text=format_email_text(alert),
        )

    async def deliver(self, alert: Alert) -> DeliveryResult:
        if await self._sender.send(self.render(alert)):
            return self._ok()
        return self._fail("email sender reported failure")

    async def close(self) -> None:
        await self._sender.close()
