"""Convenience factory for wiring the alert channel matrix."""

from __future__ import annotations

from typing import TextIO

import structlog

from src.alerts.channels import (
    AlertChannel,
    ConsoleChannel,
    EmailChannel,
    FileChannel,
    WebhookChannel,
)
from src.alerts.mailer import EmailSender, create_email_sender
from src.core.config import AlertsConfig

logger = structlog.get_logger(__name__)


def create_channels(
    config: AlertsConfig,
    email_sender: EmailSender | None = None,
    console_stream: TextIO | None = None,
) -> list[AlertChannel]:
    """Build the enabled channels from config.

    Channels that are enabled but missing required settings (webhook URL,
    email recipients) are skipped with a warning.
    """
    channels: list[AlertChannel] = []

    if config.enable_console:
        channels.append(ConsoleChannel(stream=console_stream, color=config.color))

    if config.enable_file:
        channels.append(FileChannel(config.file))

    if config.enable_webhook:
        if config.webhook.url:
            channels.append(
                WebhookChannel(config.webhook, timeout=config.channel_timeout_secs)
            )
        else:
            logger.warning("channel_misconfigured", channel="webhook", missing="url")

    if config.enable_email:
        if config.email.recipients:
            sender = email_sender or create_email_sender(config.email)
            channels.append(EmailChannel(config.email, sender))
        else:
            logger.warning(
                "channel_misconfigured", channel="email", missing="recipients"
            )

    return channels
