"""Database performance alerting — cooldown gating, fan-out, history."""

from src.alerts.channels import (
    AlertChannel,
    ConsoleChannel,
    EmailChannel,
    FileChannel,
    WebhookChannel,
)
from src.alerts.cooldown import CooldownTracker
from src.alerts.dispatcher import AlertDispatcher
from src.alerts.factory import create_channels
from src.alerts.history import AlertHistory
from src.alerts.mailer import EmailMessage, EmailSender, LoggingEmailSender, SmtpEmailSender
from src.alerts.service import AlertService
from src.alerts.signature import compute_signature
from src.alerts.types import (
    Alert,
    AlertKind,
    AlertStats,
    DeliveryResult,
    DispatchReport,
    Severity,
)

__all__ = [
    "Alert",
    "AlertChannel",
    "AlertDispatcher",
    "AlertHistory",
    "AlertKind",
    "AlertService",
    "AlertStats",
    "ConsoleChannel",
    "CooldownTracker",
    "DeliveryResult",
    "DispatchReport",
    "EmailChannel",
    "EmailMessage",
    "EmailSender",
    "FileChannel",
    "LoggingEmailSender",
    "Severity",
    "SmtpEmailSender",
    "WebhookChannel",
    "compute_signature",
    "create_channels",
]
