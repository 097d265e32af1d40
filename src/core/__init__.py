"""Core module — config and logging."""

from src.core.config import (
    AlertsConfig,
    CooldownConfig,
    EmailConfig,
    FileChannelConfig,
    LoggingConfig,
    Settings,
    WebhookConfig,
    env_overrides,
    load_settings,
)
from src.core.logging import setup_logging

__all__ = [
    "AlertsConfig",
    "CooldownConfig",
    "EmailConfig",
    "FileChannelConfig",
    "LoggingConfig",
    "Settings",
    "WebhookConfig",
    "env_overrides",
    "load_settings",
    "setup_logging",
]
