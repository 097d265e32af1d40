"""Pydantic settings loaded from YAML configuration and ALERT_* env vars."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class CooldownConfig(BaseModel):
    """Per-kind cooldown windows, in seconds."""

    slow_query_secs: float = Field(default=300.0, ge=0)
    error_rate_secs: float = Field(default=600.0, ge=0)
    degradation_secs: float = Field(default=900.0, ge=0)
    default_secs: float = Field(default=300.0, ge=0)
    # Explicit per-kind overrides win over the named windows above.
    overrides: dict[str, float] = Field(default_factory=dict)

    def window_for(self, kind: str) -> float:
        if kind in self.overrides:
            return self.overrides[kind]
        if kind == "slow_query":
            return self.slow_query_secs
        if kind == "high_error_rate":
            return self.error_rate_secs
        if kind == "performance_degradation":
            return self.degradation_secs
        return self.default_secs


class FileChannelConfig(BaseModel):
    """Append-only JSON-lines alert log."""

    path: str = "logs/alerts.log"


class WebhookConfig(BaseModel):
    """Outbound HTTP webhook."""

    url: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    alert_type: str = "database_performance"
    user_agent: str = "perf-alerts/1.0"


class EmailConfig(BaseModel):
    """Email delivery. SMTP is used only when ``smtp_host`` is set."""

    recipients: list[str] = Field(default_factory=list)
    sender: str = "alerts@localhost"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: SecretStr = SecretStr("")
    use_tls: bool = True


class AlertsConfig(BaseModel):
    """Thresholds, cooldowns and the channel matrix for the alert service."""

    # Thresholds
    slow_query_threshold_ms: float = Field(default=2000.0, gt=0)
    high_error_rate_threshold: float = Field(default=0.05, gt=0, le=1)
    connection_pool_threshold: float = Field(default=0.8, gt=0, le=1)
    degradation_threshold: float = Field(default=2.0, gt=0)

    cooldowns: CooldownConfig = CooldownConfig()

    # Channel enable flags
    enable_console: bool = True
    enable_file: bool = False
    enable_webhook: bool = False
    enable_email: bool = False

    file: FileChannelConfig = FileChannelConfig()
    webhook: WebhookConfig = WebhookConfig()
    email: EmailConfig = EmailConfig()

    color: bool = True
    channel_timeout_secs: float = Field(default=10.0, gt=0)
    history_size: int = Field(default=500, ge=1)

    def merged(self, partial: Mapping[str, Any]) -> AlertsConfig:
        """Return a new config with *partial* deep-merged over this one."""
        data = _deep_merge(self.model_dump(), partial)
        # SecretStr dumps as a masked object; restore the real value.
        smtp_password = data.get("email", {}).get("smtp_password")
        if isinstance(smtp_password, SecretStr):
            data["email"]["smtp_password"] = smtp_password.get_secret_value()
        return AlertsConfig.model_validate(data)


class Settings(BaseModel):
    """Root settings container."""

    alerts: AlertsConfig = AlertsConfig()
    logging: LoggingConfig = LoggingConfig()


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            result[key] = _deep_merge(current, value)
        else:
            result[key] = value
    return result


def _env_flag(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect ``ALERT_*`` environment variables into a partial alerts config."""
    env = os.environ if environ is None else environ
    out: dict[str, Any] = {}

    if "ALERT_SLOW_QUERY_THRESHOLD" in env:
        out["slow_query_threshold_ms"] = float(env["ALERT_SLOW_QUERY_THRESHOLD"])
    if "ALERT_ERROR_RATE_THRESHOLD" in env:
        out["high_error_rate_threshold"] = float(env["ALERT_ERROR_RATE_THRESHOLD"])

    for var, key in (
        ("ALERT_CONSOLE", "enable_console"),
        ("ALERT_FILE", "enable_file"),
        ("ALERT_WEBHOOK", "enable_webhook"),
        ("ALERT_EMAIL", "enable_email"),
    ):
        if var in env:
            out[key] = _env_flag(env[var])

    if "ALERT_FILE_PATH" in env:
        out.setdefault("file", {})["path"] = env["ALERT_FILE_PATH"]
    if "ALERT_WEBHOOK_URL" in env:
        out.setdefault("webhook", {})["url"] = env["ALERT_WEBHOOK_URL"]
    if "ALERT_WEBHOOK_HEADERS" in env:
        out.setdefault("webhook", {})["headers"] = json.loads(env["ALERT_WEBHOOK_HEADERS"])
    if "ALERT_EMAIL_RECIPIENTS" in env:
        out.setdefault("email", {})["recipients"] = [
            r.strip() for r in env["ALERT_EMAIL_RECIPIENTS"].split(",") if r.strip()
        ]
    return out


def load_settings(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from a YAML file, then apply ``ALERT_*`` env overrides.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Parsed Settings instance.
    """
    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    overrides = env_overrides(environ)
    if overrides:
        data = _deep_merge(data, {"alerts": overrides})

    return Settings(**data)
