"""Tests for src/core/config.py — YAML loading, env overrides, defaults, merging."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import SecretStr, ValidationError

from src.core.config import (
    AlertsConfig,
    CooldownConfig,
    LoggingConfig,
    Settings,
    env_overrides,
    load_settings,
)


class TestDefaults:
    """Settings should have sensible defaults when no YAML is provided."""

    def test_default_thresholds(self) -> None:
        cfg = AlertsConfig()
        assert cfg.slow_query_threshold_ms == 2000
        assert cfg.high_error_rate_threshold == 0.05
        assert cfg.connection_pool_threshold == 0.8
        assert cfg.degradation_threshold == 2.0

    def test_default_channels(self) -> None:
        cfg = AlertsConfig()
        assert cfg.enable_console is True
        assert cfg.enable_file is False
        assert cfg.enable_webhook is False
        assert cfg.enable_email is False
        assert cfg.file.path == "logs/alerts.log"
        assert cfg.webhook.url is None
        assert cfg.email.recipients == []

    def test_default_cooldowns(self) -> None:
        cfg = CooldownConfig()
        assert cfg.window_for("slow_query") == 300
        assert cfg.window_for("high_error_rate") == 600
        assert cfg.window_for("performance_degradation") == 900
        assert cfg.window_for("database_health_issue") == 300

    def test_default_logging_config(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.format == "json"

    def test_default_settings(self) -> None:
        s = Settings()
        assert s.alerts.history_size == 500
        assert s.logging.level == "INFO"


class TestValidation:
    def test_error_rate_must_be_fraction(self) -> None:
        with pytest.raises(ValidationError):
            AlertsConfig(high_error_rate_threshold=5)

    def test_negative_cooldown_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CooldownConfig(slow_query_secs=-1)


class TestYamlLoading:
    """Settings should load correctly from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "alerts": {
                "slow_query_threshold_ms": 1500,
                "enable_file": True,
                "file": {"path": "/var/log/alerts.log"},
                "cooldowns": {"slow_query_secs": 60},
            },
            "logging": {"level": "DEBUG", "format": "console"},
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        s = load_settings(config_file, environ={})
        assert s.alerts.slow_query_threshold_ms == 1500
        assert s.alerts.enable_file is True
        assert s.alerts.file.path == "/var/log/alerts.log"
        assert s.alerts.cooldowns.slow_query_secs == 60
        assert s.alerts.cooldowns.error_rate_secs == 600
        assert s.logging.level == "DEBUG"

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        s = load_settings(tmp_path / "nonexistent.yaml", environ={})
        assert s.alerts.enable_console is True

    def test_empty_yaml_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        s = load_settings(config_file, environ={})
        assert s.alerts.slow_query_threshold_ms == 2000

    def test_env_overrides_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"alerts": {"enable_webhook": False}}))
        s = load_settings(
            config_file,
            environ={"ALERT_WEBHOOK": "true", "ALERT_WEBHOOK_URL": "https://h.example.com"},
        )
        assert s.alerts.enable_webhook is True
        assert s.alerts.webhook.url == "https://h.example.com"


class TestEnvOverrides:
    def test_empty(self) -> None:
        assert env_overrides({}) == {}

    def test_all_recognised(self) -> None:
        out = env_overrides(
            {
                "ALERT_SLOW_QUERY_THRESHOLD": "2500",
                "ALERT_ERROR_RATE_THRESHOLD": "0.1",
                "ALERT_CONSOLE": "false",
                "ALERT_FILE": "true",
                "ALERT_EMAIL": "1",
                "ALERT_FILE_PATH": "/tmp/a.log",
                "ALERT_WEBHOOK_HEADERS": '{"X-Token": "abc"}',
                "ALERT_EMAIL_RECIPIENTS": "a@example.com, b@example.com,",
            }
        )
        assert out["slow_query_threshold_ms"] == 2500.0
        assert out["high_error_rate_threshold"] == 0.1
        assert out["enable_console"] is False
        assert out["enable_file"] is True
        assert out["enable_email"] is True
        assert out["file"] == {"path": "/tmp/a.log"}
        assert out["webhook"] == {"headers": {"X-Token": "abc"}}
        assert out["email"] == {"recipients": ["a@example.com", "b@example.com"]}


class TestMerged:
    def test_deep_merge(self) -> None:
        cfg = AlertsConfig(webhook={"url": "https://a", "headers": {"X": "1"}})
        merged = cfg.merged({"webhook": {"headers": {"Y": "2"}}})
        assert merged.webhook.url == "https://a"
        assert merged.webhook.headers == {"X": "1", "Y": "2"}

    def test_original_untouched(self) -> None:
        cfg = AlertsConfig()
        cfg.merged({"enable_file": True})
        assert cfg.enable_file is False

    def test_secret_survives_merge(self) -> None:
        cfg = AlertsConfig(email={"smtp_password": SecretStr("pw")})
        merged = cfg.merged({"enable_email": True})
        assert merged.email.smtp_password.get_secret_value() == "pw"
