"""Tests for alert formatters — console, file record, webhook payload, email."""

from __future__ import annotations

import datetime
import json

from src.alerts.formatters import (
    build_webhook_payload,
    format_console,
    format_email_html,
    format_email_subject,
    format_email_text,
    format_file_record,
)
from src.alerts.types import Alert, Severity


def _alert(**kw: object) -> Alert:
    defaults: dict[str, object] = {
        "id": "alert_1_abc",
        "kind": "slow_query",
        "severity": Severity.CRITICAL,
        "data": {"query": "users.find", "duration": "7000.00ms"},
        "context": {"endpoint": "/api/users"},
        "timestamp": datetime.datetime(2026, 1, 2, 3, 4, 5, tzinfo=datetime.UTC),
    }
    defaults.update(kw)
    return Alert(**defaults)  # type: ignore[arg-type]


class TestConsole:
    def test_contains_fields(self) -> None:
        text = format_console(_alert())
        assert "PERFORMANCE ALERT [SLOW_QUERY]" in text
        assert "Severity: CRITICAL" in text
        assert "2026-01-02T03:04:05+00:00" in text
        assert "users.find" in text
        assert "/api/users" in text

    def test_no_color(self) -> None:
        assert "\x1b[" not in format_console(_alert(), color=False)

    def test_color(self) -> None:
        assert "\x1b[31m" in format_console(_alert(), color=True)

    def test_empty_context_omitted(self) -> None:
        assert "Context" not in format_console(_alert(context={}))


class TestFileRecord:
    def test_single_json_line(self) -> None:
        line = format_file_record(_alert())
        assert line.endswith("\n")
        assert line.count("\n") == 1
        record = json.loads(line)
        assert record == {
            "timestamp": "2026-01-02T03:04:05+00:00",
            "level": "ALERT",
            "severity": "critical",
            "type": "slow_query",
            "alert_id": "alert_1_abc",
            "data": {"query": "users.find", "duration": "7000.00ms"},
            "context": {"endpoint": "/api/users"},
        }


class TestWebhookPayload:
    def test_schema(self) -> None:
        payload = build_webhook_payload(_alert())
        assert payload["alert_type"] == "database_performance"
        assert payload["severity"] == "critical"
        assert payload["event"] == "slow_query"
        assert payload["alert_id"] == "alert_1_abc"
        assert payload["timestamp"] == "2026-01-02T03:04:05+00:00"
        assert payload["data"]["query"] == "users.find"
        assert payload["context"] == {"endpoint": "/api/users"}

    def test_custom_alert_type(self) -> None:
        assert build_webhook_payload(_alert(), "db")["alert_type"] == "db"


class TestEmail:
    def test_subject(self) -> None:
        assert format_email_subject(_alert()) == "[CRITICAL] Performance Alert: slow_query"

    def test_subject_info(self) -> None:
        subject = format_email_subject(_alert(kind="test_alert", severity=Severity.INFO))
        assert subject == "[INFO] Performance Alert: test_alert"

    def test_html_contents(self) -> None:
        html = format_email_html(_alert())
        assert "SLOW QUERY" in html
        assert "#dc2626" in html
        assert "alert_1_abc" in html
        assert "Context:" in html

    def test_html_escapes_payload(self) -> None:
        html = format_email_html(_alert(data={"query": "<script>x</script>"}))
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_text_contents(self) -> None:
        text = format_email_text(_alert())
        assert text.startswith("PERFORMANCE ALERT: SLOW QUERY")
        assert "Severity: CRITICAL" in text
        assert "Alert ID: alert_1_abc" in text
        assert "Context:" in text

    def test_text_without_context(self) -> None:
        assert "Context:" not in format_email_text(_alert(context={}))
