"""Pure functions that render an Alert for each delivery channel."""

from __future__ import annotations

import json
from html import escape as html_escape
from typing import Any

from src.alerts.types import Alert, Severity

# ── Presentation tables ─────────────────────────────────────────

_ICONS: dict[Severity, str] = {
    Severity.CRITICAL: "🚨",
    Severity.WARNING: "⚠️",
    Severity.INFO: "ℹ️",
}

_ANSI_RESET = "\x1b[0m"
_ANSI_COLORS: dict[Severity, str] = {
    Severity.CRITICAL: "\x1b[31m",  # red
    Severity.WARNING: "\x1b[33m",   # yellow
    Severity.INFO: "\x1b[36m",      # cyan
}

_HTML_COLORS: dict[Severity, str] = {
    Severity.CRITICAL: "#dc2626",
    Severity.WARNING: "#d97706",
    Severity.INFO: "#0284c7",
}

_FOOTER = "This alert was generated by the database performance monitor."


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, default=str, ensure_ascii=False)


def _title(kind: str) -> str:
    return kind.replace("_", " ").upper()


# ── Console ─────────────────────────────────────────────────────


def format_console(alert: Alert, color: bool = True) -> str:
    """Multi-line human-readable block for stderr."""
    icon = _ICONS.get(alert.severity, "📊")
    start = _ANSI_COLORS.get(alert.severity, "") if color else ""
    reset = _ANSI_RESET if color else ""

    lines = [
        "",
        f"{icon} {start}PERFORMANCE ALERT [{alert.kind.upper()}]{reset}",
        f"   Severity: {alert.severity.value.upper()}",
        f"   Time: {alert.iso_timestamp}",
        f"   Alert ID: {alert.id}",
        f"   Data: {_pretty(alert.data)}",
    ]
    if alert.context:
        lines.append(f"   Context: {_pretty(alert.context)}")
    return "\n".join(lines)


# ── File ────────────────────────────────────────────────────────


def format_file_record(alert: Alert) -> str:
    """One JSON line (newline-terminated) for the append-only alert log."""
    record = {
        "timestamp": alert.iso_timestamp,
        "level": "ALERT",
        "severity": alert.severity.value,
        "type": alert.kind,
        "alert_id": alert.id,
        "data": alert.data,
        "context": alert.context,
    }
    return json.dumps(record, default=str, ensure_ascii=False) + "\n"


# ── Webhook ─────────────────────────────────────────────────────


def build_webhook_payload(
    alert: Alert, alert_type: str = "database_performance"
) -> dict[str, Any]:
    return {
        "alert_type": alert_type,
        "severity": alert.severity.value,
        "event": alert.kind,
        "timestamp": alert.iso_timestamp,
        "data": alert.data,
        "context": alert.context,
        "alert_id": alert.id,
    }


# ── Email ───────────────────────────────────────────────────────


def format_email_subject(alert: Alert) -> str:
    return f"[{alert.severity.value.upper()}] Performance Alert: {alert.kind}"


def format_email_html(alert: Alert) -> str:
    color = _HTML_COLORS.get(alert.severity, "#6b7280")
    pre_style = (
        "background: #ffffff; padding: 12px; border: 1px solid #d1d5db; "
        "border-radius: 4px; overflow-x: auto; font-size: 12px;"
    )
    context_block = ""
    if alert.context:
        context_block = (
            "<div>"
            "<strong>Context:</strong>"
            f'<pre style="{pre_style}">{html_escape(_pretty(alert.context))}</pre>'
            "</div>"
        )

    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<div style="background: {color}; color: white; padding: 16px; '
        'border-radius: 8px 8px 0 0;">'
        '<h1 style="margin: 0; font-size: 20px;">Performance Alert</h1>'
        f'<p style="margin: 4px 0 0 0; opacity: 0.9;">{html_escape(_title(alert.kind))}</p>'
        "</div>"
        '<div style="background: #f9fafb; padding: 24px; border-radius: 0 0 8px 8px; '
        'border: 1px solid #e5e7eb;">'
        '<div style="margin-bottom: 16px;"><strong>Severity:</strong> '
        f'<span style="color: {color};">{alert.severity.value.upper()}</span></div>'
        '<div style="margin-bottom: 16px;"><strong>Time:</strong> '
        f"{alert.iso_timestamp}</div>"
        '<div style="margin-bottom: 16px;"><strong>Details:</strong>'
        f'<pre style="{pre_style}">{html_escape(_pretty(alert.data))}</pre></div>'
        f"{context_block}"
        "</div>"
        '<div style="margin-top: 16px; padding: 16px; background: #f3f4f6; '
        'border-radius: 8px; font-size: 12px; color: #6b7280;">'
        f"{_FOOTER} Alert ID: {html_escape(alert.id)}"
        "</div>"
        "</div>"
    )


def format_email_text(alert: Alert) -> str:
    parts = [
        f"PERFORMANCE ALERT: {_title(alert.kind)}",
        f"Severity: {alert.severity.value.upper()}",
        f"Time: {alert.iso_timestamp}",
        f"Alert ID: {alert.id}",
        "",
        "Details:",
        _pretty(alert.data),
    ]
    if alert.context:
        parts += ["", "Context:", _pretty(alert.context)]
    parts += ["", "---", _FOOTER]
    return "\n".join(parts)
