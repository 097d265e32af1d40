"""Domain types for the alerting pipeline."""

from __future__ import annotations

import datetime
import secrets
import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Values are scalars, lists or nested mappings of the same.
Payload = dict[str, Any]


class AlertKind(StrEnum):
    """Built-in alert kinds. ``send_alert`` also accepts arbitrary strings."""

    SLOW_QUERY = "slow_query"
    HIGH_ERROR_RATE = "high_error_rate"
    PERFORMANCE_DEGRADATION = "performance_degradation"
    HIGH_CONNECTION_POOL_USAGE = "high_connection_pool_usage"
    DATABASE_HEALTH_ISSUE = "database_health_issue"
    DATABASE_CONNECTION_FAILED = "database_connection_failed"
    DATABASE_ERROR = "database_error"
    TEST_ALERT = "test_alert"


class Severity(StrEnum):
    """Alert severity."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


def new_alert_id() -> str:
    """Process-unique id: ``alert_<epoch-ms>_<random>``."""
    return f"alert_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class Alert(BaseModel):
    """A single alert. Frozen once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_alert_id)
    kind: str
    severity: Severity
    data: Payload = Field(default_factory=dict)
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime.datetime = Field(default_factory=_utcnow)
    delivered_channels: frozenset[str] = frozenset()

    @property
    def iso_timestamp(self) -> str:
        return self.timestamp.isoformat()


class AlertStats(BaseModel):
    """Point-in-time snapshot of running alert counters."""

    total: int = 0
    by_severity: dict[str, int] = Field(
        default_factory=lambda: {s.value: 0 for s in Severity}
    )
    by_type: dict[str, int] = Field(default_factory=dict)
    recent_alerts: list[Alert] = Field(default_factory=list)
    cooldowns_active: int = 0


class DeliveryResult(BaseModel):
    """Outcome of one channel's delivery attempt."""

    channel: str
    ok: bool
    reason: str = ""
    elapsed_ms: float = 0.0


class DispatchReport(BaseModel):
    """Aggregated per-channel outcomes for one alert."""

    results: list[DeliveryResult] = Field(default_factory=list)

    @property
    def delivered(self) -> frozenset[str]:
        return frozenset(r.channel for r in self.results if r.ok)

    @property
    def failed(self) -> list[str]:
        return [r.channel for r in self.results if not r.ok]

    @property
    def partial(self) -> bool:
        return bool(self.delivered) and bool(self.failed)
