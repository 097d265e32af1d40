"""Pure functions that map raw measurements to a Severity."""

from __future__ import annotations

from src.alerts.types import Severity

# ── Fixed cut-offs ──────────────────────────────────────────────

SLOW_QUERY_CRITICAL_MULTIPLIER = 3.0
ERROR_RATE_CRITICAL_MULTIPLIER = 2.0
DEGRADATION_CRITICAL_FACTOR = 5.0
POOL_USAGE_CRITICAL = 0.95

_HEALTH_SEVERITY: dict[str, Severity] = {
    "unhealthy": Severity.CRITICAL,
    "degraded": Severity.WARNING,
}


def classify_slow_query(duration_ms: float, threshold_ms: float) -> Severity:
    if duration_ms > threshold_ms * SLOW_QUERY_CRITICAL_MULTIPLIER:
        return Severity.CRITICAL
    return Severity.WARNING


def classify_error_rate(error_rate: float, threshold: float) -> Severity:
    if error_rate > threshold * ERROR_RATE_CRITICAL_MULTIPLIER:
        return Severity.CRITICAL
    return Severity.WARNING


def classify_degradation(factor: float) -> Severity:
    if factor > DEGRADATION_CRITICAL_FACTOR:
        return Severity.CRITICAL
    return Severity.WARNING


def classify_pool_usage(usage: float) -> Severity:
    if usage > POOL_USAGE_CRITICAL:
        return Severity.CRITICAL
    return Severity.WARNING


def classify_health(status: str) -> Severity:
    return _HEALTH_SEVERITY.get(status, Severity.INFO)


def classify_database_error(fatal: bool) -> Severity:
    return Severity.CRITICAL if fatal else Severity.WARNING
