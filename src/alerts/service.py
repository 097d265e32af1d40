"""AlertService: the entry point the instrumentation layer calls into.

Pipeline for every alert::

    signature -> cooldown gate -> fan-out to channels -> history + stats

Construct one service at process start and pass it to whatever reports
anomalies; there is no module-level instance.
"""

from __future__ import annotations

import asyncio
import datetime
from collections.abc import Mapping
from typing import Any, TextIO

import structlog

from src.alerts.channels import AlertChannel
from src.alerts.cooldown import Clock, CooldownTracker
from src.alerts.dispatcher import AlertDispatcher, in_dispatch
from src.alerts.mailer import EmailSender
from src.alerts.factory import create_channels
from src.alerts.history import AlertHistory
from src.alerts.payloads import (
    ConnectionFailedData,
    ConnectionPoolData,
    DatabaseErrorData,
    DatabaseHealthData,
    HealthMetrics,
    HighErrorRateData,
    PerformanceDegradationData,
    SlowQueryData,
)
from src.alerts.severity import (
    classify_database_error,
    classify_degradation,
    classify_error_rate,
    classify_health,
    classify_pool_usage,
    classify_slow_query,
)
from src.alerts.signature import compute_signature
from src.alerts.types import Alert, AlertKind, AlertStats, Payload, Severity
from src.core.config import AlertsConfig

logger = structlog.get_logger(__name__)


class AlertService:
    """Cooldown-gated, multi-channel alerting for database performance events.

    Usage::

        service = AlertService(settings.alerts)
        await service.alert_slow_query("users.find", duration_ms=4200)
        ...
        await service.close()

    Pass *channels* to use a fixed channel list instead of building one from
    config (``update_config`` then leaves the channels alone).
    """

    def __init__(
        self,
        config: AlertsConfig | None = None,
        channels: list[AlertChannel] | None = None,
        email_sender: EmailSender | None = None,
        console_stream: TextIO | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or AlertsConfig()
        self._email_sender = email_sender
        self._console_stream = console_stream
        self._fixed_channels = channels is not None
        self._channels: list[AlertChannel] = (
            list(channels) if channels is not None else self._build_channels()
        )
        self._retired: list[AlertChannel] = []
        self._closing: set[asyncio.Task[None]] = set()
        self._inflight = 0

        tracker_kwargs: dict[str, Any] = {"config": self._config.cooldowns}
        if clock is not None:
            tracker_kwargs["clock"] = clock
        self._cooldowns = CooldownTracker(**tracker_kwargs)
        self._dispatcher = AlertDispatcher(timeout_secs=self._config.channel_timeout_secs)
        self._history = AlertHistory(max_size=self._config.history_size)

    # ── Configuration ───────────────────────────────────────────

    @property
    def config(self) -> AlertsConfig:
        return self._config

    @property
    def channels(self) -> list[AlertChannel]:
        return list(self._channels)

    def _build_channels(self) -> list[AlertChannel]:
        return create_channels(
            self._config,
            email_sender=self._email_sender,
            console_stream=self._console_stream,
        )

    def update_config(self, partial: Mapping[str, Any]) -> AlertsConfig:
        """Deep-merge *partial* into the current config.

        Takes effect for subsequent sends. On a ``ValidationError`` the
        previous config stays in place.
        """
        new_config = self._config.merged(partial)
        self._config = new_config
        self._cooldowns.config = new_config.cooldowns
        self._dispatcher = AlertDispatcher(timeout_secs=new_config.channel_timeout_secs)
        if new_config.history_size != self._history.max_size:
            self._history.resize(new_config.history_size)
        if not self._fixed_channels:
            # In-flight dispatches keep their own reference to the old list.
            self._retired.extend(self._channels)
            self._channels = self._build_channels()
            if not self._inflight:
                self._close_retired()
        logger.info(
            "alert_config_updated",
            keys=sorted(partial.keys()),
            channels=[ch.name for ch in self._channels],
        )
        return new_config

    # ── Core path ───────────────────────────────────────────────

    async def send_alert(
        self,
        kind: str,
        severity: Severity | str,
        data: Payload,
        context: Mapping[str, Any] | None = None,
    ) -> Alert | None:
        """Gate, dispatch and record one alert.

        Returns the recorded Alert, or None when suppressed by cooldown or
        raised from inside a channel delivery.
        """
        kind = str(kind)
        if in_dispatch():
            logger.warning("recursive_alert_dropped", kind=kind)
            return None

        alert = Alert(
            kind=kind,
            severity=Severity(severity),
            data=dict(data),
            context=dict(context or {}),
        )
        signature = compute_signature(kind, alert.data, alert.severity)
        if not self._cooldowns.try_fire(signature, kind):
            logger.debug("alert_in_cooldown", kind=kind, signature=signature)
            return None

        channels = self._channels
        self._inflight += 1
        try:
            report = await self._dispatcher.dispatch(alert, channels)
        finally:
            self._inflight -= 1
            if not self._inflight and self._retired:
                self._close_retired()
        alert = alert.model_copy(update={"delivered_channels": report.delivered})

        self._history.append(alert)
        logger.info(
            "alert_sent",
            alert_id=alert.id,
            kind=kind,
            severity=alert.severity.value,
            channels=sorted(alert.delivered_channels),
        )
        return alert

    # ── Kind-specific helpers ───────────────────────────────────

    async def alert_slow_query(
        self,
        query: str,
        duration_ms: float,
        threshold_ms: float | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> Alert | None:
        payload = SlowQueryData(
            query=query,
            duration_ms=duration_ms,
            threshold_ms=threshold_ms or self._config.slow_query_threshold_ms,
        )
        severity = classify_slow_query(payload.duration_ms, payload.threshold_ms)
        return await self.send_alert(
            AlertKind.SLOW_QUERY, severity, payload.to_data(), context
        )

    async def alert_high_error_rate(
        self,
        query: str,
        error_rate: float,
        threshold: float | None = None,
        total_queries: int = 0,
        error_count: int = 0,
        context: Mapping[str, Any] | None = None,
    ) -> Alert | None:
        payload = HighErrorRateData(
            query=query,
            error_rate=error_rate,
            threshold=threshold or self._config.high_error_rate_threshold,
            total_queries=total_queries,
            error_count=error_count,
        )
        severity = classify_error_rate(payload.error_rate, payload.threshold)
        return await self.send_alert(
            AlertKind.HIGH_ERROR_RATE, severity, payload.to_data(), context
        )

    async def alert_performance_degradation(
        self,
        query: str,
        recent_avg_ms: float,
        previous_avg_ms: float,
        factor: float,
        context: Mapping[str, Any] | None = None,
    ) -> Alert | None:
        payload = PerformanceDegradationData(
            query=query,
            recent_avg_ms=recent_avg_ms,
            previous_avg_ms=previous_avg_ms,
            factor=factor,
        )
        severity = classify_degradation(payload.factor)
        return await self.send_alert(
            AlertKind.PERFORMANCE_DEGRADATION, severity, payload.to_data(), context
        )

    async def alert_connection_pool_high(
        self,
        usage: float,
        threshold: float | None = None,
        active_connections: int = 0,
        max_connections: int = 0,
        context: Mapping[str, Any] | None = None,
    ) -> Alert | None:
        payload = ConnectionPoolData(
            usage=usage,
            threshold=threshold or self._config.connection_pool_threshold,
            active_connections=active_connections,
            max_connections=max_connections,
        )
        severity = classify_pool_usage(payload.usage)
        return await self.send_alert(
            AlertKind.HIGH_CONNECTION_POOL_USAGE, severity, payload.to_data(), context
        )

    async def alert_database_health(
        self,
        status: str,
        metrics: HealthMetrics | Mapping[str, Any] | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> Alert | None:
        payload = DatabaseHealthData.model_validate(
            {"status": status, "metrics": metrics or {}}
        )
        severity = classify_health(payload.status)
        return await self.send_alert(
            AlertKind.DATABASE_HEALTH_ISSUE, severity, payload.to_data(), context
        )

    async def alert_database_connection_failed(
        self,
        host: str,
        database: str = "",
        error: str = "",
        attempts: int = 1,
        context: Mapping[str, Any] | None = None,
    ) -> Alert | None:
        payload = ConnectionFailedData(
            host=host, database=database, error=error, attempts=attempts
        )
        return await self.send_alert(
            AlertKind.DATABASE_CONNECTION_FAILED,
            Severity.CRITICAL,
            payload.to_data(),
            context,
        )

    async def alert_database_error(
        self,
        operation: str,
        error_type: str = "unknown",
        message: str = "",
        fatal: bool = False,
        context: Mapping[str, Any] | None = None,
    ) -> Alert | None:
        payload = DatabaseErrorData(
            operation=operation, error_type=error_type, message=message, fatal=fatal
        )
        severity = classify_database_error(payload.fatal)
        return await self.send_alert(
            AlertKind.DATABASE_ERROR, severity, payload.to_data(), context
        )

    # ── Queries ─────────────────────────────────────────────────

    def get_alert_stats(self) -> AlertStats:
        return self._history.stats(cooldowns_active=self._cooldowns.active_count())

    def get_alert_history(self, limit: int = 50) -> list[Alert]:
        return self._history.recent(limit)

    def clear_alert_history(self) -> None:
        """Reset history and counters. Cooldowns are left as they are."""
        self._history.clear()

    # ── Self-test ───────────────────────────────────────────────

    async def test_alerts(self) -> Alert | None:
        """Push a synthetic info alert through the whole pipeline."""
        alert = await self.send_alert(
            AlertKind.TEST_ALERT,
            Severity.INFO,
            {
                "message": "This is a test alert to verify the alerting system is working",
                "test_timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
            },
        )
        if alert is None:
            logger.warning("test_alert_failed")
        else:
            logger.info(
                "test_alert_sent",
                alert_id=alert.id,
                channels=sorted(alert.delivered_channels),
            )
        return alert

    # ── Lifecycle ───────────────────────────────────────────────

    def _close_retired(self) -> None:
        """Close replaced channels once no dispatch can still be using them.

        Without a running loop they stay queued until ``close()``.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        retired, self._retired = self._retired, []
        task = loop.create_task(self._close_channels(retired))
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def _close_channels(self, channels: list[AlertChannel]) -> None:
        for ch in channels:
            try:
                await ch.close()
            except Exception:
                logger.exception("channel_close_error", channel=ch.name)

    async def close(self) -> None:
        if self._closing:
            await asyncio.gather(*self._closing)
        retired, self._retired = self._retired, []
        await self._close_channels([*retired, *self._channels])
