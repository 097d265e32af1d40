"""Fan-out dispatcher — delivers one alert to every channel concurrently."""

from __future__ import annotations

import asyncio
import contextvars
import time
from collections.abc import Iterable

import structlog

from src.alerts.channels import AlertChannel
from src.alerts.types import Alert, DeliveryResult, DispatchReport

logger = structlog.get_logger(__name__)

# Set while channel deliveries for an alert are running. Tasks spawned by
# ``dispatch`` inherit it, so re-entrant sends can be detected.
_dispatching: contextvars.ContextVar[bool] = contextvars.ContextVar(
    "alert_dispatching", default=False
)


def in_dispatch() -> bool:
    """True when called from inside a channel delivery."""
    return _dispatching.get()


class AlertDispatcher:
    """Delivers alerts to channels in parallel with per-channel isolation.

    - Every channel runs as its own task; one failing never stops the others.
    - Each attempt is bounded by *timeout_secs*.
    - Exceptions and timeouts become ``DeliveryResult(ok=False)``; nothing
      propagates to the caller.
    """

    def __init__(self, timeout_secs: float = 10.0) -> None:
        self._timeout_secs = timeout_secs

    @property
    def timeout_secs(self) -> float:
        return self._timeout_secs

    async def dispatch(
        self, alert: Alert, channels: Iterable[AlertChannel]
    ) -> DispatchReport:
        channels = list(channels)
        if not channels:
            return DispatchReport()

        token = _dispatching.set(True)
        try:
            results = await asyncio.gather(
                *(self._attempt(ch, alert) for ch in channels)
            )
        finally:
            _dispatching.reset(token)

        report = DispatchReport(results=list(results))
        if report.failed:
            logger.info(
                "alert_partially_delivered" if report.partial else "alert_not_delivered",
                alert_id=alert.id,
                delivered=sorted(report.delivered),
                failed=report.failed,
            )
        return report

    # ── Internal ────────────────────────────────────────────────

    async def _attempt(self, channel: AlertChannel, alert: Alert) -> DeliveryResult:
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(
                channel.deliver(alert), timeout=self._timeout_secs
            )
        except asyncio.TimeoutError:
            logger.warning(
                "channel_delivery_timeout",
                channel=channel.name,
                alert_id=alert.id,
                timeout_secs=self._timeout_secs,
            )
            result = DeliveryResult(
                channel=channel.name,
                ok=False,
                reason=f"timed out after {self._timeout_secs}s",
            )
        except Exception as exc:
            logger.exception(
                "channel_delivery_error",
                channel=channel.name,
                alert_id=alert.id,
            )
            result = DeliveryResult(channel=channel.name, ok=False, reason=repr(exc))
        else:
            # Plain booleans count only when they are a literal True.
            if not isinstance(result, DeliveryResult):
                result = DeliveryResult(
                    channel=channel.name,
                    ok=result is True,
                    reason="" if result is True else f"unexpected result {result!r}",
                )
            if not result.ok:
                logger.warning(
                    "channel_delivery_failed",
                    channel=channel.name,
                    alert_id=alert.id,
                    reason=result.reason,
                )

        elapsed_ms = (time.perf_counter() - start) * 1000
        return result.model_copy(update={"channel": channel.name, "elapsed_ms": elapsed_ms})
