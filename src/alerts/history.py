"""AlertHistory — bounded buffer of recent alerts plus running counters.

The buffer keeps the last *max_size* alerts; the counters count every alert
ever appended and are not touched by eviction. Only ``clear()`` resets both.
"""

from __future__ import annotations

import threading
from collections import deque

from src.alerts.types import Alert, AlertStats, Severity

DEFAULT_HISTORY_SIZE = 500
RECENT_IN_STATS = 10


class AlertHistory:
    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE) -> None:
        self._buffer: deque[Alert] = deque(maxlen=max_size)
        self._lock = threading.Lock()
        self._total = 0
        self._by_severity: dict[str, int] = {}
        self._by_type: dict[str, int] = {}
        self._reset_counters()

    def _reset_counters(self) -> None:
        self._total = 0
        self._by_severity = {s.value: 0 for s in Severity}
        self._by_type = {}

    @property
    def max_size(self) -> int:
        return self._buffer.maxlen or 0

    def resize(self, max_size: int) -> None:
        """Change capacity, keeping the newest entries."""
        with self._lock:
            self._buffer = deque(self._buffer, maxlen=max_size)

    def append(self, alert: Alert) -> None:
        with self._lock:
            self._buffer.append(alert)
            self._total += 1
            sev = alert.severity.value
            self._by_severity[sev] = self._by_severity.get(sev, 0) + 1
            self._by_type[alert.kind] = self._by_type.get(alert.kind, 0) + 1

    def recent(self, limit: int = 50) -> list[Alert]:
        """Most recent first, at most *limit* entries."""
        if limit <= 0:
            return []
        with self._lock:
            items = list(self._buffer)
        items.reverse()
        return items[:limit]

    def stats(self, cooldowns_active: int = 0) -> AlertStats:
        with self._lock:
            recent = list(self._buffer)[-RECENT_IN_STATS:]
            recent.reverse()
            return AlertStats(
                total=self._total,
                by_severity=dict(self._by_severity),
                by_type=dict(self._by_type),
                recent_alerts=recent,
                cooldowns_active=cooldowns_active,
            )

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()
            self._reset_counters()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)
