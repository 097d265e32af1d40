"""Per-signature cooldown gate."""

from __future__ import annotations

import threading
import time
from typing import Callable

from src.core.config import CooldownConfig

Clock = Callable[[], float]


class CooldownTracker:
    """Remembers when each signature last fired and gates repeats.

    ``try_fire`` checks and records under one lock, so of several concurrent
    callers sharing a signature exactly one gets through. Every attempt,
    suppressed or not, restarts the window.
    """

    def __init__(
        self,
        config: CooldownConfig | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._config = config or CooldownConfig()
        self._clock = clock
        self._last_fired: dict[str, float] = {}
        self._lock = threading.Lock()

    @property
    def config(self) -> CooldownConfig:
        return self._config

    @config.setter
    def config(self, value: CooldownConfig) -> None:
        self._config = value

    def window_for(self, kind: str) -> float:
        return self._config.window_for(str(kind))

    def should_suppress(self, signature: str, kind: str) -> bool:
        with self._lock:
            return self._suppressed(signature, kind, self._clock())

    def record_fire(self, signature: str) -> None:
        with self._lock:
            self._last_fired[signature] = self._clock()

    def try_fire(self, signature: str, kind: str) -> bool:
        """Record the attempt; return True if *signature* was not cooling down."""
        with self._lock:
            now = self._clock()
            suppressed = self._suppressed(signature, kind, now)
            self._last_fired[signature] = now
            return not suppressed

    def _suppressed(self, signature: str, kind: str, now: float) -> bool:
        last = self._last_fired.get(signature)
        if last is None:
            return False
        return now - last < self.window_for(kind)

    def active_count(self) -> int:
        with self._lock:
            return len(self._last_fired)

    def clear(self) -> None:
        with self._lock:
            self._last_fired.clear()
