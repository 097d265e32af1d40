"""Tests for AlertHistory — FIFO eviction, counters, clear."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from src.alerts.history import AlertHistory
from src.alerts.types import Alert, Severity


def _alert(n: int = 0, kind: str = "slow_query", severity: Severity = Severity.WARNING) -> Alert:
    return Alert(kind=kind, severity=severity, data={"n": n})


class TestAppendAndRecent:
    def test_recent_newest_first(self) -> None:
        history = AlertHistory()
        for i in range(3):
            history.append(_alert(i))
        assert [a.data["n"] for a in history.recent(10)] == [2, 1, 0]

    def test_recent_respects_limit(self) -> None:
        history = AlertHistory()
        for i in range(5):
            history.append(_alert(i))
        recent = history.recent(2)
        assert len(recent) == 2
        assert recent[0].data["n"] == 4

    def test_recent_zero_limit(self) -> None:
        history = AlertHistory()
        history.append(_alert())
        assert history.recent(0) == []

    def test_eviction_keeps_counters(self) -> None:
        history = AlertHistory()
        for i in range(600):
            history.append(_alert(i))
        assert len(history.recent(1000)) == 500
        assert len(history) == 500
        assert history.stats().total == 600
        # oldest 100 gone
        assert history.recent(1000)[-1].data["n"] == 100

    def test_small_capacity(self) -> None:
        history = AlertHistory(max_size=2)
        for i in range(3):
            history.append(_alert(i))
        assert [a.data["n"] for a in history.recent(10)] == [2, 1]

    def test_resize_keeps_newest(self) -> None:
        history = AlertHistory(max_size=5)
        for i in range(5):
            history.append(_alert(i))
        history.resize(2)
        assert history.max_size == 2
        assert [a.data["n"] for a in history.recent(10)] == [4, 3]


class TestStats:
    def test_by_severity_and_type(self) -> None:
        history = AlertHistory()
        history.append(_alert(kind="slow_query", severity=Severity.CRITICAL))
        history.append(_alert(kind="slow_query", severity=Severity.WARNING))
        history.append(_alert(kind="database_error", severity=Severity.WARNING))
        stats = history.stats()
        assert stats.total == 3
        assert stats.by_severity == {"critical": 1, "warning": 2, "info": 0}
        assert stats.by_type == {"slow_query": 2, "database_error": 1}

    def test_empty_stats_have_all_severities(self) -> None:
        stats = AlertHistory().stats()
        assert stats.total == 0
        assert set(stats.by_severity) == {"critical", "warning", "info"}

    def test_recent_alerts_capped_at_ten(self) -> None:
        history = AlertHistory()
        for i in range(15):
            history.append(_alert(i))
        stats = history.stats(cooldowns_active=4)
        assert len(stats.recent_alerts) == 10
        assert stats.recent_alerts[0].data["n"] == 14
        assert stats.cooldowns_active == 4


class TestClear:
    def test_clear_resets_everything(self) -> None:
        history = AlertHistory()
        for i in range(5):
            history.append(_alert(i))
        history.clear()
        assert history.recent(50) == []
        stats = history.stats()
        assert stats.total == 0
        assert stats.by_type == {}
        assert stats.by_severity["warning"] == 0


class TestConcurrency:
    def test_no_lost_updates(self) -> None:
        history = AlertHistory()
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: history.append(_alert(i)), range(400)))
        assert history.stats().total == 400
        assert len(history) == 400
