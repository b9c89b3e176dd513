from __future__ import annotations

from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any


@dataclass
class _LatencyAgg:
    count: int = 0
    sum_ms: float = 0.0
    max_ms: float = 0.0

    def observe(self, elapsed_ms: float) -> None:
        self.count += 1
        self.sum_ms += float(elapsed_ms)
        if elapsed_ms > self.max_ms:
            self.max_ms = float(elapsed_ms)


class InMemoryMetrics:
    """Thread-safe, process-local delivery counters (resets on restart)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self.items_logged_total: int = 0
        self.items_delivered_total: int = 0
        self.items_failed_total: int = 0
        self.delivery_ms = _LatencyAgg()

    def observe_logged(self) -> None:
        with self._lock:
            self.items_logged_total += 1

    def observe_settled(self, delivered: bool) -> None:
        with self._lock:
            if delivered:
                self.items_delivered_total += 1
            else:
                self.items_failed_total += 1

    def observe_delivery(self, elapsed_ms: float) -> None:
        with self._lock:
            self.delivery_ms.observe(elapsed_ms)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counters": {
                    "items_logged_total": self.items_logged_total,
                    "items_delivered_total": self.items_delivered_total,
                    "items_failed_total": self.items_failed_total,
                },
                "latency_ms": {
                    "delivery_ms": asdict(self.delivery_ms),
                },
            }

    def reset(self) -> None:
        with self._lock:
            self.items_logged_total = 0
            self.items_delivered_total = 0
            self.items_failed_total = 0
            self.delivery_ms = _LatencyAgg()


_METRICS: InMemoryMetrics | None = None


def get_metrics() -> InMemoryMetrics:
    global _METRICS
    if _METRICS is None:
        _METRICS = InMemoryMetrics()
    return _METRICS


def reset_metrics() -> None:
    """Reset metrics counters/aggregates (used by tests)."""

    get_metrics().reset()
