"""
Lightweight per-source performance profiling.

Toggle via environment variable: NETWORK_SEARCH_PROFILING=1

Each source keeps a rolling window of its last calls (elapsed milliseconds
and whether the call succeeded). Summaries report calls, failures and
avg/min/max/p95 latency over that window. With profiling disabled,
recording returns immediately.

Usage:
    from network_search.shared.profiling import record_source_call, get_performance_metrics

    record_source_call("footeducation.com", elapsed_ms=120.5, ok=True)
    get_performance_metrics()
"""

from __future__ import annotations

import os
import threading
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any

PROFILING_ENABLED = os.environ.get("NETWORK_SEARCH_PROFILING", "").lower() in ("1", "true", "yes")

MAX_HISTORY_PER_SOURCE = 200


@dataclass
class SourceStats:
    """Rolling latency window for one source."""

    elapsed: deque[float] = field(default_factory=lambda: deque(maxlen=MAX_HISTORY_PER_SOURCE))
    outcomes: deque[bool] = field(default_factory=lambda: deque(maxlen=MAX_HISTORY_PER_SOURCE))

    def record(self, total_ms: float, ok: bool) -> None:
        self.elapsed.append(total_ms)
        self.outcomes.append(ok)

    @property
    def count(self) -> int:
        return len(self.elapsed)

    @property
    def failures(self) -> int:
        return self.outcomes.count(False)

    @property
    def total_avg(self) -> float:
        return sum(self.elapsed) / self.count if self.elapsed else 0

    @property
    def total_min(self) -> float:
        return min(self.elapsed, default=0)

    @property
    def total_max(self) -> float:
        return max(self.elapsed, default=0)

    @property
    def total_p95(self) -> float:
        if not self.elapsed:
            return 0
        ordered = sorted(self.elapsed)
        return ordered[min(int(len(ordered) * 0.95), len(ordered) - 1)]

    def summary_dict(self) -> dict[str, Any]:
        latency = {
            "avg": self.total_avg,
            "min": self.total_min,
            "max": self.total_max,
            "p95": self.total_p95,
        }
        return {
            "calls": self.count,
            "failures": self.failures,
            "total_ms": {name: round(value, 1) for name, value in latency.items()},
        }


_metrics: dict[str, SourceStats] = defaultdict(SourceStats)
_metrics_lock = threading.Lock()


def record_source_call(source_name: str, elapsed_ms: float, ok: bool = True) -> None:
    """Record one provider call. No-op unless profiling is enabled."""
    if not PROFILING_ENABLED:
        return
    with _metrics_lock:
        _metrics[source_name].record(elapsed_ms, ok)


def get_performance_metrics() -> dict[str, Any]:
    """Return summaries for every profiled source."""
    with _metrics_lock:
        sources = {name: stats.summary_dict() for name, stats in sorted(_metrics.items())}
    return {"enabled": PROFILING_ENABLED, "sources": sources}


def reset_metrics() -> None:
    with _metrics_lock:
        _metrics.clear()
