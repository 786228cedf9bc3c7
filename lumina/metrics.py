"""Per-action counters for calls made to the remote edge service.

Tracks how many ``auth-check``/``auth-setup``/``auth-verify``/``upload``
calls were made, how many failed and their cumulative latency.
"""

import threading
import time
from collections import defaultdict


class RemoteCallMetrics:
    """Accumulates call counts, failures and latency keyed by action."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: dict[str, int] = defaultdict(int)
        self._failures: dict[str, int] = defaultdict(int)
        self._latency: dict[str, float] = defaultdict(float)

    def record(self, action: str, latency: float, *, failed: bool = False) -> None:
        with self._lock:
            self._calls[action] += 1
            self._latency[action] += latency
            if failed:
                self._failures[action] += 1

    def snapshot(self) -> dict[str, dict[str, float]]:
        """Return ``{action: {calls, failures, avg_latency_ms}}``."""
        with self._lock:
            return {
                action: {
                    "calls": calls,
                    "failures": self._failures[action],
                    "avg_latency_ms": round(self._latency[action] / calls * 1000, 1),
                }
                for action, calls in self._calls.items()
            }


class LatencyTimer:
    """Context manager that records one remote call on exit.

    Usage::

        with LatencyTimer(metrics, "auth-verify") as timer:
            ...
            if not ok:
                timer.mark_failed()
    """

    def __init__(self, metrics: RemoteCallMetrics, action: str) -> None:
        self._metrics = metrics
        self._action = action
        self._start: float = 0.0
        self._failed = False

    def mark_failed(self) -> None:
        self._failed = True

    def __enter__(self) -> "LatencyTimer":
        self._start = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        elapsed = time.monotonic() - self._start
        self._metrics.record(self._action, elapsed, failed=self._failed or exc_type is not None)
