# ─────────────────────────────────────────────────────────────────────────────
# Generation Metrics — thread-safe performance tracking
# ─────────────────────────────────────────────────────────────────────────────
# Tracks AI drafting outcomes (success, rate-limited, unconfigured, schema
# violations, image failures, other errors) and latency percentiles.
# Exposed via GET /metrics and bridged to Prometheus.
#
# Bounded: latency history uses deque(maxlen=1000), auto-evicts oldest.
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any

FAILURE_KINDS = ("schema_violation", "image_missing", "model_error")


@dataclass
class GenerationMetrics:
    """Thread-safe generation metrics."""

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    requests_total: int = 0
    successes: int = 0
    rate_limited: int = 0
    unconfigured: int = 0
    failures: dict[str, int] = field(default_factory=lambda: dict.fromkeys(FAILURE_KINDS, 0))

    # Bounded -- only keeps last 1000 latencies, oldest auto-evicted
    _latency_history: deque[float] = field(default_factory=lambda: deque(maxlen=1000), repr=False)
    _start_time: float = field(default_factory=time.time, repr=False)

    def record_success(self, latency_ms: float) -> None:
        with self._lock:
            self.requests_total += 1
            self.successes += 1
            self._latency_history.append(latency_ms)

    def record_failure(self, kind: str, latency_ms: float) -> None:
        """Record a failed model run. Unknown kinds count as model_error."""
        with self._lock:
            self.requests_total += 1
            key = kind if kind in self.failures else "model_error"
            self.failures[key] += 1
            self._latency_history.append(latency_ms)

    def record_rate_limited(self) -> None:
        with self._lock:
            self.requests_total += 1
            self.rate_limited += 1

    def record_unconfigured(self) -> None:
        with self._lock:
            self.requests_total += 1
            self.unconfigured += 1

    def to_dict(self) -> dict[str, Any]:
        """Serialize metrics for the /metrics endpoint."""
        with self._lock:
            latencies = sorted(self._latency_history)
            n = len(latencies)
            errors_total = sum(self.failures.values())
            return {
                "requests_total": self.requests_total,
                "successes": self.successes,
                "rate_limited": self.rate_limited,
                "unconfigured": self.unconfigured,
                "errors_total": errors_total,
                "failures": dict(self.failures),
                "success_rate": round(self.successes / max(self.successes + errors_total, 1), 3),
                "latency_p50_ms": round(latencies[n // 2], 1) if n else 0,
                "latency_p95_ms": round(latencies[int(n * 0.95)], 1) if n else 0,
                "latency_mean_ms": round(sum(latencies) / n, 1) if n else 0,
                "uptime_seconds": int(time.time() - self._start_time),
            }
