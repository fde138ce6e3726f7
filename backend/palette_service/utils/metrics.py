"""
Palette Service Metrics
Process-local counters for palette generation.
"""
import time
from collections import Counter
from threading import Lock
from typing import Any, Dict, Optional


class MetricsCollector:
    """Counters, running stage timings and a histogram of palette sizes."""

    def __init__(self):
        self._lock = Lock()
        self._counters: Counter = Counter()
        # stage -> [calls, total_ms, max_ms]
        self._stages: Dict[str, list] = {}
        self._sizes: Counter = Counter()
        self._start_time = time.time()

    def increment_counter(self, name: str, amount: int = 1):
        with self._lock:
            self._counters[name] += amount

    def increment_failure_count(self, error_type: str):
        """Count a failed generation, overall and per error class."""
        with self._lock:
            self._counters["palette_failed_total"] += 1
            self._counters[f"palette_failed_total_{error_type}"] += 1

    def record_timing(self, stage: str, duration_ms: float):
        with self._lock:
            totals = self._stages.setdefault(f"{stage}_duration_ms", [0, 0.0, 0.0])
            totals[0] += 1
            totals[1] += duration_ms
            totals[2] = max(totals[2], duration_ms)

    def record_palette_size(self, size: int):
        with self._lock:
            self._sizes[size] += 1

    def get_summary(self) -> Dict[str, Any]:
        """Snapshot served by /metrics/summary."""
        with self._lock:
            timing_stats = {
                stage: {"count": calls, "mean": total / calls, "max": peak}
                for stage, (calls, total, peak) in self._stages.items()
            }
            size_stats: Dict[str, Any] = {}
            if self._sizes:
                size_stats = {
                    "count": sum(self._sizes.values()),
                    "max": max(self._sizes),
                    "by_size": {str(size): n for size, n in sorted(self._sizes.items())},
                }
            return {
                "uptime_seconds": time.time() - self._start_time,
                "counters": dict(self._counters),
                "timing_stats": timing_stats,
                "palette_size_stats": size_stats,
            }

    def reset(self):
        with self._lock:
            self._counters.clear()
            self._stages.clear()
            self._sizes.clear()
            self._start_time = time.time()


_metrics: Optional[MetricsCollector] = None


def get_metrics() -> MetricsCollector:
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def reset_metrics():
    if _metrics is not None:
        _metrics.reset()
