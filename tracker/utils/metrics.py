"""
Metrics Collection for the recurrence and streak engine.

Counts materialized occurrences, streak credits and reverts, and sweep
outcomes, and accumulates sweep timings.
"""

import functools
import threading
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict


class MetricsCollector:
    """Collects in-process counters and timers."""

    COUNTERS = (
        "occurrences_materialized_total",
        "streak_credits_total",
        "streak_reverts_total",
        "sweep_runs_total",
        "sweep_users_processed_total",
        "sweep_user_errors_total",
    )

    def __init__(self):
        """Initialize metrics collector."""
        self.metrics = defaultdict(int)
        self.timers = defaultdict(float)
        self.lock = threading.Lock()

        for name in self.COUNTERS:
            self.metrics[name] = 0

    def increment_counter(self, metric_name: str, value: int = 1):
        """Increment a counter metric."""
        with self.lock:
            self.metrics[metric_name] += value

    def record_timer(self, metric_name: str, duration: float):
        """Record a timing metric."""
        with self.lock:
            self.timers[metric_name] += duration

    def get_metrics(self) -> Dict[str, Any]:
        """Get current metrics values."""
        with self.lock:
            return {
                "counters": dict(self.metrics),
                "timers": dict(self.timers),
                "timestamp": datetime.now(timezone.utc).isoformat()
            }

    def occurrence_materialized(self):
        self.increment_counter("occurrences_materialized_total")

    def streak_credited(self):
        self.increment_counter("streak_credits_total")

    def streak_reverted(self):
        self.increment_counter("streak_reverts_total")

    def sweep_started(self):
        self.increment_counter("sweep_runs_total")

    def sweep_user_processed(self):
        self.increment_counter("sweep_users_processed_total")

    def sweep_user_error(self):
        self.increment_counter("sweep_user_errors_total")

    def time_operation(self, metric_name: str) -> Callable:
        """Decorator accumulating the wall time of each call under ``metric_name``."""
        def decorator(func):
            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    return func(*args, **kwargs)
                finally:
                    self.record_timer(metric_name, time.time() - start_time)
            return wrapper
        return decorator


# Global metrics instance
metrics_collector = MetricsCollector()
