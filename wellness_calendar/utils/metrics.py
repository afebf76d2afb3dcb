"""
Metrics collection for activity materialization and group mutations.
"""

import time
from typing import Dict, Any
from collections import defaultdict
from contextlib import contextmanager
from datetime import datetime
import threading


class MetricsCollector:
    """Collects counters and cumulative timers for the calendar service."""

    def __init__(self):
        """Initialize metrics collector."""
        self.metrics = defaultdict(int)
        self.timers = defaultdict(float)
        self.lock = threading.Lock()

        self.metrics["activities_materialized_total"] = 0
        self.metrics["activity_batches_failed_total"] = 0
        self.metrics["group_mutations_total"] = 0
        self.metrics["presets_activated_total"] = 0

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
                "timestamp": datetime.utcnow().isoformat()
            }

    def reset(self):
        """Zero every counter and timer."""
        with self.lock:
            for key in list(self.metrics):
                self.metrics[key] = 0
            self.timers.clear()

    def activities_materialized(self, count: int):
        self.increment_counter("activities_materialized_total", count)

    def activity_batch_failed(self):
        self.increment_counter("activity_batches_failed_total")

    def group_mutation(self):
        self.increment_counter("group_mutations_total")

    def preset_activated(self):
        self.increment_counter("presets_activated_total")

    @contextmanager
    def time_operation(self, metric_name: str):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            self.record_timer(metric_name, time.time() - start_time)


# Global metrics instance
metrics_collector = MetricsCollector()
