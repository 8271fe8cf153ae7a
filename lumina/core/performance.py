"""
Stage timing for the analysis pipeline.
"""
import time
import logging
from typing import Dict, Optional, Any
from functools import wraps
from collections import defaultdict
import threading

logger = logging.getLogger(__name__)

# Thread-safe metrics storage
_metrics_lock = threading.Lock()
_metrics: Dict[str, list] = defaultdict(list)

MAX_SAMPLES_PER_METRIC = 1000


class PerformanceMonitor:
    """Collect and summarize stage durations."""

    @staticmethod
    def record_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None):
        """
        Record a duration sample.

        Args:
            name: Stage name (e.g. 'profile_dataset', 'health_score')
            value: Duration in seconds
            metadata: Optional details such as status or column count
        """
        with _metrics_lock:
            samples = _metrics[name]
            samples.append({
                'value': value,
                'timestamp': time.time(),
                'metadata': metadata or {}
            })
            if len(samples) > MAX_SAMPLES_PER_METRIC:
                _metrics[name] = samples[-MAX_SAMPLES_PER_METRIC:]

    @staticmethod
    def get_stats(metric_name: str) -> Optional[Dict[str, float]]:
        """
        Summary statistics for a stage.

        Returns:
            Dict with count, min, max, mean, p50, p95, or None if no data
        """
        with _metrics_lock:
            samples = _metrics.get(metric_name)
            if not samples:
                return None
            values = sorted(m['value'] for m in samples)

        return {
            'count': len(values),
            'min': values[0],
            'max': values[-1],
            'mean': sum(values) / len(values),
            'p50': values[len(values) // 2],
            'p95': values[int(len(values) * 0.95)],
        }

    @staticmethod
    def get_all_metrics() -> Dict[str, Dict[str, float]]:
        with _metrics_lock:
            names = list(_metrics.keys())
        return {name: PerformanceMonitor.get_stats(name) for name in names}

    @staticmethod
    def clear_metrics():
        """Clear all metrics (useful for testing)."""
        with _metrics_lock:
            _metrics.clear()


def track_performance(metric_name: str):
    """
    Decorator recording how long a stage takes.

    Usage:
        @track_performance("profile_dataset")
        def profile_dataset(...):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start_time
                PerformanceMonitor.record_metric(metric_name, duration, {'status': 'error', 'error': str(e)})
                logger.error(
                    f"{metric_name} failed after {duration:.3f}s: {e}",
                    extra={'metric': metric_name, 'duration': duration},
                    exc_info=True
                )
                raise

            duration = time.perf_counter() - start_time
            PerformanceMonitor.record_metric(metric_name, duration, {'status': 'success'})
            logger.debug(
                f"{metric_name} completed in {duration:.3f}s",
                extra={'metric': metric_name, 'duration': duration}
            )
            return result

        return wrapper

    return decorator
