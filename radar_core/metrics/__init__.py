"""
Metrics Module: Diagnostics, counters, histograms.

Every dropped sample, reading or projection is counted under a reason code
so that "no estimate" outcomes can be explained after the fact:
- Counters: signal_samples_in, readings_appended, multilateration_success, ...
- Histograms: multilateration_residual_m2, bearing_confidence, ...
- Drop reasons: unreadable_signal, insufficient_motion, stale_emitter, ...

Usage:
    from radar_core.metrics import get_metrics

    metrics = get_metrics()
    metrics.increment('signal_samples_in')
    metrics.increment_drop('unreadable_signal')
    metrics.record_histogram('multilateration_residual_m2', 0.42)
"""

from .counters import MetricsCollector

# Global singleton for easy access
_global_metrics = None


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector singleton.

    Returns:
        MetricsCollector instance
    """
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = MetricsCollector()
    return _global_metrics


def reset_metrics():
    """Reset global metrics (for testing)."""
    global _global_metrics
    _global_metrics = MetricsCollector()


__all__ = ['MetricsCollector', 'get_metrics', 'reset_metrics']
