"""Performance monitoring for attribution passes.

Answers are re-aligned every time they are re-rendered, so the pipeline
tracks how long the reconcile and align phases take.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class PerformanceMetrics:
    """Performance metrics for one pipeline phase."""

    operation_name: str
    start_time: float = field(default_factory=time.perf_counter)
    end_time: Optional[float] = None
    duration: Optional[float] = None
    success: bool = True
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def finish(self, success: bool = True, error: Optional[str] = None) -> None:
        """Mark the operation as finished."""
        self.end_time = time.perf_counter()
        self.duration = self.end_time - self.start_time
        self.success = success
        self.error = error


class PerformanceMonitor:
    """
    Monitor and track durations of pipeline phases.

    Operations slower than ``slow_threshold`` seconds are logged.
    """

    def __init__(self, slow_threshold: float = 0.5, history_limit: int = 500):
        """
        Initialize the performance monitor.

        Args:
            slow_threshold: Duration in seconds above which a phase is logged.
            history_limit: Maximum number of metrics kept per operation.
        """
        self.slow_threshold = slow_threshold
        self.history_limit = history_limit
        self.metrics: Dict[str, List[PerformanceMetrics]] = {}

    def start_operation(self, operation_name: str, **metadata) -> PerformanceMetrics:
        """Start tracking an operation."""
        return PerformanceMetrics(operation_name=operation_name, metadata=metadata)

    def end_operation(
        self,
        metric: PerformanceMetrics,
        success: bool = True,
        error: Optional[str] = None
    ) -> None:
        """
        End tracking an operation.

        Args:
            metric: The metric returned by start_operation.
            success: Whether the operation succeeded.
            error: Optional error message.
        """
        metric.finish(success=success, error=error)

        history = self.metrics.setdefault(metric.operation_name, [])
        history.append(metric)
        if len(history) > self.history_limit:
            del history[: len(history) - self.history_limit]

        if metric.duration is not None and metric.duration > self.slow_threshold:
            logger.warning(
                f"Operation '{metric.operation_name}' was slow: "
                f"{metric.duration:.3f}s > {self.slow_threshold}s"
            )

    def get_operation_stats(self, operation_name: str) -> Dict[str, Any]:
        """
        Get statistics for a specific operation.

        Returns:
            Dictionary with statistics (avg, min, max, count), empty if the
            operation was never tracked.
        """
        if operation_name not in self.metrics:
            return {}

        durations = [
            m.duration for m in self.metrics[operation_name]
            if m.duration is not None
        ]

        if not durations:
            return {}

        return {
            "count": len(durations),
            "average": sum(durations) / len(durations),
            "min": min(durations),
            "max": max(durations),
            "total": sum(durations),
            "success_rate": sum(
                1 for m in self.metrics[operation_name] if m.success
            ) / len(self.metrics[operation_name])
        }

    def get_all_stats(self) -> Dict[str, Dict[str, Any]]:
        """Get statistics for all tracked operations."""
        return {
            name: self.get_operation_stats(name)
            for name in self.metrics.keys()
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self.metrics.clear()
