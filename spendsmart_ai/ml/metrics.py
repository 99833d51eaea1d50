"""
Run metrics for the analytics service.
"""

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


class AnalyticsMetrics:
    """
    Counters for forecast and anomaly runs.

    Owned by a single AnalyticsService; nothing here is shared between services.
    """

    def __init__(self):
        self.total_requests = 0
        self.successful_runs = 0
        self.failed_runs = 0
        self.items_produced = 0
        self.total_processing_time = 0.0
        self.operations: Dict[str, Dict[str, float]] = {}

    def record_run(self, operation: str, items_count: int, processing_time: float, success: bool = True):
        """Record one run; ``items_count`` is months forecast or anomalies returned."""
        self.total_requests += 1
        self.total_processing_time += processing_time

        op = self.operations.setdefault(operation, {"runs": 0, "failures": 0, "seconds": 0.0})
        op["runs"] += 1
        op["seconds"] += processing_time

        if success:
            self.successful_runs += 1
            self.items_produced += items_count
        else:
            self.failed_runs += 1
            op["failures"] += 1

        logger.info(
            f"{operation} run {'succeeded' if success else 'failed'} in {processing_time:.3f}s "
            f"({items_count} items; {self.successful_runs}/{self.total_requests} runs ok)"
        )

    def get_average_processing_time(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_processing_time / self.total_requests

    def get_stats(self) -> Dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "successful_runs": self.successful_runs,
            "failed_runs": self.failed_runs,
            "items_produced": self.items_produced,
            "runs_by_operation": {name: int(op["runs"]) for name, op in self.operations.items()},
            "average_processing_time_seconds": self.get_average_processing_time(),
            "success_rate": self.successful_runs / self.total_requests if self.total_requests else 0.0,
        }
