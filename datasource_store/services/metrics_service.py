"""
Metrics Service - In-process counters for store operations.
"""

import logging
from collections import defaultdict
from threading import Lock
from typing import Dict, Optional, Union

from ..config import settings

logger = logging.getLogger(__name__)

# Incremented on every single-datasource lookup
DB_DATASOURCE_QUERY_BY_ID = "db_datasource_query_by_id"


class MetricsService:
    """Singleton registry of named counters"""

    _instance = None
    _lock = Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(MetricsService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._metrics: Dict[str, 'MetricCounter'] = {}
        self._metric_locks = defaultdict(Lock)
        self._enabled = settings.METRICS_ENABLED
        self._initialized = True

    @classmethod
    def instance(cls) -> 'MetricsService':
        """Get singleton instance"""
        return cls()

    def counter(self, metric_name: str, description: Optional[str] = None) -> 'MetricCounter':
        """
        Get or create a counter metric.

        Args:
            metric_name: Name of the metric
            description: Optional description of the metric

        Returns:
            MetricCounter instance (no-op when metrics are disabled)
        """
        if not self._enabled:
            return NoOpMetricCounter()

        with self._metric_locks[metric_name]:
            if metric_name not in self._metrics:
                self._metrics[metric_name] = MetricCounter(
                    name=metric_name,
                    description=description or f"{metric_name} metric"
                )
                logger.debug(f"Registered new counter metric: {metric_name}")

            return self._metrics[metric_name]

    def snapshot(self) -> Dict[str, Union[int, float]]:
        """Current value of every registered counter"""
        return {name: metric.get_value() for name, metric in self._metrics.items()}


class MetricCounter:
    """Counter metric implementation"""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._value = 0
        self._lock = Lock()

    def observe(self, value: Union[int, float] = 1):
        """Increment counter by value"""
        with self._lock:
            self._value += value

    def increment(self):
        """Increment counter by 1"""
        self.observe(1)

    def get_value(self) -> Union[int, float]:
        """Get current counter value"""
        return self._value


class NoOpMetricCounter:
    def observe(self, value=1): pass
    def increment(self): pass
    def get_value(self): return 0
