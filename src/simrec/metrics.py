"""In-process counters for training and prediction.

One shared ``metrics_service`` records how often models are trained and
queried, how long each call took, and how many predictions came back empty or
failed. Hosts that embed the library read it with ``get_metrics()``.
"""

import math
import threading
from dataclasses import dataclass
from typing import Dict


@dataclass
class LatencyStats:
    """Running count and latency range of one kind of call."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = math.inf
    max_ms: float = 0.0

    def add(self, latency_ms: float) -> None:
        self.count += 1
        self.total_ms += latency_ms
        self.min_ms = min(self.min_ms, latency_ms)
        self.max_ms = max(self.max_ms, latency_ms)

    def summary(self, prefix: str) -> Dict[str, float]:
        return {
            f"{prefix}_count": self.count,
            f"average_{prefix}_ms": round(self.total_ms / self.count, 2) if self.count else 0.0,
            f"min_{prefix}_ms": round(self.min_ms, 2) if self.count else 0.0,
            f"max_{prefix}_ms": round(self.max_ms, 2),
        }


class MetricsService:
    """Thread-safe counters shared by every train and predict call."""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._predictions = LatencyStats()
            self._trainings = LatencyStats()
            self._empty_results = 0
            self._failed_predictions = 0
            self._last_trained_items = 0

    def record_prediction(self, latency_ms: float, num_results: int) -> None:
        """Record a completed predict call.

        Args:
            latency_ms: Latency in milliseconds
            num_results: Number of items returned
        """
        with self._lock:
            self._predictions.add(latency_ms)
            if num_results == 0:
                self._empty_results += 1

    def record_failed_prediction(self) -> None:
        """Record a predict call that raised instead of returning a result."""
        with self._lock:
            self._failed_predictions += 1

    def record_training(self, duration_ms: float, num_trained_items: int) -> None:
        """Record a completed training run and the number of items it vectorized."""
        with self._lock:
            self._trainings.add(duration_ms)
            self._last_trained_items = num_trained_items

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with metrics including:
            - predict_count, empty_result_count, failed_predict_count
            - average_latency_ms, min_latency_ms, max_latency_ms for predict
            - train_count and average/min/max training time in milliseconds
            - last_trained_items: Items with vectors in the latest model
        """
        with self._lock:
            predictions = self._predictions.summary("latency")
            metrics = {
                "predict_count": predictions.pop("latency_count"),
                "empty_result_count": self._empty_results,
                "failed_predict_count": self._failed_predictions,
                **predictions,
                **self._trainings.summary("train"),
                "last_trained_items": self._last_trained_items,
            }
            return metrics


metrics_service = MetricsService()
