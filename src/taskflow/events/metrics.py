"""Prometheus metrics for task observability.

Metrics Defined:
- taskflow_tasks_processed_total: Counter of tasks reaching a terminal
  status, labelled by agent and result
- taskflow_tasks_failed_total: Counter of failures, labelled by the stage
  where they occurred
- taskflow_processing_duration_seconds: Histogram of intake-to-result time

MetricsEventEmitter updates these from task events; the /metrics endpoint
serves them through generate_metrics_output().
"""

import logging
from typing import Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from src.taskflow.events.emitter import EventEmitter
from src.taskflow.events.models import EventType, TaskEvent


logger = logging.getLogger(__name__)


# Completion calls usually finish in seconds; the tail covers slow providers.
DEFAULT_DURATION_BUCKETS = (
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
    30.0,
    60.0,
)


class TaskMetrics:
    """Container for the service's Prometheus metrics.

    Pass a dedicated CollectorRegistry in tests to avoid duplicate
    registration on the global registry.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or REGISTRY

        self.tasks_processed_total = Counter(
            "taskflow_tasks_processed_total",
            "Total number of tasks that reached a terminal status",
            labelnames=["agent", "result"],
            registry=self.registry,
        )

        self.tasks_failed_total = Counter(
            "taskflow_tasks_failed_total",
            "Total number of task failures by pipeline stage",
            labelnames=["stage"],
            registry=self.registry,
        )

        self.processing_duration_seconds = Histogram(
            "taskflow_processing_duration_seconds",
            "Time from task intake to stored result in seconds",
            labelnames=["agent"],
            buckets=DEFAULT_DURATION_BUCKETS,
            registry=self.registry,
        )

    def record_task_processed(self, agent: str, success: bool) -> None:
        result = "success" if success else "failure"
        self.tasks_processed_total.labels(agent=agent, result=result).inc()

    def record_task_failed(self, stage: str) -> None:
        self.tasks_failed_total.labels(stage=stage).inc()

    def record_processing_duration(self, agent: str, duration_seconds: float) -> None:
        self.processing_duration_seconds.labels(agent=agent).observe(
            duration_seconds
        )


_default_metrics: Optional[TaskMetrics] = None


def get_metrics(registry: Optional[CollectorRegistry] = None) -> TaskMetrics:
    """Get the global metrics instance, or a new one for a custom registry."""
    global _default_metrics

    if registry is not None:
        return TaskMetrics(registry=registry)

    if _default_metrics is None:
        _default_metrics = TaskMetrics()

    return _default_metrics


def generate_metrics_output(registry: Optional[CollectorRegistry] = None) -> bytes:
    """Render metrics in the Prometheus text exposition format."""
    return generate_latest(registry or REGISTRY)


class MetricsEventEmitter(EventEmitter):
    """Event emitter that updates Prometheus metrics.

    - ERROR: increments the failure counter for the stage and, when the
      task was marked failed, the processed counter with result=failure
    - COMPLETION: increments the processed counter and records duration
    - STATE_TRANSITION: ignored
    """

    def __init__(
        self,
        metrics: Optional[TaskMetrics] = None,
        registry: Optional[CollectorRegistry] = None,
    ):
        self._metrics = metrics if metrics is not None else get_metrics(registry)

    @property
    def metrics(self) -> TaskMetrics:
        return self._metrics

    async def emit(self, event: TaskEvent) -> None:
        try:
            if event.event_type == EventType.ERROR:
                self._handle_error(event)
            elif event.event_type == EventType.COMPLETION:
                self._handle_completion(event)
        except Exception as e:
            logger.error(
                "Failed to update metrics for event %s: %s",
                event.event_type.value,
                str(e),
                extra={"event_type": event.event_type.value, "task_id": event.task_id},
            )

    def _handle_error(self, event: TaskEvent) -> None:
        self._metrics.record_task_failed(event.details.get("stage", "unknown"))
        if event.details.get("compensated"):
            self._metrics.record_task_processed(
                agent=event.agent or "unknown", success=False
            )

    def _handle_completion(self, event: TaskEvent) -> None:
        agent = event.agent or "unknown"
        self._metrics.record_task_processed(agent=agent, success=True)

        duration = event.details.get("duration_seconds")
        if duration is not None:
            self._metrics.record_processing_duration(agent, float(duration))
