"""Task event emission and metrics.

Event Emitters:
- EventEmitter: Abstract base class for event emission
- LoggingEventEmitter: Emits events as structured log entries
- CompositeEventEmitter: Emits to multiple sinks simultaneously
- MetricsEventEmitter: Emits events as Prometheus metrics
- NullEventEmitter: Discards events (for testing)
"""

from src.taskflow.events.emitter import (
    CompositeEventEmitter,
    EventEmitter,
    EventSinkType,
    LoggingEventEmitter,
    NullEventEmitter,
    create_event_emitter,
)
from src.taskflow.events.metrics import (
    MetricsEventEmitter,
    TaskMetrics,
    generate_metrics_output,
    get_metrics,
)
from src.taskflow.events.models import EventType, TaskEvent

__all__ = [
    # Event models
    "EventType",
    "TaskEvent",
    # Event emitters
    "EventEmitter",
    "LoggingEventEmitter",
    "CompositeEventEmitter",
    "MetricsEventEmitter",
    "NullEventEmitter",
    # Metrics
    "TaskMetrics",
    "get_metrics",
    "generate_metrics_output",
    # Factory
    "EventSinkType",
    "create_event_emitter",
]
