"""Task state machine models.

This module defines the data models for the task lifecycle:
- TaskStatus: Enum of task statuses
- SubmissionStage: Steps a single submission passes through
- Task: Complete record of a submitted task
- VALID_TRANSITIONS: Map defining allowed status transitions

A task starts as ``pending`` and moves exactly once to a terminal status,
``completed`` or ``failed``. Terminal statuses have no outgoing transitions.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class TaskStatus(str, Enum):
    """Statuses of a task record.

    Attributes:
        PENDING: Task recorded, agent not yet finished.
        COMPLETED: Agent produced a result and it was stored.
        FAILED: The pipeline failed after the task was recorded.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class SubmissionStage(str, Enum):
    """Steps of a single submission, used for events and diagnostics.

    Flow:
        received → recorded → routed → executed → persisted
    """

    RECEIVED = "received"
    RECORDED = "recorded"
    ROUTED = "routed"
    EXECUTED = "executed"
    PERSISTED = "persisted"


class Task(BaseModel):
    """A submitted prompt and the outcome of executing it.

    Attributes:
        id: Opaque identifier assigned by the task store.
        prompt: The original input text.
        status: Current task status.
        result: Agent output; set only when status is completed.
        error_message: Diagnostic; set only when status is failed.
        agent: Name of the agent that handled the task, when known.
        created_at: When the task was recorded (UTC).
        updated_at: When the task was last written (UTC).
    """

    id: str = Field(..., min_length=1, description="Task identifier")

    prompt: str = Field(..., min_length=1, description="Original prompt text")

    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        description="Current task status",
    )

    result: Optional[str] = Field(
        default=None,
        description="Agent output when the task completed",
    )

    error_message: Optional[str] = Field(
        default=None,
        description="Diagnostic when the task failed",
    )

    agent: Optional[str] = Field(
        default=None,
        description="Name of the agent that handled the task",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the task was recorded (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the task was last written (UTC)",
    )

    @model_validator(mode="after")
    def check_terminal_fields(self) -> "Task":
        """Ensure terminal fields match the status they belong to."""
        if self.result is not None and self.status != TaskStatus.COMPLETED:
            raise ValueError("result is only allowed on completed tasks")
        if self.error_message is not None and self.status != TaskStatus.FAILED:
            raise ValueError("error_message is only allowed on failed tasks")
        if self.status == TaskStatus.COMPLETED and self.result is None:
            raise ValueError("completed tasks must carry a result")
        if self.status == TaskStatus.FAILED and not self.error_message:
            raise ValueError("failed tasks must carry an error_message")
        return self

    @property
    def is_terminal(self) -> bool:
        return is_terminal_status(self.status)


# Completed and failed are both terminal; there is no recovery path.
VALID_TRANSITIONS: Dict[TaskStatus, List[TaskStatus]] = {
    TaskStatus.PENDING: [
        TaskStatus.COMPLETED,
        TaskStatus.FAILED,
    ],
    TaskStatus.COMPLETED: [],
    TaskStatus.FAILED: [],
}


def is_valid_transition(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """Check if a status transition is valid.

    Example:
        >>> is_valid_transition(TaskStatus.PENDING, TaskStatus.COMPLETED)
        True
        >>> is_valid_transition(TaskStatus.FAILED, TaskStatus.COMPLETED)
        False
    """
    return to_status in VALID_TRANSITIONS.get(from_status, [])


def is_terminal_status(status: TaskStatus) -> bool:
    """Check if a status has no outgoing transitions."""
    return len(VALID_TRANSITIONS.get(status, [])) == 0
