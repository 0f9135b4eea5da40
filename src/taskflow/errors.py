"""Error taxonomy for the task pipeline.

Every failure the orchestrator can surface derives from TaskflowError so
the HTTP layer can map it to a response without inspecting messages:

- ValidationError: missing or empty prompt (400, no task recorded)
- PersistenceError: the task store rejected a write (500)
- ResultNotRecordedError: the agent succeeded but the result was not stored
- RoutingError: agent selection raised (500)
- ProviderError: the completion provider failed
- AgentExecutionError: the selected agent could not produce a result (500)
- CompensationError: the best-effort terminal write itself failed

Errors raised once a task id exists carry it as ``task_id``. When the
compensating write fails, its CompensationError is attached to the original
error as ``compensation_error`` instead of replacing it.
"""

from typing import Optional


class TaskflowError(Exception):
    """Base class for all pipeline errors.

    Attributes:
        message: Human-readable error description.
        task_id: Identifier of the task the error belongs to, if one exists.
        compensation_error: Failure of the compensating write, if any.
    """

    def __init__(self, message: str, task_id: Optional[str] = None):
        self.message = message
        self.task_id = task_id
        self.compensation_error: Optional["CompensationError"] = None
        super().__init__(message)


class ValidationError(TaskflowError):
    """Raised when the submitted prompt is missing or empty."""


class PersistenceError(TaskflowError):
    """Raised when a task store operation fails.

    Wraps underlying driver errors to give callers a single type to handle.

    Attributes:
        original_error: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        task_id: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, task_id=task_id)
        self.original_error = original_error


class ResultNotRecordedError(PersistenceError):
    """Raised when an agent succeeded but its result could not be stored."""


class TaskNotFoundError(PersistenceError):
    """Raised when a terminal write targets an unknown task id."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}", task_id=task_id)


class RoutingError(TaskflowError):
    """Raised when agent selection fails for a recorded task."""

    def __init__(
        self,
        message: str,
        task_id: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, task_id=task_id)
        self.cause = cause


class ProviderError(TaskflowError):
    """Raised when the completion provider fails or returns no content.

    Attributes:
        cause: The underlying client exception, if any.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class AgentExecutionError(TaskflowError):
    """Raised when the selected agent could not produce a result.

    Attributes:
        agent: Name of the agent that failed.
        cause: The exception raised by the agent (a ProviderError for the
            assistant agent).
    """

    def __init__(
        self,
        message: str,
        agent: str,
        task_id: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, task_id=task_id)
        self.agent = agent
        self.cause = cause


class CompensationError(TaskflowError):
    """Raised when the best-effort terminal write fails.

    Attributes:
        original_error: The store failure that prevented the write.
    """

    def __init__(
        self,
        message: str,
        task_id: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, task_id=task_id)
        self.original_error = original_error
