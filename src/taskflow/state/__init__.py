"""Task state machine and persistence.

Tasks progress from pending to exactly one terminal status:
- pending → completed
- pending → failed

State is persisted through the TaskStore protocol, backed by PostgreSQL in
production and by an in-memory dict for development and tests.
"""

from src.taskflow.state.models import (
    SubmissionStage,
    Task,
    TaskStatus,
    VALID_TRANSITIONS,
    is_terminal_status,
    is_valid_transition,
)
from src.taskflow.state.repository import PostgresTaskStore
from src.taskflow.state.store import InMemoryTaskStore, TaskStore

__all__ = [
    # Models
    "SubmissionStage",
    "Task",
    "TaskStatus",
    "VALID_TRANSITIONS",
    "is_terminal_status",
    "is_valid_transition",
    # Stores
    "InMemoryTaskStore",
    "PostgresTaskStore",
    "TaskStore",
]
