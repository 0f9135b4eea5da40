"""Unit tests for task models and the in-memory task store."""

import asyncio

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.taskflow.errors import PersistenceError, TaskNotFoundError
from src.taskflow.state.models import (
    VALID_TRANSITIONS,
    Task,
    TaskStatus,
    is_terminal_status,
    is_valid_transition,
)
from src.taskflow.state.store import InMemoryTaskStore, TaskStore


def run_async(coro):
    return asyncio.run(coro)


# =============================================================================
# Task model
# =============================================================================


class TestTask:
    def test_new_task_is_pending(self):
        task = Task(id="t-1", prompt="Draft an email")

        assert task.status == TaskStatus.PENDING
        assert task.result is None
        assert task.error_message is None
        assert not task.is_terminal
        assert task.created_at.tzinfo is not None

    def test_completed_task_requires_result(self):
        with pytest.raises(PydanticValidationError):
            Task(id="t-1", prompt="Draft", status=TaskStatus.COMPLETED)

    def test_failed_task_requires_error_message(self):
        with pytest.raises(PydanticValidationError):
            Task(id="t-1", prompt="Draft", status=TaskStatus.FAILED)

    def test_result_only_on_completed(self):
        with pytest.raises(PydanticValidationError):
            Task(id="t-1", prompt="Draft", result="text")

    def test_error_message_only_on_failed(self):
        with pytest.raises(PydanticValidationError):
            Task(
                id="t-1",
                prompt="Draft",
                status=TaskStatus.COMPLETED,
                result="text",
                error_message="boom",
            )

    def test_empty_prompt_rejected(self):
        with pytest.raises(PydanticValidationError):
            Task(id="t-1", prompt="")

    def test_empty_result_is_allowed_on_completed(self):
        task = Task(id="t-1", prompt="Draft", status=TaskStatus.COMPLETED, result="")

        assert task.is_terminal


class TestTransitions:
    @pytest.mark.parametrize("to_status", [TaskStatus.COMPLETED, TaskStatus.FAILED])
    def test_pending_moves_to_terminal(self, to_status):
        assert is_valid_transition(TaskStatus.PENDING, to_status)

    @pytest.mark.parametrize("from_status", [TaskStatus.COMPLETED, TaskStatus.FAILED])
    def test_terminal_statuses_have_no_exits(self, from_status):
        assert is_terminal_status(from_status)
        for to_status in TaskStatus:
            assert not is_valid_transition(from_status, to_status)

    def test_every_status_has_a_transition_entry(self):
        assert set(VALID_TRANSITIONS) == set(TaskStatus)
        assert not is_terminal_status(TaskStatus.PENDING)


# =============================================================================
# InMemoryTaskStore
# =============================================================================


@pytest.fixture
def store():
    return InMemoryTaskStore()


class TestInMemoryTaskStore:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, TaskStore)

    def test_create_returns_distinct_ids(self, store):
        first = run_async(store.create("one"))
        second = run_async(store.create("two"))

        assert first != second
        assert len(store) == 2

    def test_created_task_is_pending(self, store):
        task_id = run_async(store.create("Draft an email"))

        task = run_async(store.get(task_id))
        assert task.status == TaskStatus.PENDING
        assert task.prompt == "Draft an email"

    def test_mark_completed_stores_result_and_agent(self, store):
        task_id = run_async(store.create("Draft an email"))

        run_async(store.mark_completed(task_id, "Here is a draft", agent="assistant"))

        task = run_async(store.get(task_id))
        assert task.status == TaskStatus.COMPLETED
        assert task.result == "Here is a draft"
        assert task.agent == "assistant"
        assert task.updated_at >= task.created_at

    def test_mark_failed_stores_error(self, store):
        task_id = run_async(store.create("Draft an email"))

        run_async(store.mark_failed(task_id, "provider unavailable"))

        task = run_async(store.get(task_id))
        assert task.status == TaskStatus.FAILED
        assert task.error_message == "provider unavailable"
        assert task.result is None

    def test_terminal_task_cannot_be_rewritten(self, store):
        task_id = run_async(store.create("Draft an email"))
        run_async(store.mark_completed(task_id, "done"))

        with pytest.raises(PersistenceError) as exc_info:
            run_async(store.mark_failed(task_id, "late failure"))

        assert exc_info.value.task_id == task_id
        task = run_async(store.get(task_id))
        assert task.status == TaskStatus.COMPLETED
        assert task.result == "done"

    @pytest.mark.parametrize("method", ["mark_completed", "mark_failed"])
    def test_unknown_task_raises_not_found(self, store, method):
        with pytest.raises(TaskNotFoundError):
            run_async(getattr(store, method)("missing", "text"))

    def test_get_unknown_returns_none(self, store):
        assert run_async(store.get("missing")) is None

    def test_health_check(self, store):
        assert run_async(store.health_check()) is True

    def test_tasks_returns_copy(self, store):
        run_async(store.create("Draft an email"))

        snapshot = store.tasks
        snapshot.clear()

        assert len(store) == 1
