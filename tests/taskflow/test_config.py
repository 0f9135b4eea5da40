"""Tests for service configuration."""

import pytest
from pydantic import ValidationError

from src.taskflow.config import TaskflowSettings, get_settings
from src.taskflow.events.emitter import EventSinkType
from src.taskflow.llm.provider import DEFAULT_MODEL, DEFAULT_SYSTEM_PROMPT


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "TASKFLOW_DATABASE_URL",
        "TASKFLOW_LLM_API_KEY",
        "TASKFLOW_LLM_BASE_URL",
        "TASKFLOW_LLM_MODEL",
        "TASKFLOW_MEETING_TRIGGERS",
        "TASKFLOW_EVENT_SINKS",
        "TASKFLOW_LOG_LEVEL",
        "TASKFLOW_PORT",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = TaskflowSettings()

    assert settings.database_url is None
    assert settings.llm_model == DEFAULT_MODEL
    assert settings.llm_system_prompt == DEFAULT_SYSTEM_PROMPT
    assert settings.meeting_triggers == ["schedule a meeting", "meeting with"]
    assert settings.event_sinks == [EventSinkType.LOGGING, EventSinkType.METRICS]
    assert settings.log_level == "INFO"
    assert settings.port == 8080


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("TASKFLOW_DATABASE_URL", "postgresql://db/taskflow")
    monkeypatch.setenv("TASKFLOW_LLM_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("TASKFLOW_MEETING_TRIGGERS", '["book a call", "  "]')
    monkeypatch.setenv("TASKFLOW_EVENT_SINKS", '["logging"]')
    monkeypatch.setenv("TASKFLOW_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.database_url == "postgresql://db/taskflow"
    assert settings.llm_model == "gpt-4o-mini"
    assert settings.meeting_triggers == ["book a call"]
    assert settings.event_sinks == [EventSinkType.LOGGING]
    assert settings.log_level == "DEBUG"


def test_blank_database_url_means_in_memory():
    assert TaskflowSettings(database_url="  ").database_url is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"database_url": "mysql://db/taskflow"},
        {"llm_base_url": "ftp://llm"},
        {"llm_model": "  "},
        {"llm_system_prompt": ""},
        {"llm_timeout_seconds": 0},
        {"meeting_triggers": ["", "   "]},
        {"db_min_pool_size": 0},
        {"log_level": "chatty"},
        {"port": 70000},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        TaskflowSettings(**overrides)
