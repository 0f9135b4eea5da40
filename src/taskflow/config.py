"""Service configuration using pydantic-settings.

This module defines the TaskflowSettings class that reads configuration
from environment variables with the TASKFLOW_ prefix. Every field has a
default, so the service starts locally with an in-memory task store and
the OpenAI endpoint (which still needs an API key at request time).

List fields such as TASKFLOW_MEETING_TRIGGERS are given as JSON arrays.
"""

from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.taskflow.events.emitter import EventSinkType
from src.taskflow.llm.provider import DEFAULT_MODEL, DEFAULT_SYSTEM_PROMPT
from src.taskflow.routing.registry import DEFAULT_MEETING_TRIGGERS


class TaskflowSettings(BaseSettings):
    """Service configuration from environment variables.

    All environment variables are prefixed with TASKFLOW_ (e.g.,
    TASKFLOW_DATABASE_URL).
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKFLOW_",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Database Configuration
    # -------------------------------------------------------------------------
    # PostgreSQL connection string; an in-memory store is used when unset
    database_url: Optional[str] = None

    db_min_pool_size: int = 1
    db_max_pool_size: int = 10

    # Create the tasks table on startup when it is missing
    db_create_schema: bool = True

    # -------------------------------------------------------------------------
    # Completion Provider Configuration
    # -------------------------------------------------------------------------
    # API key for the completion endpoint; falls back to OPENAI_API_KEY
    llm_api_key: Optional[str] = None

    # OpenAI-compatible endpoint override
    llm_base_url: Optional[str] = None

    llm_model: str = DEFAULT_MODEL

    llm_system_prompt: str = DEFAULT_SYSTEM_PROMPT

    llm_timeout_seconds: Optional[float] = None

    llm_temperature: Optional[float] = None

    # -------------------------------------------------------------------------
    # Routing Configuration
    # -------------------------------------------------------------------------
    # Phrases that route a prompt to the meeting agent
    meeting_triggers: List[str] = list(DEFAULT_MEETING_TRIGGERS)

    # -------------------------------------------------------------------------
    # Observability Configuration
    # -------------------------------------------------------------------------
    event_sinks: List[EventSinkType] = [
        EventSinkType.LOGGING,
        EventSinkType.METRICS,
    ]

    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"

    port: int = 8080

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate that the database URL uses a PostgreSQL scheme."""
        if v is None or not v.strip():
            return None
        if not v.startswith(("postgresql://", "postgres://")):
            raise ValueError(
                "database_url must start with postgresql:// or postgres://"
            )
        return v

    @field_validator("llm_base_url")
    @classmethod
    def validate_llm_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate that the LLM base URL is an http(s) URL."""
        if v is None or not v.strip():
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("llm_base_url must start with http:// or https://")
        return v

    @field_validator("llm_model", "llm_system_prompt")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v

    @field_validator("llm_timeout_seconds")
    @classmethod
    def validate_llm_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Validate that the timeout is positive when given."""
        if v is not None and v <= 0:
            raise ValueError("llm_timeout_seconds must be positive")
        return v

    @field_validator("meeting_triggers")
    @classmethod
    def validate_meeting_triggers(cls, v: List[str]) -> List[str]:
        """Validate that at least one non-blank trigger phrase is configured."""
        triggers = [t.strip() for t in v if t and t.strip()]
        if not triggers:
            raise ValueError("meeting_triggers must contain a non-empty phrase")
        return triggers

    @field_validator("db_min_pool_size", "db_max_pool_size")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("pool sizes must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v


def get_settings() -> TaskflowSettings:
    """Create and return a TaskflowSettings instance.

    Raises:
        pydantic.ValidationError: If a configured value is invalid.
    """
    return TaskflowSettings()
