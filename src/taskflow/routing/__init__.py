"""Prompt classification and agent selection."""

from src.taskflow.routing.registry import (
    DEFAULT_MEETING_TRIGGERS,
    AgentRegistry,
    Route,
    build_default_registry,
    keyword_predicate,
)

__all__ = [
    "AgentRegistry",
    "DEFAULT_MEETING_TRIGGERS",
    "Route",
    "build_default_registry",
    "keyword_predicate",
]
