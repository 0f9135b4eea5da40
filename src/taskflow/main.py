"""FastAPI application entry point for the task service.

Wires the task store, completion provider, agent registry, and event
emitters into a TaskOrchestrator at startup and exposes:
- POST /api/orchestrator: submit a prompt
- GET /health: liveness probe
- GET /ready: readiness probe (task store connectivity)
- GET /metrics: Prometheus metrics
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from .api.handler import SubmissionHandler
from .config import TaskflowSettings, get_settings
from .events.emitter import EventEmitter, create_event_emitter
from .events.metrics import generate_metrics_output
from .llm.provider import ChatCompletionProvider, CompletionProvider
from .orchestrator import TaskOrchestrator
from .routing.registry import build_default_registry
from .state.repository import PostgresTaskStore
from .state.store import InMemoryTaskStore, TaskStore

logger = logging.getLogger(__name__)


def _redact_secret(value: Optional[str], visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters."""
    if not value:
        return "(not set)"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: TaskflowSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Taskflow configuration:")
    logger.info(f"  Database URL: {_redact_secret(settings.database_url)}")
    logger.info(f"  LLM API Key: {_redact_secret(settings.llm_api_key)}")
    logger.info(f"  LLM Base URL: {settings.llm_base_url or '(default)'}")
    logger.info(f"  LLM Model: {settings.llm_model}")
    logger.info(f"  LLM Timeout Seconds: {settings.llm_timeout_seconds}")
    logger.info(f"  Meeting Triggers: {settings.meeting_triggers}")
    logger.info(f"  Event Sinks: {[s.value for s in settings.event_sinks]}")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")


def _build_provider(cfg: TaskflowSettings) -> ChatCompletionProvider:
    return ChatCompletionProvider(
        model_name=cfg.llm_model,
        system_prompt=cfg.llm_system_prompt,
        api_key=cfg.llm_api_key,
        base_url=cfg.llm_base_url,
        timeout=cfg.llm_timeout_seconds,
        temperature=cfg.llm_temperature,
    )


async def _build_store(cfg: TaskflowSettings) -> TaskStore:
    """Connect the PostgreSQL store, or fall back to memory without a URL."""
    if cfg.database_url is None:
        logger.warning(
            "TASKFLOW_DATABASE_URL not set; tasks are kept in memory only"
        )
        return InMemoryTaskStore()

    store = PostgresTaskStore(
        cfg.database_url,
        min_pool_size=cfg.db_min_pool_size,
        max_pool_size=cfg.db_max_pool_size,
    )
    await store.connect()
    if cfg.db_create_schema:
        try:
            await store.ensure_schema()
        except Exception:
            logger.exception("Failed to create tasks table; closing pool")
            await store.disconnect()
            raise
    return store


def create_app(
    settings: Optional[TaskflowSettings] = None,
    store: Optional[TaskStore] = None,
    provider: Optional[CompletionProvider] = None,
    event_emitter: Optional[EventEmitter] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Collaborators passed in are used as-is; the rest are built from
    settings during startup. Components are stored on ``app.state``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Taskflow starting up...")

        cfg = settings or get_settings()
        logging.getLogger().setLevel(cfg.log_level)
        _log_configuration(cfg)

        task_store = store if store is not None else await _build_store(cfg)
        completion_provider = provider or _build_provider(cfg)
        emitter = event_emitter or create_event_emitter(cfg.event_sinks)

        registry = build_default_registry(
            completion_provider, meeting_triggers=cfg.meeting_triggers
        )
        orchestrator = TaskOrchestrator(
            store=task_store,
            registry=registry,
            event_emitter=emitter,
        )

        app.state.store = task_store
        app.state.orchestrator = orchestrator
        app.state.handler = SubmissionHandler(orchestrator)

        logger.info("Taskflow started successfully")

        yield

        logger.info("Taskflow shutting down...")
        await emitter.close()
        if store is None and isinstance(task_store, PostgresTaskStore):
            await task_store.disconnect()
        logger.info("Taskflow shutdown complete")

    app = FastAPI(
        title="Taskflow",
        description="Routes natural-language task requests to agents",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health():
        """Liveness probe endpoint."""
        return {"status": "healthy"}

    @app.get("/ready")
    async def ready(request: Request):
        """Readiness probe endpoint; 503 when the task store is unreachable."""
        task_store = request.app.state.store
        check = getattr(task_store, "health_check", None)
        healthy = await check() if check is not None else True

        database_status = "healthy" if healthy else "unhealthy"
        body = {
            "status": "ready" if healthy else "not_ready",
            "dependencies": {"database": database_status},
        }
        return JSONResponse(body, status_code=200 if healthy else 503)

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_metrics_output(), media_type=CONTENT_TYPE_LATEST
        )

    @app.post("/api/orchestrator")
    async def submit_task(request: Request):
        """Submit a prompt and return the agent's response."""
        logger.info("Orchestrator endpoint hit")
        try:
            payload = await request.json()
        except ValueError:
            payload = None

        result = await request.app.state.handler.handle(payload)
        return JSONResponse(result.body, status_code=result.status_code)

    return app


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    dev_settings = get_settings()
    uvicorn.run(
        "src.taskflow.main:app",
        host=dev_settings.host,
        port=dev_settings.port,
        reload=True,
    )
