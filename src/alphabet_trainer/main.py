"""FastAPI application entry point."""

import asyncio
import logging
import os
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from alphabet_trainer.api.routes import router, set_service
from alphabet_trainer.config import Settings, get_settings, load_vocabulary
from alphabet_trainer.engine.service import PracticeService
from alphabet_trainer.storage.debounce import DebouncedWriter
from alphabet_trainer.storage.progress_store import JsonProgressStore, initialize_progress


def configure_logging(json_logs: bool | None = None) -> None:
    """Configure structlog: JSON in production, console otherwise."""
    if json_logs is None:
        json_logs = os.getenv("ENV", "development").lower() == "production"

    if json_logs:
        # Production: JSON format for machine parsing
        renderer = structlog.processors.JSONRenderer()
        level = logging.INFO
    else:
        # Development: console format for human readability
        renderer = structlog.dev.ConsoleRenderer()
        level = logging.DEBUG

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_service(settings: Settings) -> PracticeService:
    store = JsonProgressStore(settings.progress_path, max_history=settings.max_session_history)
    progress = initialize_progress(store, legacy_path=settings.legacy_stats_path)
    writer = DebouncedWriter(store, delay_seconds=settings.save_debounce_seconds)
    return PracticeService(
        progress,
        writer,
        vocabulary=load_vocabulary(settings.vocabulary_path),
        choice_count=settings.choices_per_question,
        max_history=settings.max_session_history,
    )


def create_app(service: PracticeService | None = None) -> FastAPI:
    """Build the app; a ready service may be injected (tests)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        svc = service or build_service(get_settings())
        set_service(svc)
        drain = asyncio.create_task(svc.writer.run())
        structlog.get_logger().info("trainer_started", items=len(svc.vocabulary))
        try:
            yield
        finally:
            drain.cancel()
            try:
                await drain
            except asyncio.CancelledError:
                pass
            set_service(None)

    app = FastAPI(title="Alphabet Trainer", version="0.1.0", lifespan=lifespan)
    app.include_router(router)
    return app


def main() -> None:
    """Run the application."""
    settings = get_settings()
    configure_logging(settings.log_json or None)
    uvicorn.run(
        create_app(),
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
