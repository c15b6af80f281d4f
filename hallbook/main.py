from __future__ import annotations

from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from hallbook import __version__
from hallbook.api.v1.router import router as api_v1_router
from hallbook.config.settings import Settings, settings as default_settings
from hallbook.core.error_handlers import register_exception_handlers
from hallbook.core.logging import LoggingConfig, get_logger
from hallbook.core.middleware import register_middlewares
from hallbook.db.init_db import init_db
from hallbook.services.audit.audit_log_sink import AuditLogSink
from hallbook.services.audit.log_store import MongoLogStore
from hallbook.services.notification.email_notifier import EmailNotifier
from hallbook.services.scheduler.lifecycle_scheduler import LifecycleScheduler, SchedulerConfig

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    session_factory: Optional[Callable[[], Session]] = None,
    log_store: Optional[MongoLogStore] = None,
    sink: Optional[AuditLogSink] = None,
    notifier: Optional[EmailNotifier] = None,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under /api/v1.
    - Owns the audit log store, the log sink and the lifecycle scheduler:
      started on startup, released on shutdown.

    Every collaborator can be injected; the defaults come from Settings.
    """
    settings = settings or default_settings

    if engine is None:
        from hallbook.db.session import SessionLocal, engine as default_engine
        engine = default_engine
        session_factory = session_factory or SessionLocal
    if session_factory is None:
        session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    log_store = log_store or MongoLogStore.from_settings(settings)
    sink = sink or AuditLogSink.with_thread_pool(
        log_store, settings.AUDIT_LOG_MAX_RETRIES, settings.AUDIT_LOG_WORKERS
    )
    if notifier is None:
        notifier = EmailNotifier(settings, sink)
    scheduler = LifecycleScheduler(
        session_factory, sink, notifier, SchedulerConfig.from_settings(settings)
    )

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.log_store = log_store
    app.state.sink = sink
    app.state.notifier = notifier
    app.state.scheduler = scheduler

    # Credentials cannot be combined with a wildcard origin
    wildcard = not settings.CORS_ORIGINS or settings.CORS_ORIGINS == ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if wildcard else settings.CORS_ORIGINS,
        allow_credentials=not wildcard,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app.on_event("startup")
    async def on_startup() -> None:
        LoggingConfig.configure()
        # Missing MONGODB_URI is fatal here
        log_store.start()
        if not settings.is_production():
            init_db(bind=engine)
        if settings.SCHEDULER_ENABLED:
            await scheduler.start()
        logger.info(f"{settings.APP_NAME} started ({settings.ENVIRONMENT})")

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await scheduler.stop()
        sink.shutdown(wait=True)
        log_store.close()
        logger.info(f"{settings.APP_NAME} stopped")

    return app


app = create_app()
