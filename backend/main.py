"""
Code Migration - FastAPI Backend
Main application entry point
"""
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
from contextlib import asynccontextmanager
import uvicorn
import logging

from config import Settings, get_settings
from routes import analyses, events, files, migration, projects
from services.ai_service import MigrationAIService
from services.migration_service import MigrationService
from services.notifier import ChangeNotifier
from services.storage import MigrationStorage, create_storage

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "sqlalchemy.engine")

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    """Configure root logging once and quiet chatty libraries"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _attach_services(app: FastAPI, storage: MigrationStorage, settings: Settings):
    """Wire storage into the services routes resolve from app.state"""
    app.state.storage = storage
    app.state.migration_service = MigrationService(
        storage,
        app.state.ai_service,
        app.state.notifier,
        sample_size=settings.summary_sample_size
    )


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[MigrationStorage] = None,
    ai_service: Optional[MigrationAIService] = None,
    notifier: Optional[ChangeNotifier] = None,
) -> FastAPI:
    """
    Build the API application

    Args:
        settings: Settings (defaults to environment)
        storage: Storage backend; created from settings at startup when omitted
        ai_service: External translation service wrapper
        notifier: Change-event fan-out shared by all routes

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        # Startup
        logger.info("Starting Code Migration API...")
        if app.state.storage is None:
            _attach_services(app, create_storage(settings), settings)
        logger.info(f"Storage backend: {app.state.storage.name}")

        yield

        # Shutdown
        logger.info("Shutting down Code Migration API...")

    app = FastAPI(
        title="Code Migration API",
        description="LLM-assisted source code migration between languages and frameworks",
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.ai_service = ai_service or MigrationAIService(settings)
    app.state.notifier = notifier or ChangeNotifier()
    app.state.storage = None
    app.state.migration_service = None
    if storage is not None:
        _attach_services(app, storage, settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies and path/query parameters are client errors (400)"""
        logger.info(f"Rejected {request.method} {request.url.path}: invalid request data")
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())}
        )

    # Health check
    @app.get("/")
    async def root():
        """API health check"""
        return {
            "status": "healthy",
            "service": "Code Migration API",
            "version": "1.0.0"
        }

    @app.get("/api/test")
    async def api_test():
        """Liveness plus whether the AI service can be used"""
        return {
            "status": "ok",
            "message": "API is working",
            "openai_configured": app.state.ai_service.enabled,
        }

    @app.get("/api/health")
    async def health_check():
        """Detailed health check"""
        storage = app.state.storage
        return {
            "status": "healthy",
            "storage": storage.name if storage else None,
            "openai_configured": app.state.ai_service.enabled,
            "listeners": app.state.notifier.listener_count,
        }

    app.include_router(projects.router)
    app.include_router(files.router)
    app.include_router(analyses.router)
    app.include_router(migration.router)
    app.include_router(events.router)

    return app


settings = get_settings()
setup_logging(settings.log_level)
app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.python_env == "development",
        # In-memory storage and the notifier are per process
        workers=1,
        timeout_keep_alive=65,
        log_level=settings.log_level.lower()
    )
