"""
caltrack - FastAPI Application
"""
import locale
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from caltrack import __version__
from caltrack.core.config import Settings, settings as default_settings
from caltrack.core.exceptions import EstimatorUnavailable
from caltrack.core.logging import setup_logging, get_logger
from caltrack.api import estimates, presets, workouts
from caltrack.api.deps import register_error_handlers
from caltrack.services.estimation import EstimationService
from caltrack.services.history import ExportService, HistoryStore, StorageBackend, build_storage

logger = get_logger(__name__)


def use_system_date_locale() -> None:
    """Render %x export dates in the locale named by LC_ALL, LC_TIME or LANG."""
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        logger.warning("System locale unavailable, export dates use the C locale", error=str(e))


def create_app(
    config: Optional[Settings] = None,
    storage: Optional[StorageBackend] = None,
    estimation_service: Optional[EstimationService] = None,
) -> FastAPI:
    """
    Build the application.

    Storage and the estimation service are created during startup from
    ``config`` unless passed in.
    """
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        # Startup
        setup_logging()
        use_system_date_locale()
        logger.info("Starting caltrack", version=__version__)

        store = HistoryStore(
            storage or build_storage(config),
            key=config.HISTORY_KEY,
            export_service=ExportService(config.EXPORT_DATE_FORMAT),
        )
        store.load()
        app.state.history_store = store

        app.state.estimator_error = None
        app.state.estimation_service = estimation_service
        if estimation_service is None:
            try:
                app.state.estimation_service = EstimationService.from_settings(config)
            except EstimatorUnavailable as e:
                # History endpoints keep working; estimates answer 500
                logger.error("Estimator not configured", error=str(e))
                app.state.estimator_error = e.with_traceback(None)

        yield

        # Shutdown
        logger.info("Shutting down caltrack")

    app = FastAPI(
        title="caltrack API",
        description="Workout calorie estimation and history",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Include routers
    app.include_router(estimates.router, prefix="/api", tags=["estimates"])
    app.include_router(workouts.router, prefix="/api/workouts", tags=["workouts"])
    app.include_router(presets.router, prefix="/api/presets", tags=["presets"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": config.APP_NAME}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "caltrack.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
    )
