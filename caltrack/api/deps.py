"""
Request dependencies and error responses shared by the routers.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from caltrack.core.exceptions import EstimatorUnavailable, ValidationError
from caltrack.core.logging import get_logger
from caltrack.services.estimation import EstimationService
from caltrack.services.history import HistoryStore

logger = get_logger(__name__)

CALCULATION_FAILED = "Failed to calculate calories"


def get_history_store(request: Request) -> HistoryStore:
    """The application's HistoryStore, loaded at startup."""
    return request.app.state.history_store


def get_estimation_service(request: Request) -> EstimationService:
    """
    The application's EstimationService.

    Raises EstimatorUnavailable, built from the error recorded at startup,
    when the estimator could not be configured.
    """
    service = getattr(request.app.state, "estimation_service", None)
    if service is None:
        startup_error = request.app.state.estimator_error
        raise EstimatorUnavailable(startup_error.message, details=startup_error.details)
    return service


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Rejected estimation request", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=400, content=exc.to_payload())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    logger.info("Rejected malformed request body", path=request.url.path, details=details)
    return JSONResponse(
        status_code=400,
        content={"error": "Missing required fields", "details": details},
    )


async def estimator_unavailable_handler(request: Request, exc: EstimatorUnavailable) -> JSONResponse:
    logger.error("Estimator unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"error": CALCULATION_FAILED, "details": str(exc)},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(EstimatorUnavailable, estimator_unavailable_handler)
