from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from schoolhub.api.v1.academic_years.router import router as academic_years_router
from schoolhub.api.v1.finance.router import router as finance_router
from schoolhub.api.v1.students.router import router as students_router
from schoolhub.core.config import settings
from schoolhub.core.events import EventBus
from schoolhub.core.exceptions import ServiceError
from schoolhub.core.logging import get_logger, setup_logging
from schoolhub.core.middleware import RequestContextMiddleware
from schoolhub.core.schemas import ErrorResponse

logger = get_logger(__name__)


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
        headers=headers,
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request.service_error", message=exc.message)
        return _error(exc.status_code, "Internal server error")
    return _error(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error(exc.status_code, message, getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Validation failed")
    return _error(status.HTTP_400_BAD_REQUEST, f"{field}: {message}" if field else message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled_error", error_type=type(exc).__name__)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app(event_bus: Optional[EventBus] = None) -> FastAPI:
    setup_logging(settings)
    app = FastAPI(title=settings.app_title or "SchoolHub Finance")

    # Publisher for domain events (fee.assigned, payment.recorded); handlers subscribe at startup.
    app.state.event_bus = event_bus or EventBus()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(finance_router)
    app.include_router(students_router)
    app.include_router(academic_years_router)

    @app.get("/api/health", tags=["health"])
    async def health() -> dict:
        return {"success": True, "data": {"status": "ok"}}

    return app


app = create_app()
