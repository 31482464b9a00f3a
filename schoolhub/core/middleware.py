import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from schoolhub.core.logging import bind_request_context, clear_request_context, get_logger
from schoolhub.core.schemas import ErrorResponse

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger("schoolhub.http")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Binds request_id/method/path into the structlog context for the duration
    of the request and logs one line per request. Exceptions that escape the
    routes' handlers are turned into the 500 envelope here so the response
    still carries the request id.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = bind_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.exception(
                    "request.failed",
                    status_code=500,
                    error_type=type(exc).__name__,
                    duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
                )
                response = JSONResponse(
                    status_code=500,
                    content=ErrorResponse(message="Internal server error").model_dump(),
                )
            else:
                logger.info(
                    "request.completed",
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
                )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()
