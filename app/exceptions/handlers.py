import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .custom import (
    ConfigurationError,
    InvalidRequestError,
    MakeWebhookError,
    MalformedWebhookError,
    NetworkError,
    RetellError,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


async def invalid_request_error_handler(_request: Request, exc: InvalidRequestError) -> JSONResponse:
    logger.info("Rejected request: %s", exc.message)
    return _error(400, exc.message)


async def request_validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Request body failed validation: %s", exc.errors())
    return _error(400, "Invalid request body")


async def malformed_webhook_error_handler(_request: Request, exc: MalformedWebhookError) -> JSONResponse:
    logger.warning("Malformed webhook: %s", exc.message)
    return JSONResponse(status_code=400, content={"message": exc.message})


async def configuration_error_handler(_request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error: %s", exc.message)
    return _error(500, exc.message)


async def network_error_handler(_request: Request, exc: NetworkError) -> JSONResponse:
    logger.error("Network error: %s", exc.message)
    return _error(500, exc.message)


async def retell_error_handler(_request: Request, exc: RetellError) -> JSONResponse:
    logger.error("Retell error: %s (status=%s)", exc.message, exc.status_code)
    return _error(500, exc.message)


async def make_webhook_error_handler(_request: Request, exc: MakeWebhookError) -> JSONResponse:
    logger.error("Make.com webhook error: %s (status=%s)", exc.message, exc.status_code)
    return _error(500, exc.message)


async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown paths and wrong methods on known paths both count as unmatched
    if exc.status_code in (404, 405):
        return _error(404, "Route not found")
    return _error(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error: %s", exc, exc_info=exc)
    # Error text is only exposed while running in development
    extra = {"error": str(exc)} if getattr(request.app.state, "expose_errors", False) else {}
    return _error(500, "Internal server error", **extra)
