import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError

from core.exceptions import BaseCustomException
from core.logging.providers import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    """
    Build the common error body.

    Parameters
    ----------
    status_code : int
        HTTP status
    message : str
        Human-readable message
    **extra
        Additional top-level fields, skipped when empty

    Returns
    -------
    JSONResponse
        ``{"status": "error", "message": ...}`` plus extras
    """
    content = {"status": "error", "message": message}
    content.update({key: value for key, value in extra.items() if value})
    return JSONResponse(status_code=status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Render request validation errors as a flat list of field messages.

    Parameters
    ----------
    request : Request
        FastAPI request
    exc : RequestValidationError
        Validation error

    Returns
    -------
    JSONResponse
        422 error response
    """
    errors = []
    for error in exc.errors():
        field_path = ".".join(
            str(part) for part in error["loc"] if not isinstance(part, int) and part != "body"
        )
        errors.append({
            "field": field_path or "body",
            "message": error["msg"],
            "type": error["type"]
        })

    logger.debug(f"Rejected {request.method} {request.url.path}: {len(errors)} validation error(s)")
    return error_response(422, "Validation error", errors=errors)


async def http_exception_handler(request: Request, exc: HTTPException):
    return error_response(exc.status_code, exc.detail)


async def starlette_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing errors (404, 405) in the common error shape."""
    return error_response(exc.status_code, exc.detail)


async def custom_exception_handler(request: Request, exc: Exception):
    """
    Render service exceptions; anything else becomes a logged 500.

    Upstream failures (5xx service exceptions) are logged with the request
    path; client errors are not.

    Parameters
    ----------
    request : Request
        FastAPI request
    exc : Exception
        Raised exception

    Returns
    -------
    JSONResponse
        Error response
    """
    if isinstance(exc, BaseCustomException):
        status_code = exc.get_status_code()
        if status_code >= 500:
            logger.warning(
                f"{request.method} {request.url.path} failed with {type(exc).__name__}: {exc.message}"
            )
        return error_response(status_code, exc.message, details=exc.get_details())

    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_exception_handler)
    app.add_exception_handler(BaseCustomException, custom_exception_handler)
    app.add_exception_handler(Exception, custom_exception_handler)
