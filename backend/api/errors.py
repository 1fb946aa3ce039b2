"""
Exception handlers.

Maps HouseHelpError subclasses to their status codes, request validation
failures to field-level 400s, and anything else to a generic 500 whose
details stay in the server log.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.exceptions import HouseHelpError, RateLimitError, field_errors

from .models.errors import ErrorResponse, FieldError, ValidationErrorResponse

logger = logging.getLogger(__name__)


async def househelp_error_handler(request: Request, exc: HouseHelpError) -> JSONResponse:
    body = ErrorResponse(error=exc.message, code=exc.code, details=exc.details or None)
    headers = {}
    if exc.status_code == 401:
        headers["WWW-Authenticate"] = "Bearer"
    if isinstance(exc, RateLimitError) and exc.retry_after is not None:
        headers["Retry-After"] = str(exc.retry_after)

    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)

    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers or None,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ValidationErrorResponse(
        details=[FieldError(**e) for e in field_errors(exc.errors())],
    )
    return JSONResponse(status_code=400, content=body.model_dump())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HouseHelpError, househelp_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
