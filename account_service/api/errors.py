"""Exception handlers rendering failures as response envelopes."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..domain.errors import AccountServiceError
from .responses import MSG_INVALID_REQUEST, ResponseCode, classify, http_status_for
from .schemas import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(code: ResponseCode, message: str) -> JSONResponse:
    body = ErrorResponse(code=code, message=message)
    return JSONResponse(status_code=http_status_for(code), content=body.model_dump(mode="json"))


async def _service_error_handler(request: Request, exc: AccountServiceError) -> JSONResponse:
    code, message = classify(exc)
    if code is ResponseCode.INTERNAL_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(code, message)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = MSG_INVALID_REQUEST
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{MSG_INVALID_REQUEST}: {location} {first.get('msg', '')}".strip()
    return error_response(ResponseCode.VALIDATION_ERROR, message)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # runs inside ServerErrorMiddleware, which re-raises for the server to log
    code, message = classify(exc)
    return error_response(code, message)


def install_error_handlers(app: FastAPI) -> None:
    """Register envelope-producing handlers for every failure the API can raise."""
    app.add_exception_handler(AccountServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
