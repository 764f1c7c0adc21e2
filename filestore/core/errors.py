# filestore/core/errors.py
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error surfaced to the caller as ``{"message": ...}`` with a fixed status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Forbidden."):
        super().__init__(message)


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


async def handle_api_error(request: Request, exc: ApiError):
    # 401 is the one response that is plain text
    if isinstance(exc, Unauthorized):
        return PlainTextResponse("Unauthorized", status_code=exc.status_code)
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    logger.info("rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        {"message": "Invalid request."},
        status_code=ValidationError.status_code,
    )
