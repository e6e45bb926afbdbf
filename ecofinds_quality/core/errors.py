"""
Structured error responses and global exception handlers.

Every error returned by the API follows this envelope:

    {
        "error": "snake_case_code",
        "message": "Human-readable description.",
        "detail": { ... }   // optional
    }

Inside the analysis pipeline `QualityAPIError` subclasses are not returned
as HTTP errors: they are folded into an `error`-quality result so one bad
image never fails a batch.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Canonical error envelope
# --------------------------------------------------------------------------- #

def error_response(
    code: str,
    message: str,
    status_code: int,
    detail: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {"error": code, "message": message}
    if detail is not None:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body, headers=headers)


# --------------------------------------------------------------------------- #
# Custom exception classes
# --------------------------------------------------------------------------- #

class QualityAPIError(Exception):
    """Base exception for all domain errors raised inside services."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.headers = headers
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class UnauthorizedError(QualityAPIError):
    def __init__(self) -> None:
        super().__init__(
            "unauthorized",
            "Missing or invalid X-Api-Key header.",
            status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "ApiKey"},
        )


class InvalidImageError(QualityAPIError):
    """Pixel buffer cannot be analysed (wrong shape, or no interior pixel)."""

    def __init__(self, message: str) -> None:
        super().__init__("invalid_image", message, status.HTTP_422_UNPROCESSABLE_ENTITY)


class ImageFetchError(QualityAPIError):
    def __init__(self, message: str) -> None:
        super().__init__("image_fetch_error", message, status.HTTP_422_UNPROCESSABLE_ENTITY)


class ImageDecodeError(QualityAPIError):
    def __init__(self, message: str) -> None:
        super().__init__("image_decode_error", message, status.HTTP_422_UNPROCESSABLE_ENTITY)


class UnsupportedFormatError(QualityAPIError):
    def __init__(self, fmt: str | None, supported: tuple[str, ...]) -> None:
        super().__init__(
            "unsupported_format",
            f"Image format '{fmt or 'unknown'}' is not supported; "
            f"expected one of: {', '.join(supported)}.",
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        )


class ImageTooLargeError(QualityAPIError):
    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        super().__init__(
            "image_too_large",
            f"Image is {size_bytes:,} bytes; maximum allowed is {max_bytes:,} bytes.",
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )


class BatchTooLargeError(QualityAPIError):
    def __init__(self, received: int, max_allowed: int) -> None:
        super().__init__(
            "batch_too_large",
            f"Batch contains {received} images; maximum allowed is {max_allowed}.",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )


# --------------------------------------------------------------------------- #
# FastAPI exception handlers — register via register_exception_handlers()
# --------------------------------------------------------------------------- #

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(QualityAPIError)
    async def quality_api_error_handler(
        request: Request, exc: QualityAPIError
    ) -> JSONResponse:
        logger.warning("QualityAPIError [%s]: %s", exc.code, exc.message)
        return error_response(
            exc.code, exc.message, exc.status_code, headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.debug("RequestValidationError: %s", exc.errors())
        return error_response(
            code="validation_error",
            message="Request body or query parameters failed validation.",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=jsonable_errors(exc.errors()),
        )

    @app.exception_handler(ValidationError)
    async def pydantic_validation_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return error_response(
            code="validation_error",
            message="Internal data validation error.",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=jsonable_errors(exc.errors()),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("Unhandled exception: %s", exc)
        return error_response(
            code="internal_error",
            message="An unexpected error occurred. Please try again later.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def jsonable_errors(errors: Any) -> Any:
    # Validator errors carry the raised exception in `ctx`, which is not JSON.
    from fastapi.encoders import jsonable_encoder

    return jsonable_encoder(errors, custom_encoder={Exception: str})
