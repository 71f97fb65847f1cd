"""
commerce_cms.errors

Application error type and FastAPI exception handlers.

Responsibilities:
- Define the single `AppError` raised by services and dependencies.
- Keep the machine-readable error codes stable (clients branch on them).
- Render every failure as `{"message": ..., "error": ...}`.
"""

from __future__ import annotations

import enum

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from commerce_cms.observability.logging import get_logger

log = get_logger(__name__)


class ErrorCode(enum.StrEnum):
    invalid = "Error_Invalid"
    unauthenticated = "Error_Unauthenticated"
    unauthorized = "Error_Unauthorized"
    account_freeze = "Error_AccountFreeze"
    maintenance = "Error_Maintenance"
    too_large = "Error_TooLarge"
    server = "Error_Server"


class AppError(Exception):
    def __init__(self, message: str, status_code: int, code: ErrorCode) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "error": self.code.value}


def _body(message: str, code: ErrorCode) -> dict[str, str]:
    return {"message": message, "error": code.value}


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Only the first failing field is reported back to the client.
    errors = exc.errors()
    message = str(errors[0].get("msg", "Invalid request.")) if errors else "Invalid request."
    return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content=_body(message, ErrorCode.invalid))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("unhandled_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=_body("Server Error", ErrorCode.server),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)


# --- Module Notes -----------------------------------------------------------
# 404 responses carry `ErrorCode.invalid`; there is no dedicated not-found code.
