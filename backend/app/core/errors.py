# app/core/errors.py
"""
Application error taxonomy and the FastAPI handlers that render it.

Services raise these exceptions; the handlers registered by
`register_exception_handlers` translate them into JSON responses of the form
{"detail": {"code": ..., "message": ..., **extra}}.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from tortoise.exceptions import BaseORMException

logger = logging.getLogger("uvicorn.error")


class AppError(Exception):
    """Base class for errors that map onto a client-facing response."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, code: str | None = None, **extra):
        self.message = message or self.message
        if code:
            self.code = code
        self.extra = extra
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message, **self.extra}


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Invalid data"


class ConflictError(AppError):
    # Duplicate unique fields are reported as a plain bad request
    status_code = status.HTTP_400_BAD_REQUEST
    code = "CONFLICT"
    message = "Resource already exists"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTH_INVALID_TOKEN"
    message = "Invalid authentication token"


class QuotaExceededError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "QUOTA_EXCEEDED"
    message = "Plan limit reached"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Not found"


class RateLimitedError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RATE_LIMITED"
    message = "Too many attempts, try again later"


class InternalError(AppError):
    pass


class PaymentGatewayError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "PAYMENT_ERROR"
    message = "Payment processor error"


class PaymentUnavailableError(PaymentGatewayError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "PAYMENT_UNAVAILABLE"
    message = "Payment processor not configured"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": jsonable_encoder(exc.to_detail())})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/query/form binding failures as 400 instead of FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": {
            "code": ValidationError.code,
            "message": ValidationError.message,
            "errors": jsonable_encoder(exc.errors(), custom_encoder={Exception: str}),
        }},
    )


async def orm_error_handler(request: Request, exc: BaseORMException) -> JSONResponse:
    # Never leak store details to the client
    logger.exception("[db] unhandled ORM error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": {"code": InternalError.code, "message": InternalError.message}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(BaseORMException, orm_error_handler)
