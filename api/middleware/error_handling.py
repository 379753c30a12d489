from typing import Dict, Type

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging import get_api_logger_safe, get_error_logger_safe
from core.utils.exceptions import TradebookException, ValidationError, PersistenceError
from services.auth.exceptions import (
    InvalidCredentialsError,
    MissingCredentialError,
    InvalidCredentialError,
)

logger = get_api_logger_safe("api.middleware.error_handling")
error_logger = get_error_logger_safe("api.middleware.error_handling")

# Looked up along the exception's MRO, most specific class first
STATUS_BY_EXCEPTION: Dict[Type[TradebookException], int] = {
    ValidationError: 400,
    InvalidCredentialsError: 400,
    MissingCredentialError: 401,
    InvalidCredentialError: 403,
    PersistenceError: 500,
    TradebookException: 500,
}


def status_for(exc: TradebookException) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_EXCEPTION:
            return STATUS_BY_EXCEPTION[cls]
    return 500


async def tradebook_exception_handler(request: Request, exc: TradebookException) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        error_logger.error("Request failed in backing store",
                           path=request.url.path,
                           method=request.method,
                           error_type=type(exc).__name__,
                           operation=getattr(exc, "operation", None),
                           cause=repr(exc.__cause__) if exc.__cause__ else None)
    else:
        logger.info("Request rejected",
                    path=request.url.path,
                    method=request.method,
                    status_code=status_code,
                    error_type=type(exc).__name__)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, MissingCredentialError) else None
    return JSONResponse(status_code=status_code, content={"message": exc.message}, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"message": "Invalid request body.", "details": {"errors": jsonable_encoder(exc.errors())}},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain exceptions to {"message": ...} JSON responses."""
    app.add_exception_handler(TradebookException, tradebook_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Last-resort handler: anything unmapped becomes a 500 and is logged."""

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            error_logger.error(
                "Unhandled API exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
                exc_info=True
            )

            return JSONResponse(
                status_code=500,
                content={"message": "An unexpected error occurred"},
            )
