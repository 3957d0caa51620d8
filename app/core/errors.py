"""Error taxonomy for the gateway and the handlers that render it as JSON.

Services raise one of the ``GatewayError`` subclasses; nothing else is
allowed to reach the client. Collaborator errors (SQLAlchemy, storage) are
classified here or at the call site and re-wrapped, and their details are
logged rather than returned.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class GatewayError(Exception):
    """Base class: carries a client-safe message and the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(GatewayError):
    """Malformed or missing input."""

    status_code = 400


class AuthenticationError(GatewayError):
    """Missing, invalid or expired session token, or bad credentials."""

    status_code = 401


class AuthorizationError(GatewayError):
    """Valid session, insufficient role."""

    status_code = 403


class ConflictError(GatewayError):
    """Uniqueness violation; reported as 400 with a specific message."""

    status_code = 400


class NotFoundError(GatewayError):
    """Referenced entity is absent."""

    status_code = 404


class InternalError(GatewayError):
    """Collaborator failure; the message is always generic."""

    status_code = 500

    def __init__(self, message: str = INTERNAL_ERROR_MESSAGE) -> None:
        super().__init__(message)


def error_body(message: str) -> dict[str, object]:
    return {"success": False, "error": message}


async def _gateway_error_handler(_request: Request, exc: GatewayError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message), headers=headers)


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content=error_body(message))


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Database integrity error: %s", exc.orig)
    return JSONResponse(status_code=400, content=error_body("Record conflicts with an existing entry"))


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(status_code=500, content=error_body(INTERNAL_ERROR_MESSAGE))


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content=error_body(INTERNAL_ERROR_MESSAGE))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(GatewayError, _gateway_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
