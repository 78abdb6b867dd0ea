# bloodlink/errors.py
"""Error taxonomy for the credential, session and request services, plus the
FastAPI handlers that turn them into JSON responses."""
import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class BloodLinkError(Exception):
    """Base error; ``message`` is safe to show to the caller."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationFailure(BloodLinkError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, details: List[Dict[str, str]], message: Optional[str] = None):
        self.details = details
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationFailure":
        return cls([{"field": field, "message": message}])


class DuplicateIdentity(BloodLinkError):
    status_code = 400
    message = "User with this email already exists"


class AuthFailure(BloodLinkError):
    status_code = 401
    message = "Invalid credentials"


class NotAuthenticated(BloodLinkError):
    status_code = 401
    message = "Not authenticated"


class TokenInvalid(BloodLinkError):
    status_code = 401
    message = "Invalid token"


class TokenExpired(BloodLinkError):
    status_code = 401
    message = "Token expired"


class PermissionDenied(BloodLinkError):
    status_code = 403
    message = "Not authorized"


class NotFoundOrForbidden(BloodLinkError):
    status_code = 404
    message = "Blood request not found or not authorized"


class UserNotFound(BloodLinkError):
    status_code = 404
    message = "User not found"


class InternalFailure(BloodLinkError):
    status_code = 500
    message = "Internal server error"


def _error_body(exc: BloodLinkError) -> dict:
    body = {"error": exc.message}
    if isinstance(exc, ValidationFailure):
        body["details"] = exc.details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BloodLinkError)
    async def handle_bloodlink_error(request: Request, exc: BloodLinkError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})

    @app.exception_handler(SQLAlchemyError)
    async def handle_store_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Store failure on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=_error_body(InternalFailure()))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=_error_body(InternalFailure()))
