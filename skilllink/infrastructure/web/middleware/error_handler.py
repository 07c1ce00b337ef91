"""
Global error handler middleware for the FastAPI application.
Catches and formats all exceptions consistently.
"""

import json
import logging
import traceback
from typing import Any, Dict

from fastapi import status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from skilllink.config import settings
from skilllink.domain.models.base import (
    DomainException, ValidationError, EntityNotFoundError, AuthorizationError,
    BusinessRuleViolation, DuplicateEntityError, ConcurrencyError
)

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle all uncaught exceptions and format error responses.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return await self.handle_exception(request, exc)

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """
        Log the exception and turn it into the JSON error envelope.
        """
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
            exc_info=True,
            extra={
                "request_path": request.url.path,
                "request_method": request.method,
                "client_host": request.client.host if request.client else None
            }
        )

        error_response = self.format_error_response(exc)

        if settings.debug:
            error_response["debug"] = {
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exc().split("\n")
            }

        return JSONResponse(
            status_code=error_response["status_code"],
            content=error_response
        )

    def format_error_response(self, exc: Exception) -> Dict[str, Any]:
        """
        Format exception into a consistent error response structure.
        """
        error_response = {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
        }

        if isinstance(exc, DomainException):
            error_response.update(self._domain_error(exc))
        elif isinstance(exc, json.JSONDecodeError):
            error_response.update({
                "error": "Invalid JSON",
                "message": "The request body contains invalid JSON",
                "status_code": status.HTTP_400_BAD_REQUEST
            })
        elif isinstance(exc, ValueError):
            error_response.update({
                "error": "Bad Request",
                "message": str(exc),
                "status_code": status.HTTP_400_BAD_REQUEST
            })
        elif isinstance(exc, TimeoutError):
            error_response.update({
                "error": "Request Timeout",
                "message": "The request took too long to process",
                "status_code": status.HTTP_408_REQUEST_TIMEOUT
            })

        return error_response

    @staticmethod
    def _domain_error(exc: DomainException) -> Dict[str, Any]:
        if isinstance(exc, ValidationError):
            error, code = "Validation Error", status.HTTP_422_UNPROCESSABLE_ENTITY
        elif isinstance(exc, EntityNotFoundError):
            error, code = "Not Found", status.HTTP_404_NOT_FOUND
        elif isinstance(exc, AuthorizationError):
            error, code = "Forbidden", status.HTTP_403_FORBIDDEN
        elif isinstance(exc, (BusinessRuleViolation, DuplicateEntityError, ConcurrencyError)):
            error, code = "Conflict", status.HTTP_409_CONFLICT
        else:
            error, code = "Bad Request", status.HTTP_400_BAD_REQUEST
        return {"error": error, "message": exc.message, "status_code": code}


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Same envelope for unknown routes and for missing entities.
    A router's own detail message is kept.
    """
    detail = getattr(exc, "detail", None)
    if not isinstance(detail, str) or detail == "Not Found":
        detail = f"The requested resource {request.url.path} was not found"
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Not Found",
            "message": detail,
            "status_code": status.HTTP_404_NOT_FOUND
        }
    )
