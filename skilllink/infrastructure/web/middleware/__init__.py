"""
Middleware for the FastAPI application.
"""

from .error_handler import ErrorHandlerMiddleware, not_found_handler

__all__ = ["ErrorHandlerMiddleware", "not_found_handler"]
