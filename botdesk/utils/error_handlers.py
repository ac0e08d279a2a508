"""
Centralized Error Handling

Translates domain exceptions and upstream failures into JSON responses.
Services raise; only this module decides status codes for the HTTP edge.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from openai import APIError, RateLimitError, APITimeoutError
from sqlalchemy.exc import IntegrityError, OperationalError, DBAPIError
from typing import Dict, Any
import logging
import traceback

from botdesk.core.exceptions import BotdeskException

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Centralized error handling"""

    @staticmethod
    def handle_domain_error(error: BotdeskException) -> Dict[str, Any]:
        """
        Handle Botdesk domain errors

        Quota and permission denials are expected traffic and logged at
        WARNING; configuration errors are logged at ERROR.
        """
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error.message}")
        else:
            logger.warning(f"{type(error).__name__}: {error.message}")
        return error.to_dict()

    @staticmethod
    def handle_openai_error(error: Exception) -> Dict[str, Any]:
        """
        Handle OpenAI API errors

        Args:
            error: OpenAI exception

        Returns:
            Error dictionary with message and details
        """
        if isinstance(error, RateLimitError):
            logger.warning(f"OpenAI rate limit exceeded: {error}")
            return {
                "error": "rate_limit",
                "message": "Model provider rate limit exceeded. Please try again in a moment.",
                "retry_after": 60,
                "provider": "openai"
            }

        elif isinstance(error, APITimeoutError):
            logger.warning(f"OpenAI API timeout: {error}")
            return {
                "error": "timeout",
                "message": "Model provider request timed out. Please try again.",
                "provider": "openai"
            }

        logger.error(f"OpenAI API error: {error}")
        return {
            "error": "api_error",
            "message": "Model provider error occurred. Please try again.",
            "details": str(error),
            "provider": "openai"
        }

    @staticmethod
    def handle_database_error(error: Exception) -> Dict[str, Any]:
        """
        Handle database errors

        Args:
            error: Database exception

        Returns:
            Error dictionary with message and details
        """
        details = str(error.orig) if getattr(error, 'orig', None) is not None else str(error)

        if isinstance(error, IntegrityError):
            logger.warning(f"Database integrity error: {error}")
            return {
                "error": "integrity_error",
                "message": "Data integrity violation. Duplicate entry or constraint failed.",
                "details": details
            }

        elif isinstance(error, OperationalError):
            logger.error(f"Database operational error: {error}")
            return {
                "error": "database_error",
                "message": "Database connection or operational error.",
                "details": details
            }

        logger.error(f"Database API error: {error}")
        return {
            "error": "database_error",
            "message": "Database error occurred.",
            "details": details
        }

    @staticmethod
    def handle_generic_error(error: Exception) -> Dict[str, Any]:
        """
        Handle generic/unknown errors

        Args:
            error: Exception

        Returns:
            Error dictionary
        """
        logger.error(f"Unexpected error: {error}\n{traceback.format_exc()}")
        return {
            "error": "internal_error",
            "message": "An unexpected error occurred. Please try again.",
            "type": type(error).__name__
        }


# Global exception handlers for FastAPI

async def domain_error_handler(request: Request, exc: BotdeskException):
    """FastAPI exception handler for domain errors"""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorHandler.handle_domain_error(exc)
    )


async def openai_error_handler(request: Request, exc: APIError):
    """FastAPI exception handler for OpenAI errors"""
    error_data = ErrorHandler.handle_openai_error(exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_data
    )


async def database_error_handler(request: Request, exc: DBAPIError):
    """FastAPI exception handler for database errors"""
    error_data = ErrorHandler.handle_database_error(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_data
    )


async def generic_error_handler(request: Request, exc: Exception):
    """FastAPI exception handler for generic errors"""
    error_data = ErrorHandler.handle_generic_error(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_data
    )


# Setup function for FastAPI app
def setup_error_handlers(app):
    """
    Setup global error handlers for FastAPI app

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(BotdeskException, domain_error_handler)
    app.add_exception_handler(APIError, openai_error_handler)
    app.add_exception_handler(DBAPIError, database_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    logger.info("Error handlers registered")
