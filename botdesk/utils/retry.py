"""
Retry Logic Utilities

Provides automatic retry mechanisms for external API calls with exponential backoff.
The final error is re-raised unchanged so callers see the upstream failure.
"""

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
    after_log
)
from openai import APIConnectionError, APITimeoutError, InternalServerError, RateLimitError
from botdesk.config import settings
import logging

logger = logging.getLogger(__name__)

TRANSIENT_API_ERRORS = (
    RateLimitError,
    APITimeoutError,
    APIConnectionError,
    InternalServerError,
    ConnectionError,
    TimeoutError
)


def retry_on_api_error(max_attempts: int = None, min_wait: float = 2, max_wait: float = 30):
    """
    Decorator for retrying transient embedding/model API errors

    Retries on:
    - Rate limit errors
    - Timeouts and connection failures
    - 5xx responses

    Client errors (bad key, bad request) are not retried.

    Args:
        max_attempts: Maximum attempts (default: settings.RETRY_MAX_ATTEMPTS,
            or 1 when RETRY_ENABLED is off)
        min_wait: Minimum backoff in seconds
        max_wait: Maximum backoff in seconds

    Returns:
        Tenacity retry decorator
    """
    if max_attempts is None:
        max_attempts = settings.RETRY_MAX_ATTEMPTS if settings.RETRY_ENABLED else 1

    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=1,
            min=min_wait,
            max=max_wait,
            exp_base=settings.RETRY_EXPONENTIAL_BASE
        ),
        retry=retry_if_exception_type(TRANSIENT_API_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.DEBUG),
        reraise=True
    )
