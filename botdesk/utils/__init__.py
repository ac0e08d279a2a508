"""
Utility Functions and Classes

Provides retry logic, error handling, text measurement and time helpers.
"""

from botdesk.utils.retry import retry_on_api_error
from botdesk.utils.error_handlers import (
    ErrorHandler,
    setup_error_handlers
)
from botdesk.utils.text import count_words, is_within_word_count_quota

__all__ = [
    "retry_on_api_error",
    "ErrorHandler",
    "setup_error_handlers",
    "count_words",
    "is_within_word_count_quota"
]
