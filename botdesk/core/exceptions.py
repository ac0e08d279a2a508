"""
Custom exceptions for Botdesk API
"""

from typing import Optional

from fastapi import HTTPException, status


class BotdeskException(Exception):
    """Base exception for Botdesk"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class NotFoundError(BotdeskException):
    """Resource not found, or not visible to the caller"""

    status_code = status.HTTP_404_NOT_FOUND
    error = "not_found"


class ForbiddenError(BotdeskException):
    """Caller is not allowed to perform the action"""

    status_code = status.HTTP_403_FORBIDDEN
    error = "forbidden"


class QuotaExceededError(ForbiddenError):
    """A subscription limit would be exceeded"""

    error = "quota_exceeded"

    def __init__(
        self,
        message: str,
        quota_type: str,
        limit: Optional[float] = None,
        used: Optional[int] = None
    ):
        super().__init__(message)
        self.quota_type = quota_type
        self.limit = limit
        self.used = used

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({"quota_type": self.quota_type, "limit": self.limit, "used": self.used})
        return data


class BadRequestError(BotdeskException):
    """Malformed or semantically invalid input"""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "bad_request"


class ConfigurationError(BotdeskException):
    """Server-side configuration is missing or invalid"""

    error = "configuration_error"


# HTTP exception helpers
def http_401_unauthorized(detail: str = "Invalid authentication credentials"):
    """Raise 401 Unauthorized"""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
    )
