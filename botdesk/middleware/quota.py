"""
Quota admission dependency

check_quota(resource) returns a FastAPI dependency that runs the
admission check on the request's database session before the route
handler. The admission lock stays held on that session, and the
handler's create/share write commits in the same transaction.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID
import json
import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from botdesk.api.deps import get_current_user
from botdesk.database import get_db
from botdesk.models.usage_quota import UsageQuota
from botdesk.models.user import User
from botdesk.services.quota_service import QuotaResource, QuotaService

logger = logging.getLogger(__name__)


async def _read_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}


def _requested_emails(body: Dict[str, Any]) -> List[str]:
    emails = body.get("emails")
    if isinstance(emails, list):
        return [email for email in emails if isinstance(email, str)]
    email = body.get("email")
    return [email] if isinstance(email, str) else []


def _path_chatbot_id(request: Request) -> Optional[UUID]:
    try:
        return UUID(str(request.path_params["chatbot_id"]))
    except (KeyError, ValueError):
        return None


def check_quota(resource: QuotaResource):
    """
    Build an admission dependency for one resource kind

    Usage:
        @router.post("", dependencies=[Depends(check_quota(QuotaResource.CHATBOT))])

    Raises (from the dependency):
        ForbiddenError / QuotaExceededError / BadRequestError
    """

    async def quota_dependency(
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user)
    ) -> UsageQuota:
        body = await _read_body(request)
        chunks = body.get("chunks") if isinstance(body.get("chunks"), list) else None

        return QuotaService(db).check_quota(
            current_user.id,
            resource,
            chunks=chunks,
            emails=_requested_emails(body),
            visibility=body.get("visibility"),
            chatbot_id=_path_chatbot_id(request),
        )

    return quota_dependency
