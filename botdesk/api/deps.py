"""
FastAPI dependencies
Current user, database session, service singletons
"""

from fastapi import Depends, Header
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from botdesk.database import get_db
from botdesk.models.user import User
from botdesk.core.exceptions import http_401_unauthorized


async def get_current_user(
    x_user_id: Optional[str] = Header(None, description="Authenticated user id (set by the gateway)"),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current user from the upstream-injected X-User-Id header

    Authentication happens before requests reach this service; the header
    carries the already-verified user id.

    Raises:
        HTTPException: 401 if the header is missing, malformed or unknown
    """
    if not x_user_id:
        raise http_401_unauthorized("Missing X-User-Id header")

    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise http_401_unauthorized("Invalid X-User-Id header")

    user = db.get(User, user_id)
    if user is None:
        raise http_401_unauthorized("User not found")

    return user


# ==============================================================================
# Service Singletons
# ==============================================================================
# One Qdrant client and one RAG pipeline per process; overridable in tests


def get_vector_store():
    """
    Get singleton VectorStoreService instance

    Returns:
        VectorStoreService: Shared gateway to the vector collection
    """
    from botdesk.ai.vector_store import get_vector_store_service
    return get_vector_store_service()


def get_rag():
    """
    Get singleton RAGService instance

    Returns:
        RAGService: Shared retrieval-augmented generation pipeline
    """
    from botdesk.ai.rag_service import get_rag_service
    return get_rag_service()
