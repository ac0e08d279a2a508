"""
Quota Management Service

Admission control for chatbot creation, document creation and chatbot
sharing against the caller's active subscription.

Admission and creation share one transaction: check_quota takes a row
lock on the subscription (a no-op version bump) before counting, and
leaves the transaction open so the caller's create/share write commits
under the same lock. Two concurrent requests at count = limit - 1 are
therefore serialized and only the first is admitted.
"""

from enum import Enum
from typing import Iterable, List, Optional
from uuid import UUID
import logging

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from botdesk.config import settings
from botdesk.core.exceptions import BadRequestError, ForbiddenError, QuotaExceededError
from botdesk.models.chatbot import ChatBot, ChatBotShare, ChatBotVisibility
from botdesk.models.document import Document
from botdesk.models.subscription import Subscription, SubscriptionStatus
from botdesk.models.usage_quota import UsageQuota
from botdesk.utils.dates import utcnow
from botdesk.utils.text import count_words_in, is_within_word_count_quota

logger = logging.getLogger(__name__)


class QuotaResource(str, Enum):
    CHATBOT = "chatbot"
    DOCUMENT = "document"
    CHATBOT_SHARE = "chatbot_share"


def normalize_emails(emails: Iterable[str]) -> List[str]:
    """Lower-cased, de-duplicated recipient addresses in request order"""
    return list(dict.fromkeys(
        email.strip().lower() for email in emails if email and email.strip()
    ))


class QuotaService:
    """
    Enforce subscription limits with live counts

    Limits come from the subscription's UsageQuota snapshot. Counts are
    never cached: they are read inside the admission transaction.
    """

    def __init__(self, db: Session):
        """Initialize quota service with database session"""
        self.db = db

    def get_active_subscription(self, user_id: UUID) -> Optional[Subscription]:
        """Newest active subscription whose end_date is still in the future"""
        return (
            self.db.query(Subscription)
            .filter(
                Subscription.user_id == user_id,
                Subscription.status == SubscriptionStatus.ACTIVE,
                Subscription.end_date > utcnow()
            )
            .order_by(Subscription.end_date.desc())
            .first()
        )

    def _lock_subscription(self, subscription: Subscription) -> None:
        # No-op write: takes the row lock that serializes admissions per user
        self.db.execute(
            update(Subscription)
            .where(Subscription.id == subscription.id)
            .values(admission_version=Subscription.admission_version + 1)
            .execution_options(synchronize_session=False)
        )

    def count_chatbots(self, user_id: UUID) -> int:
        return self.db.query(func.count(ChatBot.id)).filter(ChatBot.user_id == user_id).scalar() or 0

    def count_documents(self, user_id: UUID) -> int:
        return self.db.query(func.count(Document.id)).filter(Document.user_id == user_id).scalar() or 0

    def count_shares(self, user_id: UUID) -> int:
        """Share seats across every chatbot the user owns"""
        return (
            self.db.query(func.count(ChatBotShare.id))
            .join(ChatBot, ChatBot.id == ChatBotShare.chatbot_id)
            .filter(ChatBot.user_id == user_id)
            .scalar()
        ) or 0

    def check_quota(
        self,
        user_id: UUID,
        resource: QuotaResource,
        chunks: Optional[List[dict]] = None,
        emails: Optional[List[str]] = None,
        visibility: Optional[str] = None,
        chatbot_id: Optional[UUID] = None
    ) -> UsageQuota:
        """
        Admit or deny one resource-creating action

        On success the transaction is left open with the admission lock
        held; the caller commits it together with the creation write. On
        failure the transaction is rolled back before raising.

        Args:
            user_id: Caller
            resource: Kind of resource being created
            chunks: Incoming document chunks ({"content": ...}) for DOCUMENT
            emails: Recipient addresses for CHATBOT_SHARE
            visibility: Requested chatbot visibility for CHATBOT
            chatbot_id: Chatbot being shared for CHATBOT_SHARE; its current
                recipients take no new seat

        Returns:
            The quota snapshot that admitted the action

        Raises:
            ForbiddenError: No active subscription or quota snapshot
            QuotaExceededError: A limit would be exceeded
            BadRequestError: DOCUMENT request without any chunk content
        """
        try:
            subscription = self.get_active_subscription(user_id)
            if subscription is None:
                raise ForbiddenError("No active subscription found. Please subscribe to a plan.")

            quota = subscription.quota
            if quota is None:
                raise ForbiddenError("Usage limits could not be verified. Please contact support via Help.")

            self._lock_subscription(subscription)

            if resource == QuotaResource.CHATBOT:
                self._check_chatbot(user_id, quota, visibility)
            elif resource == QuotaResource.DOCUMENT:
                self._check_document(user_id, quota, chunks)
            elif resource == QuotaResource.CHATBOT_SHARE:
                self._check_share(user_id, quota, emails, chatbot_id)
            else:
                raise BadRequestError(f"Unknown quota resource: {resource}")

        except Exception:
            self.db.rollback()
            raise

        logger.debug(f"Quota check PASSED for user {user_id}: {resource.value}")
        return quota

    def _check_chatbot(self, user_id: UUID, quota: UsageQuota, visibility: Optional[str]) -> None:
        used = self.count_chatbots(user_id)
        if used >= quota.max_chatbot_count:
            raise QuotaExceededError(
                f"Chatbot limit reached ({quota.max_chatbot_count}). Please upgrade your plan.",
                quota_type="chatbots",
                limit=quota.max_chatbot_count,
                used=used
            )

        if visibility == ChatBotVisibility.PUBLIC and not quota.is_public_chatbot_allowed:
            raise QuotaExceededError(
                "Public chatbots are not available on your plan. Please upgrade your plan.",
                quota_type="public_chatbots"
            )

    def _check_document(self, user_id: UUID, quota: UsageQuota, chunks: Optional[List[dict]]) -> None:
        contents = [chunk.get("content") or "" for chunk in (chunks or []) if isinstance(chunk, dict)]
        if not any(content.strip() for content in contents):
            raise BadRequestError("Document content cannot be empty.")

        used = self.count_documents(user_id)
        if used >= quota.max_document_count:
            raise QuotaExceededError(
                f"Document limit reached ({quota.max_document_count}). Please upgrade your plan.",
                quota_type="documents",
                limit=quota.max_document_count,
                used=used
            )

        word_count = count_words_in(contents)
        if not is_within_word_count_quota(
            word_count,
            quota.max_word_count_per_document,
            settings.WORD_COUNT_TOLERANCE_PERCENT
        ):
            raise QuotaExceededError(
                f"Document word count limit exceeded ({quota.max_word_count_per_document} words). "
                f"Please reduce the content or create another Document.",
                quota_type="words_per_document",
                limit=quota.max_word_count_per_document,
                used=word_count
            )

    def _check_share(
        self,
        user_id: UUID,
        quota: UsageQuota,
        emails: Optional[List[str]],
        chatbot_id: Optional[UUID] = None
    ) -> None:
        requested = normalize_emails(emails or [])
        if chatbot_id is not None and requested:
            already_shared = set(self.recipient_emails(user_id, chatbot_id))
            requested = [email for email in requested if email not in already_shared]

        attempting = len(requested)
        current = self.count_shares(user_id)
        if current + attempting > quota.max_chatbot_shares:
            raise QuotaExceededError(
                f"Chatbot share limit reached. Total allowed: {quota.max_chatbot_shares}. "
                f"Current: {current}, Attempting: {attempting}.",
                quota_type="chatbot_shares",
                limit=quota.max_chatbot_shares,
                used=current
            )

    def recipient_emails(self, user_id: UUID, chatbot_id: UUID) -> List[str]:
        """Lower-cased recipient addresses of one of the user's chatbots"""
        rows = (
            self.db.query(func.lower(ChatBotShare.email))
            .join(ChatBot, ChatBot.id == ChatBotShare.chatbot_id)
            .filter(ChatBot.id == chatbot_id, ChatBot.user_id == user_id)
            .all()
        )
        return [email for (email,) in rows]

    def get_usage(self, user_id: UUID) -> dict:
        """
        Get current usage for user

        Returns:
            Dictionary with limit/used/available per resource

        Raises:
            ForbiddenError: No active subscription
        """
        subscription = self.get_active_subscription(user_id)
        if subscription is None or subscription.quota is None:
            raise ForbiddenError("No active subscription found. Please subscribe to a plan.")

        quota = subscription.quota
        usage = {
            "chatbots": (quota.max_chatbot_count, self.count_chatbots(user_id)),
            "documents": (quota.max_document_count, self.count_documents(user_id)),
            "chatbot_shares": (quota.max_chatbot_shares, self.count_shares(user_id)),
        }

        report = {
            name: {
                "used": used,
                "limit": limit,
                "available": max(limit - used, 0),
                "percentage": (used / limit * 100) if limit > 0 else 0
            }
            for name, (limit, used) in usage.items()
        }
        report["max_word_count_per_document"] = quota.max_word_count_per_document
        report["is_public_chatbot_allowed"] = quota.is_public_chatbot_allowed
        report["subscription_end_date"] = subscription.end_date
        return report
