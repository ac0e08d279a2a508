"""
Subscription helpers

A subscription is created together with its UsageQuota snapshot, so
later plan edits never change what an existing subscriber may do.
"""

from datetime import timedelta
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from botdesk.models.plan import Plan
from botdesk.models.subscription import Subscription, SubscriptionStatus
from botdesk.models.usage_quota import UsageQuota
from botdesk.utils.dates import utcnow

logger = logging.getLogger(__name__)


def subscribe(db: Session, user_id: UUID, plan: Plan, days: int = 30) -> Subscription:
    """
    Create an active subscription and its quota snapshot

    Args:
        db: Database session (committed here)
        user_id: Subscriber
        plan: Plan whose limits are copied
        days: Length of the subscription

    Returns:
        The new subscription with `quota` populated
    """
    start = utcnow()
    subscription = Subscription(
        user_id=user_id,
        plan_id=plan.id,
        status=SubscriptionStatus.ACTIVE,
        start_date=start,
        end_date=start + timedelta(days=days),
    )
    subscription.quota = UsageQuota.from_plan(plan)

    db.add(subscription)
    db.commit()
    db.refresh(subscription)

    logger.info(f"User {user_id} subscribed to plan {plan.name} for {days} days")
    return subscription
