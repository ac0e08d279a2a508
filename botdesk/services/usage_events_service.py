"""
Usage Events Service

Append-only ledger of token consumption. Metering is bookkeeping: it
must never fail the operation being metered, so every error is logged
and swallowed here.
"""

from typing import Optional, Union
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from botdesk.database import SessionLocal
from botdesk.models.usage_event import UsageEvent

logger = logging.getLogger(__name__)


class UsageEventsService:
    """Write usage events, optionally inside a caller's transaction"""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def create_event(
        self,
        user_id: Union[str, UUID],
        model_name: str,
        provider: str,
        token_count: int,
        event_type: str,
        session: Optional[Session] = None
    ) -> Optional[UsageEvent]:
        """
        Record one usage event

        With a session, the event is written in a SAVEPOINT on that session
        and commits or rolls back with the caller's transaction. Without
        one, it is committed on its own session.

        Args:
            user_id: Account charged
            model_name: Model that consumed the tokens
            provider: Provider of that model
            token_count: Tokens consumed
            event_type: UsageEventType value
            session: Optional caller transaction

        Returns:
            The event, or None if it could not be written
        """
        try:
            event = UsageEvent(
                user_id=user_id if isinstance(user_id, UUID) else UUID(str(user_id)),
                model_name=model_name,
                provider=provider,
                token_count=int(token_count),
                event_type=event_type,
            )

            if session is not None:
                with session.begin_nested():
                    session.add(event)
            else:
                db = self.session_factory()
                try:
                    db.add(event)
                    db.commit()
                finally:
                    db.close()

            logger.debug(f"Usage event {event_type}: user={user_id} model={model_name} tokens={token_count}")
            return event

        except Exception as e:
            logger.error(f"Failed to record usage event {event_type} for user {user_id}: {e}")
            return None


# Global instance (lazy initialization)
_usage_events_service: Optional[UsageEventsService] = None


def get_usage_events_service() -> UsageEventsService:
    """Get or create usage events service singleton"""
    global _usage_events_service
    if _usage_events_service is None:
        _usage_events_service = UsageEventsService()
    return _usage_events_service
