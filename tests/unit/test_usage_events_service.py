"""
Unit tests for UsageEventsService

Tests:
- Standalone writes commit on their own session
- Writes inside a caller transaction roll back with it
- Errors are swallowed
- Events are append-only
"""

import pytest
from unittest.mock import MagicMock
from uuid import uuid4

from botdesk.models.usage_event import UsageEvent, UsageEventType
from botdesk.services.usage_events_service import UsageEventsService


@pytest.mark.unit
class TestUsageEventsService:
    """Test suite for UsageEventsService"""

    def test_create_event_standalone(self, session_factory):
        service = UsageEventsService(session_factory=session_factory)
        user_id = uuid4()

        event = service.create_event(user_id, "text-embedding-3-small", "openai", 42, UsageEventType.QUERY_DOCUMENT)

        assert event is not None
        check = session_factory()
        try:
            stored = check.query(UsageEvent).one()
            assert stored.user_id == user_id
            assert stored.token_count == 42
            assert stored.event_type == UsageEventType.QUERY_DOCUMENT
        finally:
            check.close()

    def test_accepts_string_user_id(self, session_factory):
        service = UsageEventsService(session_factory=session_factory)
        user_id = uuid4()

        event = service.create_event(str(user_id), "gpt-4o-mini", "OPENAI", 5, UsageEventType.LLM_INPUT)

        assert event.user_id == user_id

    def test_create_event_in_caller_transaction_commits(self, db_session, usage_events, test_user):
        usage_events.create_event(test_user.id, "gpt-4o-mini", "OPENAI", 10, UsageEventType.LLM_INPUT, db_session)
        db_session.commit()

        assert db_session.query(UsageEvent).count() == 1

    def test_create_event_in_caller_transaction_rolls_back(self, db_session, usage_events, test_user):
        usage_events.create_event(test_user.id, "gpt-4o-mini", "OPENAI", 10, UsageEventType.LLM_INPUT, db_session)
        usage_events.create_event(test_user.id, "gpt-4o-mini", "OPENAI", 3, UsageEventType.LLM_OUTPUT, db_session)
        db_session.rollback()

        assert db_session.query(UsageEvent).count() == 0

    def test_failed_event_does_not_break_caller_transaction(self, db_session, usage_events, test_user):
        usage_events.create_event(test_user.id, "gpt-4o-mini", "OPENAI", 10, UsageEventType.LLM_INPUT, db_session)
        # NOT NULL model_name: the savepoint fails, the outer transaction survives
        assert usage_events.create_event(test_user.id, None, "OPENAI", 1, UsageEventType.LLM_OUTPUT, db_session) is None
        db_session.commit()

        events = db_session.query(UsageEvent).all()
        assert [event.event_type for event in events] == [UsageEventType.LLM_INPUT]

    def test_errors_are_swallowed(self):
        session_factory = MagicMock(side_effect=RuntimeError("database unavailable"))
        service = UsageEventsService(session_factory=session_factory)

        assert service.create_event(uuid4(), "m", "p", 1, UsageEventType.LLM_INPUT) is None

    def test_invalid_user_id_is_swallowed(self, session_factory):
        service = UsageEventsService(session_factory=session_factory)

        assert service.create_event("not-a-uuid", "m", "p", 1, UsageEventType.LLM_INPUT) is None

    def test_events_are_append_only(self, db_session, usage_events, test_user):
        event = usage_events.create_event(test_user.id, "m", "p", 1, UsageEventType.LLM_INPUT, db_session)
        db_session.commit()

        event.token_count = 999
        with pytest.raises(ValueError, match="append-only"):
            db_session.commit()
        db_session.rollback()
