"""
Unit tests for ChatBotService

Tests:
- Creation over owned documents and LLM configs only
- Sharing: per-email outcomes, existing recipients, visibility change
"""

import pytest
from uuid import uuid4

from botdesk.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from botdesk.models.chatbot import ChatBot, ChatBotShare, ChatBotVisibility
from botdesk.models.document import Document
from botdesk.schemas.chatbot import ChatBotCreate
from botdesk.services.chatbot_service import ChatBotService


@pytest.mark.unit
class TestCreateChatbot:
    """Test suite for ChatBotService.create_chatbot"""

    def test_create(self, db_session, test_user, test_document, test_llm_config):
        chatbot = ChatBotService(db_session).create_chatbot(
            test_user.id,
            ChatBotCreate(
                name="Helpdesk",
                document_ids=[test_document.id],
                llm_config_id=test_llm_config.id,
                system_prompt="Be concise.",
            )
        )

        assert chatbot.user_id == test_user.id
        assert chatbot.document_ids == [str(test_document.id)]
        assert chatbot.visibility == ChatBotVisibility.PRIVATE

    def test_foreign_document_rejected(self, db_session, test_user, other_user):
        foreign = Document(user_id=other_user.id, name="Not yours")
        db_session.add(foreign)
        db_session.commit()

        with pytest.raises(BadRequestError):
            ChatBotService(db_session).create_chatbot(
                test_user.id, ChatBotCreate(name="Bot", document_ids=[foreign.id])
            )

        assert db_session.query(ChatBot).count() == 0

    def test_unknown_llm_config_rejected(self, db_session, test_user):
        with pytest.raises(BadRequestError):
            ChatBotService(db_session).create_chatbot(
                test_user.id, ChatBotCreate(name="Bot", llm_config_id=uuid4())
            )


@pytest.mark.unit
class TestShareChatbot:
    """Test suite for ChatBotService.share_chatbot"""

    def test_share(self, db_session, test_user, other_user, test_chatbot):
        result = ChatBotService(db_session).share_chatbot(
            test_user.id,
            test_chatbot.id,
            ["Other@Example.com", "nobody@example.com", "owner@example.com"]
        )

        assert result["success"] == ["other@example.com"]
        assert result["failed"] == [
            {"email": "nobody@example.com", "reason": "User not found"},
            {"email": "owner@example.com", "reason": "Cannot share with owner"},
        ]
        assert result["chatbot"].visibility == ChatBotVisibility.SHARED
        assert test_chatbot.is_accessible_by(other_user.id)

    def test_existing_recipient_takes_no_new_seat(self, db_session, test_user, other_user, test_chatbot):
        service = ChatBotService(db_session)
        service.share_chatbot(test_user.id, test_chatbot.id, ["other@example.com"])

        result = service.share_chatbot(test_user.id, test_chatbot.id, ["other@example.com"])

        assert result["success"] == ["other@example.com"]
        assert db_session.query(ChatBotShare).count() == 1

    def test_public_visibility_kept(self, db_session, test_user, other_user, test_chatbot):
        test_chatbot.visibility = ChatBotVisibility.PUBLIC
        db_session.commit()

        result = ChatBotService(db_session).share_chatbot(test_user.id, test_chatbot.id, ["other@example.com"])

        assert result["chatbot"].visibility == ChatBotVisibility.PUBLIC

    def test_only_owner_can_share(self, db_session, other_user, test_chatbot):
        with pytest.raises(ForbiddenError):
            ChatBotService(db_session).share_chatbot(other_user.id, test_chatbot.id, ["x@example.com"])

    def test_missing_chatbot(self, db_session, test_user):
        with pytest.raises(NotFoundError):
            ChatBotService(db_session).share_chatbot(test_user.id, uuid4(), ["x@example.com"])
