"""
Integration tests for the public chat API

Tests:
- GET /api/v1/public/chat/{chatbot_id}
- POST /api/v1/public/chat/{session_id}/{chatbot_id}/start
- POST /api/v1/public/chat/{session_id}/{conversation_id}/message
- Hidden sources, session mismatch and private chatbots
"""

import asyncio
import pytest
from unittest.mock import patch
from uuid import uuid4

from botdesk.models.chatbot import ChatBotVisibility
from botdesk.models.usage_event import UsageEvent


@pytest.fixture
def public_chatbot(db_session, vector_store, test_chatbot, test_document):
    """Public chatbot whose document has one chunk in the vector store"""
    test_chatbot.visibility = ChatBotVisibility.PUBLIC
    db_session.commit()
    metadata = [{
        "document_id": str(test_document.id),
        "user_id": str(test_document.user_id),
        "chunk_id": "chunk-0",
        "chunk_index": 0,
    }]
    asyncio.run(vector_store.index_documents(["Refunds within 30 days."], metadata))
    return test_chatbot


@pytest.mark.integration
class TestPublicChatAPI:
    """Integration tests for the public chat API; no X-User-Id anywhere"""

    def start(self, client, session_id, chatbot_id):
        return client.post(f"/api/v1/public/chat/{session_id}/{chatbot_id}/start")

    def send(self, client, session_id, conversation_id, message="Refunds within 30 days."):
        return client.post(
            f"/api/v1/public/chat/{session_id}/{conversation_id}/message",
            json={"message": message},
        )

    def test_get_public_chatbot(self, client, public_chatbot):
        response = client.get(f"/api/v1/public/chat/{public_chatbot.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Helpdesk"
        assert data["view_source_documents"] is True

    def test_private_chatbot_not_found(self, client, test_chatbot):
        response = client.get(f"/api/v1/public/chat/{test_chatbot.id}")

        assert response.status_code == 404

    def test_start_private_chatbot_forbidden(self, client, test_chatbot):
        response = self.start(client, "visitor-1", test_chatbot.id)

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_start_and_resume(self, client, public_chatbot):
        first = self.start(client, "visitor-1", public_chatbot.id)
        again = self.start(client, "visitor-1", public_chatbot.id)

        assert first.status_code == 200
        assert first.json()["title"] == "Helpdesk"
        assert first.json()["chatbot"]["id"] == str(public_chatbot.id)
        assert again.json()["conversation_id"] == first.json()["conversation_id"]

    def test_chat_turn_billed_to_owner(self, client, db_session, test_user, public_chatbot, fake_model_service):
        conversation_id = self.start(client, "visitor-1", public_chatbot.id).json()["conversation_id"]

        with patch('botdesk.ai.rag_service.get_model_service', return_value=fake_model_service):
            response = self.send(client, "visitor-1", conversation_id)

        assert response.status_code == 200
        data = response.json()
        assert data["response"] == "Fake answer"
        assert [source["chunk_id"] for source in data["sources"]] == ["chunk-0"]

        events = db_session.query(UsageEvent).all()
        assert len(events) == 3
        assert {event.user_id for event in events} == {test_user.id}

        history = self.start(client, "visitor-1", public_chatbot.id).json()["messages"]
        assert [message["role"] for message in history] == ["user", "assistant"]
        assert [source["chunk_id"] for source in history[1]["sources"]] == ["chunk-0"]

    def test_hidden_sources(self, client, db_session, public_chatbot, fake_model_service):
        public_chatbot.view_source_documents = False
        db_session.commit()
        conversation_id = self.start(client, "visitor-1", public_chatbot.id).json()["conversation_id"]

        with patch('botdesk.ai.rag_service.get_model_service', return_value=fake_model_service):
            response = self.send(client, "visitor-1", conversation_id)

        assert response.status_code == 200
        assert response.json()["sources"] == []

        history = self.start(client, "visitor-1", public_chatbot.id).json()["messages"]
        assert history[1]["chunk_ids"] is None
        assert history[1]["sources"] is None

    def test_other_session_forbidden(self, client, db_session, public_chatbot):
        conversation_id = self.start(client, "visitor-1", public_chatbot.id).json()["conversation_id"]

        response = self.send(client, "visitor-2", conversation_id, "hello")

        assert response.status_code == 403
        assert db_session.query(UsageEvent).count() == 0

    def test_unknown_conversation(self, client):
        response = self.send(client, "visitor-1", uuid4(), "hello")

        assert response.status_code == 404

    def test_empty_message_rejected(self, client, public_chatbot):
        conversation_id = self.start(client, "visitor-1", public_chatbot.id).json()["conversation_id"]

        assert self.send(client, "visitor-1", conversation_id, "").status_code == 422
