"""
SQLAlchemy Database Models

All models use UUID primary keys and UTC timestamps.

Models:
    - User: Resource owner
    - Plan: Subscription tier with limits
    - Subscription: User's plan membership
    - UsageQuota: Limit snapshot owned by one subscription
    - LLMConfig: Generation model credentials
    - Document: Indexed text metadata (chunks live in the vector store)
    - ChatBot / ChatBotShare: Assistants and their share recipients
    - Conversation / ConversationMessage: Chat history
    - PublicConversation / PublicConversationMessage: Anonymous chat history on public chatbots
    - UsageEvent: Append-only token ledger

Relationships:
    User 1:N Subscription 1:1 UsageQuota
    User 1:N ChatBot N:M Document
    ChatBot 1:N ChatBotShare
    Conversation 1:N ConversationMessage
    ChatBot 1:N PublicConversation 1:N PublicConversationMessage
"""

from botdesk.models.user import User
from botdesk.models.plan import Plan
from botdesk.models.subscription import Subscription, SubscriptionStatus
from botdesk.models.usage_quota import UsageQuota
from botdesk.models.llm_config import LLMConfig, LLMProvider
from botdesk.models.document import Document, DocumentStatus, DocumentVisibility
from botdesk.models.chatbot import ChatBot, ChatBotShare, ChatBotVisibility, chatbot_documents
from botdesk.models.conversation import Conversation
from botdesk.models.conversation_message import ConversationMessage
from botdesk.models.public_conversation import PublicConversation, PublicConversationMessage
from botdesk.models.usage_event import UsageEvent, UsageEventType

__all__ = [
    "User",
    "Plan",
    "Subscription",
    "SubscriptionStatus",
    "UsageQuota",
    "LLMConfig",
    "LLMProvider",
    "Document",
    "DocumentStatus",
    "DocumentVisibility",
    "ChatBot",
    "ChatBotShare",
    "ChatBotVisibility",
    "chatbot_documents",
    "Conversation",
    "ConversationMessage",
    "PublicConversation",
    "PublicConversationMessage",
    "UsageEvent",
    "UsageEventType",
]
