"""
Business Logic Services

Includes:
- ChatService: Conversation orchestration over the RAG service
- QuotaService: Transactional quota admission
- UsageEventsService: Append-only token ledger
- DocumentService: Document records and their indexed chunks
- ChatBotService: Chatbot creation and sharing
"""

# Lazy imports to avoid circular dependencies
# Import services directly from their modules instead

__all__ = [
    "ChatService",
    "QuotaService",
    "UsageEventsService",
    "DocumentService",
    "ChatBotService"
]
