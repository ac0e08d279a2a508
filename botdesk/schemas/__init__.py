"""
Pydantic Schemas for Request/Response Validation

Modules:
    - chunk: Chunk input and vector-store chunk responses
    - document: Document create/read
    - chatbot: Chatbot create, share, quota usage
    - chat: Conversations and chat turns
"""
