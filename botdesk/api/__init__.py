"""
API Routes and Endpoints

Routers:
    - chat: Conversations and chat turns
    - documents: Document create (quota-gated), read, delete
    - chatbots: Chatbot create and share (quota-gated), quota usage
"""
