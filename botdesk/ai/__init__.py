"""
AI backends and retrieval pipeline

Modules:
    - base: Embedding and generation interfaces
    - factory: Backend selection by configuration / provider
    - filters: The only place Qdrant filters are built
    - vector_store: Qdrant gateway
    - rag_service: Retrieval-augmented answers and source hydration
"""
