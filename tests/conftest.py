"""
Pytest configuration and shared fixtures for Botdesk tests

Provides:
- Isolated in-memory SQLite database per test (SAVEPOINT-capable)
- Test users, plans, subscriptions, LLM configs, documents, chatbots
- Deterministic fake embedding service
- In-memory Qdrant vector store
- Fake chat model and model service for the RAG pipeline
"""

import hashlib
import pytest
from typing import Generator, List
from unittest.mock import MagicMock
from uuid import uuid4

from langchain_core.language_models.fake_chat_models import FakeListChatModel
from qdrant_client import AsyncQdrantClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from botdesk.ai.base import BaseEmbeddingService
from botdesk.ai.rag_service import RAGService
from botdesk.ai.vector_store import VectorStoreService
from botdesk.database import Base
from botdesk.models.chatbot import ChatBot
from botdesk.models.document import Document, DocumentStatus
from botdesk.models.llm_config import LLMConfig, LLMProvider
from botdesk.models.plan import Plan
from botdesk.models.user import User
from botdesk.services.subscription_service import subscribe
from botdesk.services.usage_events_service import UsageEventsService

EMBEDDING_DIMENSIONS = 8


def make_sqlite_engine(url: str = "sqlite://", begin: str = "BEGIN", **connect_args):
    """
    SQLite engine with working SAVEPOINT support

    pysqlite's own transaction handling is disabled and SQLAlchemy emits
    BEGIN itself, so begin_nested() behaves like it does on PostgreSQL.
    """
    options = {"connect_args": {"check_same_thread": False, **connect_args}}
    if url == "sqlite://":
        options["poolclass"] = StaticPool
    engine = create_engine(url, **options)

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql(begin)

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_engine():
    """Fresh in-memory database for each test"""
    engine = make_sqlite_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def file_db_engine(tmp_path):
    """
    File-backed database for multi-threaded tests

    Transactions start with BEGIN IMMEDIATE so concurrent writers queue
    on the database lock instead of failing with SQLITE_BUSY.
    """
    engine = make_sqlite_engine(f"sqlite:///{tmp_path / 'botdesk.db'}", begin="BEGIN IMMEDIATE", timeout=30)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    """Database session for one test"""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def create_user(db_session: Session, email: str = None, name: str = "Test User") -> User:
    user = User(email=email or f"{uuid4().hex[:8]}@example.com", name=name)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def create_plan(db_session: Session, **limits) -> Plan:
    values = {
        "name": f"plan-{uuid4().hex[:8]}",
        "max_chatbot_count": 3,
        "max_chatbot_shares": 2,
        "max_document_count": 2,
        "max_word_count_per_document": 1000,
        "is_public_chatbot_allowed": False,
    }
    values.update(limits)
    plan = Plan(**values)
    db_session.add(plan)
    db_session.commit()
    db_session.refresh(plan)
    return plan


@pytest.fixture
def user_factory(db_session):
    """Create extra users: user_factory(email=..., name=...)"""
    return lambda **kwargs: create_user(db_session, **kwargs)


@pytest.fixture
def plan_factory(db_session):
    """Create plans with custom limits: plan_factory(max_document_count=5)"""
    return lambda **limits: create_plan(db_session, **limits)


@pytest.fixture
def test_user(db_session) -> User:
    """Create a test user"""
    return create_user(db_session, email="owner@example.com", name="Owner")


@pytest.fixture
def other_user(db_session) -> User:
    """A second, unrelated user"""
    return create_user(db_session, email="other@example.com", name="Other")


@pytest.fixture
def test_plan(db_session) -> Plan:
    """Plan with 3 chatbots, 2 shares, 2 documents, 1000 words"""
    return create_plan(db_session, name="starter")


@pytest.fixture
def test_subscription(db_session, test_user, test_plan):
    """Active 30-day subscription with its quota snapshot"""
    return subscribe(db_session, test_user.id, test_plan)


@pytest.fixture
def test_llm_config(db_session, test_user) -> LLMConfig:
    llm_config = LLMConfig(
        user_id=test_user.id,
        name="default",
        provider=LLMProvider.OPENAI,
        model_name="gpt-4o-mini",
        api_key="sk-test",
    )
    db_session.add(llm_config)
    db_session.commit()
    db_session.refresh(llm_config)
    return llm_config


@pytest.fixture
def test_document(db_session, test_user) -> Document:
    """Indexed document record (no chunks in any vector store)"""
    document = Document(
        user_id=test_user.id,
        name="Handbook",
        description="Employee handbook",
        status=DocumentStatus.INDEXED,
        chunk_count=0,
    )
    db_session.add(document)
    db_session.commit()
    db_session.refresh(document)
    return document


@pytest.fixture
def test_chatbot(db_session, test_user, test_llm_config, test_document) -> ChatBot:
    chatbot = ChatBot(
        user_id=test_user.id,
        name="Helpdesk",
        system_prompt="Answer from the handbook.",
        llm_config_id=test_llm_config.id,
        temperature=0.2,
        max_tokens=256,
    )
    chatbot.documents = [test_document]
    db_session.add(chatbot)
    db_session.commit()
    db_session.refresh(chatbot)
    return chatbot


class FakeEmbeddingService(BaseEmbeddingService):
    """
    Deterministic embeddings for tests

    Vectors are derived from a hash of the text and never all-zero.
    Token count is the word count.
    """

    def __init__(self, dimensions: int = EMBEDDING_DIMENSIONS):
        self.dimensions = dimensions
        self.calls: List[List[str]] = []

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        return [self._vector(text) for text in texts]

    def _vector(self, text: str) -> List[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [(digest[i] + 1) / 256 for i in range(self.dimensions)]

    def count_tokens(self, text: str) -> int:
        return len(text.split())

    def get_model_name(self) -> str:
        return "fake-embedding"

    def get_provider_name(self) -> str:
        return "fake"

    def get_dimensions(self) -> int:
        return self.dimensions


@pytest.fixture
def fake_embedding_service() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture
def usage_events(session_factory) -> UsageEventsService:
    """Usage events writing to the test database"""
    return UsageEventsService(session_factory=session_factory)


@pytest.fixture
def index_usage_events():
    """Recorder for the indexing usage events written by the vector store"""
    return MagicMock(spec=UsageEventsService)


@pytest.fixture
def vector_store(fake_embedding_service, index_usage_events) -> VectorStoreService:
    """Vector store on an in-memory Qdrant collection"""
    return VectorStoreService(
        client=AsyncQdrantClient(location=":memory:"),
        embedding_service=fake_embedding_service,
        usage_events=index_usage_events,
        collection_name="test_documents",
    )


@pytest.fixture
def rag_service(vector_store, fake_embedding_service, usage_events) -> RAGService:
    return RAGService(
        vector_store=vector_store,
        embedding_service=fake_embedding_service,
        usage_events=usage_events,
        top_k=4,
    )


@pytest.fixture
def fake_model_service():
    """
    Model service returning a scripted chat model

    get_model() returns a FakeListChatModel answering "Fake answer".
    count_tokens() returns the word count.
    """
    service = MagicMock()
    service.get_model.side_effect = lambda *args, **kwargs: FakeListChatModel(responses=["Fake answer"])
    service.count_tokens.side_effect = lambda text, model_name: len(text.split())
    return service


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests for API endpoints"
    )
    config.addinivalue_line(
        "markers", "asyncio: Async tests requiring asyncio event loop"
    )
