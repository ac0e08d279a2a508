"""
Shared fixtures for API integration tests
"""

import pytest
from fastapi.testclient import TestClient

from botdesk.api.deps import get_rag, get_vector_store
from botdesk.database import get_db
from botdesk.main import app


@pytest.fixture
def client(db_session, vector_store, rag_service):
    """Test client bound to the test database, vector store and RAG pipeline"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_vector_store] = lambda: vector_store
    app.dependency_overrides[get_rag] = lambda: rag_service

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(test_user):
    return {"X-User-Id": str(test_user.id)}


@pytest.fixture
def other_headers(other_user):
    return {"X-User-Id": str(other_user.id)}
