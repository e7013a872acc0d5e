"""
Pytest configuration file with shared fixtures.

The database is an in-memory SQLite engine and Logos is simulated with an
``httpx.MockTransport``, so no external service is needed.
"""
import json
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.api.deps import create_access_token
from app.db.base_class import Base
from app.db.database import get_db
from app.core.security import get_password_hash
from app.db.models import Document, DocumentStatus, User, UserRole
from app.schemas.user import UserResponse
from app.services.rag_client import RagClient, get_rag_client

# Create a test engine
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create a TestingSessionLocal
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeLogos:
    """
    In-memory stand-in for the Logos service.

    Every request is recorded. Documents live in ``documents``; the chat
    endpoint calls ``on_chat`` if set, streams ``chat_chunks`` one by one
    and, if ``chat_error`` is set, raises it after the last chunk.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.bodies: List[bytes] = []
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.chat_chunks: List[bytes] = [
            b'data: {"content": "Hello"}\n\n',
            b'data: {"chunk_ids": ["c1"]}\n\n',
        ]
        self.chat_error: Optional[Exception] = None
        self.failures: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.unreachable = False
        self.on_chat: Optional[Callable[[httpx.Request], None]] = None
        self._next_id = 0

    def add_document(self, status: str = "completed", **fields: Any) -> str:
        self._next_id += 1
        logos_id = fields.pop("id", f"logos-{self._next_id}")
        self.documents[logos_id] = {
            "id": logos_id,
            "filename": "report.pdf",
            "content_type": "application/pdf",
            "status": status,
            "summary": None,
            "classification": None,
            "error_message": None,
            "created_at": "2026-01-01T10:00:00",
            "updated_at": "2026-01-01T10:05:00",
            **fields,
        }
        return logos_id

    def fail(self, method: str, path: str, status_code: int, body: Any = None) -> None:
        self.failures[(method, path)] = (status_code, body)

    def requests_to(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def last_chat_payload(self) -> Dict[str, Any]:
        for request, body in zip(reversed(self.requests), reversed(self.bodies)):
            if request.url.path == "/chat":
                return json.loads(body)
        raise AssertionError("Logos received no chat request")

    async def handler(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        self.requests.append(request)
        self.bodies.append(body)

        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)

        failure = self.failures.get((request.method, request.url.path))
        if failure is not None:
            status_code, failure_body = failure
            if isinstance(failure_body, (dict, list)):
                return httpx.Response(status_code, json=failure_body)
            return httpx.Response(status_code, content=(failure_body or "").encode())

        path = request.url.path
        if request.method == "POST" and path == "/documents/upload":
            logos_id = self.add_document(status="pending")
            return httpx.Response(200, json={"id": logos_id, "message": "Document queued for processing"})

        if request.method == "POST" and path == "/chat":
            if self.on_chat is not None:
                self.on_chat(request)
            return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=self._stream())

        parts = path.strip("/").split("/")
        if parts[0] == "documents" and len(parts) >= 2:
            document = self.documents.get(parts[1])
            if document is None:
                return httpx.Response(404, json={"detail": "Document not found"})
            if request.method == "GET" and len(parts) == 3 and parts[2] == "status":
                return httpx.Response(200, json={
                    key: document[key]
                    for key in ("id", "status", "summary", "classification", "error_message")
                })
            if request.method == "GET" and len(parts) == 2:
                return httpx.Response(200, json=document)
            if request.method == "DELETE" and len(parts) == 2:
                del self.documents[parts[1]]
                return httpx.Response(200, json={"message": "Document deleted"})

        return httpx.Response(404, json={"detail": "Not found"})

    async def _stream(self):
        for chunk in self.chat_chunks:
            yield chunk
        if self.chat_error is not None:
            raise self.chat_error


@pytest.fixture
def fake_logos():
    return FakeLogos()


@pytest.fixture
def rag_client(fake_logos):
    return RagClient(base_url="http://logos.test", transport=httpx.MockTransport(fake_logos.handler))


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)
    
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db, rag_client):
    """
    Create a test client with a database session and a fake Logos.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass
    
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rag_client] = lambda: rag_client
    
    with TestClient(app) as client:
        yield client
    
    app.dependency_overrides.clear()


def make_user(db, email: str, role: UserRole = UserRole.USER) -> User:
    user = User(
        email=email,
        hashed_password=get_password_hash("password123"),
        full_name=email.split("@")[0].title(),
        role=role.value,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db):
    return make_user(db, "alice@example.com")


@pytest.fixture
def other_user(db):
    return make_user(db, "bob@example.com")


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def auth_headers(test_user):
    return {"Authorization": f"Bearer {create_access_token(test_user.id)}"}


@pytest.fixture
def current_user(test_user):
    return UserResponse.model_validate(test_user)


@pytest.fixture
def other_current_user(other_user):
    return UserResponse.model_validate(other_user)


@pytest.fixture
def make_document(db, fake_logos):
    """Factory for local documents, mirrored in the fake Logos when they have a reference"""
    def _make(
        owner: User,
        status: DocumentStatus = DocumentStatus.COMPLETED,
        with_logos: bool = True,
        **fields: Any,
    ) -> Document:
        logos_id = None
        if with_logos:
            logos_id = fake_logos.add_document(status=status.value.lower())
        document = Document(
            user_id=owner.id,
            filename=fields.pop("filename", "report.pdf"),
            content_type=fields.pop("content_type", "application/pdf"),
            logos_id=logos_id,
            status=status.value,
            **fields,
        )
        db.add(document)
        db.commit()
        db.refresh(document)
        return document
    return _make

