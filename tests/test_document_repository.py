from datetime import datetime, timedelta

import pytest

from app.db.models import ChatMessage, ChatSession, Document, DocumentStatus
from app.repositories.document_repository import DocumentRepository


async def test_list_by_user_newest_first(db, test_user, other_user, make_document):
    older = make_document(test_user, created_at=datetime(2026, 1, 1))
    newer = make_document(test_user, created_at=datetime(2026, 1, 1) + timedelta(hours=1))
    make_document(other_user)

    documents = await DocumentRepository.list_by_user(test_user.id, db)

    assert [d.id for d in documents] == [newer.id, older.id]


async def test_apply_remote_state(db, test_user, make_document):
    document = make_document(test_user, status=DocumentStatus.PROCESSING)

    await DocumentRepository.apply_remote_state(
        document, {"status": "FAILED", "error_message": "Unreadable scan"}, db
    )

    stored = db.query(Document).one()
    assert stored.status == "FAILED"
    assert stored.error_message == "Unreadable scan"


async def test_apply_remote_state_rejects_other_fields(db, test_user, other_user, make_document):
    document = make_document(test_user)

    with pytest.raises(ValueError):
        await DocumentRepository.apply_remote_state(document, {"user_id": other_user.id}, db)

    db.refresh(document)
    assert document.user_id == test_user.id


async def test_delete_cascades_to_chat(db, test_user, make_document):
    document = make_document(test_user)
    session = ChatSession(document_id=document.id)
    db.add(session)
    db.commit()
    db.add(ChatMessage(session_id=session.id, seq=1, role="user", content="Hi"))
    db.commit()

    await DocumentRepository.delete(document, db)

    assert db.query(Document).count() == 0
    assert db.query(ChatSession).count() == 0
    assert db.query(ChatMessage).count() == 0
