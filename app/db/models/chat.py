from sqlalchemy import Column, Integer, String, Text, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
import enum

from app.db.base_class import AppendOnlyModel, BaseModel

class MessageRole(str, enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"

class ChatSession(BaseModel):
    """One conversation thread per document"""
    __tablename__ = "chat_sessions"

    document_id = Column(
        String(36),
        ForeignKey("documents.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    # Relationships
    document = relationship("Document", back_populates="chat_session")
    messages = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by=lambda: [ChatMessage.created_at, ChatMessage.seq],
    )

class ChatMessage(AppendOnlyModel):
    """
    Chat message model. Messages are append-only.

    ``seq`` numbers the messages of a session in insertion order, starting
    at 1. It breaks ties between messages with the same ``created_at``.
    """
    __tablename__ = "chat_messages"
    __table_args__ = (
        UniqueConstraint("session_id", "seq", name="uq_chat_messages_session_seq"),
    )

    session_id = Column(String(36), ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    seq = Column(Integer, nullable=False)
    role = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    chunk_ids = Column(JSON, nullable=False, default=list)

    # Relationships
    session = relationship("ChatSession", back_populates="messages")
