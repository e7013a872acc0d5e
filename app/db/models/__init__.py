from app.db.models.user import User, UserRole
from app.db.models.document import Document, DocumentStatus
from app.db.models.chat import ChatSession, ChatMessage, MessageRole

__all__ = [
    "User",
    "UserRole",
    "Document",
    "DocumentStatus",
    "ChatSession",
    "ChatMessage",
    "MessageRole",
]
