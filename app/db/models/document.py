from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship
import enum

from app.db.base_class import BaseModel

class DocumentStatus(str, enum.Enum):
    """Document processing status, as reported by Logos"""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

class Document(BaseModel):
    """Document model, a local mirror of a Logos document"""
    __tablename__ = "documents"
    
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    filename = Column(String(255), nullable=False)
    content_type = Column(String(100), nullable=False)
    logos_id = Column(String(255), unique=True, nullable=True)
    status = Column(String(20), nullable=False, default=DocumentStatus.PENDING.value)
    summary = Column(Text, nullable=True)
    classification = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)
    
    # Relationships
    user = relationship("User", back_populates="documents")
    chat_session = relationship(
        "ChatSession",
        back_populates="document",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Document id={self.id} filename={self.filename} status={self.status}>"
