from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.db.models.chat import MessageRole

class ConversationTurn(BaseModel):
    """A single turn of context sent to Logos"""
    role: str = Field(..., description="Author of the turn, e.g. user, assistant or system")
    content: str = Field(..., description="Text of the turn")

class ChatRequest(BaseModel):
    """Request body for a streamed chat exchange"""
    document_id: str = Field(..., min_length=1, description="ID of the document to chat with")
    message: str = Field(..., min_length=1, description="The user's message")
    conversation_history: Optional[List[ConversationTurn]] = Field(
        default=None,
        description="Client-side history; the stored session history takes precedence",
    )

class ChatMessageResponse(BaseModel):
    """A persisted chat message"""
    id: str = Field(..., description="ID of the message")
    role: MessageRole = Field(..., description="Author of the message")
    content: str = Field(..., description="Text of the message")
    chunk_ids: List[str] = Field(default_factory=list, description="IDs of the source chunks cited by the message")
    created_at: datetime = Field(..., description="When the message was created")

    class Config:
        from_attributes = True

class ChatHistoryResponse(BaseModel):
    """The full conversation for a document"""
    session_id: str = Field(..., description="ID of the chat session, empty if none exists yet")
    document_id: str = Field(..., description="ID of the document")
    messages: List[ChatMessageResponse] = Field(default_factory=list, description="Messages, oldest first")
