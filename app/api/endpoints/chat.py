from contextlib import aclosing
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from functools import lru_cache
import logging
from sqlalchemy.orm import Session

from app.api.endpoints.documents import get_document_service
from app.core.permissions import Permission, check_permission
from app.core.sse import format_error_event
from app.db.database import get_db
from app.repositories.chat_repository import ChatMessageRepository, ChatSessionRepository
from app.schemas.chat import ChatHistoryResponse, ChatRequest
from app.schemas.user import UserResponse
from app.services.chat_service import ChatService
from app.services.document_service import DocumentService
from app.services.rag_client import RagClient, get_rag_client

router = APIRouter()
logger = logging.getLogger(__name__)

require_chat_access = check_permission(Permission.CHAT_WITH_DOCUMENTS)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

@lru_cache()
def get_chat_session_repository() -> ChatSessionRepository:
    """Get chat session repository instance"""
    return ChatSessionRepository()

@lru_cache()
def get_chat_message_repository() -> ChatMessageRepository:
    """Get chat message repository instance"""
    return ChatMessageRepository()

def get_chat_service(
    session_repository: ChatSessionRepository = Depends(get_chat_session_repository),
    message_repository: ChatMessageRepository = Depends(get_chat_message_repository),
    document_service: DocumentService = Depends(get_document_service),
    rag_client: RagClient = Depends(get_rag_client),
    db: Session = Depends(get_db)
) -> ChatService:
    """Get chat service instance"""
    return ChatService(
        session_repository=session_repository,
        message_repository=message_repository,
        document_service=document_service,
        rag_client=rag_client,
        db=db
    )

@router.post("")
async def chat(
    chat_request: ChatRequest,
    current_user: UserResponse = Depends(require_chat_access),
    chat_service: ChatService = Depends(get_chat_service)
):
    """
    Chat with a document.

    The answer is streamed as server-sent events exactly as Logos produces
    them. Headers are sent before anything can fail, so errors are reported
    as a final ``error`` event instead of an HTTP status.
    """
    async def event_stream():
        try:
            async with aclosing(chat_service.stream_chat(chat_request, current_user)) as stream:
                async for chunk in stream:
                    yield chunk
        except HTTPException as e:
            logger.warning(f"Chat on document {chat_request.document_id} failed: {e.detail}")
            yield format_error_event(str(e.detail))
        except Exception as e:
            logger.error(f"Chat on document {chat_request.document_id} failed: {e}", exc_info=True)
            yield format_error_event(str(e))

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)

@router.get("/history/{document_id}", response_model=ChatHistoryResponse)
async def get_chat_history(
    document_id: str,
    current_user: UserResponse = Depends(require_chat_access),
    chat_service: ChatService = Depends(get_chat_service)
):
    """Get the conversation for a document"""
    return await chat_service.get_chat_history(document_id, current_user)

@router.delete("/history/{document_id}")
async def clear_chat_history(
    document_id: str,
    current_user: UserResponse = Depends(require_chat_access),
    chat_service: ChatService = Depends(get_chat_service)
):
    """Delete the conversation for a document"""
    await chat_service.clear_chat_history(document_id, current_user)
    return {"message": "Chat history cleared successfully"}
