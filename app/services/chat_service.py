from contextlib import aclosing
from typing import AsyncIterator, Dict, List, Optional
from fastapi import HTTPException
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import InvalidStateError
from app.core.sse import SSEAccumulator
from app.db.models.chat import ChatMessage, MessageRole
from app.db.models.document import Document, DocumentStatus
from app.repositories.chat_repository import ChatMessageRepository, ChatSessionRepository
from app.schemas.chat import ChatHistoryResponse, ChatMessageResponse, ChatRequest
from app.schemas.user import UserResponse
from app.services.document_service import DocumentService
from app.services.rag_client import RagClient

# Set up logging
logger = logging.getLogger(__name__)

class ChatService:
    def __init__(
        self,
        session_repository: ChatSessionRepository,
        message_repository: ChatMessageRepository,
        document_service: DocumentService,
        rag_client: RagClient,
        db: Session
    ):
        self.session_repository = session_repository
        self.message_repository = message_repository
        self.document_service = document_service
        self.rag_client = rag_client
        self.db = db

    async def validate_document_access(self, document_id: str, current_user: UserResponse) -> Document:
        """Check that the user owns the document and that it is ready to chat with"""
        document = await self.document_service.get_document(document_id, current_user)

        if document.status != DocumentStatus.COMPLETED.value:
            raise InvalidStateError(f"Document is not ready. Current status: {document.status}")

        if not document.logos_id:
            raise InvalidStateError("Document has no Logos reference")

        return document

    async def get_chat_history(self, document_id: str, current_user: UserResponse) -> ChatHistoryResponse:
        """Get the conversation for a document, oldest message first"""
        await self.document_service.get_document(document_id, current_user)

        try:
            session = await self.session_repository.get_by_document_id(document_id, self.db)
            if not session:
                return ChatHistoryResponse(session_id="", document_id=document_id, messages=[])

            messages = await self.message_repository.list_by_session(session.id, self.db)
            return ChatHistoryResponse(
                session_id=session.id,
                document_id=document_id,
                messages=[ChatMessageResponse.model_validate(message) for message in messages],
            )
        except Exception as e:
            logger.error(f"Failed to get chat history for document {document_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    async def clear_chat_history(self, document_id: str, current_user: UserResponse) -> None:
        """Delete the session of a document and all its messages"""
        await self.document_service.get_document(document_id, current_user)

        try:
            if await self.session_repository.delete_by_document_id(document_id, self.db):
                logger.info(f"Chat history for document {document_id} cleared by user {current_user.id}")
        except Exception as e:
            logger.error(f"Failed to clear chat history for document {document_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    async def save_message(
        self,
        document_id: str,
        role: MessageRole,
        content: str,
        chunk_ids: Optional[List[str]] = None
    ) -> ChatMessage:
        """Append a message to the document's session, creating the session if needed"""
        session = await self.session_repository.get_or_create(document_id, self.db)
        message = ChatMessage(
            session_id=session.id,
            role=role.value,
            content=content,
            chunk_ids=list(chunk_ids or []),
        )
        return await self.message_repository.create(message, self.db)

    async def stream_chat(self, chat_request: ChatRequest, current_user: UserResponse) -> AsyncIterator[bytes]:
        """
        Proxy a chat exchange with Logos.

        Chunks from Logos are yielded exactly as received. On the side they are
        parsed to rebuild the full answer, which is stored as an assistant
        message only if the stream ran to completion.
        """
        document = await self.validate_document_access(chat_request.document_id, current_user)

        # The user's message is stored before Logos is contacted
        await self.save_message(document.id, MessageRole.USER, chat_request.message)

        history = await self._conversation_context(document.id)

        accumulator = SSEAccumulator()
        remote_stream = self.rag_client.open_chat_stream(document.logos_id, chat_request.message, history)
        async with aclosing(remote_stream) as stream:
            async for chunk in stream:
                accumulator.feed(chunk)
                yield chunk
        accumulator.finish()

        if accumulator.content:
            await self.save_message(
                document.id,
                MessageRole.ASSISTANT,
                accumulator.content,
                accumulator.chunk_ids,
            )
            logger.info(f"Stored assistant reply for document {document.id} ({len(accumulator.content)} chars)")
        else:
            logger.info(f"Chat stream for document {document.id} produced no content")

    async def _conversation_context(self, document_id: str) -> List[Dict[str, str]]:
        """Stored history minus the message that was just saved"""
        session = await self.session_repository.get_by_document_id(document_id, self.db)
        if not session:
            return []
        messages = await self.message_repository.list_by_session(session.id, self.db)
        return [{"role": m.role, "content": m.content} for m in messages[:-1]]
