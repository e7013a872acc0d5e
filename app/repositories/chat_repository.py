from typing import List, Optional
import logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db.models.chat import ChatMessage, ChatSession

logger = logging.getLogger(__name__)


class ChatSessionRepository:
    @staticmethod
    async def get_by_document_id(document_id: str, db: Session) -> Optional[ChatSession]:
        """Get the chat session of a document"""
        try:
            return db.query(ChatSession).filter(ChatSession.document_id == document_id).first()
        except Exception as e:
            logger.error(f"Failed to get chat session for document {document_id}: {e}")
            raise

    @staticmethod
    async def get_or_create(document_id: str, db: Session) -> ChatSession:
        """
        Get the chat session of a document, creating it if absent.

        Two requests racing on the same document both try to insert; the unique
        constraint on ``document_id`` rejects the loser, which rolls back and
        reads the winner's row instead.
        """
        session = await ChatSessionRepository.get_by_document_id(document_id, db)
        if session:
            return session

        try:
            session = ChatSession(document_id=document_id)
            db.add(session)
            db.commit()
            db.refresh(session)
            logger.info(f"Created chat session {session.id} for document {document_id}")
            return session
        except IntegrityError:
            db.rollback()
            logger.info(f"Chat session for document {document_id} created concurrently, re-reading")
            session = await ChatSessionRepository.get_by_document_id(document_id, db)
            if session is None:
                raise
            return session

    @staticmethod
    async def delete_by_document_id(document_id: str, db: Session) -> bool:
        """Delete the chat session of a document and all its messages"""
        try:
            session = db.query(ChatSession).filter(ChatSession.document_id == document_id).first()
            if not session:
                return False

            db.delete(session)
            db.commit()
            return True
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to delete chat session for document {document_id}: {e}")
            raise


class ChatMessageRepository:
    # Attempts at claiming a sequence number before giving up
    MAX_APPEND_ATTEMPTS = 3

    @staticmethod
    async def create(message: ChatMessage, db: Session) -> ChatMessage:
        """
        Append a message to a session.

        The message gets the next ``seq`` of its session. Two concurrent
        appends may claim the same number; the unique constraint rejects the
        loser, which rolls back and takes the following number.
        """
        for attempt in range(1, ChatMessageRepository.MAX_APPEND_ATTEMPTS + 1):
            message.seq = ChatMessageRepository.next_seq(message.session_id, db)
            try:
                db.add(message)
                db.commit()
                db.refresh(message)
                return message
            except IntegrityError as e:
                db.rollback()
                if attempt == ChatMessageRepository.MAX_APPEND_ATTEMPTS:
                    logger.error(f"Failed to append chat message to session {message.session_id}: {e}")
                    raise
                logger.info(f"Sequence {message.seq} of session {message.session_id} taken, retrying")
            except Exception as e:
                db.rollback()
                logger.error(f"Failed to create chat message: {e}")
                raise

    @staticmethod
    def next_seq(session_id: str, db: Session) -> int:
        last = (
            db.query(func.max(ChatMessage.seq))
            .filter(ChatMessage.session_id == session_id)
            .scalar()
        )
        return (last or 0) + 1

    @staticmethod
    async def list_by_session(session_id: str, db: Session) -> List[ChatMessage]:
        """List all messages in a session, oldest first"""
        try:
            return (
                db.query(ChatMessage)
                .filter(ChatMessage.session_id == session_id)
                .order_by(ChatMessage.created_at.asc(), ChatMessage.seq.asc())
                .all()
            )
        except Exception as e:
            logger.error(f"Failed to list messages for session {session_id}: {e}")
            raise
