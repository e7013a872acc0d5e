from typing import Any, Dict, List, Optional
import logging
from sqlalchemy.orm import Session

from app.db.models.document import Document

logger = logging.getLogger(__name__)

# Fields that may be copied over from a Logos record
SYNCED_FIELDS = ("status", "summary", "classification", "error_message")

class DocumentRepository:
    """Persistence for the local copies of uploaded documents"""

    @staticmethod
    async def create(document: Document, db: Session) -> Document:
        """
        Insert a new document.

        Args:
            document: Unsaved document
            db: Database session

        Returns:
            The stored document with its generated ID
        """
        try:
            db.add(document)
            db.commit()
            db.refresh(document)
            return document
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to create document {document.filename}: {e}")
            raise

    @staticmethod
    async def get_by_id(document_id: str, db: Session) -> Optional[Document]:
        return db.query(Document).filter(Document.id == document_id).first()

    @staticmethod
    async def list_by_user(user_id: str, db: Session) -> List[Document]:
        """Documents owned by ``user_id``, newest first"""
        return (
            db.query(Document)
            .filter(Document.user_id == user_id)
            .order_by(Document.created_at.desc())
            .all()
        )

    @staticmethod
    async def apply_remote_state(document: Document, fields: Dict[str, Any], db: Session) -> Document:
        """
        Overwrite the Logos-owned fields of a document.

        Keys outside ``SYNCED_FIELDS`` are rejected so a caller cannot move a
        document to another owner or rewrite its Logos reference this way.
        """
        unknown = set(fields) - set(SYNCED_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        try:
            for key, value in fields.items():
                setattr(document, key, value)
            db.commit()
            db.refresh(document)
            return document
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to update document {document.id}: {e}")
            raise

    @staticmethod
    async def delete(document: Document, db: Session) -> None:
        """Delete a document; its chat session and messages go with it"""
        try:
            db.delete(document)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to delete document {document.id}: {e}")
            raise
