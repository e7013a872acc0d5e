from typing import Dict, List, Optional
from fastapi import HTTPException
import logging
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    ForbiddenError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from app.db.models.document import Document, DocumentStatus
from app.repositories.document_repository import DocumentRepository
from app.schemas.document import (
    DocumentResponse,
    DocumentStatusResponse,
    DocumentUpload,
    DocumentUploadResponse,
)
from app.schemas.logos import LogosDocumentStatus
from app.schemas.user import UserResponse
from app.services.rag_client import RagClient

# Set up logging
logger = logging.getLogger(__name__)

class DocumentService:
    def __init__(
        self,
        document_repository: DocumentRepository,
        rag_client: RagClient,
        db: Session
    ):
        self.document_repository = document_repository
        self.rag_client = rag_client
        self.db = db

    async def upload_document(
        self,
        payload: DocumentUpload,
        current_user: UserResponse
    ) -> DocumentUploadResponse:
        """Send a file to Logos and record it locally as PENDING"""
        self._validate_upload(payload)
        try:
            # Nothing is stored locally unless Logos accepted the file
            logos_result = await self.rag_client.upload(
                payload.content,
                payload.filename,
                payload.content_type,
            )

            document = Document(
                user_id=str(current_user.id),
                filename=payload.filename,
                content_type=payload.content_type,
                logos_id=logos_result.id,
                status=DocumentStatus.PENDING.value,
            )
            document = await self.document_repository.create(document, self.db)
            logger.info(f"Document {document.id} ({payload.filename}) uploaded by user {current_user.id}")

            return DocumentUploadResponse(
                id=document.id,
                logos_id=logos_result.id,
                message=logos_result.message,
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Failed to upload document {payload.filename}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def _validate_upload(self, payload: DocumentUpload) -> None:
        """Check the file against the size limit and the content type allow-list"""
        if not payload.content:
            raise ValidationError("Uploaded file is empty")

        if len(payload.content) > settings.MAX_FILE_SIZE_BYTES:
            raise PayloadTooLargeError(
                f"File exceeds maximum allowed size ({settings.MAX_FILE_SIZE_MB}MB)"
            )

        allowed_types = settings.ALLOWED_CONTENT_TYPE_LIST
        if payload.content_type not in allowed_types:
            raise ValidationError(
                f"Invalid file type: {payload.content_type}. Allowed: {', '.join(allowed_types)}"
            )

    async def list_documents(self, current_user: UserResponse) -> List[DocumentResponse]:
        """List the user's documents, newest first"""
        try:
            documents = await self.document_repository.list_by_user(str(current_user.id), self.db)
            return [DocumentResponse.model_validate(doc) for doc in documents]
        except Exception as e:
            logger.error(f"Failed to list documents for user {current_user.id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    async def get_document(
        self,
        doc_id: str,
        current_user: UserResponse
    ) -> Document:
        """Get a document, checking that it belongs to the current user"""
        try:
            doc = await self.document_repository.get_by_id(doc_id, self.db)
        except Exception as e:
            logger.error(f"Failed to get document {doc_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        if not doc:
            raise NotFoundError("Document not found")
        if str(doc.user_id) != str(current_user.id):
            logger.warning(f"User {current_user.id} tried to access document {doc_id}")
            raise ForbiddenError("Access denied")
        return doc

    async def get_status(
        self,
        doc_id: str,
        current_user: UserResponse
    ) -> DocumentStatusResponse:
        """
        Get the processing status of a document.

        Logos is the source of truth: when the document has a Logos reference
        its status is fetched fresh, and the local copy is only written when
        the status has changed.
        """
        doc = await self.get_document(doc_id, current_user)

        if not doc.logos_id:
            return DocumentStatusResponse.model_validate(doc)

        logos_status = await self.rag_client.get_status(doc.logos_id)

        if logos_status.status.value != doc.status:
            previous_status = doc.status
            try:
                await self.document_repository.apply_remote_state(doc, _remote_fields(logos_status), self.db)
            except Exception as e:
                logger.error(f"Failed to store status of document {doc_id}: {e}")
                raise HTTPException(status_code=500, detail=str(e))
            logger.info(f"Document {doc_id} status changed from {previous_status} to {logos_status.status.value}")

        return DocumentStatusResponse(
            id=doc_id,
            status=logos_status.status,
            summary=logos_status.summary,
            classification=logos_status.classification,
            error_message=logos_status.error_message,
        )

    async def sync_document(
        self,
        doc_id: str,
        current_user: UserResponse
    ) -> DocumentResponse:
        """Overwrite the local copy with the full Logos record"""
        doc = await self.get_document(doc_id, current_user)

        if not doc.logos_id:
            raise NotFoundError("Document has no Logos reference")

        logos_doc = await self.rag_client.get_document(doc.logos_id)

        try:
            doc = await self.document_repository.apply_remote_state(doc, _remote_fields(logos_doc), self.db)
        except Exception as e:
            logger.error(f"Failed to sync document {doc_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Document {doc_id} synced from Logos ({logos_doc.status.value})")
        return DocumentResponse.model_validate(doc)

    async def delete_document(
        self,
        doc_id: str,
        current_user: UserResponse
    ) -> Dict[str, str]:
        """Delete a document from Logos (best effort) and locally"""
        doc = await self.get_document(doc_id, current_user)

        if doc.logos_id:
            try:
                await self.rag_client.delete(doc.logos_id)
            except HTTPException as e:
                logger.warning(f"Failed to delete document {doc.logos_id} from Logos: {e.detail}")

        try:
            await self.document_repository.delete(doc, self.db)
        except Exception as e:
            logger.error(f"Failed to delete document {doc_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Document {doc_id} deleted by user {current_user.id}")
        return {"message": "Document deleted successfully"}


def _remote_fields(record: LogosDocumentStatus) -> Dict[str, Optional[str]]:
    return {
        "status": record.status.value,
        "summary": record.summary,
        "classification": record.classification,
        "error_message": record.error_message,
    }
