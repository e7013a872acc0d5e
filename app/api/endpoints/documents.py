from typing import List
from fastapi import APIRouter, Depends, UploadFile, File
from functools import lru_cache
import logging
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.schemas.user import UserResponse
from app.services.document_service import DocumentService
from app.services.rag_client import RagClient, get_rag_client
from app.repositories.document_repository import DocumentRepository
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.permissions import Permission, check_permission
from app.schemas.document import (
    DocumentResponse,
    DocumentStatusResponse,
    DocumentUpload,
    DocumentUploadResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)

require_document_access = check_permission(Permission.MANAGE_OWN_DOCUMENTS)

# Dependencies
@lru_cache()
def get_document_repository() -> DocumentRepository:
    """Get document repository instance"""
    return DocumentRepository()

def get_document_service(
    document_repository: DocumentRepository = Depends(get_document_repository),
    rag_client: RagClient = Depends(get_rag_client),
    db: Session = Depends(get_db)
) -> DocumentService:
    """Dependency for DocumentService"""
    return DocumentService(
        document_repository=document_repository,
        rag_client=rag_client,
        db=db
    )

@router.post("/upload", response_model=DocumentUploadResponse)
async def upload_document(
    file: UploadFile = File(...),
    current_user: UserResponse = Depends(require_document_access),
    doc_service: DocumentService = Depends(get_document_service)
):
    """
    Upload a document.

    The file is forwarded to Logos for processing and a local record is
    created in PENDING status.
    """
    if not file.filename:
        raise ValidationError("Filename is required")

    # One byte past the limit is enough for the size check to reject the file
    payload = DocumentUpload(
        filename=file.filename,
        content_type=file.content_type or "application/octet-stream",
        content=await file.read(settings.MAX_FILE_SIZE_BYTES + 1),
    )
    return await doc_service.upload_document(payload, current_user)

@router.get("", response_model=List[DocumentResponse])
async def list_documents(
    current_user: UserResponse = Depends(require_document_access),
    doc_service: DocumentService = Depends(get_document_service)
):
    """
    List the current user's documents, newest first.
    """
    return await doc_service.list_documents(current_user)

@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    current_user: UserResponse = Depends(require_document_access),
    doc_service: DocumentService = Depends(get_document_service)
):
    """
    Get document details by ID.
    """
    return await doc_service.get_document(document_id, current_user)

@router.get("/{document_id}/status", response_model=DocumentStatusResponse)
async def get_document_status(
    document_id: str,
    current_user: UserResponse = Depends(require_document_access),
    doc_service: DocumentService = Depends(get_document_service)
):
    """
    Get the processing status of a document, refreshed from Logos.
    """
    return await doc_service.get_status(document_id, current_user)

@router.post("/{document_id}/sync", response_model=DocumentResponse)
async def sync_document(
    document_id: str,
    current_user: UserResponse = Depends(require_document_access),
    doc_service: DocumentService = Depends(get_document_service)
):
    """
    Overwrite the local document with the full record held by Logos.
    """
    return await doc_service.sync_document(document_id, current_user)

@router.delete("/{document_id}")
async def delete_document(
    document_id: str,
    current_user: UserResponse = Depends(require_document_access),
    doc_service: DocumentService = Depends(get_document_service)
):
    """
    Delete a document and its chat history.
    """
    return await doc_service.delete_document(document_id, current_user)
