from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime

from app.db.models.document import DocumentStatus

class DocumentUpload(BaseModel):
    """Schema for an uploaded file, validated before it is sent to Logos"""
    filename: str = Field(..., min_length=1, description="Original filename")
    content_type: str = Field(..., description="MIME type of the file")
    content: bytes = Field(..., description="Raw file content")

class DocumentUploadResponse(BaseModel):
    """Schema for the upload response"""
    id: str = Field(..., description="ID of the local document record")
    logos_id: str = Field(..., description="ID of the document in Logos")
    message: str = Field(..., description="Message returned by Logos")

class DocumentStatusResponse(BaseModel):
    """Schema for document processing status"""
    id: str = Field(..., description="ID of the document")
    status: DocumentStatus = Field(..., description="Processing status of the document")
    summary: Optional[str] = Field(default=None, description="Summary generated by Logos")
    classification: Optional[str] = Field(default=None, description="Classification assigned by Logos")
    error_message: Optional[str] = Field(default=None, description="Error message if processing failed")

    class Config:
        from_attributes = True

class DocumentResponse(DocumentStatusResponse):
    """Schema for document response"""
    filename: str = Field(..., description="Original filename")
    content_type: str = Field(..., description="MIME type of the file")
    logos_id: Optional[str] = Field(default=None, description="ID of the document in Logos")
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Last updated timestamp")

    class Config:
        from_attributes = True
