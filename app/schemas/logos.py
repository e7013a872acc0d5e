from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from app.db.models.document import DocumentStatus

class LogosUploadResult(BaseModel):
    """Response of the Logos upload endpoint"""
    id: str = Field(..., description="ID of the document in Logos")
    message: str = Field(default="Document uploaded", description="Message returned by Logos")

class LogosDocumentStatus(BaseModel):
    """Processing status of a document as reported by Logos"""
    id: str = Field(..., description="ID of the document in Logos")
    status: DocumentStatus = Field(..., description="Processing status")
    summary: Optional[str] = None
    classification: Optional[str] = None
    error_message: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        # Logos reports lowercase statuses
        if isinstance(v, str):
            return v.upper()
        return v

class LogosDocument(LogosDocumentStatus):
    """Full document record held by Logos"""
    filename: Optional[str] = None
    content_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
