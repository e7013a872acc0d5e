from datetime import datetime, timezone
from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, String, DateTime
import uuid

# Create base class for SQLAlchemy models
Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp with microsecond precision"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Base for rows that are never modified after insert
class AppendOnlyModel(Base):
    """Abstract base with an ID and a creation timestamp"""
    __abstract__ = True

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at = Column(DateTime, nullable=False, default=utcnow)


# Define a base model class with common fields
class BaseModel(AppendOnlyModel):
    """Base model class with common fields for all SQLAlchemy models"""
    __abstract__ = True

    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
