from enum import Enum
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship

from app.db.base_class import BaseModel

class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"

# SQLAlchemy User model
class User(BaseModel):
    """User SQLAlchemy model"""
    __tablename__ = "users"
    
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    is_active = Column(Boolean, nullable=False, default=True)
    
    # Relationships
    documents = relationship("Document", back_populates="user", cascade="all, delete-orphan")
