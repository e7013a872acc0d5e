from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from app.db.models.user import UserRole

class UserBase(BaseModel):
    email: EmailStr = Field(..., description="Email address of the user")
    full_name: str = Field(..., min_length=1, max_length=100, description="Full name of the user")

class UserCreate(UserBase):
    password: str = Field(..., min_length=8, description="Plain text password, hashed before storage")

class Token(BaseModel):
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")

class UserResponse(UserBase):
    id: str = Field(..., description="ID of the user")
    role: UserRole = Field(default=UserRole.USER, description="Role of the user")
    is_active: bool = Field(..., description="Whether the user can sign in")
    created_at: Optional[datetime] = Field(default=None, description="Created timestamp")

    class Config:
        from_attributes = True
