from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from sqlalchemy.orm import Session
from app.db.database import get_db
from app.core.config import settings
from app.repositories.user_repository import UserRepository
from app.schemas.user import UserResponse

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")

def decode_access_token(token: str) -> Optional[str]:
    """Return the user ID carried by a token, or None if the token is invalid or expired"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")

async def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> UserResponse:
    user_id = decode_access_token(token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token", headers={"WWW-Authenticate": "Bearer"})

    user = await UserRepository.get_by_id(user_id, db)
    if not user or not user.is_active:
        logger.warning(f"Token presented for unknown or inactive user {user_id}")
        raise HTTPException(status_code=401, detail="User not found", headers={"WWW-Authenticate": "Bearer"})

    return UserResponse.model_validate(user)

def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a new JWT access token for a user
    Args:
        user_id: The ID of the user
        expires_delta: Optional expiration time delta. If not provided, defaults to settings.ACCESS_TOKEN_EXPIRE_MINUTES
    Returns:
        str: JWT access token
    """
    to_encode = {"sub": user_id}
    
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
