from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.schemas.user import UserResponse
from app.services.user_service import UserService
from app.api.deps import get_current_user
from app.db.database import get_db
from app.core.permissions import Permission, check_permission

router = APIRouter()

@router.get("", response_model=List[UserResponse])
async def list_users(
    current_user: UserResponse = Depends(check_permission(Permission.VIEW_USERS)),
    db: Session = Depends(get_db)
):
    """
    List all users (admin only).
    """
    user_service = UserService(db)
    return await user_service.list_users()

@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: UserResponse = Depends(get_current_user)
):
    """
    Get current user information.
    """
    return current_user
