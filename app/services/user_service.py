from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from app.core.exceptions import ValidationError
from app.core.security import get_password_hash, verify_password
from app.db.models.user import User, UserRole
from app.repositories.user_repository import UserRepository
from app.schemas.user import UserCreate, UserResponse

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = UserRepository()

    async def create_user(self, user_data: UserCreate) -> UserResponse:
        """Register a new user"""
        # Check if email already exists
        if await self.repository.get_by_email(user_data.email, self.db):
            raise ValidationError("Email already registered")
        
        # Create user with hashed password
        user = User(
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            full_name=user_data.full_name,
            role=UserRole.USER.value,
            is_active=True,
        )
        user = await self.repository.create(user, self.db)
        logger.info(f"User {user.id} registered")
        return UserResponse.model_validate(user)

    async def list_users(self) -> List[UserResponse]:
        """List all users"""
        users = await self.repository.list_all(self.db)
        return [UserResponse.model_validate(user) for user in users]

    async def authenticate_user(self, email: str, password: str) -> Optional[UserResponse]:
        """Authenticate user by email and password"""
        user = await self.repository.get_by_email(email, self.db)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return UserResponse.model_validate(user)
