from typing import List, Optional
import logging
from sqlalchemy.orm import Session
from app.db.models.user import User

logger = logging.getLogger(__name__)

class UserRepository:
    @staticmethod
    async def create(user: User, db: Session) -> User:
        """Create a new user"""
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
            return user
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to create user: {e}")
            raise
    
    @staticmethod
    async def get_by_id(user_id: str, db: Session) -> Optional[User]:
        """Get user by ID"""
        try:
            return db.query(User).filter(User.id == user_id).first()
        except Exception as e:
            logger.error(f"Failed to get user by ID {user_id}: {e}")
            raise
    
    @staticmethod
    async def get_by_email(email: str, db: Session) -> Optional[User]:
        """Get user by email"""
        try:
            return db.query(User).filter(User.email == email).first()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise
    
    @staticmethod
    async def list_all(db: Session) -> List[User]:
        """List all users"""
        try:
            return db.query(User).order_by(User.created_at.asc()).all()
        except Exception as e:
            logger.error(f"Failed to list users: {e}")
            raise
