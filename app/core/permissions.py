from enum import Enum
from typing import Dict, List
from fastapi import Depends, HTTPException, status

from app.api.deps import get_current_user
from app.db.models.user import UserRole
from app.schemas.user import UserResponse


class Permission(str, Enum):
    # Document permissions
    MANAGE_OWN_DOCUMENTS = "manage_own_documents"

    # Chat permissions
    CHAT_WITH_DOCUMENTS = "chat_with_documents"

    # User management permissions
    VIEW_USERS = "view_users"


# Define which permissions are granted to each role
ROLE_PERMISSIONS: Dict[UserRole, List[Permission]] = {
    UserRole.USER: [
        Permission.MANAGE_OWN_DOCUMENTS,
        Permission.CHAT_WITH_DOCUMENTS,
    ],
    UserRole.ADMIN: [
        Permission.MANAGE_OWN_DOCUMENTS,
        Permission.CHAT_WITH_DOCUMENTS,
        Permission.VIEW_USERS,
    ],
}


def get_permissions_for_role(role: UserRole) -> List[Permission]:
    """Get all permissions for a specific role"""
    return ROLE_PERMISSIONS.get(role, [])


def check_permission(required_permission: Permission):
    """
    Dependency function to check if a user has the required permission
    Usage in routes:
        @router.get("/endpoint")
        def endpoint(current_user=Depends(check_permission(Permission.SOME_PERMISSION))):
            # This will only execute if the user has the required permission
            pass
    """
    async def permission_dependency(current_user: UserResponse = Depends(get_current_user)):
        if required_permission not in get_permissions_for_role(current_user.role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: {required_permission.value} required",
            )
        return current_user
    
    return permission_dependency
