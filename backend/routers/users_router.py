"""Admin account management (super admin only)."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import AdminUserService

router = APIRouter(prefix="/admin/users", tags=["admin-users"])


@router.get("", response_model=schemas.AdminUserList)
def list_users(
    current_admin: db_models.AdminUser = Depends(auth.get_super_admin),
    db: Session = Depends(get_db),
) -> schemas.AdminUserList:
    """List all case handler accounts."""
    return schemas.AdminUserList(
        users=[
            schemas.AdminUser.model_validate(admin)
            for admin in AdminUserService.list_admins(db)
        ]
    )


@router.post(
    "", response_model=schemas.AdminUser, status_code=status.HTTP_201_CREATED
)
def create_user(
    user: schemas.AdminUserCreate,
    current_admin: db_models.AdminUser = Depends(auth.get_super_admin),
    db: Session = Depends(get_db),
) -> db_models.AdminUser:
    """Create a regular case handler account."""
    return AdminUserService.create_admin(db, user.username, user.email, user.password)


@router.delete("/{user_id}", response_model=schemas.StatusMessage)
def delete_user(
    user_id: int,
    current_admin: db_models.AdminUser = Depends(auth.get_super_admin),
    db: Session = Depends(get_db),
) -> schemas.StatusMessage:
    """Delete a case handler account. The super admin cannot be deleted."""
    AdminUserService.delete_admin(db, user_id, current_admin.id)
    return schemas.StatusMessage(message="User deleted")
