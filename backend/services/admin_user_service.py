"""
Admin User Service

Management of case handler accounts. Exactly one super admin exists: it is
created at startup when missing, cannot be deleted and is the only account
allowed to manage other admins.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import authentication.auth as auth
import repositories.db_models as db_models
from helpers.password_validation import validate_password
from models.exceptions import (
    AdminUserAlreadyExistsException,
    AdminUserNotFoundException,
    CannotDeleteSelfException,
    CannotDeleteSuperAdminException,
    ValidationException,
)
from repositories.admin_user_repository import AdminUserRepository

SUPER_ADMIN_USERNAME = "admin"


class AdminUserService:
    """Service for managing case handler accounts."""

    @staticmethod
    def list_admins(db: Session) -> List[db_models.AdminUser]:
        """All admins, oldest first."""
        return AdminUserRepository(db).list_all()

    @staticmethod
    def create_admin(
        db: Session, username: str, email: Optional[str], password: str
    ) -> db_models.AdminUser:
        """
        Create a regular (non-super) admin.

        Args:
            db: Database session
            username: Unique username
            email: Optional unique e-mail for notifications
            password: Plaintext password

        Returns:
            Created admin

        Raises:
            ValidationException: If username is blank or the password is invalid
            AdminUserAlreadyExistsException: If username or e-mail is taken
        """
        username = username.strip()
        if not username:
            raise ValidationException("Username is required")

        is_valid, errors = validate_password(password)
        if not is_valid:
            raise ValidationException("; ".join(errors))

        email = email or None
        admin_repo = AdminUserRepository(db)
        if admin_repo.username_or_email_taken(username, email):
            raise AdminUserAlreadyExistsException()

        admin = db_models.AdminUser(
            username=username,
            email=email,
            hashed_password=auth.get_password_hash(password),
            is_super=False,
        )
        try:
            admin = admin_repo.create(admin)
        except IntegrityError:
            admin_repo.rollback()
            raise AdminUserAlreadyExistsException()

        logger.info(f"Admin user {admin.id} created")
        return admin

    @staticmethod
    def delete_admin(db: Session, admin_id: int, requester_id: int) -> None:
        """
        Delete an admin account.

        Raises:
            CannotDeleteSelfException: If the requester targets itself
            AdminUserNotFoundException: If the admin does not exist
            CannotDeleteSuperAdminException: If the target is the super admin
        """
        if admin_id == requester_id:
            raise CannotDeleteSelfException()

        admin_repo = AdminUserRepository(db)
        admin = admin_repo.get_by_id(admin_id)
        if admin is None:
            raise AdminUserNotFoundException()
        if admin.is_super:
            raise CannotDeleteSuperAdminException()

        admin_repo.delete(admin)
        logger.info(f"Admin user {admin_id} deleted by {requester_id}")

    @staticmethod
    def ensure_super_admin(db: Session, initial_password: str) -> bool:
        """
        Create the super admin if none exists.

        Args:
            db: Database session
            initial_password: Password for the new super admin

        Returns:
            True if a super admin was created
        """
        admin_repo = AdminUserRepository(db)
        if admin_repo.get_super_admin() is not None:
            return False

        existing = admin_repo.get_by_username(SUPER_ADMIN_USERNAME)
        if existing is not None:
            # A regular account already uses the name; promote it
            existing.is_super = True
            admin_repo.commit()
            logger.warning(f"Promoted existing '{SUPER_ADMIN_USERNAME}' to super admin")
            return True

        admin_repo.create(
            db_models.AdminUser(
                username=SUPER_ADMIN_USERNAME,
                email=None,
                hashed_password=auth.get_password_hash(initial_password),
                is_super=True,
            )
        )
        logger.info(f"Created super admin '{SUPER_ADMIN_USERNAME}'")
        return True

    @staticmethod
    def notification_recipients(db: Session) -> List[str]:
        """E-mail addresses that receive new-report notifications."""
        return AdminUserRepository(db).list_notification_emails()
