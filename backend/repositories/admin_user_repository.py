"""
Admin user repository for database operations.
"""

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class AdminUserRepository(BaseRepository[db_models.AdminUser]):
    """Repository for AdminUser entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.AdminUser, db)

    def get_by_username(self, username: str) -> Optional[db_models.AdminUser]:
        """
        Get admin by username (exact, case-sensitive match).

        Args:
            username: Username

        Returns:
            AdminUser if found, None otherwise
        """
        return (
            self.db.query(db_models.AdminUser)
            .filter(db_models.AdminUser.username == username)
            .first()
        )

    def username_or_email_taken(self, username: str, email: Optional[str]) -> bool:
        """
        Check whether the username, or the email when given, is already in use.

        Args:
            username: Username to check
            email: Optional email to check

        Returns:
            True if either value is taken
        """
        conditions = [db_models.AdminUser.username == username]
        if email:
            conditions.append(db_models.AdminUser.email == email)
        return (
            self.db.query(db_models.AdminUser).filter(or_(*conditions)).first()
            is not None
        )

    def get_super_admin(self) -> Optional[db_models.AdminUser]:
        """Return the super admin, if one exists."""
        return (
            self.db.query(db_models.AdminUser)
            .filter(db_models.AdminUser.is_super == True)  # noqa: E712
            .order_by(db_models.AdminUser.id)
            .first()
        )

    def list_all(self) -> List[db_models.AdminUser]:
        """All admins, oldest first."""
        return (
            self.db.query(db_models.AdminUser)
            .order_by(db_models.AdminUser.created_at, db_models.AdminUser.id)
            .all()
        )

    def list_notification_emails(self) -> List[str]:
        """E-mail addresses of all admins that have one."""
        rows = (
            self.db.query(db_models.AdminUser.email)
            .filter(db_models.AdminUser.email.isnot(None))
            .all()
        )
        return [email for (email,) in rows if email]
