"""
Message and attachment repositories for database operations.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

import repositories.db_models as db_models
from .base import BaseRepository


class MessageRepository(BaseRepository[db_models.Message]):
    """Repository for Message entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Message, db)

    def list_for_report(self, report_id: int) -> List[db_models.Message]:
        """
        Messages of a report in display order (oldest first).

        Attachments are loaded eagerly since every view lists them.

        Args:
            report_id: Report ID

        Returns:
            Ordered list of messages
        """
        return (
            self.db.query(db_models.Message)
            .options(selectinload(db_models.Message.attachments))
            .filter(db_models.Message.report_id == report_id)
            .order_by(db_models.Message.created_at, db_models.Message.id)
            .all()
        )

    def count_for_report(self, report_id: int) -> int:
        """Number of messages attached to a report."""
        return (
            self.db.query(db_models.Message)
            .filter(db_models.Message.report_id == report_id)
            .count()
        )


class AttachmentRepository(BaseRepository[db_models.Attachment]):
    """Repository for Attachment entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Attachment, db)

    def get_with_owner(self, attachment_id: int) -> Optional[db_models.Attachment]:
        """
        Get attachment together with its owning message.

        Args:
            attachment_id: Attachment ID

        Returns:
            Attachment with `message` loaded, or None
        """
        return (
            self.db.query(db_models.Attachment)
            .options(joinedload(db_models.Attachment.message))
            .filter(db_models.Attachment.id == attachment_id)
            .first()
        )
