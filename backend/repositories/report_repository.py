"""
Report repository for database operations.
"""

from typing import List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class ReportRepository(BaseRepository[db_models.Report]):
    """Repository for Report entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Report, db)

    def get_by_case_code(self, case_code: str) -> Optional[db_models.Report]:
        """
        Get report by its case code.

        Args:
            case_code: Public case code (e.g. "WH-123-ABC")

        Returns:
            Report if found, None otherwise
        """
        return (
            self.db.query(db_models.Report)
            .filter(db_models.Report.case_code == case_code)
            .first()
        )

    def case_code_exists(self, case_code: str) -> bool:
        """Check if a case code is already issued."""
        return self.get_by_case_code(case_code) is not None

    def list_with_message_counts(self) -> List[Tuple[db_models.Report, int]]:
        """
        All reports, newest first, each paired with its message count.

        Returns:
            List of (report, message_count) tuples
        """
        message_count = (
            self.db.query(
                db_models.Message.report_id.label("report_id"),
                func.count(db_models.Message.id).label("count"),
            )
            .group_by(db_models.Message.report_id)
            .subquery()
        )
        rows = (
            self.db.query(
                db_models.Report, func.coalesce(message_count.c.count, 0)
            )
            .outerjoin(message_count, message_count.c.report_id == db_models.Report.id)
            .order_by(db_models.Report.created_at.desc(), db_models.Report.id.desc())
            .all()
        )
        return [(report, int(count)) for report, count in rows]

    def claim_confirmation(self, report_id: int) -> bool:
        """
        Set the confirmation flag if it is still unset, without committing.

        The conditional UPDATE makes concurrent confirmations race-safe: only
        one transaction sees a changed row.

        Args:
            report_id: Report ID

        Returns:
            True if this call flipped the flag, False if it was already set
        """
        result = self.db.execute(
            update(db_models.Report)
            .where(
                db_models.Report.id == report_id,
                db_models.Report.confirmation_sent == False,  # noqa: E712
            )
            .values(confirmation_sent=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
