"""
Message Service

Appends messages to a report for either side of the conversation. Message,
attachment records and any status change are committed together; stored
files are removed again when that commit fails.
"""

from typing import List, Optional, Sequence

from fastapi import UploadFile
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.exceptions import EmptyMessageException, ReportNotFoundException
from repositories.message_repository import MessageRepository
from repositories.report_repository import ReportRepository
from services import status_gate
from services.attachment_service import AcceptedUpload, AttachmentService
from services.file_storage import LocalFileStorage


class MessageService:
    """Service for case communication."""

    @staticmethod
    def build_message(
        sender_type: db_models.SenderType,
        content: Optional[str],
        uploads: Sequence[AcceptedUpload],
    ) -> db_models.Message:
        """
        Create an unsaved message after validating its content.

        Raises:
            EmptyMessageException: If content is blank and there are no uploads
        """
        text = (content or "").strip()
        if not text and not uploads:
            raise EmptyMessageException()
        return db_models.Message(sender_type=sender_type, content=text)

    @staticmethod
    def post_message(
        db: Session,
        storage: LocalFileStorage,
        report_id: int,
        sender_type: db_models.SenderType,
        content: Optional[str],
        files: Optional[Sequence[UploadFile]] = None,
    ) -> db_models.Message:
        """
        Append a message to a report.

        Admin messages move a NEW report to IN_PROGRESS.

        Args:
            db: Database session
            storage: Attachment storage
            report_id: Report ID
            sender_type: WHISTLEBLOWER or ADMIN
            content: Message text (trimmed)
            files: Uploaded files

        Returns:
            The created message with attachments

        Raises:
            ReportNotFoundException: If the report does not exist
            ReportClosedException: If the report is CLOSED
            EmptyMessageException: If neither text nor accepted files are sent
            ValidationException: If too many or too large files are sent
        """
        report_repo = ReportRepository(db)
        report = report_repo.get_by_id(report_id)
        if report is None:
            raise ReportNotFoundException()

        status_gate.ensure_accepts_messages(report)

        uploads = AttachmentService.screen_uploads(files)
        message = MessageService.build_message(sender_type, content, uploads)
        message.report = report

        if sender_type == db_models.SenderType.ADMIN:
            status_gate.advance_on_handler_activity(report)

        written = AttachmentService.store(storage, message, uploads)
        try:
            db.add(message)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            AttachmentService.discard(storage, written)
            raise

        db.refresh(message)
        logger.info(
            f"{sender_type.value} message {message.id} added to report {report.id} "
            f"with {len(written)} attachment(s)"
        )
        return message

    @staticmethod
    def list_messages(db: Session, report_id: int) -> List[db_models.Message]:
        """Messages of a report, oldest first."""
        return MessageRepository(db).list_for_report(report_id)
