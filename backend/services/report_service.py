"""
Report Service

Report intake, case views for handlers and the receipt confirmation.
"""

from typing import List, Optional, Sequence, Tuple

from fastapi import UploadFile
from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import (
    confirmation_due_at,
    format_german_date,
    is_confirmation_overdue,
)
from models.config import settings
from models.exceptions import (
    ConfirmationAlreadySentException,
    ReportNotFoundException,
)
from repositories.message_repository import MessageRepository
from repositories.report_repository import ReportRepository
from services import status_gate
from services.attachment_service import AttachmentService
from services.credential_service import CredentialService, IssuedCredentials
from services.file_storage import LocalFileStorage
from services.message_service import MessageService

CONFIRMATION_TEMPLATE = (
    "Sehr geehrte/r Hinweisgeber/in,\n\n"
    "wir bestätigen hiermit den Eingang Ihres Hinweises vom {date}.\n\n"
    "Ihre Meldung wird nun von unserer internen Meldestelle geprüft. "
    "Gemäß den gesetzlichen Vorgaben werden wir Sie innerhalb von drei Monaten "
    "über die ergriffenen Maßnahmen informieren.\n\n"
    "Vielen Dank für Ihr Vertrauen.\n\n"
    "Mit freundlichen Grüßen\n"
    "Ihre interne Meldestelle"
)


def build_confirmation_text(report: db_models.Report) -> str:
    """Fixed acknowledgement text, dated with the report's creation day."""
    return CONFIRMATION_TEMPLATE.format(date=format_german_date(report.created_at))


class ReportService:
    """Service for report intake and case handling."""

    @staticmethod
    def submit_report(
        db: Session,
        storage: LocalFileStorage,
        content: Optional[str],
        category: Optional[str],
        files: Optional[Sequence[UploadFile]] = None,
    ) -> Tuple[db_models.Report, IssuedCredentials]:
        """
        Create a report with its first whistleblower message.

        The case code is re-drawn until one is free. A concurrent request can
        still take the same code between check and insert, so a unique
        constraint violation also leads to another attempt.

        Args:
            db: Database session
            storage: Attachment storage
            content: Report text
            category: Category name; unknown values become "Sonstiges"
            files: Uploaded files

        Returns:
            Tuple of (report, credentials). The plaintext secret exists only
            in the returned credentials.

        Raises:
            EmptyMessageException: If neither text nor accepted files are sent
            ValidationException: If too many or too large files are sent
        """
        uploads = AttachmentService.screen_uploads(files)
        message = MessageService.build_message(
            db_models.SenderType.WHISTLEBLOWER, content, uploads
        )

        issued = CredentialService.issue()
        secret_hash = auth.get_password_hash(issued.secret)
        report_category = db_models.ReportCategory.coerce(category)
        report_repo = ReportRepository(db)

        written = AttachmentService.store(storage, message, uploads)
        case_code = issued.case_code
        try:
            while True:
                if report_repo.case_code_exists(case_code):
                    case_code = CredentialService.generate_case_code()
                    continue

                report = db_models.Report(
                    case_code=case_code,
                    secret_hash=secret_hash,
                    category=report_category,
                    status=db_models.ReportStatus.NEW,
                    confirmation_sent=False,
                )
                report.messages.append(message)
                db.add(report)
                try:
                    db.commit()
                    break
                except IntegrityError:
                    db.rollback()
                    logger.info("Case code collision on insert, drawing a new one")
                    case_code = CredentialService.generate_case_code()
        except SQLAlchemyError:
            db.rollback()
            AttachmentService.discard(storage, written)
            raise

        db.refresh(report)
        logger.info(
            f"Report {report.id} submitted in category '{report_category.value}' "
            f"with {len(written)} attachment(s)"
        )
        return report, IssuedCredentials(case_code=case_code, secret=issued.secret)

    @staticmethod
    def get_report(db: Session, report_id: int) -> db_models.Report:
        """
        Raises:
            ReportNotFoundException: If the report does not exist
        """
        report = ReportRepository(db).get_by_id(report_id)
        if report is None:
            raise ReportNotFoundException()
        return report

    @staticmethod
    def _summary(report: db_models.Report, message_count: int) -> schemas.ReportSummary:
        deadline_days = settings.CONFIRMATION_DEADLINE_DAYS
        return schemas.ReportSummary(
            id=report.id,
            case_code=report.case_code,
            status=report.status,
            category=report.category,
            confirmation_sent=report.confirmation_sent,
            created_at=report.created_at,
            confirmation_due_at=confirmation_due_at(report.created_at, deadline_days),
            confirmation_overdue=is_confirmation_overdue(
                report.created_at, report.confirmation_sent, deadline_days
            ),
            message_count=message_count,
        )

    @staticmethod
    def list_reports(db: Session) -> List[schemas.ReportSummary]:
        """All reports, newest first, with message counts."""
        rows = ReportRepository(db).list_with_message_counts()
        return [ReportService._summary(report, count) for report, count in rows]

    @staticmethod
    def get_report_detail(db: Session, report_id: int) -> schemas.ReportDetail:
        """
        Full case view for handlers.

        Raises:
            ReportNotFoundException: If the report does not exist
        """
        report = ReportService.get_report(db, report_id)
        messages = MessageRepository(db).list_for_report(report.id)
        summary = ReportService._summary(report, len(messages))
        return schemas.ReportDetail(
            **summary.model_dump(),
            messages=[schemas.Message.model_validate(m) for m in messages],
        )

    @staticmethod
    def get_whistleblower_case(db: Session, report_id: int) -> schemas.WhistleblowerCase:
        """
        Case view for the reporter: status and conversation only.

        Raises:
            ReportNotFoundException: If the report does not exist
        """
        report = ReportService.get_report(db, report_id)
        messages = MessageRepository(db).list_for_report(report.id)
        return schemas.WhistleblowerCase(
            case_code=report.case_code,
            status=report.status,
            messages=[schemas.Message.model_validate(m) for m in messages],
        )

    @staticmethod
    def update_status(db: Session, report_id: int, value: str) -> db_models.Report:
        """
        Set the report status explicitly.

        Raises:
            ReportNotFoundException: If the report does not exist
            InvalidStatusException: If value is not a known status
        """
        report = ReportService.get_report(db, report_id)
        status_gate.set_status(report, value)
        db.commit()
        db.refresh(report)
        return report

    @staticmethod
    def send_confirmation(db: Session, report_id: int) -> db_models.Message:
        """
        Send the one-time receipt confirmation.

        Flag, acknowledgement message and status change are committed in one
        transaction. The flag is claimed with a conditional UPDATE so two
        concurrent requests cannot both succeed.

        Raises:
            ReportNotFoundException: If the report does not exist
            ConfirmationAlreadySentException: If it was already sent
        """
        report_repo = ReportRepository(db)
        report = ReportService.get_report(db, report_id)
        if report.confirmation_sent:
            raise ConfirmationAlreadySentException()

        try:
            if not report_repo.claim_confirmation(report.id):
                db.rollback()
                raise ConfirmationAlreadySentException()
            report.confirmation_sent = True

            message = db_models.Message(
                sender_type=db_models.SenderType.ADMIN,
                content=build_confirmation_text(report),
            )
            message.report = report
            status_gate.advance_on_handler_activity(report)
            db.add(message)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(message)
        logger.info(f"Receipt confirmation sent for report {report.id}")
        return message
