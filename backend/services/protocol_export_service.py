"""
Protocol Export Service

Renders the case protocol of a report as PDF for legal archiving: case
overview plus the complete conversation with attachment names.
"""

from datetime import datetime, timezone
from io import BytesIO
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.time_utils import format_german_datetime
from repositories.message_repository import MessageRepository
from services.report_service import ReportService

STATUS_LABELS = {
    db_models.ReportStatus.NEW: "Neu",
    db_models.ReportStatus.IN_PROGRESS: "In Bearbeitung",
    db_models.ReportStatus.CLOSED: "Abgeschlossen",
}
SENDER_LABELS = {
    db_models.SenderType.WHISTLEBLOWER: "Hinweisgeber/in",
    db_models.SenderType.ADMIN: "Meldestelle",
}
FOOTER_LINES = (
    "Dieses Dokument wurde automatisch generiert und dient der rechtssicheren "
    "Dokumentation gemäß HinSchG.",
    "Alle Zeitangaben in koordinierter Weltzeit (UTC).",
)


def _text(value: str) -> str:
    """Escape for reportlab's paragraph markup and keep line breaks."""
    return escape(value).replace("\n", "<br/>")


def protocol_filename(case_code: str, generated_at: Optional[datetime] = None) -> str:
    """File name like Protokoll_WH-123-ABC_2024-03-05.pdf."""
    generated_at = generated_at or datetime.now(timezone.utc)
    return f"Protokoll_{case_code}_{generated_at:%Y-%m-%d}.pdf"


class ProtocolExportService:
    """Service for the PDF case protocol."""

    @staticmethod
    def render(
        report: db_models.Report,
        messages: List[db_models.Message],
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        """
        Render the protocol of a report.

        Args:
            report: Report to document
            messages: Its messages in display order
            generated_at: Timestamp printed in the header (defaults to now)

        Returns:
            PDF document bytes
        """
        generated_at = generated_at or datetime.now(timezone.utc)

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=2 * cm,
            rightMargin=2 * cm,
            topMargin=2 * cm,
            bottomMargin=2 * cm,
            title=f"Fallprotokoll {report.case_code}",
        )

        styles = getSampleStyleSheet()
        centered = ParagraphStyle("Centered", parent=styles["Normal"], alignment=1)
        indented = ParagraphStyle("Indented", parent=styles["Normal"], leftIndent=20)
        attachment_style = ParagraphStyle(
            "Attachment", parent=styles["Italic"], fontSize=9, leftIndent=30
        )
        footer_style = ParagraphStyle("Footer", parent=styles["Normal"], fontSize=8)

        story = [
            Paragraph("Fallprotokoll / Hinweisgebersystem", styles["Title"]),
            Paragraph(
                f"Generiert am: {format_german_datetime(generated_at)}", centered
            ),
            Spacer(1, 24),
            Paragraph("Fallübersicht", styles["Heading2"]),
            Paragraph(f"Fallnummer: {_text(report.case_code)}", styles["Normal"]),
            Paragraph(f"Kategorie: {_text(report.category.value)}", styles["Normal"]),
            Paragraph(
                f"Status: {STATUS_LABELS.get(report.status, report.status.value)}",
                styles["Normal"],
            ),
            Paragraph(
                f"Eingangsdatum: {format_german_datetime(report.created_at)}",
                styles["Normal"],
            ),
            Paragraph(
                "Eingangsbestätigung versendet: "
                f"{'Ja' if report.confirmation_sent else 'Nein'}",
                styles["Normal"],
            ),
            Spacer(1, 24),
            Paragraph("Kommunikationsverlauf", styles["Heading2"]),
        ]

        for index, message in enumerate(messages, start=1):
            sender = SENDER_LABELS.get(message.sender_type, message.sender_type.value)
            story.append(
                Paragraph(
                    f"<b>[{index}] {sender} - "
                    f"{format_german_datetime(message.created_at)}</b>",
                    styles["Normal"],
                )
            )
            if message.content:
                story.append(Paragraph(_text(message.content), indented))
            if message.attachments:
                story.append(Paragraph("Anlagen:", attachment_style))
                for attachment in message.attachments:
                    story.append(
                        Paragraph(
                            f"&bull; {_text(attachment.original_name)}",
                            attachment_style,
                        )
                    )
            story.append(Spacer(1, 12))

        story.append(Spacer(1, 24))
        story.append(Paragraph("---", footer_style))
        for line in FOOTER_LINES:
            story.append(Paragraph(line, footer_style))

        doc.build(story)
        return buffer.getvalue()

    @staticmethod
    def export_report(db: Session, report_id: int) -> Tuple[bytes, str]:
        """
        Render the protocol of a stored report.

        Returns:
            Tuple of (pdf_bytes, filename)

        Raises:
            ReportNotFoundException: If the report does not exist
        """
        report = ReportService.get_report(db, report_id)
        messages = MessageRepository(db).list_for_report(report.id)
        generated_at = datetime.now(timezone.utc)
        pdf = ProtocolExportService.render(report, messages, generated_at)
        return pdf, protocol_filename(report.case_code, generated_at)
