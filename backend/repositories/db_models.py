"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

Report is the pseudonymous account of a whistleblower: it owns the case code,
the hashed access secret and the message history. AdminUser is a case
handler and is never linked to individual messages.
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


class ReportStatus(str, enum.Enum):
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"


class SenderType(str, enum.Enum):
    WHISTLEBLOWER = "WHISTLEBLOWER"
    ADMIN = "ADMIN"


class ReportCategory(str, enum.Enum):
    """Fixed report categories offered on the public submission form."""

    CORRUPTION = "Korruption"
    THEFT = "Diebstahl"
    HARASSMENT = "Belästigung"
    DATA_PROTECTION = "Datenschutz"
    OTHER = "Sonstiges"

    @classmethod
    def coerce(cls, value: Optional[str]) -> "ReportCategory":
        """Map free input to a category; anything unknown becomes OTHER."""
        for category in cls:
            if value == category.value:
                return category
        return cls.OTHER


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class AdminUser(Base):
    __tablename__ = "admin_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    hashed_password: Mapped[str] = mapped_column(String, nullable=False)
    is_super: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (Index("ix_reports_status", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    case_code: Mapped[str] = mapped_column(
        String(16), unique=True, index=True, nullable=False
    )
    secret_hash: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[ReportCategory] = mapped_column(
        Enum(ReportCategory, values_callable=lambda e: [m.value for m in e]),
        default=ReportCategory.OTHER,
        nullable=False,
    )
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus), default=ReportStatus.NEW, nullable=False
    )
    confirmation_sent: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    # Relationships (display order comes from MessageRepository.list_for_report)
    messages: Mapped[List["Message"]] = relationship(
        "Message", back_populates="report"
    )


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_report_created", "report_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    report_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("reports.id"), nullable=False
    )
    sender_type: Mapped[SenderType] = mapped_column(Enum(SenderType), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    report: Mapped["Report"] = relationship("Report", back_populates="messages")
    attachments: Mapped[List["Attachment"]] = relationship(
        "Attachment",
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="Attachment.id",
    )


class Attachment(Base):
    __tablename__ = "attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    message_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("messages.id"), nullable=False, index=True
    )
    storage_name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(128), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    message: Mapped["Message"] = relationship("Message", back_populates="attachments")


class SystemSetting(Base):
    __tablename__ = "system_settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
