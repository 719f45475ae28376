"""
Attachment Service

Screens uploaded files before they are stored and decides who may read a
stored attachment. Admins may read every attachment; a report principal only
the attachments of its own report.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from fastapi import UploadFile
from loguru import logger
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.sanitization import sanitize_filename
from models.config import settings
from models.exceptions import AttachmentNotFoundException, ValidationException
from models.principal import Principal
from repositories.message_repository import AttachmentRepository
from services.file_storage import LocalFileStorage

ALLOWED_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/csv",
    "application/zip",
    "application/x-rar-compressed",
    "application/x-7z-compressed",
}


@dataclass
class AcceptedUpload:
    """An upload that passed screening and is ready to be stored."""

    original_name: str
    content_type: str
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass
class StoredFile:
    """Resolved attachment ready to be streamed to the caller."""

    path: Path
    original_name: str
    content_type: str


def _base_content_type(content_type: Optional[str]) -> str:
    # "text/plain; charset=utf-8" -> "text/plain"
    return (content_type or "").split(";")[0].strip().lower()


class AttachmentService:
    """Service for attachment screening and access control."""

    @staticmethod
    def is_allowed_type(content_type: Optional[str]) -> bool:
        return _base_content_type(content_type) in ALLOWED_MIME_TYPES

    @staticmethod
    def screen_uploads(
        files: Optional[Sequence[UploadFile]],
        max_files: int | None = None,
        max_bytes: int | None = None,
    ) -> List[AcceptedUpload]:
        """
        Read and filter uploads.

        Files with a type outside the allow-list are dropped silently. Empty
        form parts (no filename) are ignored.

        Args:
            files: Uploaded files of one message
            max_files: Maximum number of files (defaults to MAX_FILES_PER_MESSAGE)
            max_bytes: Maximum size per file (defaults to MAX_UPLOAD_BYTES)

        Returns:
            Accepted uploads with their content read into memory

        Raises:
            ValidationException: If too many files are sent or one is too large
        """
        max_files = max_files or settings.MAX_FILES_PER_MESSAGE
        max_bytes = max_bytes or settings.MAX_UPLOAD_BYTES

        candidates = [f for f in (files or []) if f is not None and f.filename]
        if len(candidates) > max_files:
            raise ValidationException(
                f"At most {max_files} files may be attached to one message"
            )

        accepted: List[AcceptedUpload] = []
        for upload in candidates:
            content_type = _base_content_type(upload.content_type)
            if content_type not in ALLOWED_MIME_TYPES:
                logger.info(f"Dropped attachment with disallowed type '{content_type}'")
                continue

            # Read one byte past the limit instead of the whole stream
            data = upload.file.read(max_bytes + 1)
            if len(data) > max_bytes:
                raise ValidationException(
                    f"File exceeds the size limit of {max_bytes // (1024 * 1024)} MB"
                )

            accepted.append(
                AcceptedUpload(
                    original_name=sanitize_filename(upload.filename),
                    content_type=content_type,
                    data=data,
                )
            )
        return accepted

    @staticmethod
    def store(
        storage: LocalFileStorage,
        message: db_models.Message,
        uploads: Sequence[AcceptedUpload],
    ) -> List[str]:
        """
        Write uploads to storage and attach their records to the message.

        Nothing is committed here. If writing fails part way, files already
        written are removed before the error propagates.

        Returns:
            Storage keys written, so the caller can clean up after a failed commit
        """
        written: List[str] = []
        try:
            for upload in uploads:
                storage_key = storage.save(upload.data, upload.original_name)
                written.append(storage_key)
                message.attachments.append(
                    db_models.Attachment(
                        storage_name=storage_key,
                        original_name=upload.original_name,
                        content_type=upload.content_type,
                        size_bytes=upload.size_bytes,
                    )
                )
        except OSError:
            AttachmentService.discard(storage, written)
            raise
        return written

    @staticmethod
    def discard(storage: LocalFileStorage, storage_keys: Sequence[str]) -> None:
        """Remove stored files that never got a committed database record."""
        for storage_key in storage_keys:
            storage.delete(storage_key)

    @staticmethod
    def can_access(db: Session, principal: Principal, attachment_id: int) -> bool:
        """
        Decide whether a principal may read an attachment.

        Args:
            db: Database session
            principal: Verified caller
            attachment_id: Attachment ID

        Returns:
            False for unknown attachments and for other reports' attachments
        """
        attachment = AttachmentRepository(db).get_with_owner(attachment_id)
        if attachment is None:
            return False
        if principal.is_admin:
            return True
        return principal.owns_report(attachment.message.report_id)

    @staticmethod
    def resolve_download(
        db: Session,
        storage: LocalFileStorage,
        principal: Principal,
        attachment_id: int,
    ) -> StoredFile:
        """
        Resolve an attachment the caller may read to its file on disk.

        Raises:
            AttachmentNotFoundException: If the attachment does not exist, is
                not visible to the caller, or its file is missing.
        """
        if not AttachmentService.can_access(db, principal, attachment_id):
            raise AttachmentNotFoundException()

        attachment = AttachmentRepository(db).get_by_id(attachment_id)
        if attachment is None:
            raise AttachmentNotFoundException()

        path = storage.open(attachment.storage_name)
        if path is None:
            logger.warning(f"File of attachment {attachment_id} is missing on disk")
            raise AttachmentNotFoundException()

        return StoredFile(
            path=path,
            original_name=attachment.original_name,
            content_type=attachment.content_type,
        )
