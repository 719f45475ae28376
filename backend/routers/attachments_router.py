"""Attachment download for both case handlers and reporters."""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

import authentication.auth as auth
from models.principal import Principal
from repositories.database import get_db
from services import AttachmentService
from services.registry import ServiceRegistry, get_services

router = APIRouter(prefix="/attachments", tags=["attachments"])


@router.get("/{attachment_id}")
def download_attachment(
    attachment_id: int,
    principal: Principal = Depends(auth.get_any_principal),
    db: Session = Depends(get_db),
    services: ServiceRegistry = Depends(get_services),
) -> FileResponse:
    """
    Download an attachment.

    Reporters only see attachments of their own case. Missing and foreign
    attachments get the same 404.
    """
    stored = AttachmentService.resolve_download(
        db, services.storage, principal, attachment_id
    )
    return FileResponse(
        stored.path,
        media_type=stored.content_type,
        filename=stored.original_name,
    )
