"""Whistleblower endpoints: login with case code and secret, case conversation."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.request_utils import get_client_ip
from models.principal import Principal
from repositories.database import get_db
from services import AuthService, MessageService, ReportService
from services.registry import ServiceRegistry, get_services

router = APIRouter(prefix="/whistleblower", tags=["whistleblower"])


@router.post("/login", response_model=schemas.ReportLoginResponse)
def login(
    request: Request,
    credentials: schemas.ReportLogin,
    db: Session = Depends(get_db),
    services: ServiceRegistry = Depends(get_services),
) -> schemas.ReportLoginResponse:
    """
    Log in with the credentials issued at submission.

    Failed attempts are throttled per client.
    """
    return AuthService.login_report(
        db,
        services.login_throttle,
        get_client_ip(request),
        credentials.case_code,
        credentials.secret,
    )


@router.get("/messages", response_model=schemas.WhistleblowerCase)
def get_messages(
    principal: Principal = Depends(auth.get_report_principal),
    db: Session = Depends(get_db),
) -> schemas.WhistleblowerCase:
    """Status and conversation of the reporter's own case."""
    return ReportService.get_whistleblower_case(db, principal.id)


@router.post(
    "/messages",
    response_model=schemas.Message,
    status_code=status.HTTP_201_CREATED,
)
def post_message(
    content: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    principal: Principal = Depends(auth.get_report_principal),
    db: Session = Depends(get_db),
    services: ServiceRegistry = Depends(get_services),
) -> db_models.Message:
    """Send a message to the case handlers. Rejected once the case is closed."""
    return MessageService.post_message(
        db,
        services.storage,
        principal.id,
        db_models.SenderType.WHISTLEBLOWER,
        content,
        files,
    )
