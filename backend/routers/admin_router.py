"""Case handler endpoints: login, case list, case detail and case actions."""

from typing import List, Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Request,
    Response,
    UploadFile,
    status,
)
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.request_utils import get_client_ip
from models.principal import Principal
from repositories.database import get_db
from services import (
    AuthService,
    MessageService,
    ProtocolExportService,
    ReportService,
)
from services.registry import ServiceRegistry, get_services

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=schemas.AdminLoginResponse)
def login(
    request: Request,
    credentials: schemas.AdminLogin,
    db: Session = Depends(get_db),
    services: ServiceRegistry = Depends(get_services),
) -> schemas.AdminLoginResponse:
    """Log in as case handler. Failed attempts are throttled per client."""
    return AuthService.login_admin(
        db,
        services.login_throttle,
        get_client_ip(request),
        credentials.username,
        credentials.password,
    )


@router.get("/me", response_model=schemas.AdminUser)
async def read_admin_me(
    current_admin: db_models.AdminUser = Depends(auth.get_current_admin),
) -> db_models.AdminUser:
    """Get the logged-in case handler."""
    return current_admin


@router.get("/reports", response_model=schemas.ReportList)
def list_reports(
    principal: Principal = Depends(auth.get_admin_principal),
    db: Session = Depends(get_db),
) -> schemas.ReportList:
    """All reports, newest first, with message counts and confirmation deadline."""
    return schemas.ReportList(reports=ReportService.list_reports(db))


@router.get("/reports/{report_id}", response_model=schemas.ReportDetail)
def get_report(
    report_id: int,
    principal: Principal = Depends(auth.get_admin_principal),
    db: Session = Depends(get_db),
) -> schemas.ReportDetail:
    """Full case view including the conversation."""
    return ReportService.get_report_detail(db, report_id)


@router.post(
    "/reports/{report_id}/messages",
    response_model=schemas.Message,
    status_code=status.HTTP_201_CREATED,
)
def post_message(
    report_id: int,
    content: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    principal: Principal = Depends(auth.get_admin_principal),
    db: Session = Depends(get_db),
    services: ServiceRegistry = Depends(get_services),
) -> db_models.Message:
    """
    Reply to the reporter.

    The first handler reply moves a new case to IN_PROGRESS. Closed cases
    accept no messages.
    """
    return MessageService.post_message(
        db,
        services.storage,
        report_id,
        db_models.SenderType.ADMIN,
        content,
        files,
    )


@router.patch("/reports/{report_id}/status", response_model=schemas.StatusUpdateResponse)
def update_status(
    report_id: int,
    status_update: schemas.StatusUpdate,
    principal: Principal = Depends(auth.get_admin_principal),
    db: Session = Depends(get_db),
) -> schemas.StatusUpdateResponse:
    """Set the case status. Any status can be set, including reopening."""
    report = ReportService.update_status(db, report_id, status_update.status)
    return schemas.StatusUpdateResponse(
        id=report.id, case_code=report.case_code, status=report.status
    )


@router.post(
    "/reports/{report_id}/send-confirmation",
    response_model=schemas.ConfirmationResponse,
)
def send_confirmation(
    report_id: int,
    principal: Principal = Depends(auth.get_admin_principal),
    db: Session = Depends(get_db),
) -> schemas.ConfirmationResponse:
    """Send the one-time receipt confirmation to the reporter."""
    ReportService.send_confirmation(db, report_id)
    return schemas.ConfirmationResponse()


@router.get("/reports/{report_id}/export-pdf")
def export_pdf(
    report_id: int,
    principal: Principal = Depends(auth.get_admin_principal),
    db: Session = Depends(get_db),
) -> Response:
    """Download the case protocol as PDF."""
    pdf, filename = ProtocolExportService.export_report(db, report_id)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
