"""Public endpoints: anonymous report submission and category list."""

from typing import List, Optional

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    Request,
    UploadFile,
    status,
)
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.rate_limiter import limiter
from models.config import settings
from repositories.database import get_db
from services import AdminUserService, ReportService
from services.registry import ServiceRegistry, get_services

router = APIRouter(tags=["public"])


@router.post(
    "/reports",
    response_model=schemas.ReportCredentials,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.SUBMIT_RATE_LIMIT)
def submit_report(
    request: Request,
    background_tasks: BackgroundTasks,
    content: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    services: ServiceRegistry = Depends(get_services),
) -> schemas.ReportCredentials:
    """
    Submit an anonymous report.

    Returns the case code and secret exactly once; they cannot be recovered.
    Case handlers are notified in the background.
    """
    report, credentials = ReportService.submit_report(
        db, services.storage, content, category, files
    )

    recipients = AdminUserService.notification_recipients(db)
    background_tasks.add_task(
        services.notifier.notify_new_report, recipients, report.case_code
    )

    return schemas.ReportCredentials(
        case_code=credentials.case_code, secret=credentials.secret
    )


@router.get("/categories", response_model=schemas.CategoryList)
def list_categories() -> schemas.CategoryList:
    """Categories offered on the submission form."""
    return schemas.CategoryList(
        categories=[category.value for category in db_models.ReportCategory]
    )
