"""Portal settings endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services import SettingService

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=schemas.SettingsResponse)
def get_settings(db: Session = Depends(get_db)) -> schemas.SettingsResponse:
    """Public portal texts (company name, welcome text)."""
    return schemas.SettingsResponse(settings=SettingService.get_settings(db))


@router.put("", response_model=schemas.SettingsResponse)
def update_settings(
    update: schemas.SettingsUpdate,
    current_admin: db_models.AdminUser = Depends(auth.get_super_admin),
    db: Session = Depends(get_db),
) -> schemas.SettingsResponse:
    """Update portal texts. Unknown keys are ignored."""
    return schemas.SettingsResponse(
        settings=SettingService.update_settings(db, update.settings)
    )
