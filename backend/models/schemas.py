from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from repositories.db_models import ReportCategory, ReportStatus, SenderType


# Token Schemas
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AdminLogin(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=256)


class AdminLoginResponse(Token):
    username: str


class ReportLogin(BaseModel):
    case_code: str = Field(..., min_length=1, max_length=32)
    secret: str = Field(..., min_length=1, max_length=256)


class ReportLoginResponse(Token):
    case_code: str
    status: ReportStatus


# Message Schemas
class AttachmentInfo(BaseModel):
    id: int
    original_name: str
    content_type: str
    size_bytes: int

    model_config = ConfigDict(from_attributes=True)


class Message(BaseModel):
    id: int
    sender_type: SenderType
    content: str
    created_at: datetime
    attachments: List[AttachmentInfo] = []

    model_config = ConfigDict(from_attributes=True)


# Report Schemas
class ReportCredentials(BaseModel):
    """Returned exactly once after submission; the secret is not recoverable."""

    case_code: str
    secret: str
    message: str = (
        "Your report has been submitted. Save these credentials - "
        "they cannot be recovered."
    )


class WhistleblowerCase(BaseModel):
    case_code: str
    status: ReportStatus
    messages: List[Message]


class ReportSummary(BaseModel):
    id: int
    case_code: str
    status: ReportStatus
    category: ReportCategory
    confirmation_sent: bool
    created_at: datetime
    confirmation_due_at: datetime
    confirmation_overdue: bool
    message_count: int = 0


class ReportDetail(ReportSummary):
    messages: List[Message]


class ReportList(BaseModel):
    reports: List[ReportSummary]


class StatusUpdate(BaseModel):
    status: str


class StatusUpdateResponse(BaseModel):
    id: int
    case_code: str
    status: ReportStatus


class ConfirmationResponse(BaseModel):
    success: bool = True
    message: str = "Eingangsbestätigung wurde gesendet"


class CategoryList(BaseModel):
    categories: List[str]


# Admin User Schemas
class AdminUserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: str


class AdminUser(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    is_super: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminUserList(BaseModel):
    users: List[AdminUser]


# System Settings Schemas
class SettingsUpdate(BaseModel):
    settings: Dict[str, Any]


class SettingsResponse(BaseModel):
    settings: Dict[str, str]


class StatusMessage(BaseModel):
    message: str
