"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .admin_user_service import AdminUserService
from .attachment_service import AttachmentService
from .auth_service import AuthService
from .credential_service import CredentialService
from .message_service import MessageService
from .protocol_export_service import ProtocolExportService
from .report_service import ReportService
from .setting_service import SettingService

__all__ = [
    "AdminUserService",
    "AttachmentService",
    "AuthService",
    "CredentialService",
    "MessageService",
    "ProtocolExportService",
    "ReportService",
    "SettingService",
]
