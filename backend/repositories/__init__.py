"""
Repository pattern implementation for data access layer.
"""

from .admin_user_repository import AdminUserRepository
from .base import BaseRepository
from .message_repository import AttachmentRepository, MessageRepository
from .report_repository import ReportRepository
from .setting_repository import SettingRepository

__all__ = [
    "AdminUserRepository",
    "AttachmentRepository",
    "BaseRepository",
    "MessageRepository",
    "ReportRepository",
    "SettingRepository",
]
