"""
Setting Service

Portal texts shown on the public pages (company name, welcome text).
"""

from typing import Any, Dict

from loguru import logger
from sqlalchemy.orm import Session

from helpers.sanitization import sanitize_plain_text
from repositories.setting_repository import SettingRepository

DEFAULT_SETTINGS: Dict[str, str] = {
    "COMPANY_NAME": "Interne Meldestelle",
    "WELCOME_TEXT": (
        "Melden Sie Missstände sicher und vertraulich. "
        "Ihre Identität wird geschützt."
    ),
}
ALLOWED_KEYS = frozenset(DEFAULT_SETTINGS)


class SettingService:
    """Service for system settings."""

    @staticmethod
    def get_settings(db: Session) -> Dict[str, str]:
        """All stored settings."""
        return SettingRepository(db).get_all()

    @staticmethod
    def update_settings(db: Session, values: Dict[str, Any]) -> Dict[str, str]:
        """
        Store allowed settings.

        Unknown keys and non-string values are skipped. Values are stripped
        of HTML before they are stored.

        Returns:
            All settings after the update
        """
        setting_repo = SettingRepository(db)
        changed = []
        for key, value in values.items():
            if key not in ALLOWED_KEYS or not isinstance(value, str):
                continue
            setting_repo.upsert(key, sanitize_plain_text(value).strip())
            changed.append(key)

        setting_repo.commit()
        if changed:
            logger.info(f"Settings updated: {', '.join(sorted(changed))}")
        return setting_repo.get_all()

    @staticmethod
    def ensure_defaults(db: Session) -> int:
        """
        Insert default values for settings that are missing.

        Returns:
            Number of settings inserted
        """
        setting_repo = SettingRepository(db)
        inserted = sum(
            1
            for key, value in DEFAULT_SETTINGS.items()
            if setting_repo.insert_if_missing(key, value)
        )
        setting_repo.commit()
        return inserted
