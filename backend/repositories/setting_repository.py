"""
System setting repository for database operations.
"""

from typing import Dict

from sqlalchemy.orm import Session

import repositories.db_models as db_models


class SettingRepository:
    """Key/value access to system settings (keyed by name, not by integer id)."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> Dict[str, str]:
        """All settings as a plain dict."""
        return {
            row.key: row.value for row in self.db.query(db_models.SystemSetting).all()
        }

    def upsert(self, key: str, value: str) -> None:
        """Insert or overwrite a setting without committing."""
        setting = self.db.get(db_models.SystemSetting, key)
        if setting is None:
            self.db.add(db_models.SystemSetting(key=key, value=value))
        else:
            setting.value = value

    def insert_if_missing(self, key: str, value: str) -> bool:
        """Insert a setting only when absent. Returns True if inserted."""
        if self.db.get(db_models.SystemSetting, key) is not None:
            return False
        self.db.add(db_models.SystemSetting(key=key, value=value))
        return True

    def commit(self) -> None:
        """Commit the current transaction."""
        self.db.commit()
