"""Initialize the database with the super admin and default settings."""

from models.config import settings
from repositories.database import Base, SessionLocal, engine
import repositories.db_models  # noqa: F401 - registers tables on Base
from services.admin_user_service import SUPER_ADMIN_USERNAME, AdminUserService
from services.setting_service import SettingService


def init_db():
    """Create tables and seed default data."""
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()

    try:
        if AdminUserService.ensure_super_admin(db, settings.ADMIN_INIT_PASSWORD):
            print("[OK] Super admin created")
            print(f"  Username: {SUPER_ADMIN_USERNAME}")
            print("  Password: (from ADMIN_INIT_PASSWORD in .env)")
            print("  IMPORTANT: Change this password in production!")

        inserted = SettingService.ensure_defaults(db)
        if inserted:
            print(f"[OK] {inserted} default setting(s) created")

        print("\n[OK] Database initialization complete!")

    except Exception as e:
        print(f"Error initializing database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
