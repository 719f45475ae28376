"""
Pytest configuration and fixtures for backend tests.
"""

import io
import os
import sys
from pathlib import Path
from typing import Callable, List, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers, UploadFile

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["ADMIN_INIT_PASSWORD"] = "InitialAdmin123"
os.environ["ENVIRONMENT"] = "test"
os.environ["CORS_ORIGINS"] = '["http://localhost:3001"]'
# Cheap hashing keeps the suite fast; production default is 12
os.environ["BCRYPT_ROUNDS"] = "4"

from authentication.auth import create_access_token, get_password_hash  # noqa: E402
from models.principal import PrincipalKind  # noqa: E402
from repositories.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402
from services.email_service import EmailNotifier, EmailProvider  # noqa: E402
from services.file_storage import LocalFileStorage  # noqa: E402
from services.login_throttle import LoginThrottle  # noqa: E402
from services.registry import ServiceRegistry, get_services  # noqa: E402
from services.report_service import ReportService  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SUPER_ADMIN_PASSWORD = "SuperSecret123"
HANDLER_PASSWORD = "HandlerSecret123"
PORTAL_URL = "http://portal.test"


class RecordingProvider(EmailProvider):
    """Email provider that keeps sent mails in memory."""

    def __init__(self) -> None:
        self.sent: List[dict] = []

    def send(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        self.sent.append(
            {
                "to": to_email,
                "subject": subject,
                "html": html_body,
                "text": text_body,
            }
        )
        return True


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session."""
    return db_session


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    """Attachment storage in a per-test directory."""
    return LocalFileStorage(tmp_path / "uploads")


@pytest.fixture
def mail_provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def services(storage, mail_provider) -> ServiceRegistry:
    """Service registry wired to test doubles."""
    return ServiceRegistry(
        storage=storage,
        notifier=EmailNotifier(mail_provider, PORTAL_URL),
        login_throttle=LoginThrottle(max_failures=10, window_seconds=900),
    )


@pytest.fixture(scope="function")
def client(db_session, services):
    """Create a test client with overridden database and service dependencies."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_services] = lambda: services
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def upload_factory() -> Callable[..., UploadFile]:
    """Build UploadFile objects the way FastAPI hands them to endpoints."""

    def _make(
        filename: str = "evidence.pdf",
        content_type: str = "application/pdf",
        data: bytes = b"%PDF-1.4 test",
    ) -> UploadFile:
        return UploadFile(
            file=io.BytesIO(data),
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )

    return _make


@pytest.fixture
def super_admin(db_session) -> db_models.AdminUser:
    """Create the super admin."""
    admin = db_models.AdminUser(
        username="admin",
        email=None,
        hashed_password=get_password_hash(SUPER_ADMIN_PASSWORD),
        is_super=True,
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def handler_admin(db_session) -> db_models.AdminUser:
    """Create a regular case handler with a notification address."""
    admin = db_models.AdminUser(
        username="handler",
        email="handler@example.com",
        hashed_password=get_password_hash(HANDLER_PASSWORD),
        is_super=False,
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def super_headers(super_admin) -> dict:
    """Authentication headers for the super admin."""
    token = create_access_token(PrincipalKind.ADMIN, super_admin.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(handler_admin) -> dict:
    """Authentication headers for a regular case handler."""
    token = create_access_token(PrincipalKind.ADMIN, handler_admin.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def submitted_report(db_session, storage) -> Tuple[db_models.Report, str]:
    """A submitted report and its plaintext secret."""
    report, credentials = ReportService.submit_report(
        db_session,
        storage,
        "Invoices are being approved without review.",
        "Korruption",
    )
    return report, credentials.secret


@pytest.fixture
def test_report(submitted_report) -> db_models.Report:
    return submitted_report[0]


@pytest.fixture
def other_report(db_session, storage) -> db_models.Report:
    """A second, unrelated report."""
    report, _ = ReportService.submit_report(
        db_session, storage, "Unrelated matter.", "Diebstahl"
    )
    return report


@pytest.fixture
def report_headers(test_report) -> dict:
    """Authentication headers for the whistleblower of test_report."""
    token = create_access_token(PrincipalKind.REPORT, test_report.id)
    return {"Authorization": f"Bearer {token}"}
