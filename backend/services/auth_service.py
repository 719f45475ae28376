"""
Authentication Service

Login for both identities: case handlers (username/password) and reporters
(case code/secret). Both paths answer failures identically and are subject to
the same login throttle.
"""

from sqlalchemy.orm import Session

import models.schemas as schemas
from authentication.auth import (
    burn_password_check,
    create_access_token,
    verify_password,
)
from models.exceptions import InvalidCredentialsException
from models.principal import PrincipalKind
from repositories.admin_user_repository import AdminUserRepository
from repositories.report_repository import ReportRepository
from services.login_throttle import LoginThrottle


class AuthService:
    """Service for authentication business logic."""

    @staticmethod
    def login_admin(
        db: Session,
        throttle: LoginThrottle,
        client_key: str,
        username: str,
        password: str,
    ) -> schemas.AdminLoginResponse:
        """
        Authenticate a case handler.

        Args:
            db: Database session
            throttle: Failed-login throttle
            client_key: Key the throttle counts failures under
            username: Exact username
            password: Plaintext password

        Returns:
            Admin token and username

        Raises:
            RateLimitExceededException: If the client has too many failures
            InvalidCredentialsException: If username or password is wrong
        """
        throttle.check(client_key)

        admin = AdminUserRepository(db).get_by_username(username)
        if admin is None:
            burn_password_check(password)
            throttle.record_failure(client_key)
            raise InvalidCredentialsException()
        if not verify_password(password, admin.hashed_password):
            throttle.record_failure(client_key)
            raise InvalidCredentialsException()

        token = create_access_token(PrincipalKind.ADMIN, admin.id)
        # nosec B106: "bearer" is OAuth2 token type, not a password
        return schemas.AdminLoginResponse(
            access_token=token, token_type="bearer", username=admin.username  # nosec B106
        )

    @staticmethod
    def login_report(
        db: Session,
        throttle: LoginThrottle,
        client_key: str,
        case_code: str,
        secret: str,
    ) -> schemas.ReportLoginResponse:
        """
        Authenticate a reporter with the credentials issued at submission.

        Args:
            db: Database session
            throttle: Failed-login throttle
            client_key: Key the throttle counts failures under
            case_code: Case code, surrounding whitespace ignored
            secret: Access secret

        Returns:
            Report token, case code and current status

        Raises:
            RateLimitExceededException: If the client has too many failures
            InvalidCredentialsException: If case code or secret is wrong
        """
        throttle.check(client_key)

        report = ReportRepository(db).get_by_case_code(case_code.strip())
        if report is None:
            burn_password_check(secret)
            throttle.record_failure(client_key)
            raise InvalidCredentialsException()
        if not verify_password(secret, report.secret_hash):
            throttle.record_failure(client_key)
            raise InvalidCredentialsException()

        token = create_access_token(PrincipalKind.REPORT, report.id)
        return schemas.ReportLoginResponse(
            access_token=token,
            token_type="bearer",  # nosec B106
            case_code=report.case_code,
            status=report.status,
        )
