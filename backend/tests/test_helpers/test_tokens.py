"""Tests for token issuing and principal resolution."""

from datetime import timedelta

import jwt
import pytest

from authentication.auth import (
    GENERIC_TOKEN_ERROR,
    _resolve,
    burn_password_check,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from fastapi.security import HTTPAuthorizationCredentials
from models.config import settings
from models.exceptions import AuthenticationException
from models.principal import Principal, PrincipalKind


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = get_password_hash("Password123")
        assert verify_password("Password123", hashed)
        assert not verify_password("Password124", hashed)

    def test_malformed_hash_fails_closed(self):
        assert verify_password("Password123", "not-a-bcrypt-hash") is False

    def test_burn_password_check_returns_nothing(self):
        assert burn_password_check("anything") is None


class TestDecodeAccessToken:
    def test_round_trip_keeps_kind_and_id(self):
        token = create_access_token(PrincipalKind.REPORT, 42)
        assert decode_access_token(token, PrincipalKind.REPORT) == Principal(
            PrincipalKind.REPORT, 42
        )

    def test_any_kind_accepted_without_requirement(self):
        token = create_access_token(PrincipalKind.ADMIN, 1)
        assert decode_access_token(token, None).is_admin

    @pytest.mark.parametrize(
        "issued,required",
        [
            (PrincipalKind.REPORT, PrincipalKind.ADMIN),
            (PrincipalKind.ADMIN, PrincipalKind.REPORT),
        ],
    )
    def test_kinds_never_cross(self, issued, required):
        token = create_access_token(issued, 1)
        with pytest.raises(AuthenticationException) as exc_info:
            decode_access_token(token, required)
        assert exc_info.value.message == GENERIC_TOKEN_ERROR

    def test_expired(self):
        token = create_access_token(
            PrincipalKind.ADMIN, 1, expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(AuthenticationException):
            decode_access_token(token, PrincipalKind.ADMIN)

    def test_wrong_signature(self):
        token = jwt.encode(
            {"sub": "1", "kind": "admin", "exp": 9999999999},
            "another-key",
            algorithm=settings.ALGORITHM,
        )
        with pytest.raises(AuthenticationException):
            decode_access_token(token, PrincipalKind.ADMIN)

    @pytest.mark.parametrize(
        "payload",
        [
            {"sub": "1", "kind": "admin"},
            {"kind": "admin", "exp": 9999999999},
            {"sub": "1", "exp": 9999999999},
            {"sub": "1", "kind": "auditor", "exp": 9999999999},
            {"sub": "one", "kind": "admin", "exp": 9999999999},
        ],
    )
    def test_incomplete_claims(self, payload):
        token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        with pytest.raises(AuthenticationException):
            decode_access_token(token, None)

    def test_garbage(self):
        with pytest.raises(AuthenticationException):
            decode_access_token("not.a.token", None)


class TestResolve:
    def test_missing_credentials(self, db_session):
        with pytest.raises(AuthenticationException):
            _resolve(None, db_session, None)

    def test_existing_admin(self, db_session, handler_admin):
        token = create_access_token(PrincipalKind.ADMIN, handler_admin.id)
        principal = _resolve(bearer(token), db_session, PrincipalKind.ADMIN)
        assert principal.id == handler_admin.id

    def test_deleted_admin(self, db_session, handler_admin):
        token = create_access_token(PrincipalKind.ADMIN, handler_admin.id)
        db_session.delete(handler_admin)
        db_session.commit()

        with pytest.raises(AuthenticationException):
            _resolve(bearer(token), db_session, PrincipalKind.ADMIN)

    def test_unknown_report(self, db_session):
        token = create_access_token(PrincipalKind.REPORT, 9999)
        with pytest.raises(AuthenticationException):
            _resolve(bearer(token), db_session, PrincipalKind.REPORT)
