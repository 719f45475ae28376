"""
Dual-identity authentication.

Two disjoint token kinds share one signing key: admin tokens resolve to an
AdminUser, report tokens resolve to a Report (the whistleblower's
pseudonymous account). Every dependency below returns an explicit
`Principal`; nothing is attached to the request object.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InsufficientPermissionsException,
)
from models.principal import Principal, PrincipalKind
from repositories.database import get_db

bearer_scheme = HTTPBearer(auto_error=False)

GENERIC_TOKEN_ERROR = "Could not validate credentials"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time bcrypt comparison; over-long input simply fails."""
    try:
        return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    ).decode()


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return get_password_hash("timing-equalizer")


def burn_password_check(plain_password: str) -> None:
    """
    Spend the same bcrypt work as a real check when no account matched.

    Keeps "unknown user" and "wrong password" indistinguishable by timing.
    """
    verify_password(plain_password, _dummy_hash())


def create_access_token(
    kind: PrincipalKind, subject_id: int, expires_delta: Optional[timedelta] = None
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {"sub": str(subject_id), "kind": kind.value, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, required_kind: Optional[PrincipalKind]) -> Principal:
    """
    Verify signature, expiry and discriminator of a token.

    Args:
        token: Encoded JWT
        required_kind: Kind the endpoint accepts, or None for either kind

    Raises:
        AuthenticationException: For every failure, with one generic message.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
        kind = PrincipalKind(payload.get("kind"))
        subject_id = int(payload["sub"])
    except (jwt.exceptions.InvalidTokenError, ValueError, TypeError, KeyError):
        raise AuthenticationException(GENERIC_TOKEN_ERROR)

    if required_kind is not None and kind is not required_kind:
        raise AuthenticationException(GENERIC_TOKEN_ERROR)

    return Principal(kind=kind, id=subject_id)


def _resolve(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: Session,
    required_kind: Optional[PrincipalKind],
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthenticationException(GENERIC_TOKEN_ERROR)

    principal = decode_access_token(credentials.credentials, required_kind)

    model = db_models.AdminUser if principal.is_admin else db_models.Report
    if db.get(model, principal.id) is None:
        raise AuthenticationException(GENERIC_TOKEN_ERROR)
    return principal


async def get_admin_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    """Require a valid admin token."""
    return _resolve(credentials, db, PrincipalKind.ADMIN)


async def get_report_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    """Require a valid report (whistleblower) token."""
    return _resolve(credentials, db, PrincipalKind.REPORT)


async def get_any_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    """Accept either token kind; anonymous access is still rejected."""
    return _resolve(credentials, db, None)


async def get_current_admin(
    principal: Principal = Depends(get_admin_principal),
    db: Session = Depends(get_db),
) -> db_models.AdminUser:
    """Load the AdminUser behind an admin principal."""
    admin = db.get(db_models.AdminUser, principal.id)
    if admin is None:
        raise AuthenticationException(GENERIC_TOKEN_ERROR)
    return admin


async def get_super_admin(
    current_admin: db_models.AdminUser = Depends(get_current_admin),
) -> db_models.AdminUser:
    """
    Require super admin permissions.

    Raises:
        InsufficientPermissionsException: If the admin is not a super admin.
    """
    if not bool(current_admin.is_super):
        raise InsufficientPermissionsException(
            "Only the super admin can perform this action"
        )
    return current_admin
