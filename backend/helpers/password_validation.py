"""
Password validation helper for admin accounts.

bcrypt only looks at the first 72 bytes of a password, so longer passwords
are rejected instead of being silently truncated.
"""

from dataclasses import dataclass
from typing import List


@dataclass
class PasswordRequirements:
    """Password requirements configuration."""

    min_length: int = 8
    max_bytes: int = 72


DEFAULT_REQUIREMENTS = PasswordRequirements()


def validate_password(
    password: str,
    requirements: PasswordRequirements = DEFAULT_REQUIREMENTS,
) -> tuple[bool, List[str]]:
    """
    Validate password against the requirements.

    Args:
        password: Password to validate
        requirements: Password requirements configuration

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors: List[str] = []

    if len(password) < requirements.min_length:
        errors.append(
            f"Password must be at least {requirements.min_length} characters long"
        )

    if len(password.encode("utf-8")) > requirements.max_bytes:
        errors.append(
            f"Password must not be longer than {requirements.max_bytes} bytes"
        )

    return len(errors) == 0, errors
