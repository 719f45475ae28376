"""
Credential Service

Generates the case code and access secret handed to a whistleblower after
submission. Pure functions; persistence and uniqueness checks belong to
ReportService.
"""

import secrets
from dataclasses import dataclass

from models.config import settings

CASE_CODE_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"
# No 0/O and no 1/l/I so secrets can be read back from paper.
SECRET_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghjkmnpqrstuvwxyz23456789"


@dataclass(frozen=True)
class IssuedCredentials:
    case_code: str
    secret: str


class CredentialService:
    """Service for issuing whistleblower credentials."""

    @staticmethod
    def generate_case_code() -> str:
        """
        Generate a case code like "WH-482-KTR".

        Returns:
            "WH-" + three digits (100-999) + "-" + three letters
        """
        number = 100 + secrets.randbelow(900)
        letters = "".join(secrets.choice(CASE_CODE_LETTERS) for _ in range(3))
        return f"WH-{number}-{letters}"

    @staticmethod
    def generate_secret(length: int | None = None) -> str:
        """
        Generate an access secret from the unambiguous alphabet.

        Args:
            length: Number of characters (defaults to SECRET_LENGTH)

        Returns:
            Random secret drawn with a CSPRNG
        """
        length = length or settings.SECRET_LENGTH
        return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))

    @staticmethod
    def issue() -> IssuedCredentials:
        """Draw a fresh case code and secret. Uniqueness is not checked here."""
        return IssuedCredentials(
            case_code=CredentialService.generate_case_code(),
            secret=CredentialService.generate_secret(),
        )
