"""Authenticated principal passed explicitly to request handlers."""

import enum
from dataclasses import dataclass


class PrincipalKind(str, enum.Enum):
    """Token discriminator; admin and report tokens never overlap."""

    ADMIN = "admin"
    REPORT = "report"


@dataclass(frozen=True)
class Principal:
    """
    Identity resolved from a verified bearer token.

    `id` is an AdminUser id for ADMIN principals and a Report id for REPORT
    principals.
    """

    kind: PrincipalKind
    id: int

    @property
    def is_admin(self) -> bool:
        return self.kind is PrincipalKind.ADMIN

    def owns_report(self, report_id: int) -> bool:
        return self.kind is PrincipalKind.REPORT and self.id == report_id
