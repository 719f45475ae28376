"""Models package - Pydantic schemas, settings and domain types."""

from .principal import Principal, PrincipalKind

__all__ = [
    "Principal",
    "PrincipalKind",
]
