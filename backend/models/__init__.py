"""Models package - Pydantic schemas and domain types."""

from .identity import ANONYMOUS, CallerIdentity

__all__ = [
    "ANONYMOUS",
    "CallerIdentity",
]
