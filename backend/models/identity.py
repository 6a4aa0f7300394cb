"""
Caller identity passed explicitly into every core operation.

The core never authenticates. It receives who is calling and whether they
hold the moderator claim, and authorizes from that alone.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CallerIdentity:
    """Identity claim of the caller of a core operation."""

    user_id: Optional[int] = None
    is_moderator: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def owns(self, owner_id: int) -> bool:
        """True when the caller is the given owner."""
        return self.user_id is not None and self.user_id == owner_id


ANONYMOUS = CallerIdentity()
