"""
Request identity resolved by the access guard.
"""

from dataclasses import dataclass
from typing import Union
import uuid

from app.models.user import UserRole


@dataclass(frozen=True)
class Anonymous:
    """No session token was presented."""


@dataclass(frozen=True)
class Authenticated:
    """Verified identity taken from a session token."""
    user_id: uuid.UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_agent(self) -> bool:
        return self.role == UserRole.AGENT

    def can_manage(self, owner_id: uuid.UUID) -> bool:
        """Admins manage every listing; agents only their own."""
        return self.is_admin or (self.is_agent and self.user_id == owner_id)


RequestContext = Union[Anonymous, Authenticated]
