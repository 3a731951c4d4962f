"""Command permissions.

Handlers look up the permissions granted to the message author and call
``has_permission`` before running a privileged command.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class Permission(str, Enum):
    ADMIN = "admin"
    MUSIC = "music"
    DOWNLOAD = "download"
    AI = "ai"


@dataclass(frozen=True)
class UserPermissions:
    """Permissions granted to one user."""

    user_id: str
    permissions: frozenset[Permission] = field(default_factory=frozenset)

    def allows(self, required: Permission) -> bool:
        return has_permission(self.permissions, required)


def has_permission(granted: Iterable[Permission], required: Permission) -> bool:
    """Return True if ``required`` (or admin, which implies everything) is granted."""

    return any(perm == required or perm == Permission.ADMIN for perm in granted)
