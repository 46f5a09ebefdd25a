"""Directory Protocol for user lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from approvalflow.core.domain.models import User


class DirectoryProtocol(Protocol):
    """Read-only access to the user directory."""

    async def get_users(self) -> list[User]:
        """Return all users in stable directory order."""
        ...

    async def get_user(self, user_id: str) -> User | None:
        """Return a single user, or None if unknown."""
        ...
