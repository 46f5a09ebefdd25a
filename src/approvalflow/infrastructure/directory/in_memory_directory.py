"""In-memory user directory."""

from __future__ import annotations

from collections.abc import Iterable

from approvalflow.core.domain.models import User
from approvalflow.core.interfaces.directory import DirectoryProtocol


class InMemoryDirectory(DirectoryProtocol):
    """Directory backed by a list of users, preserving insertion order."""

    def __init__(self, users: Iterable[User] = ()) -> None:
        self._users: dict[str, User] = {}
        for user in users:
            self.add_user(user)

    def add_user(self, user: User) -> None:
        """Add or replace a user."""
        self._users[user.user_id] = user

    async def get_users(self) -> list[User]:
        return list(self._users.values())

    async def get_user(self, user_id: str) -> User | None:
        return self._users.get(user_id)
