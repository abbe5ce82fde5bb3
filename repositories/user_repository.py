"""
User repository (read-only team directory).

Provides lookups only. Leads reference users by id; a lookup for a user that
does not exist returns None rather than failing, so a dangling
`Lead.assigned_to` never breaks a read.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol

from domain.user import User


class UserDirectory(Protocol):
    def list_users(self) -> List[User]: ...

    def get_user(self, user_id: Optional[str]) -> Optional[User]: ...


class InMemoryUserDirectory:
    def __init__(self, users: Iterable[User] = ()) -> None:
        self._users = {user.id: user for user in users}

    def list_users(self) -> List[User]:
        return list(self._users.values())

    def get_user(self, user_id: Optional[str]) -> Optional[User]:
        """
        Fetch a user by ID.

        Returns:
        - User if found
        - None if user_id is unset or no user has that id
        """
        if not user_id:
            return None
        return self._users.get(user_id)


__all__ = ["InMemoryUserDirectory", "UserDirectory"]
