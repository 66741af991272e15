"""
Repository interface for users.

The service layer depends only on this interface.  Implementations own
the storage mechanism and are responsible for assigning ids and
timestamps when a user is persisted.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import List, Optional

from ..models.user import User


class UserRepository(ABC):
    """Capability set required by :class:`UserService`."""

    @abstractmethod
    def list_all(self) -> List[User]:
        """Return every stored user, ordered by id."""

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def search_by_name(self, name: str) -> List[User]:
        """Case-insensitive substring match on ``name``.

        An empty string matches every user.
        """

    @abstractmethod
    def find_recent(self, days: int) -> List[User]:
        """Return users whose ``created_at`` lies within the last ``days`` days."""

    @abstractmethod
    def exists_by_email(self, email: str) -> bool:
        ...

    @abstractmethod
    def exists_by_email_excluding_id(self, email: str, user_id: int) -> bool:
        """True iff a user other than ``user_id`` has ``email``."""

    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def delete_by_id(self, user_id: int) -> bool:
        """Delete a user; return whether a row was removed."""

    @abstractmethod
    def persist(self, user: User) -> User:
        """Insert ``user`` if it has no id, otherwise update it in place.

        Inserts assign ``id``, ``created_at`` and ``updated_at``; updates
        refresh ``updated_at`` only.  The same object is returned.
        """

    @abstractmethod
    def transaction(self) -> AbstractContextManager["UserRepository"]:
        """Return a context manager yielding a repository bound to one transaction.

        Everything done through the yielded repository is committed when
        the block exits normally and rolled back if it raises.
        """
