"""
Domain model for users.

``User`` is a plain dataclass with no knowledge of how it is stored.
The repository fills in ``id`` and the timestamps on first persistence.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(eq=False)
class User:
    name: str
    email: str
    bio: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def apply_changes(self, changes: "User") -> None:
        """Overwrite the mutable fields with those of ``changes``.

        ``id`` and ``created_at`` are left untouched.
        """
        self.name = changes.name
        self.email = changes.email
        self.bio = changes.bio

    # Identity is (id, email).  Two drafts without an id compare equal when
    # their emails match.
    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, User):
            return NotImplemented
        return self.id == other.id and self.email == other.email

    def __hash__(self) -> int:
        return hash((self.id, self.email))

    def __repr__(self) -> str:
        return (
            f"User(id={self.id}, name={self.name!r}, email={self.email!r}, "
            f"created_at={self.created_at}, updated_at={self.updated_at})"
        )
