"""
SQLite implementation of :class:`UserRepository`.

All queries use parameterized statements.  Outside a transaction each
call opens its own connection through :meth:`Database.cursor`; inside
``transaction()`` every call shares the connection of the enclosing
``BEGIN IMMEDIATE`` block.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional

from ..core.db import Database
from ..core.errors import DuplicateEmailError, UserNotFoundError
from ..models.user import User
from .base import UserRepository

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, email, bio, created_at, updated_at"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    # Fixed-width ISO text so string comparison in SQL matches time order.
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _cutoff(days: int) -> datetime:
    try:
        return _utcnow() - timedelta(days=days)
    except OverflowError:
        # Further back than datetime can represent; every row qualifies.
        return datetime.min.replace(tzinfo=timezone.utc)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteUserRepository(UserRepository):
    """Stores users in the ``users`` table of a :class:`Database`."""

    def __init__(self, database: Database, connection: Optional[sqlite3.Connection] = None) -> None:
        self._database = database
        self._connection = connection

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        if self._connection is not None:
            yield self._connection.cursor()
        else:
            with self._database.cursor() as cursor:
                yield cursor

    @contextmanager
    def transaction(self) -> Iterator[SQLiteUserRepository]:
        if self._connection is not None:
            # Already inside a transaction; join it.
            yield self
            return
        conn = self._database.connect()
        try:
            # IMMEDIATE takes the write lock up front so a read-then-write
            # sequence cannot interleave with another writer.
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error:
            conn.close()
            raise
        try:
            yield type(self)(self._database, conn)
            conn.execute("COMMIT")
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            bio=row["bio"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def list_all(self) -> List[User]:
        with self._cursor() as cursor:
            rows = cursor.execute(f"SELECT {_COLUMNS} FROM users ORDER BY id").fetchall()
        return [self._row_to_user(row) for row in rows]

    def find_by_id(self, user_id: int) -> Optional[User]:
        with self._cursor() as cursor:
            row = cursor.execute(
                f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,)
            ).fetchone()
        return self._row_to_user(row) if row else None

    def find_by_email(self, email: str) -> Optional[User]:
        with self._cursor() as cursor:
            row = cursor.execute(
                f"SELECT {_COLUMNS} FROM users WHERE email = ?", (email,)
            ).fetchone()
        return self._row_to_user(row) if row else None

    def search_by_name(self, name: str) -> List[User]:
        pattern = f"%{_escape_like(name.casefold())}%"
        with self._cursor() as cursor:
            rows = cursor.execute(
                f"SELECT {_COLUMNS} FROM users WHERE casefold(name) LIKE ? ESCAPE '\\'",
                (pattern,),
            ).fetchall()
        return [self._row_to_user(row) for row in rows]

    def find_recent(self, days: int) -> List[User]:
        cutoff = _serialize_datetime(_cutoff(days))
        with self._cursor() as cursor:
            rows = cursor.execute(
                f"SELECT {_COLUMNS} FROM users WHERE created_at >= ?", (cutoff,)
            ).fetchall()
        return [self._row_to_user(row) for row in rows]

    def exists_by_email(self, email: str) -> bool:
        with self._cursor() as cursor:
            row = cursor.execute(
                "SELECT 1 FROM users WHERE email = ? LIMIT 1", (email,)
            ).fetchone()
        return row is not None

    def exists_by_email_excluding_id(self, email: str, user_id: int) -> bool:
        with self._cursor() as cursor:
            row = cursor.execute(
                "SELECT 1 FROM users WHERE email = ? AND id != ? LIMIT 1",
                (email, user_id),
            ).fetchone()
        return row is not None

    def count(self) -> int:
        with self._cursor() as cursor:
            row = cursor.execute("SELECT COUNT(*) AS count FROM users").fetchone()
        return int(row["count"])

    def delete_by_id(self, user_id: int) -> bool:
        with self._cursor() as cursor:
            cursor.execute("DELETE FROM users WHERE id = ?", (user_id,))
            return cursor.rowcount > 0

    def persist(self, user: User) -> User:
        try:
            if user.id is None:
                return self._insert(user)
            return self._update(user)
        except sqlite3.IntegrityError as exc:
            # Only the unique email index can be violated here.
            logger.error("Unique email constraint rejected %s", user.email)
            raise DuplicateEmailError(user.email) from exc

    def _insert(self, user: User) -> User:
        now = _utcnow()
        stamp = _serialize_datetime(now)
        with self._cursor() as cursor:
            cursor.execute(
                "INSERT INTO users (name, email, bio, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (user.name, user.email, user.bio, stamp, stamp),
            )
            user.id = cursor.lastrowid
        user.created_at = now
        user.updated_at = now
        return user

    def _update(self, user: User) -> User:
        now = _utcnow()
        if user.updated_at is not None and now <= user.updated_at:
            now = user.updated_at + timedelta(microseconds=1)
        with self._cursor() as cursor:
            cursor.execute(
                "UPDATE users SET name = ?, email = ?, bio = ?, updated_at = ? WHERE id = ?",
                (user.name, user.email, user.bio, _serialize_datetime(now), user.id),
            )
            if cursor.rowcount == 0:
                raise UserNotFoundError(user.id)
        user.updated_at = now
        return user
