"""
SQLite database integration and simple migration system.

This module provides the ``Database`` wrapper used by the repositories:
it opens connections (``connect``), hands out short-lived cursors
(``cursor``) and applies migrations on application start
(``initialize``).  It uses SQLite as a lightweight embedded database;
to switch to another DBMS you would replace the connection logic and
adapt SQL syntax accordingly.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .config import Settings

logger = logging.getLogger(__name__)


MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: users table
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            bio TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """,
    ),
    # Migration 2: lookup indices.  The unique index on email backs up the
    # existence check performed by UserService.
    (
        2,
        """
        CREATE UNIQUE INDEX IF NOT EXISTS idx_users_email ON users(email);
        CREATE INDEX IF NOT EXISTS idx_users_created_at ON users(created_at);
        """,
    ),
]


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def resolve_database_path(database_url: str) -> Path:
    """Compute the path to the SQLite database file.

    Absolute paths are used directly.  Relative paths are resolved
    against the project root (the directory containing the
    ``user_service_api`` package).
    """
    if os.path.isabs(database_url):
        return Path(database_url)
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return (base_dir / database_url).resolve()


class Database:
    """Thin wrapper around a SQLite database file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(resolve_database_path(settings.database_url))

    def connect(self) -> sqlite3.Connection:
        """Create and return a new SQLite connection.

        Rows are returned as ``sqlite3.Row`` so columns can be accessed by
        name.  The driver runs in autocommit mode (``isolation_level=None``)
        and transactions are opened explicitly by ``cursor`` and
        ``SQLiteUserRepository.transaction``.

        SQLite's built-in ``LOWER`` only folds ASCII, so a ``casefold``
        SQL function backed by :meth:`str.casefold` is registered for
        case-insensitive matching.
        """
        conn = sqlite3.connect(self.path, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        return conn

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside a transaction and close the connection on exit.

        The transaction is committed when the block finishes and rolled
        back if it raises.
        """
        conn = self.connect()
        try:
            conn.execute("BEGIN")
        except sqlite3.Error:
            conn.close()
            raise
        try:
            yield conn.cursor()
            conn.execute("COMMIT")
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the database file if needed and apply pending migrations."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) AS version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    # executescript() would commit the open transaction, so
                    # run the statements one by one.
                    for statement in sql.split(";"):
                        if statement.strip():
                            cursor.execute(statement)
                    cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                    logger.info("Applied migration %d", version)
                    current_version = version
