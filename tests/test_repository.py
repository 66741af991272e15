from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from user_service_api.app.core.db import Database
from user_service_api.app.core.errors import DuplicateEmailError, UserNotFoundError
from user_service_api.app.models.user import User
from user_service_api.app.repositories.sqlite import SQLiteUserRepository


def _add(repository: SQLiteUserRepository, name: str, email: str, bio: str | None = None) -> User:
    return repository.persist(User(name, email, bio))


def test_initialize_is_idempotent(database: Database) -> None:
    database.initialize()

    with database.cursor() as cursor:
        versions = [row["version"] for row in cursor.execute("SELECT version FROM migrations")]
    assert versions == [1, 2]


def test_persist_assigns_id_and_timestamps(repository: SQLiteUserRepository) -> None:
    user = _add(repository, "John Doe", "john@example.com", "Bio")

    assert user.id is not None
    assert user.created_at is not None
    assert user.created_at == user.updated_at
    assert user.created_at.tzinfo is not None

    stored = repository.find_by_id(user.id)
    assert stored is not None
    assert stored.name == "John Doe"
    assert stored.bio == "Bio"
    assert stored.created_at == user.created_at


def test_persist_existing_user_refreshes_updated_at_only(repository: SQLiteUserRepository) -> None:
    user = _add(repository, "John Doe", "john@example.com")
    created_at = user.created_at
    first_update = user.updated_at

    user.name = "John Smith"
    repository.persist(user)

    stored = repository.find_by_id(user.id)
    assert stored.name == "John Smith"
    assert stored.created_at == created_at
    assert stored.updated_at > first_update
    assert repository.count() == 1


def test_find_by_email(repository: SQLiteUserRepository) -> None:
    user = _add(repository, "John Doe", "john@example.com")

    found = repository.find_by_email("john@example.com")

    assert found == user
    assert repository.find_by_email("nobody@example.com") is None


def test_search_by_name_is_case_insensitive(repository: SQLiteUserRepository) -> None:
    _add(repository, "John Doe", "john@example.com")
    _add(repository, "Jane Roe", "jane@example.com")

    assert [u.email for u in repository.search_by_name("john")] == ["john@example.com"]
    assert [u.email for u in repository.search_by_name("DOE")] == ["john@example.com"]
    assert repository.search_by_name("xyz") == []


def test_search_by_name_folds_non_ascii(repository: SQLiteUserRepository) -> None:
    _add(repository, "Иван Иванов", "ivan@example.com")

    assert len(repository.search_by_name("иван")) == 1


def test_search_by_name_treats_wildcards_literally(repository: SQLiteUserRepository) -> None:
    _add(repository, "John Doe", "john@example.com")
    _add(repository, "100% Real", "real@example.com")

    assert [u.email for u in repository.search_by_name("%")] == ["real@example.com"]
    assert repository.search_by_name("J_hn") == []


def test_search_by_empty_name_matches_everyone(repository: SQLiteUserRepository) -> None:
    _add(repository, "John Doe", "john@example.com")
    _add(repository, "Jane Roe", "jane@example.com")

    assert len(repository.search_by_name("")) == 2


def test_find_recent_includes_fresh_users(repository: SQLiteUserRepository, database: Database) -> None:
    fresh = _add(repository, "John Doe", "john@example.com")
    old_stamp = (datetime.now(timezone.utc) - timedelta(days=10)).isoformat(timespec="microseconds")
    with database.cursor() as cursor:
        cursor.execute(
            "INSERT INTO users (name, email, bio, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
            ("Old Timer", "old@example.com", None, old_stamp, old_stamp),
        )

    assert [u.id for u in repository.find_recent(1)] == [fresh.id]
    assert len(repository.find_recent(30)) == 2


def test_find_recent_with_window_beyond_calendar(repository: SQLiteUserRepository) -> None:
    user = _add(repository, "John Doe", "john@example.com")

    assert [u.id for u in repository.find_recent(1_000_000)] == [user.id]
    assert [u.id for u in repository.find_recent(10**12)] == [user.id]


def test_exists_by_email(repository: SQLiteUserRepository) -> None:
    _add(repository, "John Doe", "john@example.com")

    assert repository.exists_by_email("john@example.com")
    assert not repository.exists_by_email("JOHN@example.com")
    assert not repository.exists_by_email("jane@example.com")


def test_exists_by_email_excluding_id(repository: SQLiteUserRepository) -> None:
    john = _add(repository, "John Doe", "john@example.com")
    jane = _add(repository, "Jane Roe", "jane@example.com")

    assert not repository.exists_by_email_excluding_id("john@example.com", john.id)
    assert repository.exists_by_email_excluding_id("john@example.com", jane.id)


def test_count_and_delete(repository: SQLiteUserRepository) -> None:
    john = _add(repository, "John Doe", "john@example.com")
    _add(repository, "Jane Roe", "jane@example.com")
    assert repository.count() == 2

    assert repository.delete_by_id(john.id) is True
    assert repository.find_by_id(john.id) is None
    assert repository.count() == 1

    assert repository.delete_by_id(john.id) is False
    assert repository.delete_by_id(99999) is False


def test_list_all_is_ordered_by_id(repository: SQLiteUserRepository) -> None:
    first = _add(repository, "John Doe", "john@example.com")
    second = _add(repository, "Jane Roe", "jane@example.com")

    assert [u.id for u in repository.list_all()] == [first.id, second.id]


def test_unique_index_rejects_duplicate_email(repository: SQLiteUserRepository) -> None:
    _add(repository, "John Doe", "john@example.com")

    with pytest.raises(DuplicateEmailError):
        _add(repository, "Impostor", "john@example.com")

    assert repository.count() == 1


def test_transaction_rolls_back_on_error(repository: SQLiteUserRepository) -> None:
    with pytest.raises(RuntimeError):
        with repository.transaction() as tx:
            tx.persist(User("John Doe", "john@example.com"))
            assert tx.count() == 1
            raise RuntimeError("boom")

    assert repository.count() == 0


def test_transaction_commits_on_success(repository: SQLiteUserRepository) -> None:
    with repository.transaction() as tx:
        tx.persist(User("John Doe", "john@example.com"))
        tx.persist(User("Jane Roe", "jane@example.com"))

    assert repository.count() == 2


def test_storage_errors_propagate(tmp_path) -> None:
    repository = SQLiteUserRepository(Database(tmp_path / "empty.sqlite3"))

    with pytest.raises(sqlite3.OperationalError):
        repository.count()


def test_persist_user_without_row_raises_not_found(repository: SQLiteUserRepository) -> None:
    ghost = User("Ghost", "ghost@example.com", id=4242)

    with pytest.raises(UserNotFoundError):
        repository.persist(ghost)

    assert ghost.updated_at is None
    assert repository.count() == 0


def test_email_is_stored_verbatim(repository: SQLiteUserRepository) -> None:
    _add(repository, "John Doe", "John.Doe@Example.COM")

    assert repository.find_by_email("John.Doe@Example.COM") is not None
    assert repository.find_by_email("John.Doe@example.com") is None
