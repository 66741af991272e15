from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List

import pytest
from fastapi.testclient import TestClient

from user_service_api.app.core.config import Settings
from user_service_api.app.core.db import Database
from user_service_api.app.main import create_app
from user_service_api.app.repositories.sqlite import SQLiteUserRepository
from user_service_api.app.services.user_service import UserService


class RecordedSpan:
    def __init__(self, name: str) -> None:
        self.name = name
        self.attributes: Dict[str, Any] = {}

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value


class RecordingTracer:
    """Tracer that keeps every finished span in memory."""

    def __init__(self) -> None:
        self.spans: List[RecordedSpan] = []

    @contextmanager
    def start_span(self, name: str) -> Iterator[RecordedSpan]:
        span = RecordedSpan(name)
        try:
            yield span
        finally:
            self.spans.append(span)

    def last(self, name: str) -> RecordedSpan:
        matching = [span for span in self.spans if span.name == name]
        assert matching, f"no span named {name}"
        return matching[-1]


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db = Database(tmp_path / "users.sqlite3")
    db.initialize()
    return db


@pytest.fixture()
def repository(database: Database) -> SQLiteUserRepository:
    return SQLiteUserRepository(database)


@pytest.fixture()
def tracer() -> RecordingTracer:
    return RecordingTracer()


@pytest.fixture()
def service(repository: SQLiteUserRepository, tracer: RecordingTracer) -> UserService:
    return UserService(repository, tracer)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=str(tmp_path / "api.sqlite3"),
        api_prefix="/api",
        service_name="UserService",
        tracing_enabled=False,
        log_file=None,
    )


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings=settings)
    with TestClient(app) as test_client:
        yield test_client
