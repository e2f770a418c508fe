from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from movies_api.app.adapters.sqlite_movie_adapter import SqliteMovieAdapter
from movies_api.app.core.config import Settings
from movies_api.app.core.db import Database
from movies_api.app.main import create_app


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        database_url=":memory:",
        secret_key="test-secret",
        kafka_enabled=False,
        kafka_retries=2,
        kafka_initial_retry_ms=1,
        kafka_max_retry_ms=2,
        event_log_path=str(tmp_path / "movie-events.log"),
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def client(settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client) -> dict:
    token = client.get("/auth/fake-token").json()["token"]
    return {"Authorization": token}


@pytest.fixture
def database() -> Iterator[Database]:
    db = Database(":memory:")
    db.open()
    yield db
    db.close()


@pytest.fixture
def adapter(database) -> SqliteMovieAdapter:
    return SqliteMovieAdapter(database)


@pytest.fixture
def settings_factory(tmp_path):
    return lambda **overrides: make_settings(tmp_path, **overrides)
