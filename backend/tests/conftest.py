import os
import tempfile
from pathlib import Path

# Point the engine at a throwaway SQLite file before the package is imported.
_DB_DIR = Path(tempfile.mkdtemp(prefix="studygroup-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_DB_DIR / 'test.db'}")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from studygroup.database import engine, create_db_and_tables, drop_db_and_tables
from studygroup.main import app
from studygroup import models, repositories, services

PASSWORD = "12345678"


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test an empty schema."""
    drop_db_and_tables()
    create_db_and_tables()
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def keesun(session):
    return services.AuthService(session).register("keesun", "keesun@email.com", PASSWORD)


@pytest.fixture
def test_zone(session):
    zone = models.Zone(city="test", local_name_of_city="테스트시", province="테스트주")
    return repositories.ZoneRepository(session).create(zone)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_headers(client, keesun):
    r = client.post("/auth/login", json={"login": "keesun", "password": PASSWORD})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
