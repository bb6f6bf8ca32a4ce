import pytest
from fastapi.testclient import TestClient

from core.db import models
from core.db.database import SessionLocal, engine
from core.api.main import app


@pytest.fixture(scope="session", autouse=True)
def _schema():
    """Create the gravity tables once per session (in-memory SQLite, StaticPool)."""
    models.Base.metadata.create_all(bind=engine)
    yield
    models.Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_tables():
    with engine.begin() as conn:
        for table in reversed(models.Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture(autouse=True)
def _open_auth_env(monkeypatch):
    # Tests opt into authentication explicitly
    monkeypatch.delenv("API_PASSWORD_HASH", raising=False)
    monkeypatch.setenv("DEV_MODE", "false")
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)
