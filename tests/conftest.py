import pytest
from fastapi.testclient import TestClient
from config import Settings
from database import Database
from main import create_app
import models  # noqa: F401


@pytest.fixture
def settings(tmp_path):
    return Settings(DB_FILE=str(tmp_path / "test.db"))


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def db(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'crud.db'}")
    database.create_all()
    session = database.session()
    try:
        yield session
    finally:
        session.close()
        database.dispose()


@pytest.fixture
def make_product(client):
    def _make(**overrides):
        payload = {"name": "Widget", "unit": "pcs", "category": "Tools", "stock": 5}
        payload.update(overrides)
        response = client.post("/api/products", json=payload)
        assert response.status_code == 201, response.text
        return response.json()
    return _make
