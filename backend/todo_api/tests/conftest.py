import os

os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOGIN_RATE_LIMIT"] = "0"
os.environ["ENVIRONMENT"] = "test"
os.environ["REFRESH_TOKEN_ROTATION"] = "false"

import pytest
from fastapi.testclient import TestClient

from todo_api.core.config import settings
from todo_api.core.database import Base, SessionLocal, engine
from todo_api.main import app
from todo_api import models  # noqa: F401


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def rotation_enabled(monkeypatch):
    monkeypatch.setattr(settings, "refresh_token_rotation", True)

