from fastapi.testclient import TestClient
from sqlalchemy import inspect

from todo_api import entrypoint
from todo_api import main as main_module
from todo_api.core.config import settings
from todo_api.core.database import Base, engine


def test_lifespan_creates_tables_and_disposes_engine(monkeypatch):
    Base.metadata.drop_all(bind=engine)
    disposed = []
    monkeypatch.setattr(main_module.engine, "dispose", lambda: disposed.append(True))

    with TestClient(main_module.app) as client:
        assert {"users", "refresh_tokens", "todos"} <= set(inspect(engine).get_table_names())
        assert client.get("/health").status_code == 200
        assert disposed == []
    assert disposed == [True]


def test_entrypoint_runs_uvicorn_from_settings(monkeypatch):
    calls = []
    monkeypatch.setattr(entrypoint.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setattr(settings, "port", 8123)

    entrypoint.main()

    assert len(calls) == 1
    target, kwargs = calls[0]
    assert target == "todo_api.main:app"
    assert kwargs["port"] == 8123
    assert kwargs["host"] == settings.host
    assert kwargs["timeout_graceful_shutdown"] == settings.shutdown_timeout_seconds
