import pytest

from todo_api.core.database import SessionLocal
from todo_api.core.errors import InvalidOrExpiredTokenError
from todo_api.core.security import hash_token
from todo_api.models import RefreshToken
from todo_api.services import auth_service, credentials
from todo_api.services.auth_service import AuthService


@pytest.fixture()
def registered(db):
    return AuthService(db).register("carol@example.com", "pw123456", "Carol")


@pytest.fixture()
def sessions():
    first, second = SessionLocal(), SessionLocal()
    try:
        yield first, second
    finally:
        first.close()
        second.close()


def read_active_record(session, raw_token):
    record = credentials.find_active_refresh_token(session, hash_token(raw_token))
    assert record is not None
    return record


def replay_lookup(monkeypatch, record):
    """Make the next lookup return ``record`` as it was read before the other session committed."""
    monkeypatch.setattr(auth_service.credentials, "find_active_refresh_token", lambda db, token_hash: record)


def test_concurrent_logouts_only_one_succeeds(monkeypatch, registered, sessions):
    first, second = sessions
    raw = registered.refresh_token
    stale = read_active_record(first, raw)

    AuthService(second).logout(raw)
    replay_lookup(monkeypatch, stale)
    with pytest.raises(InvalidOrExpiredTokenError):
        AuthService(first).logout(raw)


def test_concurrent_rotating_refreshes_only_one_succeeds(monkeypatch, rotation_enabled, registered, sessions, db):
    first, second = sessions
    raw = registered.refresh_token
    user_id = registered.user.id
    stale = read_active_record(first, raw)

    winner = AuthService(second).refresh(raw)
    assert winner.refresh_token != raw
    replay_lookup(monkeypatch, stale)
    with pytest.raises(InvalidOrExpiredTokenError):
        AuthService(first).refresh(raw)

    records = db.query(RefreshToken).filter(RefreshToken.user_id == user_id).all()
    active = [record for record in records if record.revoked_at is None]
    assert len(records) == 2
    assert [record.token_hash for record in active] == [hash_token(winner.refresh_token)]
