"""Persistence for users and refresh-token records.

Raw refresh tokens never reach this layer: callers hand in the SHA-256 hash
and lookups are done on that hash only.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from todo_api.core import security
from todo_api.core.errors import ConflictError
from todo_api.models import RefreshToken, User


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_user(db: Session, email: str, password_hash: str, name: str) -> User:
    user = User(email=normalize_email(email), password_hash=password_hash, name=name)
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError() from exc
    return user


def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def find_user_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.get(User, user_id)


def verify_password(plain: str, password_hash: str) -> bool:
    return security.verify_password(plain, password_hash)


def store_refresh_token(db: Session, user_id: str, token_hash: str, expires_at: datetime) -> RefreshToken:
    record = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
    db.add(record)
    db.flush()
    return record


def find_active_refresh_token(db: Session, token_hash: str, now: Optional[datetime] = None) -> Optional[RefreshToken]:
    now = now or security.utcnow()
    return (
        db.query(RefreshToken)
        .filter(
            RefreshToken.token_hash == token_hash,
            RefreshToken.revoked_at.is_(None),
            RefreshToken.expires_at > now,
        )
        .first()
    )


def revoke_refresh_token(db: Session, token_id: str, now: Optional[datetime] = None) -> bool:
    """Set ``revoked_at`` unless already set. Returns whether this call revoked the record."""
    updated = (
        db.query(RefreshToken)
        .filter(RefreshToken.id == token_id, RefreshToken.revoked_at.is_(None))
        .update({RefreshToken.revoked_at: now or security.utcnow()}, synchronize_session="fetch")
    )
    return bool(updated)
