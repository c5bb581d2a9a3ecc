import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from todo_api.core import security
from todo_api.core.config import settings
from todo_api.core.errors import InvalidCredentialsError, InvalidOrExpiredTokenError
from todo_api.models import User
from todo_api.services import credentials

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    token: str
    refresh_token: str
    user: User


class AuthService:
    """Register/login/refresh/logout over one request-scoped session.

    Every public method commits its own unit of work. Failures raise the
    typed errors from ``todo_api.core.errors`` and leave nothing committed.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def register(self, email: str, password: str, name: str) -> AuthResult:
        user = credentials.create_user(self.db, email, security.hash_password(password), name)
        result = self._start_session(user)
        self.db.commit()
        logger.info("Registered user %s", user.id)
        return result

    def login(self, email: str, password: str) -> AuthResult:
        user = credentials.find_user_by_email(self.db, email)
        if user is None:
            security.dummy_verify()
            raise InvalidCredentialsError()
        if not credentials.verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        result = self._start_session(user)
        self.db.commit()
        logger.info("User %s logged in", user.id)
        return result

    def refresh(self, raw_refresh_token: str) -> AuthResult:
        record = credentials.find_active_refresh_token(self.db, security.hash_token(raw_refresh_token))
        if record is None:
            raise InvalidOrExpiredTokenError()
        user = credentials.find_user_by_id(self.db, record.user_id)
        if user is None:
            raise InvalidOrExpiredTokenError()
        token = security.issue_access_token(user.id, user.email)
        if not settings.refresh_token_rotation:
            return AuthResult(token=token, refresh_token=raw_refresh_token, user=user)
        if not credentials.revoke_refresh_token(self.db, record.id):
            self.db.rollback()
            raise InvalidOrExpiredTokenError()
        new_refresh_token = self._store_new_refresh_token(user)
        self.db.commit()
        logger.info("Rotated refresh token for user %s", user.id)
        return AuthResult(token=token, refresh_token=new_refresh_token, user=user)

    def logout(self, raw_refresh_token: str) -> str:
        record = credentials.find_active_refresh_token(self.db, security.hash_token(raw_refresh_token))
        if record is None:
            raise InvalidOrExpiredTokenError()
        user_id = record.user_id
        if not credentials.revoke_refresh_token(self.db, record.id):
            self.db.rollback()
            raise InvalidOrExpiredTokenError()
        self.db.commit()
        logger.info("Revoked refresh token for user %s", user_id)
        return user_id

    def _start_session(self, user: User) -> AuthResult:
        token = security.issue_access_token(user.id, user.email)
        refresh_token = self._store_new_refresh_token(user)
        return AuthResult(token=token, refresh_token=refresh_token, user=user)

    def _store_new_refresh_token(self, user: User) -> str:
        raw = security.generate_refresh_token()
        credentials.store_refresh_token(
            self.db,
            user.id,
            security.hash_token(raw),
            security.utcnow() + settings.refresh_token_ttl,
        )
        return raw
