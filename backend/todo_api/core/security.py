import hashlib
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from todo_api.core.config import settings
from todo_api.core.errors import InvalidOrExpiredTokenError

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

REFRESH_TOKEN_BYTES = 32


@dataclass(frozen=True)
class AccessTokenClaims:
    sub: str
    email: str
    iat: int
    exp: int


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def dummy_verify() -> None:
    pwd_context.dummy_verify()


def issue_access_token(user_id: str, email: str, now: datetime | None = None) -> str:
    issued_at = now or utcnow()
    expire = issued_at + settings.access_token_ttl
    payload = {
        "sub": user_id,
        "email": email,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> AccessTokenClaims:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise InvalidOrExpiredTokenError() from exc
    try:
        return AccessTokenClaims(
            sub=str(payload["sub"]),
            email=str(payload["email"]),
            iat=int(payload["iat"]),
            exp=int(payload["exp"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidOrExpiredTokenError() from exc


def generate_refresh_token() -> str:
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()
