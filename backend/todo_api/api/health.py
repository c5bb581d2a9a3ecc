import logging

from fastapi import APIRouter
from redis.exceptions import RedisError
from sqlalchemy import text

from todo_api.api import auth
from todo_api.core.database import SessionLocal
from todo_api.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/ready")
def ready():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    finally:
        db.close()
    # redis only backs the login limiter
    if auth.rate_limiter.enabled:
        try:
            auth.rate_limiter.client.ping()
        except RedisError as exc:
            logger.warning("Readiness check failed, redis unreachable: %s", exc)
            raise ServiceUnavailableError("Redis unreachable") from exc
    return {"status": "ready"}
