import logging

import redis
from redis.exceptions import RedisError

from todo_api.core.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-window attempt counter kept in redis.

    A ``limit`` of 0 disables the limiter. When redis is unreachable the
    limiter lets requests through.
    """

    def __init__(
        self,
        prefix: str = "login",
        limit: int | None = None,
        window_seconds: int | None = None,
        client: redis.Redis | None = None,
    ):
        self.prefix = prefix
        self.limit = settings.login_rate_limit if limit is None else limit
        self.window_seconds = window_seconds or settings.login_rate_window_seconds
        self.client = client or redis.Redis.from_url(
            settings.redis_url, decode_responses=True, socket_connect_timeout=1
        )

    @property
    def enabled(self) -> bool:
        return self.limit > 0

    def hit(self, key: str) -> bool:
        if not self.enabled:
            return True
        redis_key = f"{self.prefix}:{key}"
        try:
            count = self.client.incr(redis_key)
            if count == 1:
                self.client.expire(redis_key, self.window_seconds)
            return count <= self.limit
        except RedisError as exc:
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)
            return True

    def reset(self, key: str) -> None:
        if not self.enabled:
            return
        redis_key = f"{self.prefix}:{key}"
        try:
            self.client.delete(redis_key)
        except RedisError as exc:
            logger.warning("Rate limiter reset failed: %s", exc)
