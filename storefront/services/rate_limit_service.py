# storefront/services/rate_limit_service.py
import redis
from redis.exceptions import RedisError

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class RateLimitService:
    """
    Fixed-window request counter in Redis.
    -INCR per (scope, client) key, first hit in a window sets EXPIRE
    -the key dies with the window, nothing to clean up by hand
    """

    def __init__(self, client: redis.Redis | None = None, url: str | None = None):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)

    @staticmethod
    def _key(scope: str, client_id: str) -> str:
        return f"ratelimit:{scope}:{client_id}"

    @redis_retry()
    def _hit(self, key: str, window_seconds: int) -> int:
        count = self.redis.incr(key)
        if count == 1:
            self.redis.expire(key, window_seconds)
        return count

    def allow(self, scope: str, client_id: str, max_requests: int, window_seconds: int) -> bool:
        key = self._key(scope, client_id)
        try:
            count = self._hit(key, window_seconds)
        except RedisError as e:
            #redis down after retries: let the request through
            logger.warning(f"Rate limiter unavailable for {key}: {e}")
            return True

        if count > max_requests:
            logger.info(f"Rate limit exceeded for {key} ({count}/{max_requests})")
            return False
        return True
