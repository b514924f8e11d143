import redis

from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)

# compare-and-delete in one atomic step: Lua scripts run without interleaving,
# so nobody can slip in between GET and DEL and lose their lock to us
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    Per-user mutual exclusion for order creation.

    -acquire: SET NX EX, the value is a token unique to the caller
    -release: only the token owner deletes the key
    -a crashed holder is cleaned up by the TTL
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _order_lock_key(user_id: int) -> str:
        return f"user:{user_id}:order-lock"

    @redis_retry()
    def acquire_order_lock(self, user_id: int, token: str, ttl: int) -> bool:
        key = self._order_lock_key(user_id)
        logger.info(f"Acquire lock {key}")
        # SET user:1:order-lock "<token>" NX EX 60
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,
                ex=ttl,
            )
        )

    @redis_retry()
    def release_order_lock(self, user_id: int, token: str) -> bool:
        key = self._order_lock_key(user_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
