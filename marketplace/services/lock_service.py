import uuid

import redis

from marketplace.utils.retry import redis_retry
from marketplace.utils.settings import REDIS_URL
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

#compare-and-delete in one step, lua scripts run atomically in redis
#so nobody can slip in between GET and DEL and we never drop someone else's lock
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


def new_lock_token() -> str:
    return uuid.uuid4().hex


class LockService:
    """
    Per-buyer checkout lock:
    -acquire with SET NX EX, the TTL frees it if the worker dies mid checkout
    -release only when we still own it (token compare in lua)
    """

    def __init__(self, url: str | None = None):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(buyer_id: int) -> str:
        return f"checkout:{buyer_id}:lock"

    @redis_retry()
    def acquire_checkout_lock(self, buyer_id: int, token: str, ttl: int) -> bool:
        key = self._key(buyer_id)
        logger.info(f"Acquire lock {key}")
        #SET checkout:1:lock "<token>" NX EX 30
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True,
                ex=ttl,
            )
        )

    @redis_retry()
    def release_checkout_lock(self, buyer_id: int, token: str) -> bool:
        key = self._key(buyer_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
