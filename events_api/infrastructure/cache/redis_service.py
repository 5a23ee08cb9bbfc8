import json
import logging
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)


class RedisService:
    """
    Optional page cache. Every failure is logged and treated as a miss,
    a broken cache never fails a request.
    """

    def __init__(self, redis_url: Optional[str] = None, prefix: str = "events_api"):
        self.redis_url = redis_url
        self.prefix = prefix
        self.client = None
        if self.redis_url:
            try:
                self.client = redis.from_url(self.redis_url, decode_responses=True)
                # Test connection
                self.client.ping()
                logger.info("Connected to Redis for caching.")
            except redis.RedisError as e:
                logger.warning(f"Failed to connect to Redis: {e}. Caching disabled.")
                self.client = None
        else:
            logger.info("REDIS_URL not set. Caching disabled.")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> Optional[Any]:
        if not self.client:
            return None
        try:
            data = self.client.get(self._key(key))
            if data:
                return json.loads(data)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Redis get error: {e}")
            return None

    def set(self, key: str, value: Any, ttl_seconds: int = 60):
        if not self.client:
            return
        try:
            self.client.setex(self._key(key), ttl_seconds, json.dumps(value))
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Redis set error: {e}")

    def delete(self, key: str):
        if not self.client:
            return
        try:
            self.client.delete(self._key(key))
        except redis.RedisError as e:
            logger.warning(f"Redis delete error: {e}")

    def close(self):
        if self.client:
            self.client.close()
