# server/linkgate/services/redis_service.py

import json
import logging
from datetime import datetime
from typing import Optional

import redis
from flask import current_app

logger = logging.getLogger(__name__)

KEY_PREFIX = "linkgate"


class RedisService:
    _client: Optional[redis.Redis] = None
    _initialized: bool = False

    def __init__(self):
        if not RedisService._initialized:
            self._connect()
        self.client = RedisService._client

    def _connect(self) -> None:
        RedisService._initialized = True

        redis_url = current_app.config.get("REDIS_URL")

        if not redis_url:
            logger.info("Redis not configured, caching and visitor counters disabled")
            return

        try:
            RedisService._client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )

            RedisService._client.ping()
            logger.info("Redis connected")

        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {e}")
            RedisService._client = None

    @classmethod
    def reset(cls) -> None:
        cls._client = None
        cls._initialized = False

    def _available(self) -> bool:
        return self.client is not None

    def _key(self, *parts) -> str:
        return f"{KEY_PREFIX}:{':'.join(str(p) for p in parts)}"

    def ping(self) -> bool:
        if not self._available():
            return False
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    # Link snapshot caching
    def cache_link(self, code: str, data: dict, ttl: int = None) -> bool:
        if not self._available():
            return False

        try:
            ttl = ttl or current_app.config.get("CACHE_TTL_LINK", 3600)
            self.client.setex(self._key("link", code), ttl, json.dumps(data))
            return True
        except (redis.RedisError, TypeError) as e:
            logger.debug(f"Cache write failed: {e}")
            return False

    def get_cached_link(self, code: str) -> Optional[dict]:
        if not self._available():
            return None

        try:
            data = self.client.get(self._key("link", code))
            return json.loads(data) if data else None
        except (redis.RedisError, ValueError) as e:
            logger.debug(f"Cache read failed: {e}")
            return None

    def invalidate_link_cache(self, *codes: str) -> bool:
        if not self._available():
            return False

        keys = [self._key("link", c) for c in codes if c]
        if not keys:
            return False

        try:
            self.client.delete(*keys)
            return True
        except redis.RedisError as e:
            logger.debug(f"Cache invalidation failed: {e}")
            return False

    # Click tracking
    def increment_click_counter(self, code: str) -> int:
        if not self._available():
            return 0

        try:
            key = self._key("clicks", code, datetime.utcnow().strftime("%Y-%m-%d"))
            count = self.client.incr(key)
            self.client.expire(key, 86400 * 7)
            return count
        except redis.RedisError:
            return 0

    def add_unique_visitor(self, link_id: str, visitor_hash: str) -> bool:
        """True the first time ``visitor_hash`` is seen for this link today."""
        if not self._available() or not visitor_hash:
            return False

        try:
            key = self._key("visitors", link_id, datetime.utcnow().strftime("%Y-%m-%d"))
            added = self.client.sadd(key, visitor_hash)
            self.client.expire(key, 86400 * 2)
            return added == 1
        except redis.RedisError:
            return False
