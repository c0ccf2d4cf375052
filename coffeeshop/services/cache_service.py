"""
Redis read-through cache for catalog reads.

Entries live under {prefix}:{namespace}:{key}. Any Redis failure is logged
and treated as a miss, so the database stays the source of truth and the
API keeps answering without Redis.
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

import redis
from redis.exceptions import RedisError
from flask import Flask

logger = logging.getLogger(__name__)

# Namespaces
PRODUCTS = 'products'
REFERENCE = 'reference'


class _CacheEncoder(json.JSONEncoder):
    """Keeps Decimal precision across a round trip; dates become ISO strings."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return {'__decimal__': str(obj)}
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


def _decode_object(dct: Dict[str, Any]) -> Any:
    if '__decimal__' in dct:
        return Decimal(dct['__decimal__'])
    return dct


class CacheService:
    """
    Namespaced Redis cache.

    TTLs come from config per namespace (CACHE_PRODUCTS_TTL,
    CACHE_REFERENCE_TTL) with CACHE_DEFAULT_TTL for anything else.
    """

    def __init__(self, app: Optional[Flask] = None):
        self.client: Optional[redis.Redis] = None
        self.prefix = 'coffeeshop'
        self.default_ttl = 60
        self.ttls: Dict[str, int] = {}

        if app:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        self.prefix = app.config.get('CACHE_KEY_PREFIX', self.prefix)
        self.default_ttl = app.config.get('CACHE_DEFAULT_TTL', self.default_ttl)
        self.ttls = {
            PRODUCTS: app.config.get('CACHE_PRODUCTS_TTL', self.default_ttl),
            REFERENCE: app.config.get('CACHE_REFERENCE_TTL', self.default_ttl),
        }

        if not app.config.get('CACHE_ENABLED', True):
            logger.info("[CACHE] Disabled by CACHE_ENABLED")
            return

        redis_url = app.config.get('REDIS_URL', 'redis://redis:6379/0')
        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
                retry_on_timeout=True,
                health_check_interval=30
            )
            client.ping()
        except RedisError as e:
            logger.warning(f"[CACHE] Redis unreachable at {redis_url}: {e}. Reading from the database only.")
            return

        self.client = client
        logger.info(f"[CACHE] Redis connected: {redis_url}")

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def key(self, namespace: str, key: str) -> str:
        return f"{self.prefix}:{namespace}:{key}"

    def get(self, namespace: str, key: str) -> Optional[Any]:
        """Cached value, or None on a miss or any Redis problem."""
        if not self.enabled:
            return None

        full_key = self.key(namespace, key)
        try:
            raw = self.client.get(full_key)
        except RedisError as e:
            logger.warning(f"[CACHE] GET {full_key} failed: {e}")
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw, object_hook=_decode_object)
        except ValueError:
            logger.warning(f"[CACHE] Dropping unreadable entry {full_key}")
            self.delete(namespace, key)
            return None

    def set(self, namespace: str, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if not self.enabled:
            return False

        full_key = self.key(namespace, key)
        ttl = ttl or self.ttls.get(namespace, self.default_ttl)
        try:
            self.client.setex(full_key, ttl, json.dumps(value, cls=_CacheEncoder))
        except (RedisError, TypeError) as e:
            logger.warning(f"[CACHE] SET {full_key} failed: {e}")
            return False
        return True

    def delete(self, namespace: str, *keys: str) -> int:
        """Drop the given keys of a namespace."""
        if not self.enabled or not keys:
            return 0
        try:
            return self.client.delete(*(self.key(namespace, key) for key in keys))
        except RedisError as e:
            logger.warning(f"[CACHE] DELETE in {namespace} failed: {e}")
            return 0

    def clear(self, namespace: str) -> int:
        """Drop every key of a namespace."""
        if not self.enabled:
            return 0

        pattern = self.key(namespace, '*')
        try:
            keys = list(self.client.scan_iter(match=pattern, count=100))
            if keys:
                self.client.delete(*keys)
        except RedisError as e:
            logger.warning(f"[CACHE] CLEAR {pattern} failed: {e}")
            return 0

        if keys:
            logger.info(f"[CACHE] Cleared {pattern} ({len(keys)} keys)")
        return len(keys)

    def remember(self, namespace: str, key: str, loader: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """Return the cached value or call loader and cache what it returns."""
        cached = self.get(namespace, key)
        if cached is not None:
            return cached

        value = loader()
        self.set(namespace, key, value, ttl)
        return value


_cache_service: Optional[CacheService] = None


def init_cache(app: Flask) -> CacheService:
    global _cache_service
    _cache_service = CacheService(app)
    app.extensions['cache'] = _cache_service
    return _cache_service


def get_cache() -> CacheService:
    if _cache_service is None:
        raise RuntimeError("Cache not initialized.")
    return _cache_service
