"""
Unit tests for the Redis cache service.
Redis itself is replaced by a MagicMock client.
"""

import json
import pytest
from decimal import Decimal
from unittest.mock import MagicMock
from redis.exceptions import RedisError
from coffeeshop.services.cache_service import CacheService, PRODUCTS, REFERENCE


@pytest.fixture
def cache(app):
    service = CacheService(app)
    service.client = MagicMock()
    return service


class TestCacheDisabled:

    def test_disabled_by_config(self, app):
        service = CacheService(app)

        assert service.enabled is False
        assert service.get(PRODUCTS, 'detail:1') is None
        assert service.set(PRODUCTS, 'detail:1', {'id': 1}) is False
        assert service.clear(REFERENCE) == 0

    def test_remember_still_loads(self, app):
        service = CacheService(app)
        loader = MagicMock(return_value={'id': 1})

        assert service.remember(PRODUCTS, 'detail:1', loader) == {'id': 1}
        assert service.remember(PRODUCTS, 'detail:1', loader) == {'id': 1}
        assert loader.call_count == 2


class TestRemember:

    def test_miss_loads_and_stores_with_namespace_ttl(self, app, cache):
        cache.client.get.return_value = None
        loader = MagicMock(return_value={'id': 1, 'stock': 3})

        result = cache.remember(PRODUCTS, 'detail:1', loader)

        assert result == {'id': 1, 'stock': 3}
        loader.assert_called_once()
        key, ttl, payload = cache.client.setex.call_args[0]
        assert key == 'coffeeshop:products:detail:1'
        assert ttl == app.config['CACHE_PRODUCTS_TTL']
        assert json.loads(payload) == {'id': 1, 'stock': 3}

    def test_explicit_ttl_wins(self, cache):
        cache.client.get.return_value = None

        cache.remember(REFERENCE, 'deliveries', lambda: [], ttl=5)

        assert cache.client.setex.call_args[0][1] == 5

    def test_hit_skips_loader(self, cache):
        cache.client.get.return_value = json.dumps({'id': 1})
        loader = MagicMock()

        assert cache.remember(PRODUCTS, 'detail:1', loader) == {'id': 1}
        loader.assert_not_called()

    def test_loader_errors_propagate(self, cache):
        cache.client.get.return_value = None

        def boom():
            raise ValueError('db down')

        with pytest.raises(ValueError):
            cache.remember(PRODUCTS, 'detail:1', boom)
        cache.client.setex.assert_not_called()

    def test_redis_failure_degrades_to_loader(self, cache):
        cache.client.get.side_effect = RedisError('gone')
        cache.client.setex.side_effect = RedisError('gone')

        assert cache.remember(PRODUCTS, 'detail:1', lambda: [1, 2]) == [1, 2]

    def test_unreadable_entry_is_dropped(self, cache):
        cache.client.get.return_value = '{not json'

        assert cache.get(PRODUCTS, 'detail:1') is None
        cache.client.delete.assert_called_once_with('coffeeshop:products:detail:1')


class TestSerialization:

    def test_decimal_survives(self, cache):
        cache.set(REFERENCE, 'fees', {'fee': Decimal('10000.00')})
        cache.client.get.return_value = cache.client.setex.call_args[0][2]

        assert cache.get(REFERENCE, 'fees') == {'fee': Decimal('10000.00')}


class TestInvalidation:

    def test_delete_builds_keys(self, cache):
        cache.delete(PRODUCTS, 'detail:5', 'detail:6')

        cache.client.delete.assert_called_once_with(
            'coffeeshop:products:detail:5', 'coffeeshop:products:detail:6'
        )

    def test_delete_without_keys_is_noop(self, cache):
        assert cache.delete(PRODUCTS) == 0
        cache.client.delete.assert_not_called()

    def test_clear_scans_namespace(self, cache):
        cache.client.scan_iter.return_value = iter(['coffeeshop:reference:deliveries'])

        assert cache.clear(REFERENCE) == 1
        cache.client.scan_iter.assert_called_once_with(match='coffeeshop:reference:*', count=100)
        cache.client.delete.assert_called_once_with('coffeeshop:reference:deliveries')


class TestProductExpiry:

    def test_product_entries_expire_within_a_minute(self, cache):
        # a detail read that races a checkout can re-store old stock; expiry bounds that
        cache.client.get.return_value = None

        cache.remember(PRODUCTS, 'detail:1', lambda: {'id': 1, 'stock': 3})

        assert cache.client.setex.call_args[0][1] <= 60
