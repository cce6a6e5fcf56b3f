"""Tests for caching functionality.

Redis is replaced by an in-memory fake so these run without a server.
"""

import fnmatch

import pytest
import redis.asyncio as redis
from sqlalchemy import select

from app.config import settings
from app.utils import cache as cache_module
from app.utils.cache import (
    STALE_PATTERNS_KEY,
    cache_key,
    cached,
    flush_stale,
    invalidate_cache,
    mark_stale,
)


class FakeRedis:
    def __init__(self):
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatch.fnmatch(key, match):
                yield key

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)


class BrokenRedis:
    async def get(self, key):
        raise redis.ConnectionError("connection refused")

    async def scan_iter(self, match="*"):
        raise redis.ConnectionError("connection refused")
        yield


@pytest.fixture
def fake_redis(monkeypatch):
    client = FakeRedis()

    async def _get_redis():
        return client

    monkeypatch.setattr(settings, "cache_enabled", True)
    monkeypatch.setattr(cache_module, "get_redis", _get_redis)
    return client


@pytest.fixture
def broken_redis(monkeypatch):
    async def _get_redis():
        return BrokenRedis()

    monkeypatch.setattr(settings, "cache_enabled", True)
    monkeypatch.setattr(cache_module, "get_redis", _get_redis)


@pytest.mark.cache
class TestCacheKey:

    def test_same_args_same_key(self):
        assert cache_key(limit=12, offset=0) == cache_key(offset=0, limit=12)

    def test_different_args_different_key(self):
        assert cache_key(limit=12, offset=0) != cache_key(limit=24, offset=0)

    def test_no_args(self):
        assert cache_key() == "default"


@pytest.mark.cache
@pytest.mark.asyncio
class TestCachedDecorator:

    async def test_hit_skips_function(self, fake_redis):
        calls = 0

        @cached(ttl=10, prefix="test")
        async def listing(limit: int = 12):
            nonlocal calls
            calls += 1
            return {"limit": limit}

        assert await listing(limit=12) == {"limit": 12}
        assert await listing(limit=12) == {"limit": 12}
        assert calls == 1

        await listing(limit=24)
        assert calls == 2
        assert all(key.startswith("test:listing:") for key in fake_redis.store)
        assert set(fake_redis.ttls.values()) == {10}

    async def test_pydantic_results_are_stored_as_json(self, fake_redis):
        from pydantic import BaseModel

        class Item(BaseModel):
            id: str
            price: float

        @cached(ttl=10, prefix="test_model")
        async def get_item():
            return Item(id="abc", price=120000)

        first = await get_item()
        second = await get_item()

        assert isinstance(first, Item)
        assert second == {"id": "abc", "price": 120000.0}

    async def test_non_simple_kwargs_do_not_change_key(self, fake_redis):
        @cached(ttl=10, prefix="test_db")
        async def listing(db=None, limit: int = 12):
            return {"limit": limit}

        await listing(db=object(), limit=12)
        await listing(db=object(), limit=12)

        assert len(fake_redis.store) == 1

    async def test_disabled_cache_calls_through(self, fake_redis, monkeypatch):
        monkeypatch.setattr(settings, "cache_enabled", False)
        calls = 0

        @cached(ttl=10, prefix="test_off")
        async def listing():
            nonlocal calls
            calls += 1
            return []

        await listing()
        await listing()

        assert calls == 2
        assert fake_redis.store == {}

    async def test_redis_failure_falls_back_to_function(self, broken_redis):
        @cached(ttl=10, prefix="test_broken")
        async def listing():
            return {"ok": True}

        assert await listing() == {"ok": True}


@pytest.mark.cache
@pytest.mark.asyncio
class TestInvalidation:

    async def test_only_matching_keys_are_deleted(self, fake_redis):
        fake_redis.store.update({
            "properties:list:a": "1",
            "properties:get:b": "2",
            "lands:list:c": "3",
        })

        await invalidate_cache("properties:*")

        assert list(fake_redis.store) == ["lands:list:c"]

    async def test_redis_failure_is_swallowed(self, broken_redis):
        await invalidate_cache("properties:*")

    async def test_marked_patterns_wait_for_commit(self, fake_redis, db_session):
        fake_redis.store["properties:list:a"] = "1"

        mark_stale(db_session, "properties:*")
        assert "properties:list:a" in fake_redis.store

        await db_session.commit()
        await flush_stale(db_session)

        assert fake_redis.store == {}
        assert STALE_PATTERNS_KEY not in db_session.info

    async def test_rollback_drops_marked_patterns(self, fake_redis, db_session):
        fake_redis.store["lands:list:a"] = "1"
        await db_session.execute(select(1))

        mark_stale(db_session, "lands:*")
        await db_session.rollback()
        await flush_stale(db_session)

        assert fake_redis.store == {"lands:list:a": "1"}


@pytest.mark.cache
@pytest.mark.api
@pytest.mark.asyncio
class TestEndpointCaching:

    async def test_public_list_is_cached_and_invalidated_on_create(
        self, client, fake_redis, agent_headers, property_form
    ):
        first = await client.get("/api/properties/")
        assert first.status_code == 200
        assert first.json()["total"] == 0
        assert any(key.startswith("properties:") for key in fake_redis.store)

        created = await client.post(
            "/api/wizard/property/submit",
            json={"form_data": property_form},
            headers=agent_headers,
        )
        assert created.status_code == 201
        assert not any(key.startswith("properties:") for key in fake_redis.store)

        second = await client.get("/api/properties/")
        assert second.json()["total"] == 1
