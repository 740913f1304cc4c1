import pytest

from app.cache import RedisCache, _NoopCache, build_cache_from_env, point_key
from app.settings import Settings, load_settings


def test_settings_defaults(monkeypatch):
    for name in ("PROJECTION_LOAD_TIMEOUT_S", "SEARCH_DEBOUNCE_S", "DEFAULT_PREFERENCE", "DEFAULT_TARGET_WKID",
                 "CACHE_TTL_SECONDS"):
        monkeypatch.delenv(f"COORDS_{name}", raising=False)
    assert load_settings() == Settings()


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("COORDS_PROJECTION_LOAD_TIMEOUT_S", "2.5")
    monkeypatch.setenv("COORDS_DEFAULT_PREFERENCE", " Zone ")
    monkeypatch.setenv("COORDS_DEFAULT_TARGET_WKID", "3857")
    s = load_settings()
    assert s.projection_load_timeout_s == 2.5
    assert s.default_preference == "zone"
    assert s.default_target_wkid == 3857


def test_invalid_settings_are_ignored(monkeypatch):
    monkeypatch.setenv("COORDS_SEARCH_DEBOUNCE_S", "soon")
    monkeypatch.setenv("COORDS_DEFAULT_PREFERENCE", "utm")
    s = load_settings()
    assert s.search_debounce_s == 0.3
    assert s.default_preference == "auto"


class _FakeRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex


@pytest.mark.asyncio
async def test_point_cache_roundtrip():
    client = _FakeRedis()
    cache = RedisCache(client, prefix="coords:", default_ttl=60)
    assert await cache.get_point(3006, 4326, 674032, 6580822) is None
    assert await cache.set_point(3006, 4326, 674032, 6580822, {"x": 18.1, "y": 59.3, "spatial_reference": 4326})
    key = "coords:" + point_key(3006, 4326, 674032, 6580822)
    assert key == "coords:point:3006:4326:674032.000:6580822.000"
    assert client.ttls[key] == 60
    assert (await cache.get_point(3006, 4326, 674032.0001, 6580822))["x"] == 18.1


@pytest.mark.asyncio
async def test_corrupt_entries_are_misses():
    client = _FakeRedis()
    cache = RedisCache(client)
    client.store["coords:" + point_key(3006, 4326, 1, 2)] = b"{not json"
    assert await cache.get_point(3006, 4326, 1, 2) is None
    await cache.set_json(point_key(3006, 4326, 3, 4), {"x": 1})
    assert await cache.get_point(3006, 4326, 3, 4) is None


@pytest.mark.asyncio
async def test_cache_disabled_or_unconfigured(monkeypatch):
    monkeypatch.setenv("CACHE_DISABLE", "1")
    assert isinstance(await build_cache_from_env(), _NoopCache)
    monkeypatch.delenv("CACHE_DISABLE")
    monkeypatch.delenv("REDIS_URL", raising=False)
    cache = await build_cache_from_env()
    assert isinstance(cache, _NoopCache)
    assert await cache.get_point(3006, 4326, 1, 2) is None
