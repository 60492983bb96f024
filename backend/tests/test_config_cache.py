"""Tests for the runtime configuration cache."""

import asyncio

import pytest

from db import InMemoryKVStore
from services.config_cache import ConfigCache
from services.runtime_config import KVKey, RuntimeSetting, read_setting

SETTINGS = (
    RuntimeSetting("model", KVKey.LLM_MODEL_NAME, "gpt-4o"),
    RuntimeSetting("provider", KVKey.LLM_PROVIDER, "openai"),
    RuntimeSetting("system_prompt", KVKey.SYSTEM_PROMPT, "default system"),
    RuntimeSetting("reasoning_mode", KVKey.LOG_PROMPT, False, is_flag=True),
)


class CountingStore(InMemoryKVStore):
    """In-memory store that counts reads and can be slowed down."""

    def __init__(self, initial=None, delay: float = 0.0):
        super().__init__(initial)
        self.reads = 0
        self.delay = delay

    async def get(self, key):
        self.reads += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return await super().get(key)


class ReadThenWaitStore(InMemoryKVStore):
    """Store that reads a value immediately but returns it after a delay."""

    def __init__(self, initial=None, delay: float = 0.0):
        super().__init__(initial)
        self.delay = delay

    async def get(self, key):
        value = await super().get(key)
        await asyncio.sleep(self.delay)
        return value


class FailingStore(InMemoryKVStore):
    """Store whose reads always fail."""

    async def get(self, key):
        raise ConnectionError("store unreachable")


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestRuntimeSetting:
    """Tests for value coercion."""

    def test_blank_uses_default(self):
        """Test unset and blank values resolve to the default."""
        setting = SETTINGS[2]
        assert setting.coerce(None) == "default system"
        assert setting.coerce("  ") == "default system"
        assert setting.coerce("custom") == "custom"

    def test_flag_coercion(self):
        """Test flag values accept strings and booleans."""
        flag = SETTINGS[3]
        assert flag.coerce("true") is True
        assert flag.coerce("TRUE") is True
        assert flag.coerce("1") is True
        assert flag.coerce("false") is False
        assert flag.coerce("nope") is False
        assert flag.coerce(True) is True
        assert flag.coerce(None) is False

    @pytest.mark.asyncio
    async def test_read_setting_store_failure(self):
        """Test a failing store yields the default."""
        value = await read_setting(FailingStore(), SETTINGS[0])
        assert value == "gpt-4o"


class TestConfigCache:
    """Tests for ConfigCache."""

    @pytest.mark.asyncio
    async def test_empty_store_gives_defaults(self):
        """Test every field has its default against an empty store."""
        cache = ConfigCache(InMemoryKVStore(), SETTINGS)
        config = await cache.get_all()

        assert config == {
            "model": "gpt-4o",
            "provider": "openai",
            "system_prompt": "default system",
            "reasoning_mode": False,
        }

    @pytest.mark.asyncio
    async def test_stored_values_used(self):
        """Test stored values override defaults per key."""
        store = InMemoryKVStore(
            {KVKey.LLM_MODEL_NAME.value: "claude-x", KVKey.LOG_PROMPT.value: "true"}
        )
        config = await ConfigCache(store, SETTINGS).get_all()

        assert config["model"] == "claude-x"
        assert config["provider"] == "openai"
        assert config["reasoning_mode"] is True

    @pytest.mark.asyncio
    async def test_failing_store_gives_defaults(self):
        """Test store errors never propagate out of get_all."""
        config = await ConfigCache(FailingStore(), SETTINGS).get_all()
        assert config["system_prompt"] == "default system"

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_refresh(self):
        """Test simultaneous stale reads trigger a single refresh."""
        store = CountingStore(delay=0.01)
        cache = ConfigCache(store, SETTINGS)

        results = await asyncio.gather(*(cache.get_all() for _ in range(10)))

        assert store.reads == len(SETTINGS)
        assert all(result == results[0] for result in results)

    @pytest.mark.asyncio
    async def test_fresh_snapshot_not_reread(self):
        """Test reads within the TTL hit the cache."""
        store = CountingStore()
        clock = FakeClock()
        cache = ConfigCache(store, SETTINGS, ttl_seconds=300, clock=clock)

        await cache.get_all()
        clock.now += 299
        await cache.get_all()

        assert store.reads == len(SETTINGS)

    @pytest.mark.asyncio
    async def test_expired_snapshot_reread(self):
        """Test a read after the TTL refreshes."""
        store = CountingStore()
        clock = FakeClock()
        cache = ConfigCache(store, SETTINGS, ttl_seconds=300, clock=clock)

        await cache.get_all()
        await store.set(KVKey.SYSTEM_PROMPT.value, "updated")
        clock.now += 300
        config = await cache.get_all()

        assert store.reads == 2 * len(SETTINGS)
        assert config["system_prompt"] == "updated"

    @pytest.mark.asyncio
    async def test_invalidate_forces_refresh(self):
        """Test a write plus invalidate is visible on the next read."""
        store = InMemoryKVStore()
        cache = ConfigCache(store, SETTINGS, clock=FakeClock())

        assert (await cache.get_all())["system_prompt"] == "default system"

        await store.set(KVKey.SYSTEM_PROMPT.value, "new prompt")
        assert (await cache.get_all())["system_prompt"] == "default system"

        cache.invalidate()
        assert (await cache.get_all())["system_prompt"] == "new prompt"

    @pytest.mark.asyncio
    async def test_invalidate_during_refresh_keeps_stale(self):
        """Test a refresh overlapping an invalidate is not marked fresh."""
        store = CountingStore(delay=0.05)
        cache = ConfigCache(store, SETTINGS, clock=FakeClock())

        pending = asyncio.create_task(cache.get_all())
        await asyncio.sleep(0.01)
        cache.invalidate()
        await pending

        await cache.get_all()
        assert store.reads == 2 * len(SETTINGS)

    @pytest.mark.asyncio
    async def test_invalidate_skips_in_flight_refresh(self):
        """Test a write made while a refresh is pending is seen after invalidate."""
        store = ReadThenWaitStore(delay=0.1)
        cache = ConfigCache(store, SETTINGS, clock=FakeClock())

        pending = asyncio.create_task(cache.get_all())
        await asyncio.sleep(0.01)
        await store.set(KVKey.SYSTEM_PROMPT.value, "new prompt")
        store.delay = 0
        cache.invalidate()

        after = await cache.get_all()
        assert after["system_prompt"] == "new prompt"

        before = await pending
        assert before["system_prompt"] == "default system"
        assert (await cache.get_all())["system_prompt"] == "new prompt"

    @pytest.mark.asyncio
    async def test_returns_copy(self):
        """Test callers cannot mutate the cached snapshot."""
        cache = ConfigCache(InMemoryKVStore(), SETTINGS, clock=FakeClock())

        config = await cache.get_all()
        config["model"] = "mutated"

        assert (await cache.get_all())["model"] == "gpt-4o"
