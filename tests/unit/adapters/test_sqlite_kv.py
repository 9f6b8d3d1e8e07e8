"""
KV 저장소 어댑터 테스트

SQLite / 메모리 키-값 저장소의 기본 동작을 검증합니다.
"""

import inspect

import pytest

from alertfeed.adapters.storage.memory_kv import MemoryKVStore
from alertfeed.adapters.storage.sqlite_kv import SQLiteKVStore
from alertfeed.ports.kvstore import KVStorePort


def public_methods(cls):
    return {name for name, _ in inspect.getmembers(cls, inspect.isfunction) if not name.startswith("_")}


class TestSQLiteKVStore:
    """SQLite KV 저장소 테스트"""

    @pytest.fixture
    async def kv(self, temp_db_path):
        store = SQLiteKVStore(temp_db_path)
        await store.init()
        return store

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, kv):
        """없는 키 조회"""
        assert await kv.get("nope") is None

    @pytest.mark.asyncio
    async def test_set_overwrites(self, kv):
        """같은 키에 다시 저장하면 덮어씀"""
        await kv.set("k", "v1")
        await kv.set("k", "v2")
        assert await kv.get("k") == "v2"

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, kv):
        """다른 키에 영향 없음"""
        await kv.set("a", "1")
        await kv.set("b", "2")
        assert await kv.get("a") == "1"
        assert await kv.get("b") == "2"

    @pytest.mark.asyncio
    async def test_unicode_values(self, kv):
        """일본어 값 저장"""
        await kv.set("k", '{"earthquakes": ["石川県能登地方"]}')
        assert "石川県" in await kv.get("k")

    @pytest.mark.asyncio
    async def test_init_is_idempotent(self, temp_db_path):
        """init을 여러 번 호출해도 데이터 유지"""
        store = SQLiteKVStore(temp_db_path)
        await store.init()
        await store.set("k", "v")
        await store.init()
        assert await store.get("k") == "v"


class TestMemoryKVStore:
    """메모리 KV 저장소 테스트"""

    @pytest.mark.asyncio
    async def test_roundtrip(self):
        kv = MemoryKVStore()
        await kv.init()
        assert await kv.get("k") is None
        await kv.set("k", "v")
        assert await kv.get("k") == "v"


class TestPortSurface:
    """어댑터가 포트 계약 이상의 연산을 노출하지 않는지 테스트"""

    @pytest.mark.parametrize("adapter", [SQLiteKVStore, MemoryKVStore])
    def test_adapter_matches_port(self, adapter):
        assert public_methods(KVStorePort) == {"get", "set"}
        assert public_methods(adapter) == {"init", "get", "set"}
