"""
SQLite-based key-value store for alertfeed.

This module implements KVStorePort on SQLite so that the
seen-keys snapshot survives process restarts.
"""

import time
from typing import Optional

import aiosqlite

from alertfeed.observability.logging_setup import get_logger

log = get_logger("alertfeed.kv")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    k TEXT PRIMARY KEY,
    v TEXT NOT NULL,
    updated INTEGER NOT NULL
);
"""

class SQLiteKVStore:
    """SQLite 기반 키-값 저장소"""
    
    def __init__(self, path: str):
        """
        초기화합니다.
        
        Args:
            path: SQLite 데이터베이스 파일 경로
        """
        self.path = path
        log.info(f"SQLiteKVStore 초기화: {path}")
    
    async def init(self) -> None:
        """데이터베이스를 초기화합니다."""
        async with aiosqlite.connect(self.path) as db:
            await db.executescript(SCHEMA)
            await db.commit()
        log.info("SQLiteKVStore 스키마 초기화 완료")
    
    async def get(self, key: str) -> Optional[str]:
        """
        키로 값을 조회합니다.
        
        Args:
            key: 조회할 키
            
        Returns:
            값 또는 None
        """
        async with aiosqlite.connect(self.path) as db:
            cursor = await db.execute("SELECT v FROM kv WHERE k = ?", (key,))
            row = await cursor.fetchone()
            return row[0] if row else None
    
    async def set(self, key: str, value: str) -> None:
        """
        키-값을 저장합니다 (있으면 덮어씀).
        
        Args:
            key: 저장할 키
            value: 저장할 값
        """
        async with aiosqlite.connect(self.path) as db:
            await db.execute(
                "INSERT INTO kv (k, v, updated) VALUES (?, ?, ?) "
                "ON CONFLICT(k) DO UPDATE SET v = excluded.v, updated = excluded.updated",
                (key, value, int(time.time()))
            )
            await db.commit()
