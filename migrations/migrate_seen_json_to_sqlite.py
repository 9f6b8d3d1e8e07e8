"""
기존 seen-keys JSON을 SQLite KV 저장소로 마이그레이션하는 스크립트.

브라우저 localStorage에서 내보낸 `disaster_seen_keys_v1` 값
(예: {"earthquakes": [...], "eew": "id_3", ...})을 그대로 읽어
SeenStore 형식으로 정리한 뒤 SQLiteKVStore에 기록합니다.
"""

import asyncio
import json
import sys
from pathlib import Path
from alertfeed.adapters.storage.sqlite_kv import SQLiteKVStore
from alertfeed.dedup.seen_store import DEFAULT_STORAGE_KEY, SeenState, SeenStore
from alertfeed.observability.logging_setup import get_logger

log = get_logger("alertfeed.migrate")


async def migrate(json_path: str, sqlite_path: str, max_keys: int = 10) -> bool:
    """
    JSON 파일을 SQLite KV 저장소로 마이그레이션합니다.
    
    Args:
        json_path: seen-keys JSON 파일 경로
        sqlite_path: SQLite 데이터베이스 파일 경로
        max_keys: 피드별 최대 보관 키 수
        
    Returns:
        성공 여부
    """
    json_file = Path(json_path)
    if not json_file.exists():
        log.error(f"JSON 파일이 존재하지 않습니다: {json_path}")
        return False
    
    try:
        raw = json.loads(json_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.error(f"JSON 파일 읽기 실패: {e}")
        return False
    
    kv = SQLiteKVStore(sqlite_path)
    await kv.init()
    
    state = SeenState.from_raw(raw)
    store = SeenStore(kv, max_keys=max_keys, storage_key=DEFAULT_STORAGE_KEY, state=state)
    for feed_type, keys in state.keys.items():
        state.keys[feed_type] = keys[: store.capacity(feed_type)]
        log.info(f"  - {feed_type.value}: {len(state.keys[feed_type])}개")
    
    ok = await store.persist()
    if ok:
        log.info(f"마이그레이션 완료: {sqlite_path}")
    return ok


async def main():
    """메인 함수"""
    if len(sys.argv) < 3:
        print("사용법: python migrate_seen_json_to_sqlite.py <json_file> <sqlite_file> [max_keys]")
        print("예시: python migrate_seen_json_to_sqlite.py seen.json /data/alertfeed.db 10")
        sys.exit(1)
    
    json_path = sys.argv[1]
    sqlite_path = sys.argv[2]
    max_keys = int(sys.argv[3]) if len(sys.argv) > 3 else 10
    
    success = await migrate(json_path, sqlite_path, max_keys)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    asyncio.run(main())
