"""
Bounded seen-keys store for alertfeed.

This module keeps, per feed type, the most recent dedup keys that
have already been notified, persisted write-through to a KV store.
"""

import json
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field

from alertfeed.core.models import FeedType
from alertfeed.observability import metrics
from alertfeed.observability.logging_setup import get_logger
from alertfeed.ports.kvstore import KVStorePort

log = get_logger("alertfeed.dedup")

DEFAULT_STORAGE_KEY = "disaster_seen_keys_v1"
DEFAULT_MAX_KEYS = 10

# 저장 시 최신 키 하나만 문자열(또는 null)로 기록하는 피드. 메모리에는 다른 피드와 같은 이력을 유지
SINGLETON_FEEDS: FrozenSet[FeedType] = frozenset({FeedType.EEW})


class SeenState(BaseModel):
    """피드별 기알림 키 목록 (최신이 앞)"""
    keys: Dict[FeedType, List[str]] = Field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> "SeenState":
        """
        저장된 JSON 객체를 상태로 변환합니다.

        피드별 값은 문자열 배열, 단일 문자열, null을 모두 허용합니다.
        """
        state = cls()
        if not isinstance(raw, dict):
            return state
        for feed_type in FeedType:
            value = raw.get(feed_type.value)
            if isinstance(value, list):
                state.keys[feed_type] = [str(v) for v in value if v]
            elif isinstance(value, str) and value:
                state.keys[feed_type] = [value]
        return state

    def to_raw(self, singletons: FrozenSet[FeedType] = SINGLETON_FEEDS) -> Dict[str, Any]:
        raw: Dict[str, Any] = {}
        for feed_type in FeedType:
            keys = self.keys.get(feed_type, [])
            if feed_type in singletons:
                raw[feed_type.value] = keys[0] if keys else None
            else:
                raw[feed_type.value] = list(keys)
        return raw


class SeenStore:
    """용량 제한이 있는 기알림 키 저장소"""
    
    def __init__(self,
                 kv: KVStorePort,
                 *,
                 max_keys: int = DEFAULT_MAX_KEYS,
                 storage_key: str = DEFAULT_STORAGE_KEY,
                 singleton_feeds: FrozenSet[FeedType] = SINGLETON_FEEDS,
                 state: Optional[SeenState] = None):
        """
        초기화합니다.
        
        Args:
            kv: 키-값 저장소 포트
            max_keys: 피드별 최대 보관 키 수
            storage_key: KV 저장 키
            singleton_feeds: 저장 시 최신 키 하나만 문자열로 기록하는 피드
            state: 초기 상태 (없으면 빈 상태)
        """
        if max_keys < 1:
            raise ValueError("max_keys must be >= 1")
        self.kv = kv
        self.max_keys = max_keys
        self.storage_key = storage_key
        self.singleton_feeds = singleton_feeds
        self.state = state or SeenState()
    
    def capacity(self, feed_type: FeedType) -> int:
        """피드별 메모리 보관 용량. 단일 문자열로 저장되는 피드도 같은 이력을 유지합니다."""
        return self.max_keys
    
    def keys(self, feed_type: FeedType) -> List[str]:
        return list(self.state.keys.get(feed_type, []))
    
    def has(self, feed_type: FeedType, key: str) -> bool:
        """키가 이미 알림된 적이 있는지 확인합니다. 빈 키는 항상 False."""
        if not key:
            return False
        return key in self.state.keys.get(feed_type, [])
    
    async def record(self, feed_type: FeedType, key: str) -> bool:
        """
        키를 맨 앞에 추가하고 용량을 초과한 가장 오래된 키를 버립니다.
        
        빈 키나 이미 있는 키는 무시합니다.
        
        Args:
            feed_type: 피드 종류
            key: dedup 키
            
        Returns:
            추가 여부
        """
        if not key or self.has(feed_type, key):
            return False
        current = self.state.keys.get(feed_type, [])
        self.state.keys[feed_type] = ([key] + current)[: self.capacity(feed_type)]
        metrics.seen_store_size.labels(feed=feed_type.value).set(len(self.state.keys[feed_type]))
        await self.persist()
        return True
    
    async def load(self) -> SeenState:
        """
        저장소에서 상태를 읽습니다.
        
        읽기 실패나 손상된 JSON은 빈 상태로 대체합니다.
        """
        try:
            raw = await self.kv.get(self.storage_key)
        except Exception as e:
            log.error("기알림 상태 로드 실패, 빈 상태로 시작", error=str(e))
            self.state = SeenState()
            return self.state
        
        if raw is None:
            self.state = SeenState()
        else:
            try:
                self.state = SeenState.from_raw(json.loads(raw))
            except ValueError as e:
                log.warning("기알림 상태 JSON 손상, 빈 상태로 시작", error=str(e))
                self.state = SeenState()
        
        for feed_type in FeedType:
            keys = self.state.keys.get(feed_type, [])[: self.capacity(feed_type)]
            if keys:
                self.state.keys[feed_type] = keys
            metrics.seen_store_size.labels(feed=feed_type.value).set(len(keys))
        log.info("기알림 상태 로드 완료", counts={f.value: len(k) for f, k in self.state.keys.items()})
        return self.state
    
    async def persist(self) -> bool:
        """
        현재 상태를 저장소에 기록합니다.
        
        Returns:
            저장 성공 여부 (실패 시 메모리 상태는 유지)
        """
        payload = json.dumps(self.state.to_raw(self.singleton_feeds), ensure_ascii=False)
        try:
            await self.kv.set(self.storage_key, payload)
            return True
        except Exception as e:
            log.error("기알림 상태 저장 실패, 메모리 상태로 계속", error=str(e))
            return False
