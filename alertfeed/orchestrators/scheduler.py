"""
Poll scheduler for alertfeed.

This module drives periodic, non-overlapping poll cycles:
snapshot load -> fetch per feed -> normalize -> dispatch.
"""

import asyncio
import time
from typing import Dict, List, Mapping, Optional, Set

from alertfeed.core.normalize import normalize as normalize_payload
from alertfeed.core.errors import MalformedPayloadError
from alertfeed.core.models import FEED_PRIORITY, AlertRecord, FeedType, FetchResult
from alertfeed.dispatch.dispatcher import NotificationDispatcher
from alertfeed.feeds.source import FeedSource
from alertfeed.observability import metrics
from alertfeed.observability.logging_setup import get_logger, with_context

log = get_logger("alertfeed.scheduler")

class PollScheduler:
    """주기 폴링 스케줄러 (사이클 중첩 없음)"""
    
    def __init__(self,
                 source: FeedSource,
                 dispatcher: NotificationDispatcher,
                 *,
                 endpoints: Mapping[FeedType, Optional[str]],
                 interval_sec: float = 30.0):
        """
        초기화합니다.
        
        Args:
            source: 피드 소스
            dispatcher: 알림 디스패처
            endpoints: 피드별 라이브 URL (None이면 스냅샷 전용)
            interval_sec: 폴링 주기 (초)
        """
        self.source = source
        self.dispatcher = dispatcher
        self.endpoints = dict(endpoints)
        self.interval_sec = interval_sec
        
        # 렌더링용 최신 레코드
        self.latest: Dict[FeedType, List[AlertRecord]] = {}
        self.fetch_kinds: Dict[FeedType, str] = {}
        self.last_cycle_at: Optional[float] = None
        self.cycle_count = 0
        
        self._in_flight = False
        self._timer: Optional[asyncio.Task] = None
        self._cycles: Set[asyncio.Task] = set()
    
    @property
    def enabled(self) -> bool:
        return self._timer is not None and not self._timer.done()
    
    @property
    def in_flight(self) -> bool:
        return self._in_flight
    
    @property
    def state(self) -> str:
        if self._in_flight:
            return "fetching"
        return "idle" if self.enabled else "disabled"
    
    async def start(self, *, run_initial: bool = True, auto_update: bool = True) -> None:
        """초기 사이클을 실행하고 자동 갱신 타이머를 켭니다."""
        if run_initial:
            await self.trigger()
        if auto_update:
            self.enable()
    
    async def stop(self) -> None:
        """타이머를 끄고 진행 중인 사이클이 끝나기를 기다립니다."""
        self.disable()
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)
    
    def enable(self) -> None:
        if self.enabled:
            return
        self._timer = asyncio.create_task(self._timer_loop())
        log.info("자동 갱신 활성화", interval_sec=self.interval_sec)
    
    def disable(self) -> None:
        """타이머만 취소합니다. 진행 중인 사이클은 취소하지 않습니다."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            log.info("자동 갱신 비활성화")
    
    async def _timer_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_sec)
            self.tick()
    
    def _begin(self) -> bool:
        if self._in_flight:
            metrics.cycles_skipped.inc()
            log.debug("이전 사이클 진행 중, 틱 건너뜀")
            return False
        self._in_flight = True
        return True
    
    def _spawn(self) -> asyncio.Task:
        task = asyncio.create_task(self._run_guarded())
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)
        return task
    
    def tick(self) -> Optional[asyncio.Task]:
        """
        타이머 틱. 사이클이 진행 중이면 건너뜁니다.
        
        Returns:
            시작된 사이클 태스크 또는 None
        """
        if not self._begin():
            return None
        return self._spawn()
    
    async def trigger(self) -> bool:
        """
        수동 갱신. 같은 중첩 방지 규칙을 따릅니다.
        
        사이클은 별도 태스크로 실행되어 stop()이 완료를 기다리며,
        호출자가 취소되어도 사이클 자체는 끝까지 진행됩니다.
        
        Returns:
            사이클 실행 여부
        """
        if not self._begin():
            return False
        await asyncio.shield(self._spawn())
        return True
    
    async def _run_guarded(self) -> None:
        try:
            with metrics.cycle_seconds.time():
                await self.run_cycle()
        finally:
            self._in_flight = False
            self.last_cycle_at = time.time()
            metrics.last_cycle_timestamp.set(self.last_cycle_at)
    
    async def run_cycle(self) -> None:
        """
        한 번의 폴링 사이클을 실행합니다.
        
        피드는 우선순위 순서(EEW -> 지진 -> 나머지)로 처리하며,
        한 피드의 실패가 다른 피드 처리를 막지 않습니다.
        """
        self.cycle_count += 1
        with with_context(cycle=self.cycle_count):
            snapshot = await self.source.load_snapshot()
            for feed_type in FEED_PRIORITY:
                try:
                    result = await self.source.fetch(feed_type, self.endpoints.get(feed_type), snapshot)
                    self.fetch_kinds[feed_type] = result.kind
                    records = self._normalize(feed_type, result)
                    self.latest[feed_type] = records
                    notified = await self.dispatcher.dispatch(records)
                    log.debug("피드 처리 완료", feed=feed_type.value, source=result.kind,
                              records=len(records), notified=len(notified))
                except Exception as e:
                    log.error("피드 처리 오류", feed=feed_type.value, error=repr(e))
    
    def _normalize(self, feed_type: FeedType, result: FetchResult) -> List[AlertRecord]:
        if result.is_empty:
            return []
        try:
            records = normalize_payload(feed_type, result.payload)
        except MalformedPayloadError as e:
            metrics.malformed_payloads.labels(feed=feed_type.value).inc()
            log.warning("페이로드 형식 오류, 이번 사이클은 빈 피드로 처리", feed=feed_type.value, source=result.kind, error=str(e))
            return []
        metrics.records_normalized.labels(feed=feed_type.value).inc(len(records))
        return records
