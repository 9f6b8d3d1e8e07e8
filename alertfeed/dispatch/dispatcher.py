"""
Notification dispatcher for alertfeed.

This module decides which normalized records are new, notifies
once per new dedup key and records the key afterwards.
"""

from typing import Iterable, List

from alertfeed.core.message import notification_for
from alertfeed.core.models import AlertRecord
from alertfeed.dedup.seen_store import SeenStore
from alertfeed.observability import metrics
from alertfeed.observability.logging_setup import get_logger
from alertfeed.ports.notify import NotificationSink

log = get_logger("alertfeed.dispatch")

class NotificationDispatcher:
    """중복 제거 후 알림을 발송하는 디스패처"""
    
    def __init__(self, seen: SeenStore, sink: NotificationSink):
        """
        초기화합니다.
        
        Args:
            seen: 기알림 키 저장소
            sink: 알림 발송 포트
        """
        self.seen = seen
        self.sink = sink
    
    async def dispatch(self, records: Iterable[AlertRecord]) -> List[AlertRecord]:
        """
        새 레코드마다 알림을 한 번씩 발송합니다.
        
        순서는 알림 -> 기록입니다. 그 사이에 중단되면 다음 사이클에서
        다시 알림이 나갈 수 있지만 경보를 잃지는 않습니다.
        
        Args:
            records: 정규화된 레코드 목록
            
        Returns:
            알림 대상으로 처리된 레코드 목록
        """
        notified: List[AlertRecord] = []
        for record in records:
            feed = record.feed_type.value
            if not record.dedup_key:
                # 빈 키는 중복 판단 불가
                log.debug("dedup 키 없음, 건너뜀", feed=feed, title=record.title)
                continue
            if not record.actionable:
                log.debug("알림 대상 아님", feed=feed, status=record.status)
                continue
            if self.seen.has(record.feed_type, record.dedup_key):
                metrics.alerts_duplicate.labels(feed=feed).inc()
                continue
            
            title, body = notification_for(record)
            try:
                if await self.sink.is_permitted():
                    await self.sink.notify(title, body)
                    metrics.notifications_sent.labels(feed=feed).inc()
                else:
                    log.debug("알림 권한 없음, 발송 생략", feed=feed)
            except Exception as e:
                log.error("알림 발송 실패, 다음 사이클에서 재시도", feed=feed, key=record.dedup_key, error=str(e))
                continue
            
            await self.seen.record(record.feed_type, record.dedup_key)
            notified.append(record)
            log.info("새 경보 알림", feed=feed, key=record.dedup_key, title=title)
        return notified
