"""
Feed source with snapshot fallback for alertfeed.

This module wraps the raw transport so that every feed fetch
resolves to one of live / fallback / empty and never raises.
"""

import asyncio
import json
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from alertfeed.core.errors import MalformedPayloadError, TransportError
from alertfeed.core.models import FEED_PRIORITY, FeedType, FetchResult
from alertfeed.observability import metrics
from alertfeed.observability.logging_setup import get_logger
from alertfeed.ports.fetch import FetchPort

log = get_logger("alertfeed.feeds")

# 피드별 최상위 페이로드 형태
EXPECTED_SHAPES = {
    FeedType.EARTHQUAKES: list,
    FeedType.EEW: dict,
    FeedType.VOLCANO: list,
    FeedType.WEATHER_WARNINGS: list,
    FeedType.LANDSLIDE: list,
}

class FeedSource:
    """라이브 엔드포인트 + 폴백 스냅샷 피드 소스"""
    
    def __init__(self, fetcher: FetchPort, *, timeout_sec: float = 10.0, snapshot_location: Optional[str] = None):
        """
        초기화합니다.
        
        Args:
            fetcher: 피드 수집 포트
            timeout_sec: 라이브 요청 타임아웃 (초)
            snapshot_location: 폴백 스냅샷 위치 (파일 경로 또는 http(s) URL)
        """
        self.fetcher = fetcher
        self.timeout_sec = timeout_sec
        self.snapshot_location = snapshot_location
    
    async def load_snapshot(self) -> Dict[str, Any]:
        """
        폴백 스냅샷을 읽습니다.
        
        실패하거나 객체가 아니면 빈 dict를 반환합니다.
        """
        location = self.snapshot_location
        if not location:
            return {}
        try:
            if location.startswith(("http://", "https://")):
                data = await self.fetcher.get_json(location, timeout_sec=self.timeout_sec)
            else:
                # 파일 읽기는 워커 스레드에서
                text = await asyncio.to_thread(Path(location).read_text, encoding="utf-8")
                data = json.loads(text)
        except (TransportError, MalformedPayloadError, OSError, ValueError) as e:
            log.warning("폴백 스냅샷 로드 실패", location=location, error=str(e))
            return {}
        if not isinstance(data, dict):
            log.warning("폴백 스냅샷 형식 오류", location=location, type=type(data).__name__)
            return {}
        return data
    
    def _fallback(self, feed_type: FeedType, snapshot: Mapping[str, Any], reason: str) -> FetchResult:
        payload = snapshot.get(feed_type.value) if snapshot else None
        if payload is not None:
            return FetchResult.fallback(payload, reason=reason)
        return FetchResult.empty(reason=reason)
    
    async def fetch(self, feed_type: FeedType, live_endpoint: Optional[str], fallback_snapshot: Mapping[str, Any]) -> FetchResult:
        """
        피드를 수집합니다.
        
        Args:
            feed_type: 피드 종류
            live_endpoint: 라이브 URL (None이면 폴백 전용 피드)
            fallback_snapshot: 폴백 스냅샷
            
        Returns:
            FetchResult (live / fallback / empty)
        """
        if not live_endpoint:
            result = self._fallback(feed_type, fallback_snapshot, "no live endpoint")
        else:
            try:
                payload = await self.fetcher.get_json(live_endpoint, timeout_sec=self.timeout_sec)
                expected = EXPECTED_SHAPES[feed_type]
                if not isinstance(payload, expected):
                    raise MalformedPayloadError(
                        f"expected {expected.__name__}, got {type(payload).__name__}"
                    )
                result = FetchResult.live(payload)
            except TransportError as e:
                log.warning("라이브 피드 접근 실패, 폴백 사용", feed=feed_type.value, error=str(e))
                result = self._fallback(feed_type, fallback_snapshot, f"transport: {e}")
            except MalformedPayloadError as e:
                log.warning("라이브 피드 형식 오류, 폴백 사용", feed=feed_type.value, error=str(e))
                result = self._fallback(feed_type, fallback_snapshot, f"malformed: {e}")
            except Exception as e:
                log.error("라이브 피드 수집 중 예기치 않은 오류", feed=feed_type.value, error=repr(e))
                result = self._fallback(feed_type, fallback_snapshot, f"unexpected: {e!r}")
        
        metrics.feed_fetches.labels(feed=feed_type.value, kind=result.kind).inc()
        if result.is_empty and live_endpoint:
            log.info("피드 데이터 없음", feed=feed_type.value, reason=result.reason)
        return result
    
    async def fetch_all(self, endpoints: Mapping[FeedType, Optional[str]], snapshot: Mapping[str, Any]) -> "OrderedDict[FeedType, FetchResult]":
        """모든 피드를 우선순위 순서대로 수집합니다."""
        results: "OrderedDict[FeedType, FetchResult]" = OrderedDict()
        for feed_type in FEED_PRIORITY:
            results[feed_type] = await self.fetch(feed_type, endpoints.get(feed_type), snapshot)
        return results
