"""
HTTP feed fetcher for alertfeed.

This module implements FetchPort on top of aiohttp with a bounded
per-request timeout, converting every transport failure into
TransportError / MalformedPayloadError.
"""

import asyncio
import json
from typing import Any, Optional

import aiohttp

from alertfeed.core.errors import MalformedPayloadError, TransportError
from alertfeed.observability.logging_setup import get_logger

log = get_logger("alertfeed.http")

class HttpFeedFetcher:
    """aiohttp 기반 피드 수집 어댑터"""
    
    def __init__(self, user_agent: str = "alertfeed", session: Optional[aiohttp.ClientSession] = None):
        """
        초기화합니다.
        
        Args:
            user_agent: User-Agent 헤더 값
            session: 외부에서 주입한 세션 (없으면 내부 생성)
        """
        self.user_agent = user_agent
        self.session = session
        self._owns_session = session is None
    
    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        self._ensure_session()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        await self.close()
    
    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent, "Cache-Control": "no-store"}
            )
            self._owns_session = True
        return self.session
    
    async def close(self) -> None:
        if self.session and self._owns_session and not self.session.closed:
            await self.session.close()
    
    async def get_json(self, url: str, *, timeout_sec: float) -> Any:
        """
        URL에서 JSON 문서를 가져옵니다.
        
        Args:
            url: 요청 URL
            timeout_sec: 전체 요청 타임아웃 (초)
            
        Returns:
            디코딩된 JSON 값
        """
        session = self._ensure_session()
        try:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout_sec)) as response:
                if response.status >= 400:
                    raise TransportError(f"HTTP {response.status} from {url}", status=response.status)
                text = await response.text()
        except asyncio.TimeoutError as e:
            raise TransportError(f"timeout after {timeout_sec}s: {url}") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"request failed: {url}: {e}") from e
        
        try:
            return json.loads(text)
        except ValueError as e:
            raise MalformedPayloadError(f"invalid JSON from {url}: {e}") from e
