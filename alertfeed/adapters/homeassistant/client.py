"""
Home Assistant API client for alertfeed.

This module provides a client for calling Home Assistant services,
used to deliver alert notifications.
"""

import asyncio

import aiohttp
from typing import Any, Dict, Optional
from alertfeed.observability.logging_setup import get_logger
from alertfeed.common.retry import retry_with_backoff

log = get_logger("alertfeed.ha")

def _is_transient(exc: BaseException) -> bool:
    """5xx와 연결 오류만 재시도 대상. 4xx는 재시도해도 결과가 같음"""
    if isinstance(exc, aiohttp.ClientResponseError):
        return exc.status >= 500
    return True

class HAClient:
    """Home Assistant API 클라이언트"""
    
    def __init__(self, 
                 base_url: str, 
                 token: str, 
                 timeout: int = 30,
                 max_retries: int = 3):
        """
        초기화합니다.
        
        Args:
            base_url: Home Assistant API 기본 URL
            token: Home Assistant 장기 토큰
            timeout: 요청 타임아웃 (초)
            max_retries: 요청 재시도 횟수
        """
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.max_retries = max_retries
        self.session: Optional[aiohttp.ClientSession] = None
        
        log.info("Home Assistant 클라이언트 초기화됨")
    
    async def __aenter__(self):
        """비동기 컨텍스트 매니저 진입"""
        self.session = aiohttp.ClientSession(
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json"
            },
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """비동기 컨텍스트 매니저 종료"""
        if self.session:
            await self.session.close()
            self.session = None
    
    async def _make_request(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        API 요청을 수행합니다.
        
        Args:
            method: HTTP 메서드
            endpoint: API 엔드포인트
            **kwargs: 추가 요청 매개변수
            
        Returns:
            응답 데이터
        """
        if not self.session:
            raise RuntimeError("세션이 초기화되지 않았습니다. async with를 사용하세요.")
        
        url = f"{self.base_url}{endpoint}"
        
        async def _request():
            async with self.session.request(method, url, **kwargs) as response:
                response.raise_for_status()
                return await response.json(content_type=None)
        
        return await retry_with_backoff(
            _request,
            max_retries=self.max_retries,
            base_delay=0.5,
            max_delay=5.0,
            retry_on=(aiohttp.ClientError, asyncio.TimeoutError),
            retry_if=_is_transient,
        )
    
    async def call_service(self, domain: str, service: str, payload: Dict[str, Any]) -> Any:
        """
        Home Assistant 서비스를 호출합니다.
        
        Args:
            domain: 서비스 도메인 (예: "notify", "persistent_notification")
            service: 서비스 이름 (예: "mobile_app_phone", "create")
            payload: 서비스 매개변수
            
        Returns:
            응답 데이터
        """
        result = await self._make_request(
            "POST",
            f"/services/{domain}/{service}",
            json=payload
        )
        log.info(f"서비스 호출 성공 domain:{domain} service:{service}")
        return result
