"""
Feed fetch port interface.

This module defines the protocol for raw feed transport.
"""

from typing import Any, Protocol

class FetchPort(Protocol):
    """피드 수집 포트 인터페이스"""
    
    async def get_json(self, url: str, *, timeout_sec: float) -> Any:
        """
        URL에서 JSON 문서를 가져옵니다.
        
        Args:
            url: 요청 URL
            timeout_sec: 전체 요청 타임아웃 (초)
            
        Returns:
            디코딩된 JSON 값
            
        Raises:
            TransportError: 네트워크 오류, 타임아웃, 비정상 상태 코드
            MalformedPayloadError: JSON 디코딩 실패
        """
        ...
