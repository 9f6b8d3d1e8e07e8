"""
Notification sink port interface.

This module defines the protocol for user-facing notifications.
"""

from typing import Protocol

class NotificationSink(Protocol):
    """알림 발송 포트 인터페이스"""
    
    async def is_permitted(self) -> bool:
        """알림 권한(동의) 상태를 반환합니다."""
        ...
    
    async def notify(self, title: str, body: str) -> None:
        """
        알림을 발송합니다.
        
        Args:
            title: 알림 제목
            body: 알림 본문
        """
        ...
