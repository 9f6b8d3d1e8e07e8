"""
Home Assistant notification sink for alertfeed.

Delivers notifications through a Home Assistant service call
(`notify.<target>` or `persistent_notification.create`).
"""

from typing import Tuple
from alertfeed.adapters.homeassistant.client import HAClient
from alertfeed.observability.logging_setup import get_logger

log = get_logger("alertfeed.notify.ha")

def split_service(service: str) -> Tuple[str, str]:
    """'domain.service' 문자열을 분리합니다. 도메인이 없으면 notify로 간주합니다."""
    if "." in service:
        domain, name = service.split(".", 1)
        return domain, name
    return "notify", service

class HANotificationSink:
    """Home Assistant 서비스 호출 기반 알림 싱크"""
    
    def __init__(self, ha_client: HAClient, service: str = "persistent_notification.create", enabled: bool = True):
        """
        초기화합니다.
        
        Args:
            ha_client: Home Assistant 클라이언트
            service: 호출할 서비스 ("domain.service")
            enabled: 알림 허용 여부
        """
        self.ha = ha_client
        self.domain, self.service = split_service(service)
        self.enabled = enabled
    
    async def is_permitted(self) -> bool:
        return self.enabled and bool(self.ha.token)
    
    async def notify(self, title: str, body: str) -> None:
        """Home Assistant 서비스로 알림을 발송합니다."""
        async with self.ha as client:
            await client.call_service(self.domain, self.service, {"title": title, "message": body})
        log.info("HA 알림 발송됨", title=title, service=f"{self.domain}.{self.service}")
