"""Notification sink that only writes to the log (dry runs)."""

from alertfeed.observability.logging_setup import get_logger

log = get_logger("alertfeed.notify.log")

class LogNotificationSink:
    """로그 출력 전용 알림 싱크"""
    
    def __init__(self, enabled: bool = True):
        self.enabled = enabled
    
    async def is_permitted(self) -> bool:
        return self.enabled
    
    async def notify(self, title: str, body: str) -> None:
        log.info("[DRY_RUN] 알림", title=title, body=body)
