"""
Error taxonomy for alertfeed.

Transport and payload errors are raised by adapters and the normalizer
and are always recovered at the feed source / scheduler boundary.
"""


class AlertFeedError(Exception):
    """alertfeed 기본 예외"""


class TransportError(AlertFeedError):
    """네트워크 오류, 타임아웃, 비정상 HTTP 상태"""

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status


class MalformedPayloadError(AlertFeedError):
    """JSON 파싱 실패 또는 예상과 다른 페이로드 구조"""
