"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처(가짜 포트 구현, 샘플 페이로드)를 제공합니다.
"""

import copy
import os
import tempfile
from typing import Any, Dict, List, Tuple

import pytest

from alertfeed.adapters.storage.memory_kv import MemoryKVStore
from alertfeed.core.errors import TransportError
from alertfeed.settings import Settings


class FakeFetcher:
    """URL -> 페이로드(또는 예외) 매핑으로 동작하는 FetchPort 구현"""

    def __init__(self, responses: Dict[str, Any] = None):
        self.responses = dict(responses or {})
        self.calls: List[str] = []

    async def get_json(self, url: str, *, timeout_sec: float) -> Any:
        self.calls.append(url)
        if url not in self.responses:
            raise TransportError(f"unreachable: {url}")
        value = self.responses[url]
        if isinstance(value, BaseException):
            raise value
        return copy.deepcopy(value)


class RecordingSink:
    """발송된 알림을 기록하는 NotificationSink 구현"""

    def __init__(self, permitted: bool = True):
        self.permitted = permitted
        self.sent: List[Tuple[str, str]] = []

    async def is_permitted(self) -> bool:
        return self.permitted

    async def notify(self, title: str, body: str) -> None:
        self.sent.append((title, body))


class FailingKV:
    """모든 연산이 실패하는 KV 저장소"""

    async def get(self, key):
        raise OSError("store unavailable")

    async def set(self, key, value):
        raise OSError("store unavailable")


@pytest.fixture
def temp_db_path():
    """임시 데이터베이스 파일 경로"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    # 테스트 후 파일 정리
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def sample_settings():
    """테스트용 설정"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.feeds.snapshot_location = None
    return settings


@pytest.fixture
def memory_kv():
    """테스트용 메모리 KV 저장소"""
    return MemoryKVStore()


@pytest.fixture
def failing_kv():
    """실패하는 KV 저장소"""
    return FailingKV()


@pytest.fixture
def recording_sink():
    """테스트용 알림 싱크"""
    return RecordingSink()


@pytest.fixture
def fake_fetcher_factory():
    """FakeFetcher 생성 팩토리"""
    return FakeFetcher


def make_quake(event_id="q1", issue_type="DetailScale", name="石川県能登地方", max_scale=70,
               magnitude=7.6, depth=10, tsunami="Warning", points=None, time="2024/01/01 16:10:00"):
    item = {
        "code": 551,
        "time": time + ".123",
        "issue": {"type": issue_type, "time": time},
        "earthquake": {
            "time": time,
            "hypocenter": {"name": name, "depth": depth, "magnitude": magnitude},
            "maxScale": max_scale,
            "domesticTsunami": tsunami,
        },
        "points": points if points is not None else [
            {"pref": "石川県", "addr": "志賀町香能", "scale": 70},
            {"pref": "石川県", "addr": "輪島市門前町走出", "scale": 60},
            {"pref": "石川県", "addr": "輪島市鳳至町", "scale": 55},
            {"pref": "新潟県", "addr": "長岡市小国町", "scale": 55},
        ],
    }
    if event_id is not None:
        item["id"] = event_id
    return item


def make_eew(event_id="20240101161010", serial=3, **overrides):
    data = {
        "EventID": event_id,
        "Serial": serial,
        "AnnouncedTime": "2024/01/01 16:10:30",
        "OriginTime": "2024/01/01 16:10:09",
        "Hypocenter": "石川県能登地方",
        "Magunitude": 7.4,
        "Depth": 10,
        "MaxIntensity": "6+",
        "isTraining": False,
        "isCancel": False,
        "isFinal": False,
        "WarnArea": [{"Chiiki": "石川県能登"}, {"Chiiki": "新潟県上越"}],
    }
    data.update(overrides)
    return data


@pytest.fixture
def quake_factory():
    """지진 항목 생성 팩토리"""
    return make_quake


@pytest.fixture
def eew_factory():
    """EEW 페이로드 생성 팩토리"""
    return make_eew


# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )


def pytest_collection_modifyitems(config, items):
    """테스트 아이템 수정"""
    for item in items:
        if "integration" in item.name:
            item.add_marker(pytest.mark.integration)
