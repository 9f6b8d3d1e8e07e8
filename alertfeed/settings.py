# alertfeed/settings.py
from __future__ import annotations
from typing import Dict, Optional
from pydantic import BaseModel, Field

from alertfeed.core.models import FeedType

class Feeds(BaseModel):
    earthquakes_url: Optional[str] = "https://api.p2pquake.net/v2/history?codes=551&limit=5"
    eew_url: Optional[str] = "https://api.wolfx.jp/jma_eew.json"
    volcano_url: Optional[str] = None          # 스냅샷 전용
    weather_warnings_url: Optional[str] = None  # 스냅샷 전용
    landslide_url: Optional[str] = None        # 스냅샷 전용
    snapshot_location: Optional[str] = "/data/data.json"  # 파일 경로 또는 URL
    fetch_timeout_sec: float = 10.0
    user_agent: str = "alertfeed/0.1"

    def endpoints(self) -> Dict[FeedType, Optional[str]]:
        return {
            FeedType.EARTHQUAKES: self.earthquakes_url or None,
            FeedType.EEW: self.eew_url or None,
            FeedType.VOLCANO: self.volcano_url or None,
            FeedType.WEATHER_WARNINGS: self.weather_warnings_url or None,
            FeedType.LANDSLIDE: self.landslide_url or None,
        }

class Scheduler(BaseModel):
    interval_sec: float = 30.0
    auto_update: bool = True

class Dedup(BaseModel):
    max_keys: int = 10
    kv_path: str = "/data/alertfeed.db"       # 빈 문자열이면 메모리 저장소
    storage_key: str = "disaster_seen_keys_v1"

class Notify(BaseModel):
    sink: str = "ha"                          # ha | mqtt | log
    enabled: bool = True

class HAConfig(BaseModel):
    base_url: str = "http://supervisor/core/api"
    token: str = ""
    timeout_sec: int = 5
    notify_service: str = "persistent_notification.create"

class LocalMQTT(BaseModel):
    host: str = "core-mosquitto"
    port: int = 1883
    username: str | None = None
    password: str | None = None
    topic: str = "alertfeed/notify"
    qos: int = 1
    retain: bool = False

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "alertfeed"
    build_version: str = "0.1.0"
    build_date: str = "2026-01-01"
    log_level: str = "INFO"
    log_json: bool = False                    # 한 줄 JSON 로그

class Settings(BaseModel):
    # 상위 플래그
    dry_run: bool = False

    # 하위 섹션 (기본값/팩토리로 누락 방지)
    feeds: Feeds = Field(default_factory=Feeds)
    scheduler: Scheduler = Field(default_factory=Scheduler)
    dedup: Dedup = Field(default_factory=Dedup)
    notify: Notify = Field(default_factory=Notify)
    ha: HAConfig = Field(default_factory=HAConfig)
    local_mqtt: LocalMQTT = Field(default_factory=LocalMQTT)
    observability: Observability = Field(default_factory=Observability)
