# alertfeed/main.py
import os, asyncio, signal
from typing import Optional
import uvicorn
from alertfeed.settings import Settings
from alertfeed.observability.health import create_app
from alertfeed.observability.logging_setup import setup_logging, get_logger
from alertfeed.adapters.http.client import HttpFeedFetcher
from alertfeed.adapters.storage.sqlite_kv import SQLiteKVStore
from alertfeed.adapters.storage.memory_kv import MemoryKVStore
from alertfeed.adapters.homeassistant.client import HAClient
from alertfeed.adapters.notify import HANotificationSink, MqttNotificationSink, LogNotificationSink
from alertfeed.dedup.seen_store import SeenStore
from alertfeed.dispatch.dispatcher import NotificationDispatcher
from alertfeed.feeds.source import FeedSource
from alertfeed.orchestrators.scheduler import PollScheduler

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def _opt(name, default):
    # 빈 문자열은 "엔드포인트 없음"
    value = os.getenv(name)
    if value is None:
        return default
    return value or None

def build_settings() -> Settings:
    s = Settings()
    s.dry_run = _b("DRY_RUN", s.dry_run)

    # 피드
    s.feeds.earthquakes_url = _opt("EARTHQUAKES_URL", s.feeds.earthquakes_url)
    s.feeds.eew_url = _opt("EEW_URL", s.feeds.eew_url)
    s.feeds.volcano_url = _opt("VOLCANO_URL", s.feeds.volcano_url)
    s.feeds.weather_warnings_url = _opt("WEATHER_WARNINGS_URL", s.feeds.weather_warnings_url)
    s.feeds.landslide_url = _opt("LANDSLIDE_URL", s.feeds.landslide_url)
    s.feeds.snapshot_location = _opt("SNAPSHOT_LOCATION", s.feeds.snapshot_location)
    s.feeds.fetch_timeout_sec = float(os.getenv("FETCH_TIMEOUT_SEC", s.feeds.fetch_timeout_sec))

    # 스케줄러
    s.scheduler.interval_sec = float(os.getenv("POLL_INTERVAL_SEC", s.scheduler.interval_sec))
    s.scheduler.auto_update = _b("AUTO_UPDATE", s.scheduler.auto_update)

    # 중복 제거
    s.dedup.max_keys = int(os.getenv("SEEN_MAX_KEYS", s.dedup.max_keys))
    s.dedup.kv_path = os.getenv("SEEN_DB_PATH", s.dedup.kv_path)

    # 알림
    s.notify.sink = os.getenv("NOTIFY_SINK", s.notify.sink)
    s.notify.enabled = _b("NOTIFY_ENABLED", s.notify.enabled)

    # HA
    s.ha.base_url = os.getenv("HA_BASE_URL", s.ha.base_url)
    s.ha.token = os.getenv("HA_TOKEN", os.getenv("SUPERVISOR_TOKEN", s.ha.token))
    s.ha.notify_service = os.getenv("HA_NOTIFY_SERVICE", s.ha.notify_service)

    # LOCAL MQTT
    s.local_mqtt.host = os.getenv("LOCAL_MQTT_HOST", s.local_mqtt.host)
    s.local_mqtt.port = int(os.getenv("LOCAL_MQTT_PORT", s.local_mqtt.port))
    s.local_mqtt.username = os.getenv("LOCAL_MQTT_USERNAME", s.local_mqtt.username)
    s.local_mqtt.password = os.getenv("LOCAL_MQTT_PASSWORD", s.local_mqtt.password)
    s.local_mqtt.topic = os.getenv("LOCAL_MQTT_TOPIC", s.local_mqtt.topic)

    # 관측성
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)
    s.observability.http_port = int(os.getenv("HTTP_PORT", s.observability.http_port))
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.log_json = _b("LOG_JSON", s.observability.log_json)

    return s

def build_sink(s: Settings):
    """설정에 맞는 알림 싱크를 생성합니다."""
    if s.dry_run or s.notify.sink == "log":
        return LogNotificationSink(enabled=s.notify.enabled)
    if s.notify.sink == "mqtt":
        return MqttNotificationSink(
            broker_host=s.local_mqtt.host,
            broker_port=s.local_mqtt.port,
            topic=s.local_mqtt.topic,
            username=s.local_mqtt.username,
            password=s.local_mqtt.password,
            qos=s.local_mqtt.qos,
            retain=s.local_mqtt.retain,
            enabled=s.notify.enabled,
        )
    if s.notify.sink == "ha":
        ha = HAClient(base_url=s.ha.base_url, token=s.ha.token, timeout=s.ha.timeout_sec)
        return HANotificationSink(ha, service=s.ha.notify_service, enabled=s.notify.enabled)
    raise ValueError(f"unknown notify sink: {s.notify.sink}")

async def build_kv(s: Settings):
    if not s.dedup.kv_path:
        return MemoryKVStore()
    kv = SQLiteKVStore(s.dedup.kv_path)
    try:
        await kv.init()
    except Exception as e:
        get_logger().error("KV 저장소 초기화 실패, 메모리 저장소 사용", error=str(e))
        return MemoryKVStore()
    return kv

async def start_http(settings: Settings, scheduler: PollScheduler) -> Optional[asyncio.Task]:
    if not settings.observability.http_port: return None
    app = create_app(settings, scheduler)
    return asyncio.create_task(uvicorn.Server(
        uvicorn.Config(app, host="0.0.0.0", port=settings.observability.http_port, log_level="info")
    ).serve())

async def main():
    s = build_settings()
    setup_logging(s.observability.log_level, json_logs=s.observability.log_json)
    log = get_logger()
    log.info("설정 로드 완료")

    kv = await build_kv(s)
    seen = SeenStore(kv, max_keys=s.dedup.max_keys, storage_key=s.dedup.storage_key)
    await seen.load()

    fetcher = HttpFeedFetcher(user_agent=s.feeds.user_agent)
    source = FeedSource(fetcher, timeout_sec=s.feeds.fetch_timeout_sec, snapshot_location=s.feeds.snapshot_location)
    dispatcher = NotificationDispatcher(seen, build_sink(s))
    scheduler = PollScheduler(source, dispatcher, endpoints=s.feeds.endpoints(), interval_sec=s.scheduler.interval_sec)
    log.info("스케줄러 생성 완료")

    http_task = await start_http(s, scheduler)
    if http_task:
        log.info("HTTP 서버 시작됨", port=s.observability.http_port)

    stop = asyncio.Future()
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try: loop.add_signal_handler(sig, lambda: (not stop.done()) and stop.set_result(True))
            except NotImplementedError: pass
    except RuntimeError: pass

    async with fetcher:
        await scheduler.start(auto_update=s.scheduler.auto_update)
        await stop
        await scheduler.stop()
    if http_task: http_task.cancel()
    log.info("종료")

def run() -> None:
    asyncio.run(main())

if __name__ == "__main__":
    run()
