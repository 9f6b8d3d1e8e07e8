"""
HTTP endpoints for alertfeed.

This module implements health, readiness, metrics and info endpoints
plus the control surface for the poll scheduler (latest alerts,
manual refresh, auto-update toggle).
"""

from typing import Optional
from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
import time
from alertfeed.core.models import FEED_PRIORITY
from alertfeed.orchestrators.scheduler import PollScheduler
from alertfeed.settings import Settings
from alertfeed.observability.logging_setup import get_logger

log = get_logger("alertfeed.http_api")

def create_app(settings: Settings, scheduler: Optional[PollScheduler] = None) -> FastAPI:
    """FastAPI 애플리케이션을 생성합니다."""
    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Disaster alert feed service"
    )

    start_time = time.time()

    def _require_scheduler() -> PollScheduler:
        if scheduler is None:
            raise HTTPException(status_code=503, detail="Scheduler not running")
        return scheduler

    @app.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @app.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트 (첫 사이클 완료 여부)"""
        if scheduler is None or scheduler.last_cycle_at is None:
            return JSONResponse({"status": "starting"}, status_code=503)
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "last_cycle_at": scheduler.last_cycle_at,
            "scheduler_state": scheduler.state
        })

    @app.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "interval_sec": scheduler.interval_sec if scheduler is not None else settings.scheduler.interval_sec
        })

    @app.get("/alerts")
    async def alerts():
        """피드별 최신 정규화 레코드 (우선순위 순서)"""
        sched = _require_scheduler()
        feeds = []
        for feed_type in FEED_PRIORITY:
            records = sched.latest.get(feed_type, [])
            feeds.append({
                "feed": feed_type.value,
                "source": sched.fetch_kinds.get(feed_type),
                "records": [r.model_dump(mode="json") for r in records]
            })
        return {"last_cycle_at": sched.last_cycle_at, "feeds": feeds}

    @app.post("/refresh")
    async def refresh():
        """수동 갱신 (진행 중인 사이클이 있으면 409)"""
        sched = _require_scheduler()
        ran = await sched.trigger()
        if not ran:
            raise HTTPException(status_code=409, detail="Poll cycle already in flight")
        log.info("수동 갱신 완료")
        return {"ok": True, "last_cycle_at": sched.last_cycle_at}

    @app.post("/auto")
    async def auto(payload: dict = Body(default={})):
        """자동 갱신 켜기/끄기 (enabled 생략 시 토글)"""
        sched = _require_scheduler()
        enabled = payload.get("enabled")
        if enabled is None:
            enabled = not sched.enabled
        if enabled:
            sched.enable()
        else:
            sched.disable()
        return {"auto_update": sched.enabled, "state": sched.state}

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "endpoints": {
                "health": "/health",
                "ready": "/ready",
                "metrics": "/metrics",
                "info": "/info",
                "alerts": "/alerts",
                "refresh": "/refresh",
                "auto": "/auto"
            }
        })

    return app
