"""
HTTP 클라이언트 어댑터 테스트

aiohttp 테스트 서버로 피드 수집기와 Home Assistant 클라이언트를 검증합니다.
"""

import asyncio
from unittest.mock import AsyncMock

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from alertfeed.adapters.homeassistant.client import HAClient
from alertfeed.adapters.http.client import HttpFeedFetcher
from alertfeed.common.retry import backoff_delay, retry_with_backoff
from alertfeed.core.errors import MalformedPayloadError, TransportError


def make_feed_app():
    async def ok(request):
        return web.json_response([{"id": "q1", "ua": request.headers.get("User-Agent")}])

    async def broken(request):
        return web.Response(status=500, text="oops")

    async def not_json(request):
        return web.Response(text="<html>maintenance</html>", content_type="text/html")

    async def slow(request):
        await asyncio.sleep(1)
        return web.json_response({})

    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_get("/broken", broken)
    app.router.add_get("/html", not_json)
    app.router.add_get("/slow", slow)
    return app


class TestHttpFeedFetcher:
    """aiohttp 피드 수집기 테스트"""

    @pytest.mark.asyncio
    async def test_get_json(self):
        """JSON 응답 디코딩과 User-Agent 전달"""
        async with TestServer(make_feed_app()) as server:
            async with HttpFeedFetcher(user_agent="alertfeed-test") as fetcher:
                data = await fetcher.get_json(str(server.make_url("/ok")), timeout_sec=5)
        assert data == [{"id": "q1", "ua": "alertfeed-test"}]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """4xx/5xx는 TransportError"""
        async with TestServer(make_feed_app()) as server:
            async with HttpFeedFetcher() as fetcher:
                with pytest.raises(TransportError) as exc_info:
                    await fetcher.get_json(str(server.make_url("/broken")), timeout_sec=5)
        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """JSON이 아니면 MalformedPayloadError"""
        async with TestServer(make_feed_app()) as server:
            async with HttpFeedFetcher() as fetcher:
                with pytest.raises(MalformedPayloadError):
                    await fetcher.get_json(str(server.make_url("/html")), timeout_sec=5)

    @pytest.mark.asyncio
    async def test_timeout(self):
        """타임아웃은 TransportError"""
        async with TestServer(make_feed_app()) as server:
            async with HttpFeedFetcher() as fetcher:
                with pytest.raises(TransportError):
                    await fetcher.get_json(str(server.make_url("/slow")), timeout_sec=0.1)

    @pytest.mark.asyncio
    async def test_connection_refused(self, unused_tcp_port):
        """접속 불가는 TransportError"""
        async with HttpFeedFetcher() as fetcher:
            with pytest.raises(TransportError):
                await fetcher.get_json(f"http://127.0.0.1:{unused_tcp_port}/", timeout_sec=2)


class TestHAClient:
    """Home Assistant 클라이언트 테스트"""

    @pytest.mark.asyncio
    async def test_call_service(self):
        """서비스 호출 경로와 인증 헤더"""
        received = {}

        async def service(request):
            received["path"] = request.path
            received["auth"] = request.headers.get("Authorization")
            received["body"] = await request.json()
            return web.json_response([])

        app = web.Application()
        app.router.add_post("/api/services/{domain}/{service}", service)
        async with TestServer(app) as server:
            async with HAClient(str(server.make_url("/api")), "secret", timeout=5) as client:
                await client.call_service("notify", "mobile_app_phone", {"title": "t", "message": "m"})

        assert received["path"] == "/api/services/notify/mobile_app_phone"
        assert received["auth"] == "Bearer secret"
        assert received["body"] == {"title": "t", "message": "m"}

    @pytest.mark.asyncio
    async def test_request_without_session_fails(self):
        """async with 없이 호출하면 RuntimeError"""
        client = HAClient("http://localhost", "token")
        with pytest.raises(RuntimeError):
            await client.call_service("notify", "x", {})

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        """4xx 응답은 재시도 없이 바로 전파"""
        hits = []

        async def unauthorized(request):
            hits.append(request.path)
            return web.json_response({"message": "Unauthorized"}, status=401)

        app = web.Application()
        app.router.add_post("/api/services/{domain}/{service}", unauthorized)
        async with TestServer(app) as server:
            async with HAClient(str(server.make_url("/api")), "wrong", timeout=5, max_retries=3) as client:
                with pytest.raises(aiohttp.ClientResponseError) as exc_info:
                    await client.call_service("notify", "x", {})

        assert exc_info.value.status == 401
        assert len(hits) == 1

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        """5xx 응답은 재시도 후 성공"""
        hits = []

        async def flaky(request):
            hits.append(request.path)
            if len(hits) == 1:
                return web.json_response({}, status=503)
            return web.json_response([])

        app = web.Application()
        app.router.add_post("/api/services/{domain}/{service}", flaky)
        async with TestServer(app) as server:
            async with HAClient(str(server.make_url("/api")), "secret", timeout=5, max_retries=3) as client:
                assert await client.call_service("notify", "x", {}) == []

        assert len(hits) == 2


class TestRetry:
    """재시도 로직 테스트"""

    def test_backoff_delay_is_capped(self):
        assert backoff_delay(1, 1.0, 10.0, jitter=False) == 1.0
        assert backoff_delay(3, 1.0, 10.0, jitter=False) == 4.0
        assert backoff_delay(10, 1.0, 10.0, jitter=False) == 10.0
        assert 0.5 <= backoff_delay(1, 1.0, 10.0) <= 1.0

    @pytest.mark.asyncio
    async def test_retry_until_success(self):
        """재시도 후 성공"""
        func = AsyncMock(side_effect=[ValueError("1"), ValueError("2"), "ok"])
        result = await retry_with_backoff(func, max_retries=3, base_delay=0, jitter=False)
        assert result == "ok"
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_retry_gives_up(self):
        """최대 재시도 초과 시 마지막 예외 전파"""
        func = AsyncMock(side_effect=ValueError("always"))
        with pytest.raises(ValueError):
            await retry_with_backoff(func, max_retries=2, base_delay=0, jitter=False)
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_non_retryable_error_is_raised_immediately(self):
        """retry_on에 없는 예외는 바로 전파"""
        func = AsyncMock(side_effect=KeyError("x"))
        with pytest.raises(KeyError):
            await retry_with_backoff(func, retry_on=(ValueError,))
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_retry_if_false_is_raised_immediately(self):
        """retry_if가 False를 반환하면 바로 전파"""
        func = AsyncMock(side_effect=ValueError("permanent"))
        with pytest.raises(ValueError):
            await retry_with_backoff(func, max_retries=3, base_delay=0, retry_on=(ValueError,),
                                     retry_if=lambda e: str(e) != "permanent")
        assert func.await_count == 1
