"""
NotificationDispatcher 테스트

새 키에 대한 단일 알림, 중복 억제, 비대상 레코드, 발송 순서를 검증합니다.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from alertfeed.core.models import AlertRecord, FeedType
from alertfeed.core.normalize import normalize_earthquake, normalize_eew
from alertfeed.dedup.seen_store import SeenStore
from alertfeed.dispatch.dispatcher import NotificationDispatcher


@pytest.fixture
def seen(memory_kv):
    return SeenStore(memory_kv)


@pytest.fixture
def dispatcher(seen, recording_sink):
    return NotificationDispatcher(seen, recording_sink)


class TestDispatch:
    """dispatch 테스트"""

    @pytest.mark.asyncio
    async def test_new_key_notifies_once_and_is_recorded(self, dispatcher, seen, recording_sink, quake_factory):
        """새 지진 키 -> 알림 1회, 키 기록"""
        record = normalize_earthquake(quake_factory())
        assert not seen.has(FeedType.EARTHQUAKES, record.dedup_key)

        notified = await dispatcher.dispatch([record])

        assert notified == [record]
        assert len(recording_sink.sent) == 1
        assert seen.has(FeedType.EARTHQUAKES, record.dedup_key)

    @pytest.mark.asyncio
    async def test_second_pass_is_idempotent(self, dispatcher, recording_sink, quake_factory):
        """같은 데이터로 두 번째 실행 시 알림 0회"""
        records = [normalize_earthquake(quake_factory(event_id=f"q{i}")) for i in range(3)]
        await dispatcher.dispatch(records)
        assert len(recording_sink.sent) == 3

        again = await dispatcher.dispatch(records)
        assert again == []
        assert len(recording_sink.sent) == 3

    @pytest.mark.asyncio
    async def test_training_eew_never_notifies(self, dispatcher, seen, recording_sink, eew_factory):
        """훈련 EEW는 처음 보는 키여도 알림 없음"""
        [record] = normalize_eew(eew_factory(isTraining=True))
        assert record.dedup_key

        assert await dispatcher.dispatch([record]) == []
        assert recording_sink.sent == []
        assert not seen.has(FeedType.EEW, record.dedup_key)

    @pytest.mark.asyncio
    async def test_empty_key_is_skipped_without_dedup(self, dispatcher, seen, recording_sink, eew_factory):
        """빈 키는 기록되지 않고 다른 레코드를 억제하지 않음"""
        [no_id] = normalize_eew(eew_factory(event_id=None))
        [with_id] = normalize_eew(eew_factory())

        await dispatcher.dispatch([no_id])
        assert seen.keys(FeedType.EEW) == []

        await dispatcher.dispatch([with_id])
        assert len(recording_sink.sent) == 1

    @pytest.mark.asyncio
    async def test_eew_revisions_each_notify(self, dispatcher, recording_sink, eew_factory):
        """EEW 속보 갱신(serial)마다 알림"""
        for serial in (1, 2, 3):
            await dispatcher.dispatch(normalize_eew(eew_factory(serial=serial)))
        assert len(recording_sink.sent) == 3

    @pytest.mark.asyncio
    async def test_alternating_eew_sources_notify_once_per_event(self, dispatcher, recording_sink, eew_factory):
        """라이브와 폴백 스냅샷이 번갈아 와도 이벤트당 한 번만 알림"""
        live = normalize_eew(eew_factory(event_id="E1", serial=3))
        snapshot = normalize_eew(eew_factory(event_id="E0", serial=5))
        for records in (live, snapshot, live, snapshot):
            await dispatcher.dispatch(records)
        assert len(recording_sink.sent) == 2

    @pytest.mark.asyncio
    async def test_permission_denied_is_silent_and_recorded(self, seen, recording_sink, quake_factory):
        """권한 거부 시 알림 없이 키만 기록"""
        recording_sink.permitted = False
        dispatcher = NotificationDispatcher(seen, recording_sink)
        record = normalize_earthquake(quake_factory())

        await dispatcher.dispatch([record])

        assert recording_sink.sent == []
        assert seen.has(FeedType.EARTHQUAKES, record.dedup_key)

    @pytest.mark.asyncio
    async def test_failing_sink_does_not_record(self, seen, quake_factory):
        """발송 실패 시 키를 기록하지 않고 다음 레코드 계속"""
        sink = AsyncMock()
        sink.is_permitted.return_value = True
        sink.notify.side_effect = [RuntimeError("boom"), None]
        dispatcher = NotificationDispatcher(seen, sink)
        first = normalize_earthquake(quake_factory(event_id="a"))
        second = normalize_earthquake(quake_factory(event_id="b"))

        notified = await dispatcher.dispatch([first, second])

        assert notified == [second]
        assert not seen.has(FeedType.EARTHQUAKES, first.dedup_key)
        assert seen.has(FeedType.EARTHQUAKES, second.dedup_key)

    @pytest.mark.asyncio
    async def test_notify_happens_before_persist(self, quake_factory):
        """알림 -> 저장 순서"""
        manager = Mock()
        kv = AsyncMock()
        sink = AsyncMock()
        sink.is_permitted.return_value = True
        manager.attach_mock(kv.set, "persist")
        manager.attach_mock(sink.notify, "notify")
        dispatcher = NotificationDispatcher(SeenStore(kv), sink)

        await dispatcher.dispatch([normalize_earthquake(quake_factory())])

        names = [c[0] for c in manager.mock_calls]
        assert names == ["notify", "persist"]

    @pytest.mark.asyncio
    async def test_multiple_new_records_are_not_coalesced(self, dispatcher, recording_sink):
        """새 레코드마다 개별 알림"""
        records = [
            AlertRecord(feed_type=FeedType.VOLCANO, title=f"v{i}", dedup_key=f"v{i}_t")
            for i in range(4)
        ]
        await dispatcher.dispatch(records)
        assert [t for t, _ in recording_sink.sent] == ["Volcano information"] * 4
