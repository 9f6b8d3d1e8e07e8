"""
Normalization functions for alertfeed.

This module contains pure functions for converting raw feed payloads
(earthquake history, EEW bulletins and simple text feeds)
into canonical AlertRecord models.
"""

from typing import Any, Dict, List, Mapping, Optional

from .errors import MalformedPayloadError
from .grouping import group_points
from .message import AREA_SEPARATOR, render_earthquake_body, render_eew_body
from .models import AlertRecord, FeedType, SeverityLevel
from . import severity as scale
from alertfeed.observability.logging_setup import get_logger

log = get_logger("alertfeed.normalize")

# 지진 피드에서 처리하는 최대 건수
MAX_EARTHQUAKES = 5

UNKNOWN = "unknown"
VERY_SHALLOW = "very shallow"
TSUNAMI_FLAGS = ("Warning", "Watch")


def _format_magnitude(value: Any) -> str:
    try:
        mag = float(value)
    except (TypeError, ValueError):
        return UNKNOWN
    if mag < 0:
        return UNKNOWN
    return f"{mag:.1f}"


def _format_depth(value: Any) -> str:
    try:
        depth = float(value)
    except (TypeError, ValueError):
        return UNKNOWN
    if depth == 0:
        return VERY_SHALLOW
    if depth < 0:
        # P2P 피드는 -1로 불명을 표현
        return UNKNOWN
    return f"{int(depth) if depth.is_integer() else depth}km"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def normalize_earthquake(item: Mapping[str, Any]) -> AlertRecord:
    """
    지진 정보 1건을 AlertRecord로 변환합니다.

    Args:
        item: P2P 지진 이력 항목

    Returns:
        정규화된 레코드
    """
    eq = _as_dict(item.get("earthquake")) or dict(item)
    hypo = _as_dict(eq.get("hypocenter"))
    issue = _as_dict(item.get("issue")) or _as_dict(eq.get("issue"))

    time = str(eq.get("time") or item.get("time") or "")
    epicenter = str(hypo.get("name") or hypo.get("place") or UNKNOWN)
    max_severity = scale.parse(eq.get("maxScale"))

    points = item.get("points")
    groups = group_points(points) if isinstance(points, list) else []

    fields: Dict[str, Any] = {
        "time": time,
        "epicenter": epicenter,
        "magnitude": _format_magnitude(hypo.get("magnitude")),
        "depth": _format_depth(hypo.get("depth")),
        "max_severity": scale.to_text(max_severity),
        "tsunami": eq.get("domesticTsunami") in TSUNAMI_FLAGS,
    }
    if not groups and item.get("intensity"):
        fields["intensity_text"] = str(item["intensity"])

    event_id = item.get("id") or eq.get("id")
    if event_id:
        dedup_key = f"{event_id}_{issue.get('type') or ''}"
    else:
        # ID가 없는 이벤트끼리 하나의 키로 합쳐지지 않도록 합성 키 사용
        dedup_key = f"{time}_{epicenter}_{max_severity.value}"

    return AlertRecord(
        feed_type=FeedType.EARTHQUAKES,
        dedup_key=dedup_key,
        timestamp=time,
        title=f"Earthquake: {epicenter}",
        summary_fields=fields,
        area_groups=groups,
        raw_body_text=render_earthquake_body(fields, groups),
    )


def normalize_earthquakes(payload: Any) -> List[AlertRecord]:
    """지진 이력 목록을 최신 5건까지 변환합니다."""
    if not isinstance(payload, list):
        raise MalformedPayloadError(f"earthquakes payload must be a list, got {type(payload).__name__}")

    records = []
    for item in payload[:MAX_EARTHQUAKES]:
        if not isinstance(item, Mapping):
            log.warning("지진 항목 형식 오류, 건너뜀", item_type=type(item).__name__)
            continue
        records.append(normalize_earthquake(item))
    return records


def _warn_area_text(data: Mapping[str, Any]) -> str:
    areas = data.get("WarnArea")
    if isinstance(areas, list) and areas:
        names = []
        for a in areas:
            if isinstance(a, Mapping):
                names.append(str(a.get("Chiiki") or a.get("chiiki") or a.get("name") or ""))
            else:
                names.append(str(a))
        return AREA_SEPARATOR.join(n for n in names if n)
    return str(data.get("warnAreaText") or "")


def normalize_eew(payload: Any) -> List[AlertRecord]:
    """
    긴급지진속보(EEW)를 변환합니다.

    훈련/취소 보는 actionable=False 레코드로 반환하여
    디스패처가 알림을 보내지 않도록 합니다.

    Args:
        payload: EEW 원시 객체

    Returns:
        0개 또는 1개의 레코드
    """
    if not payload:
        return []
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError(f"eew payload must be an object, got {type(payload).__name__}")

    event_id = payload.get("EventID")
    serial = payload.get("Serial")
    dedup_key = f"{event_id}_{serial if serial is not None else ''}" if event_id else ""
    timestamp = str(payload.get("AnnouncedTime") or payload.get("OriginTime") or "")

    status: Optional[str] = None
    if payload.get("isTraining"):
        status = "training"
    elif payload.get("isCancel"):
        status = "cancelled"

    if status:
        text = (
            "This is a training bulletin and is not displayed."
            if status == "training"
            else "This EEW has been cancelled."
        )
        return [AlertRecord(
            feed_type=FeedType.EEW,
            dedup_key=dedup_key,
            timestamp=timestamp,
            title=f"Earthquake Early Warning ({status})",
            raw_body_text=text,
            actionable=False,
            status=status,
        )]

    if payload.get("isFinal"):
        serial_text = "final report"
    elif serial:
        serial_text = f"report #{serial}"
    else:
        serial_text = ""

    depth = payload.get("Depth")
    max_severity: SeverityLevel = scale.parse(payload.get("MaxIntensity") or payload.get("maxInt"))
    fields: Dict[str, Any] = {
        "serial": serial,
        "serial_text": serial_text,
        "is_final": bool(payload.get("isFinal")),
        "origin_time": str(payload.get("OriginTime") or payload.get("origin") or UNKNOWN),
        "hypocenter": str(payload.get("Hypocenter") or payload.get("hypocenter") or UNKNOWN),
        "magnitude": str(payload.get("Magunitude") or payload.get("Magnitude") or payload.get("Mag") or UNKNOWN),
        "depth": f"{depth}km" if depth not in (None, "") else UNKNOWN,
        "max_severity": scale.to_text(max_severity),
        "warn_areas": _warn_area_text(payload),
    }

    return [AlertRecord(
        feed_type=FeedType.EEW,
        dedup_key=dedup_key,
        timestamp=timestamp,
        title=f"Earthquake Early Warning {serial_text}".strip(),
        summary_fields=fields,
        raw_body_text=render_eew_body(fields),
    )]


def normalize_items(feed_type: FeedType, payload: Any) -> List[AlertRecord]:
    """화산/기상경보/토사재해 같은 단순 {title, body, time} 목록을 변환합니다."""
    if isinstance(payload, Mapping):
        payload = [payload]
    if not isinstance(payload, list):
        raise MalformedPayloadError(f"{feed_type.value} payload must be a list, got {type(payload).__name__}")

    records = []
    for item in payload:
        if not isinstance(item, Mapping):
            log.warning("항목 형식 오류, 건너뜀", feed=feed_type.value)
            continue
        title = str(item.get("title") or "")
        time = str(item.get("time") or "")
        records.append(AlertRecord(
            feed_type=feed_type,
            dedup_key=f"{title}_{time}",
            timestamp=time,
            title=title,
            summary_fields={"time": time},
            raw_body_text=str(item.get("body") or item.get("text") or ""),
        ))
    return records


def normalize(feed_type: FeedType, payload: Any) -> List[AlertRecord]:
    """
    피드 종류에 맞는 정규화 함수로 페이로드를 변환합니다.

    Args:
        feed_type: 피드 종류
        payload: 원시 페이로드 (None이면 빈 목록)

    Returns:
        AlertRecord 목록

    Raises:
        MalformedPayloadError: 페이로드 최상위 구조가 잘못된 경우
    """
    if payload is None:
        return []
    if feed_type == FeedType.EARTHQUAKES:
        return normalize_earthquakes(payload)
    if feed_type == FeedType.EEW:
        return normalize_eew(payload)
    return normalize_items(feed_type, payload)
