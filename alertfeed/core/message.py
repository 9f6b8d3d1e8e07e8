"""
Message templates for alertfeed.

This module builds the plain-text bodies carried on alert records
and the short title/body pairs sent as notifications.
"""

from typing import Any, Dict, List, Tuple

from .grouping import by_severity
from .models import AlertRecord, AreaGroup, FeedType

# 지명 구분자
AREA_SEPARATOR = "、"

NOTIFY_TITLES = {
    FeedType.EARTHQUAKES: "New earthquake information",
    FeedType.EEW: "Earthquake Early Warning (EEW)",
    FeedType.VOLCANO: "Volcano information",
    FeedType.WEATHER_WARNINGS: "Weather warning",
    FeedType.LANDSLIDE: "Landslide warning",
}

TSUNAMI_ISSUED = "Tsunami information has been issued for this earthquake."
TSUNAMI_NONE = "There is no tsunami risk from this earthquake."


def render_area_lines(groups: List[AreaGroup]) -> List[str]:
    """진도별 지역 목록을 텍스트 행으로 변환합니다."""
    lines: List[str] = []
    for level, level_groups in by_severity(groups).items():
        lines.append(f"<Intensity {level.value}>")
        for g in level_groups:
            prefix = f"[{g.region}] " if g.region else ""
            lines.append(prefix + AREA_SEPARATOR.join(g.localities))
    return lines


def render_earthquake_body(fields: Dict[str, Any], groups: List[AreaGroup]) -> str:
    """
    지진 정보 본문을 생성합니다.

    Args:
        fields: 요약 필드 (epicenter, magnitude, depth, max_severity, tsunami ...)
        groups: 진도별 지역 그룹

    Returns:
        메일 형식의 본문 텍스트
    """
    lines = [
        "[Earthquake information]",
        str(fields.get("time") or ""),
        f"Epicenter: {fields.get('epicenter')}",
        f"Max intensity: {fields.get('max_severity')}",
        f"Magnitude: {fields.get('magnitude')}",
        f"Depth: {fields.get('depth')}",
        TSUNAMI_ISSUED if fields.get("tsunami") else TSUNAMI_NONE,
    ]
    area_lines = render_area_lines(groups)
    if area_lines:
        lines.append("-- Intensity by area --")
        lines.extend(area_lines)
    elif fields.get("intensity_text"):
        lines.append(str(fields["intensity_text"]))
    return "\n".join(lines)


def render_eew_body(fields: Dict[str, Any]) -> str:
    """긴급지진속보 본문을 생성합니다."""
    lines = ["[Earthquake Early Warning (forecast)]"]
    if fields.get("serial_text"):
        lines.append(f"* {fields['serial_text']}")
    lines.extend([
        f"Origin time: {fields.get('origin_time')}",
        f"An earthquake appears to have occurred near {fields.get('hypocenter')}.",
        f"Estimated max intensity {fields.get('max_severity')}, "
        f"magnitude {fields.get('magnitude')}, depth {fields.get('depth')}.",
    ])
    if fields.get("warn_areas"):
        lines.append(f"Target areas: {fields['warn_areas']}")
    lines.append("Please pay attention to further information.")
    return "\n".join(lines)


def notification_for(record: AlertRecord) -> Tuple[str, str]:
    """
    레코드로부터 알림 제목과 본문을 생성합니다.

    Args:
        record: 정규화된 경보 레코드

    Returns:
        (제목, 본문)
    """
    title = NOTIFY_TITLES.get(record.feed_type, record.title)
    f = record.summary_fields
    if record.feed_type == FeedType.EARTHQUAKES:
        body = f"{f.get('epicenter')} max intensity: {f.get('max_severity')}"
    elif record.feed_type == FeedType.EEW:
        body = f"{f.get('hypocenter')} max intensity: {f.get('max_severity')}"
    else:
        first_line = record.raw_body_text.splitlines()[0] if record.raw_body_text else ""
        body = f"{record.title}: {first_line}" if first_line else record.title
    return title, body
