"""
Seismic intensity scale for alertfeed.

This module contains pure functions that order and parse
discrete intensity levels (1 .. 7 with lower/upper 5 and 6).
"""

from functools import cmp_to_key
from typing import Any, Iterable, List

from .models import SeverityLevel

# 물리적 강도 순서 (낮음 -> 높음), 알 수 없음은 0
SEVERITY_ORDER = {
    SeverityLevel.UNKNOWN: 0,
    SeverityLevel.S1: 10,
    SeverityLevel.S2: 20,
    SeverityLevel.S3: 30,
    SeverityLevel.S4: 40,
    SeverityLevel.S5_LOWER: 45,
    SeverityLevel.S5_UPPER: 50,
    SeverityLevel.S6_LOWER: 55,
    SeverityLevel.S6_UPPER: 60,
    SeverityLevel.S7: 70,
}

# 원시 숫자 코드 -> 레벨
_CODE_MAP = {code: level for level, code in SEVERITY_ORDER.items() if code > 0}

# 텍스트 표기 -> 레벨
_LABEL_MAP = {
    "1": SeverityLevel.S1,
    "2": SeverityLevel.S2,
    "3": SeverityLevel.S3,
    "4": SeverityLevel.S4,
    "5-": SeverityLevel.S5_LOWER,
    "5弱": SeverityLevel.S5_LOWER,
    "5+": SeverityLevel.S5_UPPER,
    "5強": SeverityLevel.S5_UPPER,
    "6-": SeverityLevel.S6_LOWER,
    "6弱": SeverityLevel.S6_LOWER,
    "6+": SeverityLevel.S6_UPPER,
    "6強": SeverityLevel.S6_UPPER,
    "7": SeverityLevel.S7,
}


def rank(level: SeverityLevel) -> int:
    """
    레벨의 순위를 반환합니다.

    Args:
        level: 강도 레벨

    Returns:
        정수 순위 (unknown은 0)
    """
    return SEVERITY_ORDER.get(level, 0)


def compare(a: SeverityLevel, b: SeverityLevel) -> int:
    """두 레벨을 비교합니다. a < b 이면 -1, 같으면 0, a > b 이면 1."""
    ra, rb = rank(a), rank(b)
    return (ra > rb) - (ra < rb)


def parse(raw: Any) -> SeverityLevel:
    """
    원시 강도 코드를 레벨로 변환합니다.

    숫자 코드(10, 45, "50" 등)와 텍스트 표기("5-", "6強" 등)를 모두 처리합니다.
    인식할 수 없는 값은 예외 없이 UNKNOWN을 반환합니다.

    Args:
        raw: 원시 코드

    Returns:
        강도 레벨
    """
    if isinstance(raw, SeverityLevel):
        return raw
    if raw is None or isinstance(raw, bool):
        return SeverityLevel.UNKNOWN

    if isinstance(raw, (int, float)):
        if float(raw).is_integer():
            return _CODE_MAP.get(int(raw), SeverityLevel.UNKNOWN)
        return SeverityLevel.UNKNOWN

    text = str(raw).strip()
    if text in _LABEL_MAP:
        return _LABEL_MAP[text]
    try:
        return _CODE_MAP.get(int(text), SeverityLevel.UNKNOWN)
    except ValueError:
        return SeverityLevel.UNKNOWN


def to_text(level: SeverityLevel) -> str:
    return level.value


sort_key = cmp_to_key(compare)


def sorted_desc(levels: Iterable[SeverityLevel]) -> List[SeverityLevel]:
    """레벨을 강도 내림차순으로 정렬합니다."""
    return sorted(levels, key=sort_key, reverse=True)
