"""
Intensity area grouping for alertfeed.

This module contains pure functions that turn raw per-location
intensity reports into area groups ordered by severity.
"""

import re
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from .models import AreaGroup, PointObservation, SeverityLevel
from . import severity as scale

# 시/구/정/촌 접미사로 끝나는 가장 짧은 접두부
LOCALITY_PATTERN = re.compile(r"(.+?[市区町村])")


def parse_address(addr: str) -> Tuple[bool, str]:
    """
    주소 문자열에서 지역명(시구정촌)을 추출합니다.

    Args:
        addr: 원시 주소 문자열

    Returns:
        (매칭 여부, 지역명). 매칭 실패 시 원시 문자열을 그대로 반환합니다.
    """
    m = LOCALITY_PATTERN.match(addr or "")
    if m:
        return True, m.group(1)
    return False, addr or ""


def to_observation(point: Mapping[str, Any]) -> PointObservation:
    """원시 지점 데이터를 PointObservation으로 변환합니다."""
    matched, locality = parse_address(str(point.get("addr") or ""))
    region = str(point.get("pref") or "") if matched else ""
    return PointObservation(
        region=region,
        locality=locality,
        severity=scale.parse(point.get("scale")),
    )


def collapse_max(observations: Iterable[PointObservation]) -> List[PointObservation]:
    """(지역, 지명) 별로 최대 진도만 남깁니다."""
    best: Dict[Tuple[str, str], PointObservation] = {}
    for obs in observations:
        key = (obs.region, obs.locality)
        current = best.get(key)
        if current is None or scale.compare(obs.severity, current.severity) > 0:
            best[key] = obs
    return list(best.values())


def group_observations(observations: Iterable[PointObservation]) -> List[AreaGroup]:
    """
    관측값을 진도 -> 지역 순으로 묶습니다.

    진도 내림차순, 같은 진도 안에서는 지역명 오름차순,
    지명은 중복 제거 후 사전순으로 정렬합니다.
    """
    grouped: Dict[SeverityLevel, Dict[str, set]] = {}
    for obs in collapse_max(observations):
        grouped.setdefault(obs.severity, {}).setdefault(obs.region, set()).add(obs.locality)

    groups: List[AreaGroup] = []
    for level in scale.sorted_desc(grouped.keys()):
        for region in sorted(grouped[level]):
            groups.append(AreaGroup(
                severity=level,
                region=region,
                localities=tuple(sorted(grouped[level][region])),
            ))
    return groups


def group_points(points: Iterable[Any]) -> List[AreaGroup]:
    """
    원시 지점 목록({pref, addr, scale})을 AreaGroup 목록으로 변환합니다.

    dict가 아닌 항목은 무시합니다.
    """
    observations = [to_observation(p) for p in points if isinstance(p, Mapping)]
    return group_observations(observations)


def by_severity(groups: Iterable[AreaGroup]) -> "OrderedDict[SeverityLevel, List[AreaGroup]]":
    """표시용으로 진도별 그룹을 순서대로 묶습니다."""
    out: "OrderedDict[SeverityLevel, List[AreaGroup]]" = OrderedDict()
    for g in groups:
        out.setdefault(g.severity, []).append(g)
    return out
