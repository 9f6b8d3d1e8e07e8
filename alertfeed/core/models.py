"""
Core domain models for alertfeed.

This module defines the core domain models using Pydantic v2
for type safety and validation.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field


class FeedType(str, Enum):
    """피드 종류 (값은 폴백 스냅샷 키와 동일)"""
    EARTHQUAKES = "earthquakes"
    EEW = "eew"
    VOLCANO = "volcano"
    WEATHER_WARNINGS = "weatherWarnings"
    LANDSLIDE = "landslide"


# 한 사이클 내 처리 순서 (긴급한 것부터)
FEED_PRIORITY: Tuple[FeedType, ...] = (
    FeedType.EEW,
    FeedType.EARTHQUAKES,
    FeedType.VOLCANO,
    FeedType.WEATHER_WARNINGS,
    FeedType.LANDSLIDE,
)


class SeverityLevel(str, Enum):
    """진도 레벨"""
    UNKNOWN = "unknown"
    S1 = "1"
    S2 = "2"
    S3 = "3"
    S4 = "4"
    S5_LOWER = "5-"
    S5_UPPER = "5+"
    S6_LOWER = "6-"
    S6_UPPER = "6+"
    S7 = "7"


class PointObservation(BaseModel):
    """지점별 관측 진도"""
    model_config = ConfigDict(frozen=True)

    region: str = ""
    locality: str
    severity: SeverityLevel = SeverityLevel.UNKNOWN


class AreaGroup(BaseModel):
    """같은 진도·지역으로 묶인 지점 그룹"""
    model_config = ConfigDict(frozen=True)

    severity: SeverityLevel
    region: str = ""
    localities: Tuple[str, ...] = ()


class AlertRecord(BaseModel):
    """정규화된 경보 레코드"""
    feed_type: FeedType
    dedup_key: str = ""
    timestamp: str = ""
    title: str
    summary_fields: Dict[str, Any] = Field(default_factory=dict)
    area_groups: List[AreaGroup] = Field(default_factory=list)
    raw_body_text: str = ""
    actionable: bool = True
    status: Optional[str] = None


FetchKind = Literal["live", "fallback", "empty"]


class FetchResult(BaseModel):
    """피드 수집 결과 (live / fallback / empty)"""
    kind: FetchKind
    payload: Any = None
    reason: Optional[str] = None

    @classmethod
    def live(cls, payload: Any) -> "FetchResult":
        return cls(kind="live", payload=payload)

    @classmethod
    def fallback(cls, payload: Any, reason: Optional[str] = None) -> "FetchResult":
        return cls(kind="fallback", payload=payload, reason=reason)

    @classmethod
    def empty(cls, reason: Optional[str] = None) -> "FetchResult":
        return cls(kind="empty", reason=reason)

    @property
    def is_empty(self) -> bool:
        return self.kind == "empty"
