"""
체력검정 평가 엔진

참가자 정보(학교급, 성별, 나이, 달리기 거리) + 원시 기록 → 종목별 등급/점수, 총점

- 기록이 없거나 유한수가 아닌 종목은 None (0점이 아니라 평가 제외)
- 밴드가 없는 종목도 None, 총점에는 0으로 합산
- 같은 입력이면 항상 같은 결과 (순수 함수)
"""
import math
from datetime import date
from types import MappingProxyType
from typing import Dict, Any, Optional, Mapping, Iterable, Union
from dataclasses import dataclass
from loguru import logger

from standards.schemas import Level, Sex, Station, ALL_STATIONS, NON_RUN_STATIONS
from standards.table import StandardsTable, StationResult
from standards.timeparse import (
    age_at,
    minutes_to_seconds,
    parse_run_input,
    round_half_up,
    format_mmss,
)


# 14세 이상은 학교급과 관계없이 2.4km
RUN_KM_AGE_THRESHOLD = 14
RUN_KM_PRIMARY = 1.6
RUN_KM_SECONDARY = 2.4


def resolve_run_km(age: int, level: Level, override: Optional[float] = None) -> float:
    """나이/학교급으로 달리기 거리 결정 (명시값 우선)"""
    if override is not None:
        return float(override)
    if age is not None and age >= RUN_KM_AGE_THRESHOLD:
        return RUN_KM_SECONDARY
    return RUN_KM_PRIMARY if level == Level.PRIMARY else RUN_KM_SECONDARY


@dataclass(frozen=True)
class ParticipantContext:
    """평가 컨텍스트 (요청마다 생성)"""
    level: Level
    sex: Sex
    age: int
    run_km: float

    @classmethod
    def build(
        cls,
        level: Union[Level, str],
        sex: Union[Sex, str],
        age: int,
        run_km: Optional[float] = None,
    ) -> "ParticipantContext":
        lvl = level if isinstance(level, Level) else Level.from_string(level)
        sx = sex if isinstance(sex, Sex) else Sex.from_string(sex)
        age = int(age)
        return cls(level=lvl, sex=sx, age=age, run_km=resolve_run_km(age, lvl, run_km))

    @classmethod
    def from_birth_date(
        cls,
        level: Union[Level, str],
        sex: Union[Sex, str],
        birth_date: date,
        test_date: Optional[date] = None,
        run_km: Optional[float] = None,
    ) -> "ParticipantContext":
        """생년월일 + 검사일로 만 나이 계산"""
        return cls.build(level, sex, age_at(birth_date, test_date), run_km)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.value,
            "sex": self.sex.value,
            "age": self.age,
            "run_km": self.run_km,
        }


def _finite(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


# 외부 입력 키 → 필드명
MEASUREMENT_ALIASES = {
    "situps": "situps",
    "broad_jump": "broad_jump",
    "broad_jump_cm": "broad_jump",
    "sit_and_reach": "sit_and_reach",
    "sit_and_reach_cm": "sit_and_reach",
    "pullups": "pullups",
    "shuttle_run": "shuttle_run",
    "shuttle_s": "shuttle_run",
    "shuttle_run_sec": "shuttle_run",
    "run_minutes": "run_minutes",
    "run_2400": "run_minutes",
    "run_2400_min": "run_minutes",
    "run_seconds": "run_seconds",
    "run_time": "run_time",
    "run_mmss": "run_time",
}


@dataclass(frozen=True)
class RawMeasurements:
    """
    원시 기록 (모두 선택)

    달리기는 분(run_minutes), 초(run_seconds), 시간 문자열(run_time) 중 하나.
    여러 개가 있으면 초 > 분 > 문자열 순으로 사용.
    """
    situps: Optional[float] = None
    broad_jump: Optional[float] = None
    sit_and_reach: Optional[float] = None
    pullups: Optional[float] = None
    shuttle_run: Optional[float] = None
    run_minutes: Optional[float] = None
    run_seconds: Optional[float] = None
    run_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawMeasurements":
        """DB 행/폼 입력 dict에서 생성 (모르는 키는 무시)"""
        values: Dict[str, Any] = {}
        for key, value in data.items():
            field_name = MEASUREMENT_ALIASES.get(str(key).strip().lower())
            if field_name is None:
                continue
            if isinstance(value, str) and field_name != "run_time":
                value = value.strip()
                if not value:
                    continue
                try:
                    value = float(value)
                except ValueError:
                    logger.debug(f"숫자가 아닌 기록 무시: {key}={value!r}")
                    continue
            values[field_name] = value
        return cls(**values)

    def run_seconds_value(self) -> Optional[int]:
        seconds = _finite(self.run_seconds)
        if seconds is not None:
            return round_half_up(seconds)
        minutes = _finite(self.run_minutes)
        if minutes is not None:
            return minutes_to_seconds(minutes)
        if self.run_time:
            return parse_run_input(self.run_time)
        return None

    def value_for(self, station: Station) -> Optional[float]:
        """종목 고유 단위의 조회값 (달리기는 정수 초)"""
        if station == Station.RUN:
            return self.run_seconds_value()
        return _finite(getattr(self, station.value))


def display_value(station: Station, value: Optional[float]) -> Optional[Union[int, float, str]]:
    """화면 표시용 값 (셔틀런 소수 1자리, 달리기 M:SS)"""
    if value is None:
        return None
    if station == Station.SHUTTLE_RUN:
        return round(value, 1)
    if station == Station.RUN:
        return format_mmss(value)
    return int(value) if float(value).is_integer() else value


@dataclass(frozen=True)
class EvaluationResult:
    """평가 결과"""
    stations: Mapping[Station, Optional[StationResult]]
    total_points: int
    raw: Mapping[Station, Optional[float]]
    run_km: Optional[float] = None

    def get(self, station: Station) -> Optional[StationResult]:
        return self.stations.get(station)

    def points_for(self, station: Station) -> int:
        res = self.stations.get(station)
        return res.points if res else 0

    def is_complete(self, stations: Iterable[Station] = ALL_STATIONS) -> bool:
        """지정 종목이 모두 등급을 받았는지"""
        return all(self.stations.get(s) is not None for s in stations)

    @property
    def has_six(self) -> bool:
        return self.is_complete(ALL_STATIONS)

    @property
    def has_five(self) -> bool:
        return self.is_complete(NON_RUN_STATIONS)

    def subtotal(self, stations: Iterable[Station]) -> int:
        return sum(self.points_for(s) for s in stations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stations": {
                s.value: (self.stations[s].to_dict() if self.stations.get(s) else None)
                for s in ALL_STATIONS
            },
            "raw": {s.value: display_value(s, self.raw.get(s)) for s in ALL_STATIONS},
            "total_points": self.total_points,
            "run_km": self.run_km,
        }


def evaluate(
    table: StandardsTable,
    ctx: ParticipantContext,
    measurements: RawMeasurements,
) -> EvaluationResult:
    """
    6종목 평가

    각 종목을 독립적으로 조회하고, 매칭된 종목 점수만 합산한다.
    """
    stations: Dict[Station, Optional[StationResult]] = {}
    raw: Dict[Station, Optional[float]] = {}
    total = 0

    for station in ALL_STATIONS:
        value = measurements.value_for(station)
        raw[station] = value
        if value is None:
            stations[station] = None
            continue

        run_km = ctx.run_km if station == Station.RUN else None
        result = table.lookup(ctx.level, ctx.sex, ctx.age, station, value, run_km)
        stations[station] = result
        if result is None:
            logger.debug(
                f"밴드 없음: {station.value}={value} "
                f"({ctx.level.value}/{ctx.sex.value}/{ctx.age}세)"
            )
            continue
        total += result.points

    return EvaluationResult(
        stations=MappingProxyType(stations),
        total_points=total,
        raw=MappingProxyType(raw),
        run_km=ctx.run_km,
    )
