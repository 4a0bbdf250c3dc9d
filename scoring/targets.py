"""
다음 목표 계산

종목마다 "다음 점수 구간에 들려면 얼마가 필요한가"를 원시 기록 단위로 돌려준다.
달리기는 참가자의 거리(1.6km/2.4km) 밴드만 후보로 본다.
"""
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass
from loguru import logger

from standards.schemas import Station, Grade, ALL_STATIONS
from standards.table import StandardsTable
from standards.timeparse import format_mmss
from .evaluator import ParticipantContext, EvaluationResult


@dataclass(frozen=True)
class NextTarget:
    """다음 점수 구간 목표"""
    station: Station
    target: Union[int, float]
    grade: Grade
    points: int

    @property
    def target_mmss(self) -> Optional[str]:
        if not self.station.is_timed:
            return None
        return format_mmss(self.target)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "target_mmss": self.target_mmss,
            "grade": self.grade.value,
            "points": self.points,
        }


def _native(value: float) -> Union[int, float]:
    return int(value) if float(value).is_integer() else value


def next_target_for(
    table: StandardsTable,
    ctx: ParticipantContext,
    station: Station,
    current_points: int,
) -> Optional[NextTarget]:
    """한 종목의 다음 목표 (없으면 None)"""
    run_km = ctx.run_km if station == Station.RUN else None
    band = table.next_band(ctx.level, ctx.sex, ctx.age, station, current_points, run_km)
    if band is None:
        if table.group(ctx.level, ctx.sex, ctx.age, station, run_km) is None:
            reason = "기준 데이터 없음"
        else:
            reason = "최고 구간 도달"
        logger.debug(f"다음 목표 없음 ({reason}): {station.value}, 현재 {current_points}점")
        return None

    return NextTarget(
        station=station,
        target=_native(band.target),
        grade=band.grade,
        points=band.points,
    )


def next_targets(
    table: StandardsTable,
    ctx: ParticipantContext,
    result: EvaluationResult,
) -> Dict[Station, Optional[NextTarget]]:
    """6종목 다음 목표 (결과가 None인 종목은 0점 기준)"""
    return {
        station: next_target_for(table, ctx, station, result.points_for(station))
        for station in ALL_STATIONS
    }


def targets_to_dict(targets: Dict[Station, Optional[NextTarget]]) -> Dict[str, Any]:
    return {s.value: (t.to_dict() if t else None) for s, t in targets.items()}
