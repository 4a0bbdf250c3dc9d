"""
참가자 성적표

평가 결과 + 다음 목표 + 종합 등급을 화면 계층이 그대로 쓰는 dict로 묶는다.
"""
from typing import Dict, Any, Optional
from dataclasses import dataclass

from standards.schemas import Station, ALL_STATIONS
from standards.table import StandardsTable
from .evaluator import ParticipantContext, RawMeasurements, EvaluationResult, evaluate, display_value
from .targets import NextTarget, next_targets
from .award import Award, AwardInfo, derive_award, award_info


@dataclass(frozen=True)
class ScoreReport:
    """한 참가자의 성적표"""
    context: ParticipantContext
    result: EvaluationResult
    targets: Dict[Station, Optional[NextTarget]]
    award: Award
    info: AwardInfo

    def to_dict(self) -> Dict[str, Any]:
        stations = {}
        for station in ALL_STATIONS:
            res = self.result.get(station)
            target = self.targets.get(station)
            stations[station.value] = {
                "raw": display_value(station, self.result.raw.get(station)),
                "grade": res.grade.value if res else None,
                "points": res.points if res else 0,
                "matched": res is not None,
                "next": target.to_dict() if target else None,
            }
        return {
            "participant": self.context.to_dict(),
            "stations": stations,
            "total_points": self.result.total_points,
            "award": self.award.to_dict(),
            "award_info": self.info.to_dict(),
        }


def build_report(
    table: StandardsTable,
    ctx: ParticipantContext,
    measurements: RawMeasurements,
) -> ScoreReport:
    """평가 → 다음 목표 → 종합 등급"""
    result = evaluate(table, ctx, measurements)
    return ScoreReport(
        context=ctx,
        result=result,
        targets=next_targets(table, ctx, result),
        award=derive_award(result),
        info=award_info(table, ctx, result),
    )
