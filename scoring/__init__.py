"""
체력검정 채점 모듈

기준표 조회 기반 종목별 등급/점수, 다음 목표, 종합 등급(Award)
"""
from .evaluator import (
    ParticipantContext,
    RawMeasurements,
    EvaluationResult,
    evaluate,
    resolve_run_km,
)
from .targets import NextTarget, next_targets, next_target_for
from .award import (
    Award,
    AwardLabel,
    AwardInfo,
    AwardGuidance,
    AWARD_TIERS,
    derive_award,
    provisional_award,
    award_guidance,
    award_info,
    run_target_for_points,
)
from .report import ScoreReport, build_report

__all__ = [
    "ParticipantContext",
    "RawMeasurements",
    "EvaluationResult",
    "evaluate",
    "resolve_run_km",
    "NextTarget",
    "next_targets",
    "next_target_for",
    "Award",
    "AwardLabel",
    "AwardInfo",
    "AwardGuidance",
    "AWARD_TIERS",
    "derive_award",
    "provisional_award",
    "award_guidance",
    "award_info",
    "run_target_for_points",
    "ScoreReport",
    "build_report",
]
